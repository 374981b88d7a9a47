import pytest
from loguru import logger

@pytest.fixture(autouse=True)
def reset_loguru():
    # the cli points loguru at whatever sys.stderr is during an invocation,
    # which CliRunner closes afterwards
    yield
    logger.remove()
