import json
from pathlib import Path
from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from drvparse import cli as cli_file
from drvparse.nix import commands

cli = cli_file.cli

example_drvs = Path(__file__).parent / "data" / "example_drvs"
hello_drv_file = example_drvs / "hello.drv"
trailing_newline_drv_file = example_drvs / "trailing-newline.drv"
broken_drv_file = example_drvs / "broken.drv"

@pytest.fixture
def runner():
    """Provides a Click CLI test runner."""
    return CliRunner()

@pytest.fixture
def mock_store_lookup(monkeypatch):
    def _get_derivation_aterm_mock(drv_path):
        if drv_path == "/nix/store/yvixdlqwq3l5ikd0b5c3f39pxmfynwhl-hello-2.12.1.drv":
            return hello_drv_file.read_text()
        raise RuntimeError(f"Error reading {drv_path} from the store: no such path")

    mock = Mock(side_effect=_get_derivation_aterm_mock)
    monkeypatch.setattr(commands, "get_derivation_aterm", mock)
    return mock

def test_show_file(runner):
    result = runner.invoke(cli, ['show', str(hello_drv_file)])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert list(data["outputs"]) == ["out"]
    assert len(data["inputDrvs"]) == 3
    assert ["name", "hello-2.12.1"] in data["env"]

def test_show_canonical(runner):
    result = runner.invoke(cli, ['show', '--canonical', str(hello_drv_file)])
    assert result.exit_code == 0
    assert result.stdout.startswith('{"args":["-e",')
    assert result.stdout.count("\n") == 1

def test_show_store_path(runner, mock_store_lookup):
    result = runner.invoke(cli, ['show', "/nix/store/yvixdlqwq3l5ikd0b5c3f39pxmfynwhl-hello-2.12.1.drv"])
    assert result.exit_code == 0
    mock_store_lookup.assert_called_once_with("/nix/store/yvixdlqwq3l5ikd0b5c3f39pxmfynwhl-hello-2.12.1.drv")
    assert json.loads(result.stdout)["system"] == "x86_64-linux"

def test_show_missing_store_path(runner, mock_store_lookup):
    result = runner.invoke(cli, ['show', "/nix/store/0000000000000000000000000000000b-missing.drv"])
    assert result.exit_code == 1
    assert "no such path" in result.stderr

def test_show_parse_error(runner):
    result = runner.invoke(cli, ['show', str(broken_drv_file)])
    assert result.exit_code == 1
    assert result.stdout == ""
    assert "expected '(' at byte offset 39" in result.stderr

def test_show_trailing_newline(runner):
    result = runner.invoke(cli, ['show', str(trailing_newline_drv_file)])
    assert result.exit_code == 1
    assert "trailing data" in result.stderr

def test_show_allow_trailing_data(runner):
    result = runner.invoke(cli, ['show', '--allow-trailing-data', str(trailing_newline_drv_file)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["builder"] == "/bin/sh"

def test_show_allow_empty_outputs(runner, tmp_path):
    drv_file = tmp_path / "empty.drv"
    drv_file.write_text('Derive([],[],[],"x86_64-linux","/bin/sh",[],[])')

    result = runner.invoke(cli, ['show', str(drv_file)])
    assert result.exit_code == 1
    assert "outputs must not be empty" in result.stderr

    result = runner.invoke(cli, ['show', '--allow-empty-outputs', str(drv_file)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["outputs"] == {}

def test_check(runner):
    result = runner.invoke(cli, ['check', str(hello_drv_file), str(broken_drv_file)])
    assert result.exit_code == 1
    lines = result.stdout.splitlines()
    assert lines[0] == f"ok {hello_drv_file}"
    assert lines[1].startswith(f"error {broken_drv_file}: expected '('")
    assert "1 of 2 derivations failed to parse" in result.stderr

def test_check_all_ok(runner):
    result = runner.invoke(cli, ['check', '--allow-trailing-data', str(hello_drv_file), str(trailing_newline_drv_file)])
    assert result.exit_code == 0
    assert result.stdout.splitlines() == [f"ok {hello_drv_file}", f"ok {trailing_newline_drv_file}"]

def test_check_unknown_target(runner):
    result = runner.invoke(cli, ['check', 'no-such-file'])
    assert result.exit_code == 1
    assert result.stdout.startswith("error no-such-file: Target no-such-file is neither")
