import json

import rfc8785

from drvparse.nix.types import Derivation

def derivation_to_dict(drv: Derivation) -> dict:
    """
    JSON friendly form of a derivation, laid out like `nix derivation show`.

    env is kept as a list of [key, value] pairs rather than an object, so
    neither order nor repeated keys are lost.
    """
    return {
        "outputs": {
            name: {
                "path": output.path,
                "hashAlgo": output.hash_algorithm,
                "hash": output.hash,
            } for name, output in drv.outputs.items()
        },
        "inputDrvs": {
            path: sorted(i.output_names) for path, i in drv.input_derivations.items()
        },
        "inputSrcs": list(drv.input_sources),
        "system": drv.system,
        "builder": drv.builder,
        "args": list(drv.args),
        "env": [[key, value] for key, value in drv.env],
    }

def dumps_derivation(drv: Derivation, canonical: bool = False) -> str:
    data = derivation_to_dict(drv)
    if canonical:
        return rfc8785.dumps(data).decode('utf-8')
    return json.dumps(data, indent=2, ensure_ascii=False)
