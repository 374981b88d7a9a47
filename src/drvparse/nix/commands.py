from functools import lru_cache
import os
import subprocess
from loguru import logger

def is_derivation_path(path: str) -> bool:
    """Check if the given path looks like a derivation path"""
    return path.startswith("/nix/store/") and path.endswith(".drv")

def is_flake_reference(ref: str) -> bool:
    """Check if the given string looks like a flake reference"""
    return "#" in ref

def read_derivation_file(path: str) -> str:
    """Read a .drv file from disk"""
    logger.debug(f"Reading derivation file: {path}")
    with open(path, 'rb') as f:
        content = f.read()
    try:
        return content.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ValueError(f"Derivation file {path} is not valid UTF-8: {e}") from e

@lru_cache(maxsize=None)
def get_derivation_aterm(drv_path: str) -> str:
    """Get the ATerm text of a derivation from the Nix store"""
    try:
        logger.debug(f"Running nix store cat for: {drv_path}")
        result = subprocess.run(
            ['nix', '--extra-experimental-features', 'nix-command', 'store', 'cat', drv_path],
            capture_output=True,
            check=True
        )
    except FileNotFoundError as e:
        logger.exception("error in get_derivation_aterm")
        raise RuntimeError(f"Error reading {drv_path} from the store: nix not found") from e
    except subprocess.CalledProcessError as e:
        logger.exception("error in get_derivation_aterm")
        stderr = e.stderr.decode('utf-8', 'replace') if e.stderr else ""
        raise RuntimeError(f"Error reading {drv_path} from the store: {stderr}") from e
    # not text=True, that would decode with the locale encoding
    try:
        return result.stdout.decode('utf-8')
    except UnicodeDecodeError as e:
        raise ValueError(f"Derivation {drv_path} is not valid UTF-8: {e}") from e

def resolve_flake_to_drv(flake_ref: str) -> str:
    """
    Resolve a flake reference to a derivation path
    Example: nixpkgs#hello -> /nix/store/...drv
    """
    try:
        result = subprocess.run(
            ['nix', '--extra-experimental-features', 'nix-command flakes', 'eval', '--raw', f'{flake_ref}.drvPath'],
            capture_output=True,
            text=True,
            check=True
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to resolve flake reference {flake_ref}: nix not found") from e
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Failed to resolve flake reference {flake_ref}: {e.stderr}") from e
    drv_path = result.stdout.strip()
    logger.debug(f"Resolved {flake_ref} to {drv_path}")
    return drv_path

def load_derivation_text(target: str) -> str:
    """
    Get the ATerm text for a target

    TARGET can be either:
    - A .drv file on disk
    - A derivation path in the Nix store (/nix/store/....drv)
    - A flake reference (nixpkgs#hello)
    """
    if os.path.isfile(target):
        return read_derivation_file(target)
    if is_derivation_path(target):
        logger.debug(f"Detected store derivation path: {target}")
        return get_derivation_aterm(target)
    if is_flake_reference(target):
        logger.debug(f"Detected flake reference: {target}")
        return get_derivation_aterm(resolve_flake_to_drv(target))
    raise ValueError(
        f"Target {target} is neither an existing file, a derivation path "
        "(/nix/store/....drv) nor a flake reference (e.g., nixpkgs#hello)"
    )
