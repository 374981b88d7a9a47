import sys
import os
import click

from .config import config
from .errors import DerivationParseError
from .nix.commands import load_derivation_text
from .nix.derivation import parse_derivation, parse_derivation_prefix
from .nix.show import dumps_derivation
from loguru import logger

def configure_logging(debug: bool):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "WARNING")

def resolve_policies(allow_empty_outputs: bool, allow_trailing_data: bool) -> tuple[bool, bool]:
    # flags only ever loosen what the config allows
    return (allow_empty_outputs or config.allow_empty_outputs,
            allow_trailing_data or config.allow_trailing_data)

def policy_options(f):
    f = click.option('--allow-trailing-data', is_flag=True, default=False,
                     help='Ignore anything after the closing parenthesis')(f)
    f = click.option('--allow-empty-outputs', is_flag=True, default=False,
                     help='Accept derivations with an empty output list')(f)
    return f

@click.group()
@click.option('--debug', is_flag=True, default=False, help='Log debug output to stderr')
def cli(debug):
    """Nix derivation (.drv) parser"""
    configure_logging(debug or config.debug)
    logger.debug(f"Args: {sys.argv}")
    logger.debug(f"Working directory: {os.getcwd()}")

@cli.command()
@click.argument('target', required=True)
@click.option('--canonical', is_flag=True, default=False,
              help='Print RFC 8785 canonical JSON instead of indented JSON')
@policy_options
def show(target, canonical, allow_empty_outputs, allow_trailing_data):
    """
    Parse a derivation and print it as JSON

    TARGET can be either:
    - A .drv file
    - A derivation path (/nix/store/....drv)
    - A flake reference (nixpkgs#hello)
    """
    allow_empty_outputs, allow_trailing_data = resolve_policies(allow_empty_outputs, allow_trailing_data)
    try:
        text = load_derivation_text(target)
        if allow_trailing_data:
            drv, remaining = parse_derivation_prefix(text, allow_empty_outputs=allow_empty_outputs)
            if remaining:
                logger.warning(f"Ignoring {len(remaining)} characters after the derivation in {target}")
        else:
            drv = parse_derivation(text, allow_empty_outputs=allow_empty_outputs, allow_trailing_data=False)
        click.echo(dumps_derivation(drv, canonical=canonical))
    except DerivationParseError as e:
        click.echo(f"Error: {target}: {str(e)}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Error in show command: {str(e)}")
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)

@cli.command()
@click.argument('targets', nargs=-1, required=True)
@policy_options
def check(targets, allow_empty_outputs, allow_trailing_data):
    """Check that every TARGET parses as a derivation"""
    allow_empty_outputs, allow_trailing_data = resolve_policies(allow_empty_outputs, allow_trailing_data)
    failed = 0
    for target in targets:
        try:
            parse_derivation(load_derivation_text(target),
                             allow_empty_outputs=allow_empty_outputs,
                             allow_trailing_data=allow_trailing_data)
        except (ValueError, RuntimeError, OSError) as e:
            logger.debug(f"Failed to parse {target}: {e!r}")
            click.echo(f"error {target}: {str(e)}")
            failed += 1
        else:
            click.echo(f"ok {target}")

    if failed:
        click.echo(f"{failed} of {len(targets)} derivations failed to parse", err=True)
        sys.exit(1)

def main():
    """Entry point for the script"""
    try:
        cli.main(prog_name='drvparse', standalone_mode=False)
    except click.exceptions.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        logger.exception(f"Fatal Error")
        click.echo(f"Fatal error: {str(e)}", err=True)
        sys.exit(1)

if __name__ == '__main__':
    main()
