"""
Recursive descent parser for .drv files.

    Derivation   := "Derive(" OutputList "," InputDrvList "," SourceList ","
                    String "," String "," ArgList "," EnvList ")"
    OutputList   := "[" Output ("," Output)* "]"
    Output       := "(" String "," String "," String "," String ")"
    InputDrvList := "[" (InputDrv ("," InputDrv)*)? "]"
    InputDrv     := "(" String "," "[" String ("," String)* "]" ")"
    SourceList   := "[" (String ("," String)*)? "]"
    ArgList      := "[" (String ("," String)*)? "]"
    EnvList      := "[" (EnvPair ("," EnvPair)*)? "]"
    EnvPair      := "(" String "," String ")"

Every production is a function taking the full text and a start index and
returning the parsed value together with the index just past it. Nothing is
shared between calls, so parses of different inputs may run on any number
of threads at once.

Outputs and input derivations are collected into mappings keyed by output
name and derivation path. Nix never writes the same key twice; if a
descriptor does anyway, the later entry replaces the earlier one.
"""
from typing import Callable, List, Optional, Tuple, TypeVar
from types import MappingProxyType

from drvparse.config import config
from drvparse.errors import (
    EmptyRequiredList,
    TrailingData,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from drvparse.nix.strings import parse_string
from drvparse.nix.types import (
    Derivation,
    DerivationOutput,
    EnvPair,
    InputDerivation,
)

T = TypeVar('T')
Parser = Callable[[str, int], Tuple[T, int]]


def _expect(text: str, pos: int, token: str) -> int:
    if text.startswith(token, pos):
        return pos + len(token)
    # a truncated token at the very end is running out of input, not a mismatch
    if token.startswith(text[pos:]):
        raise UnexpectedEndOfInput(text, pos, token)
    raise UnexpectedToken(text, pos, token)


def _parse_list(text: str, pos: int, item: Parser, required: Optional[str] = None) -> Tuple[List[T], int]:
    """
    Parse "[" item ("," item)* "]" or "[" "]".

    If `required` is set, the empty list fails with EmptyRequiredList naming it.
    """
    start = pos
    pos = _expect(text, pos, "[")
    items = []
    if text.startswith("]", pos):
        if required is not None:
            raise EmptyRequiredList(text, start, required)
        return items, pos + 1

    while True:
        value, pos = item(text, pos)
        items.append(value)
        if pos >= len(text):
            raise UnexpectedEndOfInput(text, pos, "]")
        if text[pos] == ",":
            pos += 1
        elif text[pos] == "]":
            return items, pos + 1
        else:
            raise UnexpectedToken(text, pos, "',' or ']'")


def parse_output(text: str, pos: int) -> Tuple[DerivationOutput, int]:
    pos = _expect(text, pos, "(")
    name, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    path, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    hash_algorithm, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    hash, pos = parse_string(text, pos)
    pos = _expect(text, pos, ")")
    return DerivationOutput(name=name, path=path, hash_algorithm=hash_algorithm, hash=hash), pos


def parse_output_list(text: str, pos: int, allow_empty: bool = False) -> Tuple[MappingProxyType, int]:
    outputs, pos = _parse_list(text, pos, parse_output, required=None if allow_empty else "outputs")
    # last write wins on duplicate names
    return MappingProxyType({output.name: output for output in outputs}), pos


def parse_input_derivation(text: str, pos: int) -> Tuple[InputDerivation, int]:
    pos = _expect(text, pos, "(")
    drv_path, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    output_names, pos = _parse_list(text, pos, parse_string, required=f"outputs of {drv_path}")
    pos = _expect(text, pos, ")")
    return InputDerivation(drv_path=drv_path, output_names=frozenset(output_names)), pos


def parse_input_derivation_list(text: str, pos: int) -> Tuple[MappingProxyType, int]:
    inputs, pos = _parse_list(text, pos, parse_input_derivation)
    # last write wins on duplicate paths
    return MappingProxyType({i.drv_path: i for i in inputs}), pos


def parse_source_list(text: str, pos: int) -> Tuple[Tuple[str, ...], int]:
    sources, pos = _parse_list(text, pos, parse_string)
    return tuple(sources), pos


def parse_arg_list(text: str, pos: int) -> Tuple[Tuple[str, ...], int]:
    args, pos = _parse_list(text, pos, parse_string)
    return tuple(args), pos


def parse_env_pair(text: str, pos: int) -> Tuple[EnvPair, int]:
    pos = _expect(text, pos, "(")
    key, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    value, pos = parse_string(text, pos)
    pos = _expect(text, pos, ")")
    return (key, value), pos


def parse_env_list(text: str, pos: int) -> Tuple[Tuple[EnvPair, ...], int]:
    env, pos = _parse_list(text, pos, parse_env_pair)
    return tuple(env), pos


def parse_derivation_at(text: str, pos: int, allow_empty_outputs: bool = False) -> Tuple[Derivation, int]:
    pos = _expect(text, pos, "Derive(")
    outputs, pos = parse_output_list(text, pos, allow_empty=allow_empty_outputs)
    pos = _expect(text, pos, ",")
    input_derivations, pos = parse_input_derivation_list(text, pos)
    pos = _expect(text, pos, ",")
    input_sources, pos = parse_source_list(text, pos)
    pos = _expect(text, pos, ",")
    system, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    builder, pos = parse_string(text, pos)
    pos = _expect(text, pos, ",")
    args, pos = parse_arg_list(text, pos)
    pos = _expect(text, pos, ",")
    env, pos = parse_env_list(text, pos)
    pos = _expect(text, pos, ")")

    return Derivation(
        outputs=outputs,
        input_derivations=input_derivations,
        input_sources=input_sources,
        system=system,
        builder=builder,
        args=args,
        env=env,
    ), pos


def parse_derivation_prefix(text: str, *, allow_empty_outputs: Optional[bool] = None) -> Tuple[Derivation, str]:
    """
    Parse one derivation from the start of text.

    Returns:
        tuple[Derivation, str]: The derivation and whatever text follows it
    """
    if allow_empty_outputs is None:
        allow_empty_outputs = config.allow_empty_outputs
    drv, pos = parse_derivation_at(text, 0, allow_empty_outputs=allow_empty_outputs)
    return drv, text[pos:]


def parse_derivation(text: str, *,
                     allow_empty_outputs: Optional[bool] = None,
                     allow_trailing_data: Optional[bool] = None) -> Derivation:
    """
    Parse the contents of a .drv file.

    Args:
        text: The complete ATerm text
        allow_empty_outputs: Accept Derive([],...), defaults to config.allow_empty_outputs
        allow_trailing_data: Ignore text after the closing ), defaults to config.allow_trailing_data

    Returns:
        Derivation: The parsed derivation

    Raises:
        DerivationParseError: If text is not a well formed derivation
    """
    if allow_empty_outputs is None:
        allow_empty_outputs = config.allow_empty_outputs
    if allow_trailing_data is None:
        allow_trailing_data = config.allow_trailing_data

    drv, pos = parse_derivation_at(text, 0, allow_empty_outputs=allow_empty_outputs)
    if pos != len(text) and not allow_trailing_data:
        raise TrailingData(text, pos)
    return drv
