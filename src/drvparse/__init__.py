from .errors import (
    DerivationParseError,
    EmptyRequiredList,
    InvalidEscape,
    InvalidUnicodeScalar,
    TrailingData,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnterminatedString,
)
from .nix.types import Derivation, DerivationOutput, InputDerivation
from .nix.strings import parse_string
from .nix.derivation import parse_derivation, parse_derivation_prefix

__all__ = [
    'Derivation',
    'DerivationOutput',
    'InputDerivation',
    'parse_derivation',
    'parse_derivation_prefix',
    'parse_string',
    'DerivationParseError',
    'EmptyRequiredList',
    'InvalidEscape',
    'InvalidUnicodeScalar',
    'TrailingData',
    'UnexpectedEndOfInput',
    'UnexpectedToken',
    'UnterminatedString',
]
