"""
Decoder for the quoted string literals of the .drv ATerm format.

Between the quotes a literal is a sequence of fragments:

    literal run     any characters other than " and \\, copied verbatim
    escape          \\n \\r \\t \\b \\f \\\\ \\/ \\"
    unicode escape  \\u{XXXX} with 1 to 6 hex digits
    continuation    \\ followed by whitespace, decodes to nothing

Nix itself only ever writes \\\\ \\" \\n \\r and \\t, the rest is accepted so
that hand-written or tool-generated descriptors decode too.
"""
import re
from typing import Tuple

from drvparse.errors import (
    InvalidEscape,
    InvalidUnicodeScalar,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnterminatedString,
)

_LITERAL_RUN = re.compile(r'[^"\\]+')
_HEX_DIGITS = re.compile(r'[0-9a-fA-F]{1,6}')
# what nom's multispace1 accepts
_WHITESPACE = re.compile(r'[ \t\r\n]+')

_SIMPLE_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    'b': '\b',
    'f': '\f',
    '\\': '\\',
    '/': '/',
    '"': '"',
}


def _parse_unicode_escape(text: str, start: int, pos: int, opening: int) -> Tuple[str, int]:
    """
    Decode the {XXXX} part of a \\u{XXXX} escape. `start` is the index of the
    backslash, `pos` the index just past the u and `opening` the index of
    the quote the literal started at.
    """
    if pos >= len(text):
        raise UnterminatedString(text, opening)
    if text[pos] != '{':
        raise InvalidEscape(text, start, text[start:pos + 1])
    digits = _HEX_DIGITS.match(text, pos + 1)
    if digits is None:
        if pos + 1 >= len(text):
            raise UnterminatedString(text, opening)
        raise InvalidEscape(text, start, text[start:pos + 2])
    end = digits.end()
    if end >= len(text):
        raise UnterminatedString(text, opening)
    if text[end] != '}':
        raise InvalidEscape(text, start, text[start:end + 1])

    code_point = int(digits.group(), 16)
    # chr() happily returns surrogates, they are not scalar values though
    if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
        raise InvalidUnicodeScalar(text, start, code_point)
    return chr(code_point), end + 1


def _parse_fragment(text: str, pos: int, opening: int) -> Tuple[str, int]:
    """
    Decode one fragment at pos, which is neither the end of the input nor a
    closing quote. Escaped whitespace decodes to the empty string.
    """
    run = _LITERAL_RUN.match(text, pos)
    if run is not None:
        return run.group(), run.end()

    # text[pos] is a backslash
    if pos + 1 >= len(text):
        raise UnterminatedString(text, opening)
    marker = text[pos + 1]
    if marker in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[marker], pos + 2
    if marker == 'u':
        return _parse_unicode_escape(text, pos, pos + 2, opening)
    whitespace = _WHITESPACE.match(text, pos + 1)
    if whitespace is not None:
        return "", whitespace.end()
    raise InvalidEscape(text, pos, text[pos:pos + 2])


def parse_string(text: str, pos: int) -> Tuple[str, int]:
    """
    Decode the string literal whose opening quote is at text[pos].

    Args:
        text: The complete input
        pos: Index of the opening quote

    Returns:
        tuple[str, int]: The decoded value and the index just past the
        closing quote

    Raises:
        UnexpectedEndOfInput: If pos is at the end of the input
        UnexpectedToken: If text[pos] is not a quote
        UnterminatedString: If the input ends before the closing quote
        InvalidEscape: On an unknown or malformed escape sequence
        InvalidUnicodeScalar: If a \\u{...} escape is not a scalar value
    """
    if pos >= len(text):
        raise UnexpectedEndOfInput(text, pos, '"')
    if text[pos] != '"':
        raise UnexpectedToken(text, pos, '"')

    opening = pos
    pos += 1
    fragments = []
    while True:
        if pos >= len(text):
            raise UnterminatedString(text, opening)
        if text[pos] == '"':
            return "".join(fragments), pos + 1
        fragment, pos = _parse_fragment(text, pos, opening)
        fragments.append(fragment)
