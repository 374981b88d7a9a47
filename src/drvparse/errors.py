from typing import Optional


class DerivationParseError(ValueError):
    """
    Base class for everything that can go wrong while reading a .drv ATerm.

    Carries the full input text and the offset of the failure, so callers
    can show the unconsumed remainder or a byte offset into the file.
    """
    kind = "ParseError"

    def __init__(self, text: str, offset: int, detail: str):
        self.text = text
        self.offset = offset
        self.detail = detail
        super().__init__(f"{detail} at byte offset {self.byte_offset}")

    @property
    def remaining(self) -> str:
        return self.text[self.offset:]

    @property
    def byte_offset(self) -> int:
        # surrogatepass: the input may contain lone surrogates we never decoded
        return len(self.text[:self.offset].encode('utf-8', 'surrogatepass'))


class UnexpectedToken(DerivationParseError):
    kind = "UnexpectedToken"

    def __init__(self, text: str, offset: int, expected: str):
        self.expected = expected
        super().__init__(text, offset, f"expected {expected!r}")


class UnexpectedEndOfInput(DerivationParseError):
    kind = "UnexpectedEndOfInput"

    def __init__(self, text: str, offset: int, expected: Optional[str] = None):
        self.expected = expected
        if expected is None:
            detail = "unexpected end of input"
        else:
            detail = f"unexpected end of input, expected {expected!r}"
        super().__init__(text, offset, detail)


class UnterminatedString(UnexpectedEndOfInput):
    """The input ended inside a string literal. Offset points at its opening quote."""
    kind = "UnterminatedString"

    def __init__(self, text: str, offset: int):
        self.expected = '"'
        DerivationParseError.__init__(self, text, offset, "unterminated string literal")


class InvalidEscape(DerivationParseError):
    kind = "InvalidEscape"

    def __init__(self, text: str, offset: int, sequence: str):
        self.sequence = sequence
        super().__init__(text, offset, f"invalid escape sequence {sequence!r}")


class InvalidUnicodeScalar(DerivationParseError):
    kind = "InvalidUnicodeScalar"

    def __init__(self, text: str, offset: int, code_point: int):
        self.code_point = code_point
        super().__init__(text, offset, f"invalid unicode scalar value U+{code_point:04X}")


class EmptyRequiredList(DerivationParseError):
    kind = "EmptyRequiredList"

    def __init__(self, text: str, offset: int, what: str):
        self.what = what
        super().__init__(text, offset, f"{what} must not be empty")


class TrailingData(DerivationParseError):
    kind = "TrailingData"

    def __init__(self, text: str, offset: int):
        super().__init__(text, offset, f"{len(text) - offset} characters of trailing data")
