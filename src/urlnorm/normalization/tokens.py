"""
Comparison tokens produced by the normalizer.
"""

from typing import Iterator

_HEX_DIGITS = "0123456789abcdef0123456789ABCDEF"


class CompareToken(str):
    """
    One unit of a normalized URL.

    Equality is exact string equality. Tokens are copies of the URL text, so
    they stay valid after the source URL object is discarded.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"CompareToken({str.__repr__(self)})"


class EscapedCompareToken:
    """
    Token compared after percent-decoding and ``+``-as-space decoding.

    Only needed when the URL parser hands over components that are still
    escaped. Malformed escapes are lenient: a missing or non-hex digit counts
    as zero, so ``%`` at the end of a token decodes to NUL.
    """

    __slots__ = ("raw",)

    def __init__(self, raw: str):
        self.raw = raw

    def __repr__(self) -> str:
        return f"EscapedCompareToken({self.raw!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EscapedCompareToken):
            return NotImplemented
        if self.raw == other.raw:
            return True
        return self.decoded() == other.decoded()

    def __hash__(self) -> int:
        return hash(self.decoded())

    def decoded(self) -> str:
        """Return the decoded token text."""
        return "".join(_decode(self.raw))


def _decode(raw: str) -> Iterator[str]:
    chars = iter(raw)
    for c in chars:
        if c == "+":
            yield " "
        elif c == "%":
            high = _hex_value(next(chars, ""))
            low = _hex_value(next(chars, ""))
            yield chr((high << 4) | low)
        else:
            yield c


def _hex_value(c: str) -> int:
    index = _HEX_DIGITS.find(c) if c else -1
    return index % 16 if index >= 0 else 0
