"""Byte-range sequences matching the UTF-8 encodings of a code point range."""

from dataclasses import dataclass
from typing import Optional

_MAX_SCALAR_BY_LENGTH = (0x7F, 0x7FF, 0xFFFF)
_REPLACEMENT = "\ufffd".encode("utf-8")


@dataclass(frozen=True)
class Range:
    """An inclusive range of byte values."""

    start: int
    end: int

    def matches(self, b: int) -> bool:
        return self.start <= b <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return f"[{self.start:X}]"
        return f"[{self.start:X}-{self.end:X}]"


class Sequence(tuple):
    """A series of byte ranges, one for each byte of an encoded character."""

    def __new__(cls, ranges=()):
        return super().__new__(cls, ranges)

    def matches(self, data: bytes) -> bool:
        """True if the leading bytes of ``data`` fall in these ranges."""
        if len(data) < len(self):
            return False
        return all(r.matches(b) for r, b in zip(self, data))

    def __str__(self) -> str:
        if 1 <= len(self) <= 4:
            return "".join(str(r) for r in self)
        return "invalid utf8 sequence"

    def __repr__(self) -> str:
        return f"Sequence({tuple.__repr__(self)})"


def sequence_from_encoded_range(start: bytes, end: bytes) -> Sequence:
    """Build a sequence from two encodings of equal length (2 to 4 bytes)."""
    if len(start) != len(end):
        raise ValueError("byte slices must be the same length")
    if len(start) not in (2, 3, 4):
        raise ValueError("invalid encoded byte length")
    return Sequence(Range(s, e) for s, e in zip(start, end))


def _encode(code_point: int) -> bytes:
    if 0 <= code_point <= 0x10FFFF and not 0xD800 <= code_point <= 0xDFFF:
        return chr(code_point).encode("utf-8")
    return _REPLACEMENT


def _split_surrogates(lo: int, hi: int) -> Optional[tuple[tuple[int, int], tuple[int, int]]]:
    if lo < 0xE000 and hi > 0xD7FF:
        return (lo, 0xD7FF), (0xE000, hi)
    return None


def _split_lengths(lo: int, hi: int) -> Optional[tuple[tuple[int, int], tuple[int, int]]]:
    for limit in _MAX_SCALAR_BY_LENGTH:
        if lo <= limit < hi:
            return (lo, limit), (limit + 1, hi)
    return None


def _split_continuations(lo: int, hi: int) -> Optional[tuple[tuple[int, int], tuple[int, int]]]:
    for i in range(1, 4):
        m = (1 << (6 * i)) - 1
        if (lo & ~m) != (hi & ~m):
            if lo & m:
                return (lo, lo | m), ((lo | m) + 1, hi)
            if (hi & m) != m:
                return (lo, (hi & ~m) - 1), (hi & ~m, hi)
    return None


def new_sequences(start: int, end: int) -> list[Sequence]:
    """Return the byte sequences covering the UTF-8 encodings of ``start..end``."""
    result: list[Sequence] = []
    stack = [(start, end)]
    while stack:
        lo, hi = stack.pop()
        while True:
            parts = _split_surrogates(lo, hi)
            if parts is None:
                if lo > hi:
                    break
                parts = _split_lengths(lo, hi)
            if parts is None:
                if hi <= 0x7F:
                    result.append(Sequence((Range(lo & 0xFF, hi & 0xFF),)))
                    break
                parts = _split_continuations(lo, hi)
            if parts is None:
                result.append(sequence_from_encoded_range(_encode(lo), _encode(hi)))
                break
            (lo, hi), tail = parts
            stack.append(tail)
    return result