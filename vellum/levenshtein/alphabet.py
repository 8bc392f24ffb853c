"""The characters of a query and where each of them occurs in it."""

from collections.abc import Iterator

_CHUNK_BYTES = 32
_UINT32_MASK = 0xFFFFFFFF


class FullCharacteristicVector(tuple):
    """Occurrence bits of one character across a query, 32 positions per word.

    The last word is always 0 so that windows near the end can be read.
    """

    def shift_and_mask(self, offset: int, mask: int) -> int:
        """Return the bits starting at ``offset``, limited by ``mask``."""
        bucket, align = divmod(offset, 32)
        if align == 0:
            return self[bucket] & mask
        left = self[bucket] >> align
        right = (self[bucket + 1] << (32 - align)) & _UINT32_MASK
        return (left | right) & mask


class Alphabet:
    """The distinct characters of a query, in order, with their vectors."""

    def __init__(self, charset: list[tuple[str, FullCharacteristicVector]]):
        self._charset = tuple(charset)

    def __iter__(self) -> Iterator[tuple[str, FullCharacteristicVector]]:
        return iter(self._charset)

    def __len__(self) -> int:
        return len(self._charset)


def dedupe(text: str) -> str:
    """Drop repeated characters, keeping the first occurrence of each."""
    return "".join(dict.fromkeys(text))


def _lead_length(b: int) -> int:
    if b < 0x80:
        return 1
    if 0xC2 <= b <= 0xDF:
        return 2
    if 0xE0 <= b <= 0xEF:
        return 3
    if 0xF0 <= b <= 0xF4:
        return 4
    return 0


def _decode_chunk(chunk: bytes) -> Iterator[str]:
    """Decode bytes, yielding one replacement character per undecodable byte."""
    i = 0
    while i < len(chunk):
        n = _lead_length(chunk[i])
        if n:
            try:
                yield chunk[i:i + n].decode("utf-8")
                i += n
                continue
            except UnicodeDecodeError:
                pass
        yield "\ufffd"
        i += 1


def _chunks(data: bytes) -> Iterator[bytes]:
    for start in range(0, len(data), _CHUNK_BYTES):
        yield data[start:start + _CHUNK_BYTES]


def query_chars(query: str) -> Alphabet:
    """Build the alphabet of ``query``, sorted by code point.

    The query is cut into chunks of 32 encoded bytes; each chunk gives one
    word of bits, one bit per character decoded from that chunk.
    """
    data = query.encode("utf-8")
    charset = []
    for c in sorted(dedupe(query)):
        words = []
        for chunk in _chunks(data):
            bits = 0
            for position, ch in enumerate(_decode_chunk(chunk)):
                if ch == c:
                    bits |= 1 << position
            words.append(bits & _UINT32_MASK)
        words.append(0)
        charset.append((c, FullCharacteristicVector(words)))
    return Alphabet(charset)