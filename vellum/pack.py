"""Helpers for the packed integer encodings used in the FST format."""

_UINT64_MASK = (1 << 64) - 1

PACK_OUT_MASK = (1 << 4) - 1
MAX_NUM_TRANS = (1 << 6) - 1


def delta_addr(base: int, trans: int) -> int:
    """Return the address of ``trans`` relative to ``base``.

    A transition destination of 0 is special and always stays 0.
    """
    if trans == 0:
        return 0
    return (base - trans) & _UINT64_MASK


def encode_pack_size(trans_size: int, out_size: int) -> int:
    """Pack a transition size and an output size into one byte."""
    return ((trans_size << 4) | out_size) & 0xFF


def decode_pack_size(pack: int) -> tuple[int, int]:
    """Split a byte made by :func:`encode_pack_size` into its two sizes."""
    return pack >> 4, pack & PACK_OUT_MASK


def encode_num_trans(n: int) -> int:
    """Encode a transition count, or 0 when it does not fit in the header."""
    return n if n <= MAX_NUM_TRANS else 0


def read_packed_uint(data: bytes) -> int:
    """Decode a little-endian unsigned integer of any length up to 8 bytes."""
    return int.from_bytes(bytes(data), "little") & _UINT64_MASK