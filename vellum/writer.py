"""A buffered byte writer that counts what it has accepted."""

from typing import BinaryIO

DEFAULT_BUFFER_SIZE = 4096


def packed_size(n: int) -> int:
    """Return how many bytes are needed to store ``n`` little-endian (1 to 8)."""
    return min(8, max(1, (n.bit_length() + 7) // 8))


class Writer:
    """Buffers writes to a binary stream and counts the bytes written."""

    def __init__(self, stream: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE):
        self._stream = stream
        self._size = buffer_size if buffer_size > 0 else DEFAULT_BUFFER_SIZE
        self._buffer = bytearray()
        self.counter = 0

    def reset(self, stream: BinaryIO) -> None:
        """Discard buffered data and start writing to ``stream`` from zero."""
        self._stream = stream
        self._buffer.clear()
        self.counter = 0

    @property
    def _available(self) -> int:
        return self._size - len(self._buffer)

    def _write_through(self, data: bytes) -> int:
        written = self._stream.write(data)
        return len(data) if written is None else written

    def write_byte(self, c: int) -> None:
        """Write one byte, flushing first when the buffer is full."""
        if self._available <= 0:
            self.flush()
        self._buffer.append(c & 0xFF)
        self.counter += 1

    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes accepted."""
        data = bytes(data)
        pos = 0
        try:
            while len(data) - pos > self._available:
                if not self._buffer:
                    n = self._write_through(data[pos:])
                    pos += n
                    if pos < len(data):
                        raise OSError("short write")
                else:
                    take = self._available
                    self._buffer += data[pos:pos + take]
                    pos += take
                    self.flush()
            self._buffer += data[pos:]
            pos = len(data)
        finally:
            self.counter += pos
        return pos

    def flush(self) -> None:
        """Send all buffered bytes to the underlying stream."""
        if not self._buffer:
            return
        pending = bytes(self._buffer)
        n = self._write_through(pending)
        if n < len(pending):
            del self._buffer[:n]
            raise OSError("short write")
        self._buffer.clear()

    def write_packed_uint_in(self, value: int, n: int) -> None:
        """Write the low ``n`` bytes of ``value``, least significant first."""
        for shift in range(0, n * 8, 8):
            self.write_byte((value >> shift) & 0xFF)

    def write_packed_uint(self, value: int) -> None:
        """Write ``value`` in as few little-endian bytes as it needs."""
        self.write_packed_uint_in(value, packed_size(value))