"""A sparse set of small integers with constant-time clear."""


class SparseSet:
    """Set of integers below ``size`` that keeps insertion order."""

    def __init__(self, size: int):
        self._dense = [0] * size
        self._sparse = [0] * size
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def add(self, ip: int) -> int:
        """Add ``ip`` and return its position in insertion order."""
        i = self._size
        self._dense[i] = ip
        self._sparse[ip] = i
        self._size += 1
        return i

    def get(self, i: int) -> int:
        """Return the element at position ``i``."""
        return self._dense[i]

    def __contains__(self, ip: int) -> bool:
        i = self._sparse[ip]
        return i < self._size and self._dense[i] == ip

    def __iter__(self):
        return iter(self._dense[:self._size])

    def clear(self) -> None:
        self._size = 0