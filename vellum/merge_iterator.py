"""Merging several sorted key/value iterators into one."""

from collections.abc import Callable, Iterator as _PyIterator, Sequence as _Seq
from typing import Optional, Protocol

_UINT64_MASK = (1 << 64) - 1

MergeFunc = Callable[[list[int]], int]


class IteratorDone(Exception):
    """Raised when an iterator has moved past its last key."""


class KeyValueIterator(Protocol):
    def current(self) -> tuple[Optional[bytes], int]: ...

    def next(self) -> None: ...

    def seek(self, key: bytes) -> None: ...

    def close(self) -> None: ...


class MergeIterator:
    """Walks several sorted iterators in key order.

    When a key appears in more than one iterator, ``merge`` receives their
    values in the order of the iterators and chooses the resulting value.
    """

    def __init__(self, iterators: _Seq[KeyValueIterator], merge: MergeFunc):
        self._iterators = list(iterators)
        self._merge = merge
        self._keys: list[Optional[bytes]] = []
        self._values: list[int] = []
        for it in self._iterators:
            key, value = it.current()
            self._keys.append(key)
            self._values.append(value)
        self._low_key: Optional[bytes] = None
        self._low_value = 0
        self._low_indices: list[int] = []
        self._update_matches()

    def _update_matches(self) -> None:
        if not self._iterators:
            return
        low_key = self._keys[0]
        low_indices = [0]
        for i, key in enumerate(self._keys[1:], start=1):
            if key is None:
                continue
            if low_key is None or key < low_key:
                low_key = key
                low_indices = [i]
            elif key == low_key:
                low_indices.append(i)
        self._low_key = low_key
        self._low_indices = low_indices
        if len(low_indices) > 1:
            self._low_value = self._merge([self._values[i] for i in low_indices])
        else:
            self._low_value = self._values[low_indices[0]]

    def _refresh(self, index: int) -> None:
        self._keys[index], self._values[index] = self._iterators[index].current()

    @property
    def done(self) -> bool:
        """True when no current key is available."""
        return self._low_key is None

    def current(self) -> tuple[Optional[bytes], int]:
        """Return the current key and value, or ``(None, 0)`` when exhausted."""
        return self._low_key, self._low_value

    def next(self) -> None:
        """Advance to the next key; raise :class:`IteratorDone` past the end."""
        for i in self._low_indices:
            try:
                self._iterators[i].next()
            except IteratorDone:
                pass
            self._refresh(i)
        self._update_matches()
        if self._low_key is None:
            raise IteratorDone()

    def seek(self, key: bytes) -> None:
        """Move to ``key`` or the next larger key; raise :class:`IteratorDone` if none."""
        for i, it in enumerate(self._iterators):
            try:
                it.seek(key)
            except IteratorDone:
                pass
            self._refresh(i)
        self._update_matches()
        if self._low_key is None:
            raise IteratorDone()

    def close(self) -> None:
        """Close every underlying iterator, raising the first error seen."""
        first: Optional[BaseException] = None
        for it in self._iterators:
            try:
                it.close()
            except Exception as exc:  # keep closing the rest
                if first is None:
                    first = exc
        if first is not None:
            raise first

    def __iter__(self) -> _PyIterator[tuple[bytes, int]]:
        while self._low_key is not None:
            yield self._low_key, self._low_value
            try:
                self.next()
            except IteratorDone:
                return


def merge_min(values: list[int]) -> int:
    """Choose the smallest value."""
    return min(values)


def merge_max(values: list[int]) -> int:
    """Choose the largest value."""
    return max(values)


def merge_sum(values: list[int]) -> int:
    """Sum the values as unsigned 64-bit integers."""
    return sum(values) & _UINT64_MASK