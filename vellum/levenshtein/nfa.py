"""A non-deterministic Levenshtein automaton over characters."""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

_UINT64_MASK = (1 << 64) - 1


@dataclass(frozen=True)
class Distance:
    """An edit distance computed by a Levenshtein automaton."""

    distance: int


class Exact(Distance):
    """The distance is exactly this value."""


class AtLeast(Distance):
    """The distance exceeds the automaton's limit; it is at least this value."""


@dataclass(frozen=True, order=True)
class NFAState:
    """A position in the query together with the edits spent to reach it."""

    offset: int = 0
    distance: int = 0
    in_transpose: bool = False

    def implies(self, other: "NFAState") -> bool:
        """True if ``other`` adds nothing once this state is present."""
        transpose_implies = self.in_transpose or not other.in_transpose
        delta = abs(self.offset - other.offset)
        if transpose_implies:
            return other.distance >= self.distance + delta
        return other.distance > self.distance + delta


@dataclass
class MultiState:
    """A set of NFA states with no state implied by another."""

    states: list[NFAState] = field(default_factory=list)

    def add_state(self, state: NFAState) -> None:
        """Add ``state`` unless implied, dropping states that it implies."""
        if any(s.implies(state) for s in self.states):
            return
        self.states = [s for s in self.states if not state.implies(s)]
        self.states.append(state)

    def normalize(self) -> int:
        """Shift offsets so the smallest is 0, sort, and return the shift."""
        min_offset = min((s.offset for s in self.states), default=0)
        self.states = sorted(
            replace(s, offset=s.offset - min_offset) for s in self.states
        )
        return min_offset

    def clear(self) -> None:
        self.states.clear()


def characteristic_vector(query: Sequence[str], c: str) -> int:
    """Return a bit for every position of ``query`` holding ``c`` (64 at most)."""
    chi = 0
    for i, q in enumerate(query):
        if q == c:
            chi |= 1 << i
    return chi & _UINT64_MASK


def _bit(bits: int, pos: int) -> bool:
    return (bits >> pos) & 1 == 1


class LevenshteinNFA:
    """Levenshtein automaton, optionally counting a transposition as one edit."""

    def __init__(self, max_distance: int, transposition: bool):
        self.max_distance = max_distance
        self.damerau = transposition

    @property
    def ms_diameter(self) -> int:
        return 2 * self.max_distance + 1

    def initial_states(self) -> MultiState:
        ms = MultiState()
        ms.add_state(NFAState())
        return ms

    def multistate_distance(self, multistate: MultiState, query_len: int) -> Distance:
        """Distance reached when the input ends in ``multistate``."""
        best = None
        for s in multistate.states:
            t = (s.distance + (abs(query_len - s.offset) & 0xFF)) & 0xFF
            if t <= self.max_distance and (best is None or t < best):
                best = t
        if best is None:
            return AtLeast(self.max_distance + 1)
        return Exact(best)

    def _simple_transition(self, state: NFAState, symbol: int, dest: MultiState) -> None:
        if state.distance < self.max_distance:
            # insertion
            dest.add_state(NFAState(state.offset, state.distance + 1, False))
            # substitution
            dest.add_state(NFAState(state.offset + 1, state.distance + 1, False))
            # deletions followed by a match
            for d in range(1, self.max_distance + 1 - state.distance):
                if _bit(symbol, d):
                    dest.add_state(
                        NFAState(state.offset + 1 + d, state.distance + d, False)
                    )
            if self.damerau and _bit(symbol, 1):
                dest.add_state(NFAState(state.offset, state.distance + 1, True))

        if _bit(symbol, 0):
            dest.add_state(NFAState(state.offset + 1, state.distance, False))

        if state.in_transpose and _bit(symbol, 0):
            dest.add_state(NFAState(state.offset + 2, state.distance, False))

    def transition(self, current: MultiState, dest: MultiState, scv: int) -> None:
        """Fill ``dest`` with the states reached from ``current`` on vector ``scv``."""
        dest.clear()
        mask = (1 << self.ms_diameter) - 1
        for state in current.states:
            self._simple_transition(state, (scv >> state.offset) & mask, dest)
        dest.states.sort()

    def compute_distance(self, query: Sequence[str], other: Sequence[str]) -> Distance:
        """Edit distance between ``query`` and ``other``, capped by the limit."""
        current = self.initial_states()
        following = MultiState()
        for c in other:
            self.transition(current, following, characteristic_vector(query, c))
            current, following = following, current
        return self.multistate_distance(current, len(query))