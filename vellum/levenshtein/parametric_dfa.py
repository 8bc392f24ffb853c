"""Parametric Levenshtein DFA: state shapes independent of the query."""

from dataclasses import dataclass

from vellum.levenshtein.alphabet import query_chars
from vellum.levenshtein.dfa import DFA, Utf8DFABuilder
from vellum.levenshtein.nfa import (
    AtLeast,
    Distance,
    Exact,
    LevenshteinNFA,
    MultiState,
    NFAState,
    characteristic_vector,
)

STATE_LIMIT = 10000


class TooManyStatesError(Exception):
    """Raised when an automaton would need more states than allowed."""

    def __init__(self, limit: int = STATE_LIMIT):
        super().__init__(f"dfa contains more than {limit} states")
        self.limit = limit


@dataclass(frozen=True)
class ParametricState:
    """A shape of NFA multistate placed at an offset into the query."""

    shape_id: int = 0
    offset: int = 0

    @property
    def is_dead_end(self) -> bool:
        return self.shape_id == 0


@dataclass(frozen=True)
class Transition:
    """Moves to another shape and advances the offset."""

    dest_shape_id: int
    delta_offset: int

    def apply(self, state: ParametricState) -> ParametricState:
        # The dead state never carries an offset, so there is only one.
        if self.dest_shape_id == 0:
            return ParametricState(0, 0)
        return ParametricState(self.dest_shape_id, state.offset + self.delta_offset)


class ParametricStateIndex:
    """Numbers parametric states in the order they are first seen."""

    def __init__(self, query_len: int, num_param_states: int):
        self.num_offsets = query_len + 1
        if num_param_states == 0:
            num_param_states = self.num_offsets
        self.max_num_states = num_param_states * self.num_offsets
        self._index: dict[int, int] = {}
        self._queue: list[ParametricState] = []

    def __len__(self) -> int:
        return len(self._queue)

    def get(self, state_id: int) -> ParametricState:
        return self._queue[state_id]

    def get_or_allocate(self, state: ParametricState) -> int:
        """Return the number of ``state``, giving it a new one if unseen."""
        bucket = state.shape_id * self.num_offsets + state.offset
        found = self._index.get(bucket)
        if found is not None:
            return found
        new_id = len(self._queue)
        self._queue.append(state)
        self._index[bucket] = new_id
        return new_id


@dataclass
class ParametricDFA:
    """Transition and distance tables over multistate shapes."""

    distance: list[int]
    transitions: list[Transition]
    max_distance: int
    transition_stride: int
    diameter: int

    def initial_state(self) -> ParametricState:
        return ParametricState(shape_id=1)

    def num_states(self) -> int:
        return len(self.transitions) // self.transition_stride

    def transition(self, state: ParametricState, chi: int) -> Transition:
        return self.transitions[self.transition_stride * state.shape_id + chi]

    def is_prefix_sink(self, state: ParametricState, query_len: int) -> bool:
        """True if no further characters can lower the distance."""
        if state.is_dead_end:
            return True
        remaining = query_len - state.offset
        if 0 <= remaining < self.diameter:
            state_distances = self.distance[self.diameter * state.shape_id:]
            prefix_distance = state_distances[remaining]
            if prefix_distance > self.max_distance:
                return False
            return all(d >= prefix_distance for d in state_distances)
        return False

    def get_distance(self, state: ParametricState, query_len: int) -> Distance:
        """Distance reached when the input ends in ``state``."""
        remaining = query_len - state.offset
        if state.is_dead_end or not 0 <= remaining < self.diameter:
            return AtLeast(self.max_distance + 1)
        dist = self.distance[self.diameter * state.shape_id + remaining]
        if dist > self.max_distance:
            return AtLeast(dist)
        return Exact(dist)

    def compute_distance(self, left: str, right: str) -> Distance:
        """Edit distance between ``left`` and ``right``, capped by the limit."""
        state = self.initial_state()
        for ch in right:
            start = state.offset
            stop = min(start + self.diameter, len(left))
            chi = characteristic_vector(left[start:stop], ch)
            state = self.transition(state, chi).apply(state)
            if state.is_dead_end:
                return AtLeast(self.max_distance + 1)
        return self.get_distance(state, len(left))

    def build_dfa(self, query: str, distance: int, prefix: bool) -> DFA:
        """Build the byte-level DFA matching ``query`` within ``distance`` edits."""
        query_len = len(query)
        alphabet = query_chars(query)

        index = ParametricStateIndex(query_len, self.num_states())
        if index.get_or_allocate(ParametricState()) != 0:
            raise ValueError("Invalid dead end state")
        initial_id = index.get_or_allocate(self.initial_state())

        builder = Utf8DFABuilder(index.max_num_states)
        mask = (1 << self.diameter) - 1

        for state_id in range(STATE_LIMIT):
            if state_id == len(index):
                break
            state = index.get(state_id)
            if prefix and self.is_prefix_sink(state, query_len):
                builder.add_state(state_id, state_id, self.get_distance(state, query_len))
                continue
            default_successor = self.transition(state, 0).apply(state)
            default_id = index.get_or_allocate(default_successor)
            try:
                state_builder = builder.add_state(
                    state_id, default_id, self.get_distance(state, query_len)
                )
            except ValueError as exc:
                raise ValueError(f"parametric_dfa: buildDfa, err: {exc}") from exc
            for ch, vector in alphabet:
                chi = vector.shift_and_mask(state.offset, mask)
                dest = self.transition(state, chi).apply(state)
                state_builder.add_transition(ch, index.get_or_allocate(dest))
        else:
            raise TooManyStatesError()

        builder.set_initial_state(initial_id)
        return builder.build(distance)


def from_nfa(nfa: LevenshteinNFA) -> ParametricDFA:
    """Enumerate every multistate shape of ``nfa`` and tabulate it."""
    ids: dict[tuple[NFAState, ...], int] = {}
    items: list[tuple[NFAState, ...]] = []

    def get_or_allocate(states: tuple[NFAState, ...]) -> int:
        found = ids.get(states)
        if found is None:
            found = len(items)
            ids[states] = found
            items.append(states)
        return found

    get_or_allocate(())
    get_or_allocate(tuple(nfa.initial_states().states))

    diameter = nfa.ms_diameter
    num_chi = 1 << diameter

    transitions: list[Transition] = []
    for state_id in range(STATE_LIMIT):
        if state_id == len(items):
            break
        for chi in range(num_chi):
            source = MultiState(list(items[state_id]))
            dest = MultiState()
            nfa.transition(source, dest, chi)
            translation = dest.normalize()
            dest_id = get_or_allocate(tuple(dest.states))
            transitions.append(Transition(dest_id, translation))
    else:
        raise TooManyStatesError()

    distances = [
        nfa.multistate_distance(MultiState(list(states)), offset).distance
        for states in items
        for offset in range(diameter)
    ]

    return ParametricDFA(
        distance=distances,
        transitions=transitions,
        max_distance=nfa.max_distance,
        transition_stride=num_chi,
        diameter=diameter,
    )