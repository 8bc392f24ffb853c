"""A byte-level DFA built from a character-level automaton."""

from dataclasses import dataclass

from vellum.levenshtein.nfa import AtLeast, Distance, Exact

SINK_STATE = 0

# Byte ranges of UTF-8 lead bytes, by encoded length.
_LEAD_RANGES = ((0, 192), (192, 224), (224, 240), (240, 256))


def _original(state: int) -> int:
    return _predecessor(state, 0)


def _predecessor(state: int, num_steps: int) -> int:
    return state * 4 + num_steps


def _encode_char(char: str) -> bytes:
    if 0xD800 <= ord(char) <= 0xDFFF:
        char = "\ufffd"
    return char.encode("utf-8")


@dataclass
class DFA:
    """Deterministic automaton over bytes that reports edit distances."""

    transitions: list[list[int]]
    distances: list[Distance]
    initial_state: int
    max_distance: int

    def start(self) -> int:
        return self.initial_state

    def is_match(self, state: int) -> bool:
        return isinstance(self.distance(state), Exact)

    def can_match(self, state: int) -> bool:
        return 0 < state < self.num_states()

    def accept(self, state: int, b: int) -> int:
        return self.transitions[state][b]

    def will_always_match(self, state: int) -> bool:
        """True only for a matching state that every byte leads back to.

        Extra characters always add to the edit distance, so a Levenshtein
        automaton has no such state.
        """
        if not self.can_match(state) or not self.is_match(state):
            return False
        return all(target == state for target in self.transitions[state])

    def distance(self, state: int) -> Distance:
        return self.distances[state]

    def num_states(self) -> int:
        return len(self.transitions)

    def eval(self, data: bytes) -> Distance:
        """Run ``data`` from the start state and return the distance reached."""
        state = self.initial_state
        for b in data:
            state = self.transitions[state][b]
        return self.distance(state)


class Utf8DFAStateBuilder:
    """Adds character transitions out of one state of a :class:`Utf8DFABuilder`."""

    def __init__(self, builder: "Utf8DFABuilder", state_id: int, default_successor: list[int]):
        self._builder = builder
        self._state_id = state_id
        self._default_successor = default_successor

    def add_transition(self, char: str, to_state: int) -> None:
        """Route the UTF-8 bytes of ``char`` to the character-level ``to_state``."""
        transitions = self._builder.transitions
        encoded = _encode_char(char)
        from_state = self._state_id
        for i, b in enumerate(encoded[:-1]):
            remaining = len(encoded) - i - 1
            intermediate = transitions[from_state][b]
            if intermediate == self._default_successor[remaining]:
                intermediate = self._builder.allocate()
                transitions[intermediate] = [self._default_successor[remaining - 1]] * 256
            transitions[from_state][b] = intermediate
            from_state = intermediate
        target = self._builder.get_or_allocate(_original(to_state))
        transitions[from_state][encoded[-1]] = target


class Utf8DFABuilder:
    """Defines a DFA over characters and lays it out over UTF-8 bytes."""

    def __init__(self, max_states: int):
        self.max_num_states = max_states
        self._index: dict[int, int] = {}
        self.distances: list[Distance] = []
        self.transitions: list[list[int]] = []
        self.initial_state = 0

    def allocate(self) -> int:
        """Create a new byte-level state and return its id."""
        new_state = len(self.transitions)
        self.distances.append(AtLeast(255))
        self.transitions.append([0] * 256)
        return new_state

    def get_or_allocate(self, state: int) -> int:
        """Return the byte-level id of ``state``, creating it when new."""
        found = self._index.get(state)
        if found is not None:
            return found
        new_state = self.allocate()
        self._index[state] = new_state
        return new_state

    def set_initial_state(self, state: int) -> None:
        self.initial_state = self.get_or_allocate(_original(state))

    def add_state(self, state: int, default_successor: int, distance: Distance) -> Utf8DFAStateBuilder:
        """Declare ``state`` with its distance and the state any other character leads to."""
        if state > self.max_num_states:
            raise ValueError("State id is larger than maxNumStates")

        state_id = self.get_or_allocate(_original(state))
        self.distances[state_id] = distance

        default_id = self.get_or_allocate(_original(default_successor))
        # predecessors[k]: accepting k more bytes of any value leads to the default successor
        predecessors = [default_id] * 4
        for num_bytes in range(1, 4):
            pred_id = self.get_or_allocate(_predecessor(default_successor, num_bytes))
            predecessors[num_bytes] = pred_id
            self.transitions[pred_id] = [predecessors[num_bytes - 1]] * 256

        row = self.transitions[state_id]
        for (lo, hi), target in zip(_LEAD_RANGES, predecessors):
            row[lo:hi] = [target] * (hi - lo)

        return Utf8DFAStateBuilder(self, state_id, predecessors)

    def build(self, max_distance: int) -> DFA:
        return DFA(
            transitions=self.transitions,
            distances=self.distances,
            initial_state=self.initial_state,
            max_distance=max_distance,
        )