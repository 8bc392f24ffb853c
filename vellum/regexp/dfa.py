"""Determinising a compiled regular expression program."""

from dataclasses import dataclass

from vellum.regexp.compile import RegexpError
from vellum.regexp.inst import Inst, InstOp
from vellum.regexp.sparse import SparseSet

STATE_LIMIT = 10000


class TooManyStatesError(RegexpError):
    """The automaton would need more states than allowed."""

    message = f"dfa contains more than {STATE_LIMIT} states"


@dataclass
class State:
    """A DFA state: the program positions it stands for and its transitions."""

    insts: tuple[int, ...]
    next: list[int]
    match: bool


class Dfa:
    """A DFA over bytes; state 0 is the dead state."""

    def __init__(self, insts: list[Inst], states: list[State]):
        self.insts = insts
        self.states = states

    def add(self, states: SparseSet, ip: int) -> None:
        """Add ``ip`` and everything reachable from it without reading input."""
        stack = [ip]
        while stack:
            pc = stack.pop()
            if pc in states:
                continue
            states.add(pc)
            inst = self.insts[pc]
            if inst.op is InstOp.JMP:
                stack.append(inst.to)
            elif inst.op is InstOp.SPLIT:
                stack.append(inst.split_b)
                stack.append(inst.split_a)

    def run(self, source: SparseSet, dest: SparseSet, b: int) -> bool:
        """Step every position of ``source`` over byte ``b`` into ``dest``.

        Returns True if ``source`` held a match.
        """
        dest.clear()
        is_match = False
        for ip in source:
            inst = self.insts[ip]
            if inst.op is InstOp.MATCH:
                is_match = True
            elif inst.op is InstOp.RANGE and inst.range_start <= b <= inst.range_end:
                self.add(dest, ip + 1)
        return is_match


class DfaBuilder:
    """Builds a :class:`Dfa` from a program by subset construction."""

    def __init__(self, program: list[Inst]):
        self.dfa = Dfa(program, [State((), [0] * 256, False)])
        self._cache: dict[tuple[int, ...], int] = {}

    def build(self) -> Dfa:
        """Explore every reachable state; raise :class:`TooManyStatesError` past the limit."""
        size = len(self.dfa.insts)
        cur = SparseSet(size)
        nxt = SparseSet(size)

        self.dfa.add(cur, 0)
        start = self._cached_state(cur)
        pending = [start] if start else []
        seen = {start}
        while pending:
            s = pending.pop()
            for b in range(256):
                ns = self._run_state(cur, nxt, s, b)
                if ns and ns not in seen:
                    seen.add(ns)
                    pending.append(ns)
                if len(self.dfa.states) > STATE_LIMIT:
                    raise TooManyStatesError()
        return self.dfa

    def _run_state(self, cur: SparseSet, nxt: SparseSet, state: int, b: int) -> int:
        cur.clear()
        for ip in self.dfa.states[state].insts:
            cur.add(ip)
        self.dfa.run(cur, nxt, b)
        next_state = self._cached_state(nxt)
        self.dfa.states[state].next[b] = next_state
        return next_state

    def _cached_state(self, positions: SparseSet) -> int:
        insts = []
        is_match = False
        for ip in positions:
            op = self.dfa.insts[ip].op
            if op is InstOp.RANGE:
                insts.append(ip)
            elif op is InstOp.MATCH:
                is_match = True
                insts.append(ip)
        if not insts:
            return 0
        key = tuple(insts)
        found = self._cache.get(key)
        if found is not None:
            return found
        self.dfa.states.append(State(key, [0] * 256, is_match))
        new_id = len(self.dfa.states) - 1
        self._cache[key] = new_id
        return new_id