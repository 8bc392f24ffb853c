"""A regular expression automaton over bytes."""

from vellum.regexp.compile import Compiler
from vellum.regexp.dfa import DfaBuilder
from vellum.regexp.syntax import parse

DEFAULT_LIMIT = 10 * (1 << 20)


class Regexp:
    """Automaton matching whole keys against a regular expression.

    The compiled program is limited to about ``size_limit`` bytes; larger
    expressions raise :class:`~vellum.regexp.compile.CompiledTooBigError`.
    """

    def __init__(self, expr: str, size_limit: int = DEFAULT_LIMIT):
        self.expr = expr
        program = Compiler(size_limit).compile(parse(expr))
        self._dfa = DfaBuilder(program).build()

    def __repr__(self) -> str:
        return f"Regexp({self.expr!r})"

    def start(self) -> int:
        """The start state."""
        return 1

    def is_match(self, state: int) -> bool:
        """True if ``state`` is a matching state."""
        if 0 <= state < len(self._dfa.states):
            return self._dfa.states[state].match
        return False

    def can_match(self, state: int) -> bool:
        """True if ``state`` can still lead to a match."""
        return 0 < state < len(self._dfa.states)

    def will_always_match(self, state: int) -> bool:
        """True only for a matching state that every byte leads back to.

        The automaton accepts only valid UTF-8, so no state qualifies.
        """
        if not self.can_match(state):
            return False
        current = self._dfa.states[state]
        return current.match and all(target == state for target in current.next)

    def accept(self, state: int, b: int) -> int:
        """The state reached from ``state`` on byte ``b``."""
        if 0 <= state < len(self._dfa.states):
            return self._dfa.states[state].next[b]
        return 0