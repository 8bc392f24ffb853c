"""Reusable builder of Levenshtein automata for many queries."""

from vellum.levenshtein.dfa import DFA
from vellum.levenshtein.nfa import LevenshteinNFA
from vellum.levenshtein.parametric_dfa import from_nfa


class LevenshteinAutomatonBuilder:
    """Precomputes the parametric DFA for one maximum distance.

    Construction grows quickly with ``max_distance``; values up to about 5
    are practical. Once built, the builder can serve any number of queries.
    """

    def __init__(self, max_distance: int, transposition: bool):
        self._pdfa = from_nfa(LevenshteinNFA(max_distance, transposition))

    def build_dfa(self, query: str, fuzziness: int) -> DFA:
        """Build the automaton matching ``query`` within ``fuzziness`` edits."""
        return self._pdfa.build_dfa(query, fuzziness, False)

    def max_distance(self) -> int:
        """The largest edit distance this builder supports."""
        return self._pdfa.max_distance