import pytest

from vellum.levenshtein.nfa import AtLeast, Exact, LevenshteinNFA
from vellum.levenshtein.parametric_dfa import (
    ParametricState,
    ParametricStateIndex,
    TooManyStatesError,
    Transition,
    from_nfa,
)


@pytest.fixture(scope="module")
def pdfa_1_damerau():
    return from_nfa(LevenshteinNFA(1, True))


@pytest.fixture(scope="module")
def pdfa_1():
    return from_nfa(LevenshteinNFA(1, False))


@pytest.fixture(scope="module")
def pdfa_2():
    return from_nfa(LevenshteinNFA(2, False))


def test_dead_end_state():
    assert ParametricState().is_dead_end is True
    assert ParametricState(shape_id=1).is_dead_end is False


def test_transition_to_dead_state_drops_offset():
    state = ParametricState(shape_id=3, offset=5)
    assert Transition(0, 2).apply(state) == ParametricState(0, 0)
    assert Transition(4, 2).apply(state) == ParametricState(4, 7)


def test_state_index_reuses_numbers():
    index = ParametricStateIndex(3, 0)
    assert index.max_num_states == 16
    assert index.get_or_allocate(ParametricState()) == 0
    assert index.get_or_allocate(ParametricState(1, 0)) == 1
    assert index.get_or_allocate(ParametricState(1, 2)) == 2
    assert index.get_or_allocate(ParametricState(1, 0)) == 1
    assert len(index) == 3
    assert index.get(2) == ParametricState(1, 2)


def test_from_nfa_tables(pdfa_1):
    assert pdfa_1.diameter == 3
    assert pdfa_1.transition_stride == 8
    assert pdfa_1.max_distance == 1
    assert len(pdfa_1.distance) == pdfa_1.num_states() * pdfa_1.diameter
    # the empty multistate is the dead shape: everything leads back to it
    assert all(t.dest_shape_id == 0 for t in pdfa_1.transitions[:8])


def test_prefix_sink_of_dead_state(pdfa_1):
    assert pdfa_1.is_prefix_sink(ParametricState(), 3) is True


def test_get_distance(pdfa_1):
    assert pdfa_1.get_distance(ParametricState(), 3) == AtLeast(2)
    assert pdfa_1.get_distance(pdfa_1.initial_state(), 0) == Exact(0)
    assert pdfa_1.get_distance(pdfa_1.initial_state(), 10) == AtLeast(2)


@pytest.mark.parametrize(
    "left, right, expected",
    [("abc", "abc", 0), ("abc", "abcd", 1), ("aab", "ab", 1), ("abcd", "abc", 1)],
)
def test_compute_distance(pdfa_1, left, right, expected):
    assert pdfa_1.compute_distance(left, right) == Exact(expected)


def test_compute_distance_too_far(pdfa_1):
    assert pdfa_1.compute_distance("abc", "xyz").distance == 2


def test_levenshtein_parametric_dfa(pdfa_1_damerau):
    dfa = pdfa_1_damerau.build_dfa("abc", 1, False)
    assert dfa.eval(b"abc").distance == 0
    assert dfa.eval(b"ab").distance == 1
    assert dfa.eval(b"ac").distance == 1
    assert dfa.eval(b"a").distance == 2
    assert dfa.eval(b"abcd").distance == 1
    assert dfa.eval(b"abdd").distance == 2


def test_levenshtein_parametric_dfa_long_query(pdfa_1_damerau):
    alpha = "abcdefghijlmnopqrstuvwxyz"
    dfa = pdfa_1_damerau.build_dfa(alpha * 4, 1, False)

    sample1 = alpha + "abcdefghijlnopqrstuvwxyz" + alpha + alpha
    assert dfa.eval(sample1.encode()).distance == 1

    sample2 = alpha + "abcdefghijlnopqrstuvwxyz" + alpha + "abcdefghijlmnoprqstuvwxyz"
    assert dfa.eval(sample2.encode()).distance == 2


def test_levenshtein_dfa_state_count(pdfa_2):
    dfa = pdfa_2.build_dfa("abcabcaaabc", 2, False)
    assert dfa.num_states() == 273


def test_utf8_simple(pdfa_1):
    dfa = pdfa_1.build_dfa("あ", 1, False)
    assert dfa.eval("あ".encode()).distance == 0


def test_simple(pdfa_2):
    query = "abcdef"
    dfa = pdfa_2.build_dfa(query, 1, False)
    assert dfa.eval(query.encode()).distance == 0
    assert dfa.eval(b"abcdf").distance == 1
    assert dfa.eval(b"abcdgf").distance == 1
    assert dfa.eval(b"abccdef").distance == 1


def test_japanese(pdfa_2):
    query = "寿司は焦げられない"
    dfa = pdfa_2.build_dfa(query, 2, False)
    assert dfa.eval(query.encode()).distance == 0
    assert dfa.eval("寿司は焦げられな".encode()).distance == 1
    assert dfa.eval("寿司は焦げられなI".encode()).distance == 1
    assert dfa.eval("寿司は焦られなI".encode()).distance == 2


def test_japanese_english(pdfa_1):
    dfa = pdfa_1.build_dfa("寿a", 1, False)
    assert dfa.eval("寿a".encode()).distance == 0
    assert dfa.eval(b"a").distance == 1


def test_too_many_states():
    pdfa = from_nfa(LevenshteinNFA(3, True))
    query = (
        "1234567890123456789012345678901234567890123456789"
        "1234567890123456789012345678901234567890123456789"
        "1234567890123456789012345678901234567890"
    )
    with pytest.raises(TooManyStatesError, match="more than 10000 states"):
        pdfa.build_dfa(query, 1, False)