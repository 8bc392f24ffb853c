import pytest

from vellum.levenshtein.automaton import LevenshteinAutomatonBuilder
from vellum.levenshtein.dfa import SINK_STATE


@pytest.fixture(scope="module")
def builders():
    return {d: LevenshteinAutomatonBuilder(d, False) for d in range(3)}


@pytest.mark.parametrize(
    "query, distance, seq, is_match, can_match",
    [
        ("cat", 0, b"cat", True, True),
        ("cat", 1, b"ca", True, True),
        ("cat", 1, b"cats", True, True),
        ("cat", 0, b"ca", False, True),
        ("cat", 0, b"cats", False, False),
        ("cate", 1, b"cate", True, True),
        ("cater", 1, b"cate", True, True),
        ("cater", 1, b"ctr", False, False),
        ("catered", 2, b"cater", True, True),
        ("cat", 0, b"c\xc3\xa1t", False, False),
        ("cat", 1, b"c\xc3\xa1t", True, True),
        ("cat", 1, b"c\xc3\xa1ts", False, False),
        ("cat", 1, b"\xc3\xa1", False, True),
        ("cat", 1, b"\xc3\xa1cat", True, True),
        ("cát", 0, b"cat", False, False),
        ("cát", 1, b"c\xc3\xa1", True, True),
        ("cát", 1, b"c\xc3\xa1s", True, True),
        ("cát", 1, b"c\xc3\xa1ta", True, True),
        ("cát", 1, b"d\xc3\xa1t", True, True),
        ("cát", 1, b"cat", True, True),
        ("cát", 1, b"cats", False, False),
        ("cát", 1, b"\xc3\xa1", False, True),
        ("cát", 1, b"ac\xc3\xa1t", True, True),
    ],
)
def test_levenshtein(builders, query, distance, seq, is_match, can_match):
    dfa = builders[distance].build_dfa(query, distance)
    s = dfa.start()
    for b in seq:
        s = dfa.accept(s, b)
        if s == SINK_STATE:
            break
    assert dfa.is_match(s) is is_match
    assert dfa.can_match(s) is can_match


def test_max_distance(builders):
    assert builders[2].max_distance() == 2
    assert builders[0].max_distance() == 0


def test_eval_edit_distance_1_transposition():
    builder = LevenshteinAutomatonBuilder(1, True)
    dfa = builder.build_dfa("couchbase", 1)
    assert dfa.eval(b"coucibase").distance == 1


def test_eval_edit_distance_2():
    builder = LevenshteinAutomatonBuilder(2, False)
    dfa = builder.build_dfa("couchbases", 2)
    assert dfa.eval(b"couchbasefts").distance == 2


def test_edit_distance_1_is_match():
    builder = LevenshteinAutomatonBuilder(1, True)
    dfa = builder.build_dfa("couchbase", 1)
    state = dfa.start()
    for b in b"coucibase":
        state = dfa.accept(state, b)
    assert dfa.is_match(state) is True


def test_edit_distance_2_is_match():
    builder = LevenshteinAutomatonBuilder(2, False)
    dfa = builder.build_dfa("couchbases", 2)
    state = dfa.start()
    for b in b"couchbasefts":
        state = dfa.accept(state, b)
    assert dfa.is_match(state) is True