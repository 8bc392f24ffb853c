from vellum.regexp.compile import Compiler
from vellum.regexp.dfa import DfaBuilder, TooManyStatesError
from vellum.regexp.inst import Inst, InstOp
from vellum.regexp.sparse import SparseSet
from vellum.regexp.syntax import parse


def build(expr):
    return DfaBuilder(Compiler(10000).compile(parse(expr))).build()


def test_dead_state_is_first_and_goes_nowhere():
    dfa = build("a")
    dead = dfa.states[0]
    assert not dead.match
    assert set(dead.next) == {0}
    assert dead.insts == ()


def test_literal_transitions():
    dfa = build("a")
    start = dfa.states[1]
    assert not start.match
    after = start.next[ord("a")]
    assert dfa.states[after].match
    assert start.next[ord("b")] == 0


def test_transitions_stay_in_range():
    dfa = build("[a-z]?[1-9]*|wat.r")
    for state in dfa.states:
        assert len(state.next) == 256
        assert all(0 <= n < len(dfa.states) for n in state.next)


def test_star_loops_back_to_start():
    dfa = build("a*")
    assert dfa.states[1].match
    assert dfa.states[1].next[ord("a")] == 1


def test_states_are_unique():
    dfa = build("a+|b+")
    keys = [state.insts for state in dfa.states[1:]]
    assert len(keys) == len(set(keys))


def test_add_follows_splits_and_jumps():
    program = [
        Inst(InstOp.SPLIT, split_a=1, split_b=3),
        Inst(InstOp.RANGE, range_start=ord("a"), range_end=ord("a")),
        Inst(InstOp.JMP, to=0),
        Inst(InstOp.MATCH),
    ]
    dfa = DfaBuilder(program).dfa
    positions = SparseSet(len(program))
    dfa.add(positions, 2)
    assert list(positions) == [2, 0, 1, 3]


def test_run_steps_over_matching_byte():
    program = [
        Inst(InstOp.RANGE, range_start=ord("a"), range_end=ord("c")),
        Inst(InstOp.MATCH),
    ]
    dfa = DfaBuilder(program).dfa
    source = SparseSet(2)
    dest = SparseSet(2)
    source.add(0)
    assert dfa.run(source, dest, ord("b")) is False
    assert list(dest) == [1]
    assert dfa.run(dest, source, ord("b")) is True
    assert len(source) == 0


def test_too_many_states_message():
    assert str(TooManyStatesError()) == "dfa contains more than 10000 states"