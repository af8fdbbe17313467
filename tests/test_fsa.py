import pytest
from fsakit.automata.fsa import (
    DFA,
    EPSILON,
    NFA,
    InvalidAutomatonError,
    Transition,
    automaton_class,
)


def make_dfa():
    dfa = DFA()
    dfa.add_initial_state(5)
    dfa.add_transition(5, "b", 2)
    dfa.add_transition(5, "a", 9)
    dfa.add_transition(9, "a", 2)
    dfa.add_final_state(2)
    dfa.add_state(7)
    dfa.add_state(3)
    return dfa


def test_add_transition():
    nfa = NFA()
    nfa.add_transition(0, "a", 1)
    nfa.add_transition(0, "a", 2)
    nfa.add_transition(0, EPSILON, 3)
    nfa.add_transition(0, "a", 1)

    assert nfa.states == {0, 1, 2, 3}
    assert nfa.alphabet == {"a"}
    assert nfa.transitions[0] == {
        Transition("a", 1),
        Transition("a", 2),
        Transition(EPSILON, 3),
    }
    assert nfa.labels(0) == {"a", EPSILON}
    assert nfa.has_epsilon()
    assert len(nfa) == 4


def test_outgoing_is_sorted():
    dfa = make_dfa()
    assert dfa.outgoing(5) == [Transition("a", 9), Transition("b", 2)]
    assert dfa.outgoing(7) == []
    assert list(dfa.triples()) == [(5, "a", 9), (5, "b", 2), (9, "a", 2)]


def test_rename_bfs_order():
    dfa = make_dfa()
    mapping = dfa.rename(0)

    # Reachable states in discovery order, then the rest in ascending order
    assert mapping == {5: 0, 9: 1, 2: 2, 3: 3, 7: 4}
    assert dfa.states == {0, 1, 2, 3, 4}
    assert dfa.initial_states == {0}
    assert dfa.final_states == {2}
    assert dfa.transitions == {
        0: {Transition("a", 1), Transition("b", 2)},
        1: {Transition("a", 2)},
    }


def test_rename_offset():
    dfa = make_dfa()
    dfa.rename(10)
    assert dfa.states == {10, 11, 12, 13, 14}
    assert dfa.start() == 10
    assert dfa.next_state(10, "a") == 11
    assert dfa.next_state(11, "a") == 12
    assert dfa.next_state(11, "b") is None


def test_rename_several_initial_states():
    nfa = NFA()
    nfa.add_initial_state(8)
    nfa.add_initial_state(4)
    nfa.add_transition(8, "a", 1)
    nfa.add_transition(4, "a", 6)
    assert nfa.rename(0) == {4: 0, 8: 1, 6: 2, 1: 3}


def test_clear():
    dfa = make_dfa()
    dfa.clear()
    assert dfa.states == set()
    assert dfa.alphabet == set()
    assert dfa.initial_states == set()
    assert dfa.final_states == set()
    assert dfa.transitions == {}
    assert dfa.max_state() == -1


def test_copy_is_independent():
    dfa = make_dfa()
    other = dfa.copy()
    assert other == dfa
    assert other is not dfa

    other.add_transition(2, "a", 7)
    other.add_final_state(3)
    assert dfa.outgoing(2) == []
    assert dfa.final_states == {2}
    assert other != dfa


def test_copy_to_other_kind():
    dfa = make_dfa()
    nfa = dfa.copy(NFA)
    assert isinstance(nfa, NFA)
    assert nfa.transitions == dfa.transitions
    # Different kinds never compare equal
    assert nfa != dfa


def test_equality_ignores_empty_rows():
    dfa = make_dfa()
    other = dfa.copy()
    other.transitions[7] = set()
    assert dfa == other


def test_validate_accepts_well_formed():
    make_dfa().validate()

    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.add_initial_state(1)
    nfa.add_transition(0, EPSILON, 1)
    nfa.add_transition(1, "a", 0)
    nfa.add_transition(1, "a", 1)
    nfa.validate()


def test_validate_dangling_transition():
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.alphabet.add("a")
    nfa.transitions[0] = {Transition("a", 4)}
    with pytest.raises(InvalidAutomatonError):
        nfa.validate()


def test_validate_unknown_final_state():
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.final_states.add(3)
    with pytest.raises(InvalidAutomatonError):
        nfa.validate()


def test_validate_label_outside_alphabet():
    nfa = NFA()
    nfa.add_transition(0, "a", 1)
    nfa.alphabet.discard("a")
    with pytest.raises(InvalidAutomatonError):
        nfa.validate()


def test_validate_negative_state():
    nfa = NFA()
    nfa.add_state(-1)
    with pytest.raises(InvalidAutomatonError):
        nfa.validate()


def test_validate_dfa_initial_states():
    dfa = make_dfa()
    dfa.add_initial_state(3)
    with pytest.raises(InvalidAutomatonError):
        dfa.validate()

    dfa = make_dfa()
    dfa.initial_states.clear()
    with pytest.raises(InvalidAutomatonError):
        dfa.validate()
    with pytest.raises(InvalidAutomatonError):
        dfa.start()


def test_validate_dfa_nondeterminism():
    dfa = make_dfa()
    dfa.add_transition(5, "a", 7)
    with pytest.raises(InvalidAutomatonError):
        dfa.validate()


def test_validate_dfa_epsilon():
    dfa = make_dfa()
    dfa.add_transition(5, EPSILON, 7)
    with pytest.raises(InvalidAutomatonError):
        dfa.validate()

    dfa = make_dfa()
    dfa.alphabet.add(EPSILON)
    with pytest.raises(InvalidAutomatonError):
        dfa.validate()


def test_automaton_class():
    assert automaton_class("DFA") is DFA
    assert automaton_class("NFA") is NFA
    with pytest.raises(KeyError):
        automaton_class("PDA")


def test_repr():
    assert repr(make_dfa()) == "<DFA with 5 states and 3 transitions>"
