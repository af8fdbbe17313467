import pytest
from fsakit.automata.combine import (
    concatenation,
    disjoint_union,
    intersection,
    product_automaton,
    union,
)
from fsakit.automata.fsa import DFA, EPSILON, NFA, StateLimitError
from fsakit.util.testing import accepts, language, words


def single(symbol):
    dfa = DFA()
    dfa.add_initial_state(0)
    dfa.add_transition(0, symbol, 1)
    dfa.add_final_state(1)
    return dfa


def empty_string():
    dfa = DFA()
    dfa.alphabet.add("a")
    dfa.add_initial_state(0)
    dfa.add_final_state(0)
    return dfa


def ends_with_ab():
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.add_transition(0, "a", 0)
    nfa.add_transition(0, "b", 0)
    nfa.add_transition(0, "a", 1)
    nfa.add_transition(1, "b", 2)
    nfa.add_final_state(2)
    return nfa


def even_as():
    dfa = DFA()
    dfa.add_initial_state(0)
    dfa.add_transition(0, "a", 1)
    dfa.add_transition(1, "a", 0)
    dfa.add_transition(0, "b", 0)
    dfa.add_transition(1, "b", 1)
    dfa.add_final_state(0)
    return dfa


def ab_star_or_b():
    # a b* | b, with two initial states and an epsilon transition
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.add_initial_state(3)
    nfa.add_transition(0, "a", 1)
    nfa.add_transition(1, EPSILON, 2)
    nfa.add_transition(2, "b", 2)
    nfa.add_transition(3, "b", 4)
    nfa.add_final_state(2)
    nfa.add_final_state(4)
    return nfa


SAMPLES = [single("a"), empty_string(), ends_with_ab(), even_as(), ab_star_or_b()]
PAIRS = [(a, b) for a in SAMPLES for b in SAMPLES]
WORDS = list(words("ab", 5))


def test_concatenation_with_empty_string():
    result = concatenation(single("a"), empty_string())
    assert isinstance(result, DFA)
    assert len(result) == 2
    assert language(result, "a", 3) == {("a",)}


def test_intersection_of_equal_languages():
    result = intersection(single("a"), single("a"))
    assert len(result) == 2
    assert language(result, "a", 3) == {("a",)}


def test_union_of_single_symbols():
    result = union(single("a"), single("b"))
    assert len(result) == 2
    assert result.final_states == {1}
    assert list(result.triples()) == [(0, "a", 1), (0, "b", 1)]


def test_union_with_empty_string():
    result = union(single("a"), empty_string())
    assert result.final_states == {0, 1}
    assert language(result, "a", 3) == {(), ("a",)}


def test_intersection_of_disjoint_languages():
    result = intersection(single("a"), single("b"))
    assert len(result) == 1
    assert result.final_states == set()
    assert result.transitions == {}
    assert result.alphabet == {"a", "b"}


@pytest.mark.parametrize("a,b", PAIRS)
def test_union_law(a, b):
    result = union(a, b)
    for w in WORDS:
        assert accepts(result, w) == (accepts(a, w) or accepts(b, w))


@pytest.mark.parametrize("a,b", PAIRS)
def test_intersection_law(a, b):
    result = intersection(a, b)
    for w in WORDS:
        assert accepts(result, w) == (accepts(a, w) and accepts(b, w))


@pytest.mark.parametrize("a,b", PAIRS)
def test_concatenation_law(a, b):
    result = concatenation(a, b)
    for w in WORDS:
        split = any(accepts(a, w[:i]) and accepts(b, w[i:]) for i in range(len(w) + 1))
        assert accepts(result, w) == split


def test_operands_are_not_modified():
    a = ab_star_or_b()
    b = even_as()
    before = (a.copy(), b.copy())
    union(a, b)
    intersection(a, b)
    concatenation(a, b)
    assert (a, b) == before


def test_disjoint_union():
    a = DFA()
    a.add_initial_state(9)
    a.add_transition(9, "a", 5)
    b = ends_with_ab()

    first, second = disjoint_union(a, b)
    assert isinstance(first, NFA)
    assert first.states == {0, 1}
    assert second.states == {2, 3, 4}
    assert second.initial_states == {2}
    assert second.final_states == {4}
    # The operands keep their own ids
    assert a.states == {5, 9}
    assert b.states == {0, 1, 2}


def test_product_automaton():
    dfa1 = DFA()
    dfa1.add_initial_state(0)
    dfa1.add_transition(0, "a", 1)
    dfa1.add_transition(0, "b", 0)
    dfa1.add_final_state(1)

    dfa2 = DFA()
    dfa2.add_initial_state(4)
    dfa2.add_transition(4, "a", 4)
    dfa2.add_transition(4, "c", 4)
    dfa2.add_final_state(4)

    product = product_automaton(dfa1, dfa2)
    assert product.alphabet == {"a", "b", "c"}
    assert product.initial_states == {0}
    assert product.final_states == {1}
    # Only "a" is defined on both sides
    assert list(product.triples()) == [(0, "a", 1)]


def test_state_limit_is_forwarded():
    with pytest.raises(StateLimitError):
        union(single("a"), single("b"), max_states=1)
