"""
Binary operations on automata: union, intersection and concatenation.

Each operation builds a raw automaton from its two operands and then always
runs it through :class:`~fsakit.automata.determinize.Determinizer` and
:class:`~fsakit.automata.minimize.Minimizer`, so the result is a minimal DFA
numbered from 0. The operands are never modified.
"""

from collections import deque

from loguru import logger

from fsakit.automata.determinize import Determinizer
from fsakit.automata.fsa import DFA, EPSILON, NFA, AutomatonError
from fsakit.automata.minimize import Minimizer


def disjoint_union(a, b):
    """
    Returns NFA copies of ``a`` and ``b`` relabelled into separate id ranges:
    the states of ``a`` become ``0..len(a)-1`` and the states of ``b`` follow
    directly after them.

    Raises:
        AutomatonError: if the two ranges overlap. This cannot happen for
            well-formed automata and indicates a broken operand.
    """
    first = a.copy(NFA)
    first.rename(0)
    second = b.copy(NFA)
    second.rename(len(first.states))

    overlap = first.states & second.states
    if overlap:
        raise AutomatonError(
            "Relabelled operands share state ids %s" % sorted(overlap)
        )
    return first, second


def _merge(first, second):
    # Both operands must already live in disjoint id ranges
    nfa = NFA()
    nfa.alphabet = first.alphabet | second.alphabet
    nfa.states = first.states | second.states
    for fsa in (first, second):
        for src, trans in fsa.transitions.items():
            nfa.transitions.setdefault(src, set()).update(trans)
    return nfa


def _finish(fsa, max_states):
    dfa = Determinizer(max_states=max_states).determinize(fsa)
    return Minimizer(max_states=max_states).minimize(dfa)


def union(a, b, max_states=None):
    """
    Returns the minimal DFA accepting every string accepted by ``a`` or by
    ``b``.

    The raw automaton holds both operands side by side plus a new initial
    state with epsilon transitions to the initial states of both. The new
    state is final if an initial state of either operand is final.

    Args:
        a (FSA): The first automaton.
        b (FSA): The second automaton.
        max_states (int, optional): Limit for the subset construction.

    Returns:
        DFA: The minimal union automaton.
    """
    first, second = disjoint_union(a, b)
    nfa = _merge(first, second)
    nfa.final_states = first.final_states | second.final_states

    new_initial = nfa.max_state() + 1
    nfa.add_state(new_initial)
    for state in sorted(first.initial_states) + sorted(second.initial_states):
        nfa.add_transition(new_initial, EPSILON, state)
    if (first.initial_states & first.final_states) or (
        second.initial_states & second.final_states
    ):
        nfa.add_final_state(new_initial)
    nfa.initial_states = {new_initial}

    logger.debug("Union of {} and {} states: {}", len(a), len(b), nfa)
    return _finish(nfa, max_states)


def concatenation(a, b, max_states=None):
    """
    Returns the minimal DFA accepting every string ``uv`` where ``u`` is
    accepted by ``a`` and ``v`` is accepted by ``b``.

    The raw automaton starts in the initial states of ``a``, accepts in the
    final states of ``b``, and links every final state of ``a`` to every
    initial state of ``b`` with an epsilon transition.
    """
    first, second = disjoint_union(a, b)
    nfa = _merge(first, second)
    nfa.initial_states = set(first.initial_states)
    nfa.final_states = set(second.final_states)
    for final in sorted(first.final_states):
        for initial in sorted(second.initial_states):
            nfa.add_transition(final, EPSILON, initial)

    logger.debug("Concatenation of {} and {} states: {}", len(a), len(b), nfa)
    return _finish(nfa, max_states)


def intersection(a, b, max_states=None):
    """
    Returns the minimal DFA accepting the strings accepted by both ``a`` and
    ``b``.

    Both operands are determinized first, then combined with
    :func:`product_automaton`.

    Example:
        >>> dfa = DFA()
        >>> dfa.add_initial_state(0)
        >>> dfa.add_transition(0, "a", 1)
        >>> dfa.add_final_state(1)
        >>> len(intersection(dfa, dfa))
        2
    """
    determinizer = Determinizer(max_states=max_states)
    dfa1 = determinizer.determinize(a)
    dfa2 = determinizer.determinize(b)
    product = product_automaton(dfa1, dfa2)

    logger.debug("Intersection of {} and {} states: {}", len(a), len(b), product)
    return _finish(product, max_states)


def product_automaton(dfa1, dfa2):
    """
    Builds the synchronized product of two DFAs.

    A product state stands for a pair ``(state of dfa1, state of dfa2)``.
    Pairs are discovered breadth first from the pair of initial states and
    numbered from 0 in discovery order. A pair has a transition on a label
    only when both components have one, and is final only when both
    components are final. The alphabet is the union of both alphabets.

    Args:
        dfa1 (DFA): The first operand.
        dfa2 (DFA): The second operand.

    Returns:
        DFA: The product automaton, not minimized.
    """
    start = (dfa1.start(), dfa2.start())
    ids = {start: 0}
    queue = deque([start])

    dfa = DFA()
    dfa.alphabet = dfa1.alphabet | dfa2.alphabet
    dfa.add_initial_state(0)

    while queue:
        pair = queue.popleft()
        state1, state2 = pair
        src = ids[pair]
        if dfa1.is_final(state1) and dfa2.is_final(state2):
            dfa.add_final_state(src)

        moves2 = dict(dfa2.transitions.get(state2, ()))
        for label, dest1 in dfa1.outgoing(state1):
            dest2 = moves2.get(label)
            if dest2 is None:
                continue
            dest = (dest1, dest2)
            if dest not in ids:
                ids[dest] = len(ids)
                queue.append(dest)
            dfa.add_transition(src, label, ids[dest])
    return dfa
