from collections import deque

from loguru import logger

from fsakit.automata.determinize import Determinizer
from fsakit.automata.fsa import DFA


class Minimizer:
    """
    Computes the minimal DFA for the language of an automaton.

    The input is determinized first (a DFA is copied, never modified), then
    three passes run in this order, each one relying on the previous:

    1. unreachable states are removed (forward search from the initial
       state);
    2. useless states, from which no final state can be reached, are removed
       (backward search from the final states). If nothing useful is left the
       result is the canonical empty automaton, see :func:`empty_dfa`;
    3. equivalent states are merged with a Myhill-Nerode pair table.

    The result is numbered from 0 in breadth-first order from its initial
    state.

    Attributes:
        max_states (int): Passed to the :class:`Determinizer` run on the
            input, or None for no limit.
    """

    def __init__(self, max_states=None):
        self.max_states = max_states

    def minimize(self, fsa):
        """
        Returns the minimal DFA recognizing the same language as ``fsa``.

        Args:
            fsa (FSA): Any automaton. It is not modified.

        Returns:
            DFA: A new, minimal DFA.
        """
        dfa = Determinizer(max_states=self.max_states).determinize(fsa)
        dfa = self._remove_unreachable_states(dfa)
        dfa = self._remove_useless_states(dfa)
        dfa = self._merge_equivalent_states(dfa)
        logger.debug("Minimized {} states into {} states", len(fsa), len(dfa))
        return dfa

    def _remove_unreachable_states(self, dfa):
        # Keeps the states reachable from the initial state, their final
        # flags and the transitions leaving them.
        start = dfa.start()
        reached = {start}
        queue = deque([start])
        while queue:
            src = queue.popleft()
            for _, dest in dfa.outgoing(src):
                if dest not in reached:
                    reached.add(dest)
                    queue.append(dest)

        result = DFA()
        result.alphabet = set(dfa.alphabet)
        result.states = reached
        result.initial_states = {start}
        result.final_states = dfa.final_states & reached
        result.transitions = {
            src: set(trans) for src, trans in dfa.transitions.items() if src in reached
        }
        return result

    def _remove_useless_states(self, dfa):
        # Must run after _remove_unreachable_states: the survivors are then
        # exactly the states that are both reachable and co-reachable.
        incoming = incoming_states(dfa)
        useful = set(dfa.final_states)
        queue = deque(sorted(dfa.final_states))
        while queue:
            state = queue.popleft()
            for src in sorted(incoming.get(state, ())):
                if src not in useful:
                    useful.add(src)
                    queue.append(src)

        initial = dfa.initial_states & useful
        if not dfa.final_states or not initial:
            logger.debug("Automaton accepts no string, collapsing it to one state")
            return empty_dfa(dfa.alphabet)

        result = DFA()
        result.alphabet = set(dfa.alphabet)
        result.states = useful
        result.initial_states = initial
        result.final_states = set(dfa.final_states)
        for src, trans in dfa.transitions.items():
            if src in useful:
                kept = {t for t in trans if t.dest in useful}
                if kept:
                    result.transitions[src] = kept
        return result

    def _merge_equivalent_states(self, dfa):
        # Precondition: dfa is deterministic, every state is reachable and
        # useful. Renumbering then yields the dense range 0..n-1 used as
        # table indexes below.
        dfa = dfa.copy()
        dfa.rename(0)
        n = len(dfa.states)

        delta = [{} for _ in range(n)]
        for src, label, dest in dfa.triples():
            delta[src][label] = dest
        final = [state in dfa.final_states for state in range(n)]

        # All pairs start out equivalent, except final/non-final pairs
        table = [[final[i] == final[j] for j in range(n)] for i in range(n)]

        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for i in range(n):
                for j in range(i):
                    if table[i][j] and not _same_moves(delta[i], delta[j], table):
                        table[i][j] = table[j][i] = False
                        changed = True
        logger.debug("Equivalence table of {} states settled after {} passes", n, passes)

        # Each class is represented by its smallest member
        mapping = {}
        for i in range(n):
            if i in mapping:
                continue
            for j in range(i, n):
                if j not in mapping and table[i][j]:
                    mapping[j] = i

        start = mapping[dfa.start()]
        result = DFA()
        result.alphabet = set(dfa.alphabet)
        result.add_initial_state(start)
        seen = {start}
        queue = deque([start])
        while queue:
            rep = queue.popleft()
            if final[rep]:
                result.add_final_state(rep)
            for label, dest in sorted(delta[rep].items()):
                target = mapping[dest]
                result.add_transition(rep, label, target)
                if target not in seen:
                    seen.add(target)
                    queue.append(target)

        result.rename(0)
        return result


def _same_moves(moves1, moves2, table):
    if len(moves1) != len(moves2):
        return False
    for label, dest in moves1.items():
        other = moves2.get(label)
        if other is None or not table[dest][other]:
            return False
    return True


def incoming_states(fsa):
    """
    Returns a dictionary mapping each state to the set of states that have a
    transition into it.
    """
    incoming = {}
    for src, trans in fsa.transitions.items():
        for _, dest in trans:
            incoming.setdefault(dest, set()).add(src)
    return incoming


def empty_dfa(alphabet=()):
    """
    Returns the canonical automaton of the empty language: a single state 0
    that is initial, not final, and has no transitions.

    Args:
        alphabet (iterable, optional): The alphabet to give the automaton.
    """
    dfa = DFA()
    dfa.alphabet = set(alphabet)
    dfa.add_initial_state(0)
    return dfa


def minimize(fsa, max_states=None):
    """
    Returns the minimal DFA recognizing the same language as ``fsa``. See
    :class:`Minimizer`.
    """
    return Minimizer(max_states=max_states).minimize(fsa)
