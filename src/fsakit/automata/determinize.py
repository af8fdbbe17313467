from collections import deque

from loguru import logger

from fsakit.automata.fsa import DFA, EPSILON, NFA, StateLimitError


class Determinizer:
    """
    Converts any automaton into a DFA recognizing the same language using the
    subset construction.

    The conversion runs four steps in a fixed order:

    1. :meth:`simplify_initial_states` merges several initial states into one
       fresh state with epsilon transitions to each of them.
    2. :meth:`remove_epsilon_transitions` folds every epsilon closure into
       ordinary transitions and final states.
    3. :meth:`subset_construction` explores sets of states breadth first from
       the set holding the initial state.
    4. :meth:`normalize` numbers the discovered sets from 0 in discovery order
       and builds the DFA.

    Attributes:
        max_states (int): Upper bound on the number of state sets the subset
            construction may discover, or None for no limit. Exceeding it
            raises :class:`~fsakit.automata.fsa.StateLimitError`.

    Example:
        >>> nfa = NFA()
        >>> nfa.add_initial_state(0)
        >>> nfa.add_transition(0, EPSILON, 1)
        >>> nfa.add_final_state(1)
        >>> dfa = Determinizer().determinize(nfa)
        >>> dfa.final_states == dfa.initial_states == {0}
        True
    """

    def __init__(self, max_states=None):
        self.max_states = max_states

    def determinize(self, fsa):
        """
        Returns a DFA recognizing the same language as ``fsa``.

        A DFA input is not transformed: the result is a copy of it, so the
        caller may keep using (and mutating) its own object. The input is
        never modified.

        Args:
            fsa (FSA): The automaton to determinize.

        Returns:
            DFA: A new DFA with states numbered from 0.
        """
        if isinstance(fsa, DFA):
            logger.debug("Automaton is already deterministic, copying it")
            return fsa.copy()

        nfa = self.simplify_initial_states(fsa)
        nfa = self.remove_epsilon_transitions(nfa)
        start, table = self.subset_construction(nfa)
        dfa = self.normalize(nfa, start, table)
        logger.debug("Determinized {} states into {} states", len(fsa), len(dfa))
        return dfa

    def simplify_initial_states(self, fsa):
        """
        Returns an NFA copy of ``fsa`` with exactly one initial state.

        If ``fsa`` has several initial states (or none), a new state with the
        next free id gets an epsilon transition to each of them. The new state
        is final if any of the old initial states was final.
        """
        nfa = fsa.copy(NFA)
        if len(nfa.initial_states) == 1:
            return nfa

        new_initial = nfa.max_state() + 1
        nfa.add_state(new_initial)
        for state in sorted(fsa.initial_states):
            nfa.add_transition(new_initial, EPSILON, state)
        if fsa.initial_states & fsa.final_states:
            nfa.add_final_state(new_initial)
        nfa.initial_states = {new_initial}
        return nfa

    def remove_epsilon_transitions(self, nfa):
        """
        Returns an equivalent NFA without epsilon transitions.

        Each state takes over the non-epsilon transitions of every state in
        its epsilon closure, and becomes final if the closure contains a final
        state. Epsilon is dropped from the alphabet.
        """
        closures = {state: self.epsilon_closure(nfa, state) for state in nfa.states}

        result = NFA()
        result.states = set(nfa.states)
        result.alphabet = nfa.alphabet - {EPSILON}
        result.initial_states = set(nfa.initial_states)
        result.final_states = {
            state for state, closure in closures.items() if closure & nfa.final_states
        }
        for state, closure in closures.items():
            trans = {
                t
                for member in closure
                for t in nfa.transitions.get(member, ())
                if not t.is_epsilon()
            }
            if trans:
                result.transitions[state] = trans
        return result

    @staticmethod
    def epsilon_closure(fsa, state):
        """
        Returns the frozenset of states reachable from ``state`` through zero
        or more epsilon transitions (so it always contains ``state``).
        """
        closure = {state}
        queue = deque([state])
        while queue:
            src = queue.popleft()
            for t in fsa.transitions.get(src, ()):
                if t.is_epsilon() and t.dest not in closure:
                    closure.add(t.dest)
                    queue.append(t.dest)
        return frozenset(closure)

    def subset_construction(self, nfa):
        """
        Breadth-first search over sets of states of an epsilon-free NFA with a
        single initial state.

        Returns:
            tuple: ``(start, table)`` where ``start`` is the frozenset holding
            the initial state and ``table`` maps ``(state set, label)`` to the
            destination state set. Labels with no destination are left out.
        """
        start = frozenset(nfa.initial_states)
        table = {}
        seen = {start}
        queue = deque([start])

        while queue:
            current = queue.popleft()
            row = {}
            for state in current:
                for label, dest in nfa.transitions.get(state, ()):
                    row.setdefault(label, set()).add(dest)

            for label in sorted(row):
                dests = frozenset(row[label])
                table[(current, label)] = dests
                if dests not in seen:
                    seen.add(dests)
                    self._check_limit(len(seen))
                    queue.append(dests)

        logger.debug("Subset construction discovered {} state sets", len(seen))
        return start, table

    def normalize(self, nfa, start, table):
        """
        Builds the DFA for the subset construction result: every distinct
        state set gets the next integer id (from 0) in breadth-first discovery
        order, and a new state is final if its set contains a final state of
        ``nfa``.
        """
        symbols = sorted(nfa.alphabet | {label for _, label in table})

        dfa = DFA()
        dfa.alphabet = set(symbols)
        ids = {start: 0}
        queue = deque([start])
        dfa.add_initial_state(0)

        while queue:
            current = queue.popleft()
            src = ids[current]
            dfa.add_state(src)
            if current & nfa.final_states:
                dfa.add_final_state(src)

            for label in symbols:
                dests = table.get((current, label))
                if dests is None:
                    continue
                if dests not in ids:
                    ids[dests] = len(ids)
                    queue.append(dests)
                dfa.add_transition(src, label, ids[dests])
        return dfa

    def _check_limit(self, count):
        if self.max_states is not None and count > self.max_states:
            raise StateLimitError(
                "Subset construction exceeded the limit of %d states"
                % self.max_states
            )


def determinize(fsa, max_states=None):
    """
    Returns a DFA recognizing the same language as ``fsa``. See
    :class:`Determinizer`.
    """
    return Determinizer(max_states=max_states).determinize(fsa)
