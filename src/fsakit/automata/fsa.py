import itertools
from collections import deque, namedtuple

# Reserved label of a transition that consumes no input. It is the same token
# that names the epsilon column in the plain text format.
EPSILON = "*"


# Exceptions


class AutomatonError(Exception):
    """
    Base class for errors raised by the automaton operations.

    Attributes:
        message (str): explanation of the error
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class InvalidAutomatonError(AutomatonError):
    """
    Raised by :meth:`FSA.validate` when an automaton breaks one of the
    structural invariants of its kind, for example a transition pointing at
    a state that does not exist or a DFA with two initial states.
    """


class StateLimitError(AutomatonError):
    """
    Raised when the subset construction discovers more states than the
    configured ``max_states`` limit allows.
    """


class Transition(namedtuple("Transition", "label dest")):
    """
    An outgoing edge of a state: the label it is taken on and the id of the
    destination state. Transitions compare and hash by value, so a set of
    them never holds the same edge twice.

    Example:
        >>> Transition("a", 1) == Transition("a", 1)
        True
        >>> Transition(EPSILON, 3).is_epsilon()
        True
    """

    __slots__ = ()

    def is_epsilon(self):
        return self.label == EPSILON


# Base class


class FSA:
    """
    Finite State Automaton (FSA) base class.

    States are non-negative integers. The automaton is described by five
    public fields which the operations in this package read directly:

    Attributes:
        states (set): all state ids.
        alphabet (set): the input symbols (strings). Only an NFA may list
            :data:`EPSILON` here.
        initial_states (set): the initial states. A DFA has exactly one.
        final_states (set): the accepting states.
        transitions (dict): maps a source state to a set of
            :class:`Transition` objects.

    Subclasses set the ``kind`` class attribute to ``"NFA"`` or ``"DFA"``;
    it is the token written at the start of the plain text format.
    """

    kind = None

    def __init__(self):
        self.states = set()
        self.alphabet = set()
        self.initial_states = set()
        self.final_states = set()
        self.transitions = {}

    def __len__(self):
        """
        Returns the number of states in the automaton.

        :rtype: int
        """
        return len(self.states)

    def __eq__(self, other):
        """
        Check if two automata are structurally equal: same kind, same ids,
        same alphabet and the same edges. States without outgoing edges are
        equal whether or not they have an (empty) entry in the transition
        table.
        """
        if type(self) is not type(other):
            return False
        return (
            self.states == other.states
            and self.alphabet == other.alphabet
            and self.initial_states == other.initial_states
            and self.final_states == other.final_states
            and self._edges() == other._edges()
        )

    __hash__ = None

    def __repr__(self):
        return "<%s with %d states and %d transitions>" % (
            self.kind,
            len(self.states),
            sum(len(trans) for trans in self.transitions.values()),
        )

    def _edges(self):
        return {src: trans for src, trans in self.transitions.items() if trans}

    # Mutators

    def add_state(self, state):
        self.states.add(state)

    def add_initial_state(self, state):
        self.states.add(state)
        self.initial_states.add(state)

    def add_final_state(self, state):
        self.states.add(state)
        self.final_states.add(state)

    def add_transition(self, src, label, dest):
        """
        Adds a transition from the source state to the destination state with
        the given label. Both states are registered, and a non-epsilon label
        is added to the alphabet.

        Args:
            src (int): The source state.
            label (str): The input symbol, or :data:`EPSILON`.
            dest (int): The destination state.

        Example:
            >>> nfa = NFA()
            >>> nfa.add_transition(0, "a", 1)
            >>> nfa.add_transition(0, "a", 2)
            >>> sorted(nfa.transitions[0])
            [Transition(label='a', dest=1), Transition(label='a', dest=2)]
        """
        self.states.add(src)
        self.states.add(dest)
        if label != EPSILON:
            self.alphabet.add(label)
        self.transitions.setdefault(src, set()).add(Transition(label, dest))

    def clear(self):
        """
        Resets every field of the automaton to empty.
        """
        self.states.clear()
        self.alphabet.clear()
        self.initial_states.clear()
        self.final_states.clear()
        self.transitions.clear()

    def rename(self, start=0):
        """
        Relabels the states with consecutive integers beginning at ``start``.

        States are numbered in breadth-first discovery order from the initial
        states (taken in ascending order), following each state's outgoing
        transitions in ``(label, dest)`` order. States that cannot be reached
        from an initial state get the trailing ids, in ascending order of
        their old ids. The recognized language does not change.

        Args:
            start (int): The id given to the first state.

        Returns:
            dict: The mapping from old ids to new ids.

        Example:
            >>> dfa = DFA()
            >>> dfa.add_initial_state(7)
            >>> dfa.add_transition(7, "a", 3)
            >>> dfa.add_state(5)
            >>> dfa.rename(10)
            {7: 10, 3: 11, 5: 12}
        """
        counter = itertools.count(start)
        mapping = {}
        queue = deque()

        for state in sorted(self.initial_states):
            if state not in mapping:
                mapping[state] = next(counter)
                queue.append(state)

        while queue:
            src = queue.popleft()
            for _, dest in self.outgoing(src):
                if dest not in mapping:
                    mapping[dest] = next(counter)
                    queue.append(dest)

        leftovers = self.states | self.final_states | set(self.transitions)
        for state in sorted(leftovers):
            if state not in mapping:
                mapping[state] = next(counter)

        self.states = set(mapping.values())
        self.initial_states = {mapping[s] for s in self.initial_states}
        self.final_states = {mapping[s] for s in self.final_states}
        self.transitions = {
            mapping[src]: {Transition(label, mapping[dest]) for label, dest in trans}
            for src, trans in self.transitions.items()
        }
        return mapping

    # Accessors

    def outgoing(self, state):
        """
        Returns the transitions leaving ``state`` as a list sorted by label
        and then destination, so every traversal visits edges in the same
        order.
        """
        return sorted(self.transitions.get(state, ()))

    def labels(self, state):
        return {t.label for t in self.transitions.get(state, ())}

    def triples(self):
        """
        Generates every ``(source, label, destination)`` edge of the
        automaton in ascending order.
        """
        for src in sorted(self.transitions):
            for label, dest in self.outgoing(src):
                yield src, label, dest

    def is_final(self, state):
        return state in self.final_states

    def max_state(self):
        """
        Returns the highest state id, or -1 for an automaton without states.
        """
        return max(self.states) if self.states else -1

    def has_epsilon(self):
        return any(
            t.is_epsilon() for trans in self.transitions.values() for t in trans
        )

    def copy(self, cls=None):
        """
        Returns an independent copy of this automaton. Changing the copy never
        affects the original, and vice versa.

        Args:
            cls (type, optional): The automaton class of the copy, for example
                :class:`NFA` to relax a DFA. Defaults to the class of this
                automaton.
        """
        fsa = (cls or type(self))()
        fsa.states = set(self.states)
        fsa.alphabet = set(self.alphabet)
        fsa.initial_states = set(self.initial_states)
        fsa.final_states = set(self.final_states)
        fsa.transitions = {src: set(trans) for src, trans in self.transitions.items()}
        return fsa

    def validate(self):
        """
        Checks the structural invariants shared by every automaton.

        Raises:
            InvalidAutomatonError: if a state id is not a non-negative
                integer, an initial or final state is not one of the states,
                a transition leaves or enters an unknown state, or a
                transition label is missing from the alphabet.
        """
        for state in self.states:
            if isinstance(state, bool) or not isinstance(state, int) or state < 0:
                raise InvalidAutomatonError(
                    "State ids must be non-negative integers, got %r" % (state,)
                )

        for name, group in (
            ("initial", self.initial_states),
            ("final", self.final_states),
        ):
            stray = group - self.states
            if stray:
                raise InvalidAutomatonError(
                    "%s states %s are not states of the automaton"
                    % (name.capitalize(), sorted(stray))
                )

        for src, trans in self.transitions.items():
            if src not in self.states:
                raise InvalidAutomatonError("Transition from unknown state %r" % (src,))
            for label, dest in trans:
                if dest not in self.states:
                    raise InvalidAutomatonError(
                        "Transition %r --%s--> %r points to an unknown state"
                        % (src, label, dest)
                    )
                if label != EPSILON and label not in self.alphabet:
                    raise InvalidAutomatonError(
                        "Transition %r --%s--> %r uses a label outside the alphabet"
                        % (src, label, dest)
                    )


# Implementations


class NFA(FSA):
    """
    Nondeterministic finite automaton. It may have several initial states,
    several destinations for the same label, and :data:`EPSILON`
    transitions.
    """

    kind = "NFA"


class DFA(FSA):
    """
    Deterministic finite automaton: a single initial state, no epsilon
    transitions, and at most one destination per state and label. Missing
    transitions reject the input, there is no implicit dead state in the
    transition table.
    """

    kind = "DFA"

    def start(self):
        """
        Returns the initial state of the DFA.

        Raises:
            InvalidAutomatonError: if the DFA does not have exactly one
                initial state.
        """
        if len(self.initial_states) != 1:
            raise InvalidAutomatonError(
                "A DFA needs exactly one initial state, found %d"
                % len(self.initial_states)
            )
        return next(iter(self.initial_states))

    def next_state(self, src, label):
        """
        Returns the state reached from ``src`` on ``label``, or None if the
        DFA defines no such transition.
        """
        for t in self.transitions.get(src, ()):
            if t.label == label:
                return t.dest
        return None

    def validate(self):
        """
        Checks the shared invariants (see :meth:`FSA.validate`) and the DFA
        specific ones.

        Raises:
            InvalidAutomatonError: if there is not exactly one initial state,
                the alphabet contains :data:`EPSILON`, a state has an epsilon
                transition, or a state has two transitions on one label.
        """
        super().validate()
        self.start()
        if EPSILON in self.alphabet:
            raise InvalidAutomatonError("A DFA alphabet cannot contain epsilon")

        for src, trans in self.transitions.items():
            seen = set()
            for label, dest in sorted(trans):
                if label == EPSILON:
                    raise InvalidAutomatonError(
                        "DFA state %r has an epsilon transition" % (src,)
                    )
                if label in seen:
                    raise InvalidAutomatonError(
                        "DFA state %r has more than one transition on %r"
                        % (src, label)
                    )
                seen.add(label)


KINDS = {cls.kind: cls for cls in (NFA, DFA)}


def automaton_class(kind):
    """
    Returns the automaton class for a kind token (``"NFA"`` or ``"DFA"``).

    Raises:
        KeyError: if the token names no automaton kind.
    """
    return KINDS[kind]
