# Copyright 2012 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
Helpers for checking automata in tests: run an automaton on a word, collect
the words it accepts up to a given length, and compare two DFAs up to
renumbering.
"""

import itertools
from collections import deque

from fsakit.automata.fsa import EPSILON


def _closure(fsa, states):
    closure = set(states)
    queue = deque(states)
    while queue:
        src = queue.popleft()
        for label, dest in fsa.transitions.get(src, ()):
            if label == EPSILON and dest not in closure:
                closure.add(dest)
                queue.append(dest)
    return closure


def accepts(fsa, word):
    """
    Returns True if ``fsa`` (deterministic or not) accepts ``word``, a
    sequence of alphabet symbols. A plain string is read one character per
    symbol.
    """
    current = _closure(fsa, fsa.initial_states)
    for symbol in word:
        moved = {
            dest
            for state in current
            for label, dest in fsa.transitions.get(state, ())
            if label == symbol
        }
        current = _closure(fsa, moved)
        if not current:
            return False
    return bool(current & fsa.final_states)


def words(alphabet, maxlen):
    """
    Yields every word over ``alphabet`` of length 0 to ``maxlen`` as a tuple
    of symbols, shortest first.
    """
    symbols = sorted(alphabet)
    for length in range(maxlen + 1):
        yield from itertools.product(symbols, repeat=length)


def language(fsa, alphabet, maxlen):
    """
    Returns the set of words (tuples of symbols) over ``alphabet`` of length
    at most ``maxlen`` accepted by ``fsa``.
    """
    return {w for w in words(alphabet, maxlen) if accepts(fsa, w)}


def is_isomorphic(dfa1, dfa2):
    """
    Returns True if the two DFAs are identical up to the numbering of their
    states.
    """
    if len(dfa1) != len(dfa2) or dfa1.alphabet != dfa2.alphabet:
        return False

    start = (dfa1.start(), dfa2.start())
    mapping = {start[0]: start[1]}
    queue = deque([start])
    while queue:
        s1, s2 = queue.popleft()
        if dfa1.is_final(s1) != dfa2.is_final(s2):
            return False
        moves1 = dict(dfa1.transitions.get(s1, ()))
        moves2 = dict(dfa2.transitions.get(s2, ()))
        if moves1.keys() != moves2.keys():
            return False
        for label, d1 in moves1.items():
            d2 = moves2[label]
            if d1 in mapping:
                if mapping[d1] != d2:
                    return False
            elif d2 in mapping.values():
                return False
            else:
                mapping[d1] = d2
                queue.append((d1, d2))
    return len(mapping) == len(dfa1)
