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
Finite state automata and the operations on them.
"""

from loguru import logger

from fsakit.automata.combine import (
    concatenation,
    disjoint_union,
    intersection,
    product_automaton,
    union,
)
from fsakit.automata.determinize import Determinizer, determinize
from fsakit.automata.fsa import (
    DFA,
    EPSILON,
    FSA,
    NFA,
    AutomatonError,
    InvalidAutomatonError,
    StateLimitError,
    Transition,
)
from fsakit.automata.minimize import Minimizer, empty_dfa, minimize

# Library messages stay silent unless an application opts in with
# logger.enable("fsakit"), as the command line driver does.
logger.disable("fsakit")

__all__ = [
    "FSA",
    "NFA",
    "DFA",
    "EPSILON",
    "Transition",
    "AutomatonError",
    "InvalidAutomatonError",
    "StateLimitError",
    "Determinizer",
    "determinize",
    "Minimizer",
    "minimize",
    "empty_dfa",
    "union",
    "intersection",
    "concatenation",
    "disjoint_union",
    "product_automaton",
]
