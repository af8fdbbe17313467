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
Reading and writing automata in the plain text format.

The first line holds the automaton kind (``DFA`` or ``NFA``) followed by the
alphabet symbols, which also name the transition columns of every following
line. Each following line describes one state::

    NFA a b *
    <> 0 1|2 - -
     > 1 - 2 -
       2 - - 0
     < 3 - 3 -

A state line starts with an optional marker (``>`` initial, ``<`` final,
``<>`` or ``><`` both), then the state id, then one field per symbol: ``-``
for no transition, or the destination ids joined with ``|``. The epsilon
column is named ``*``.
"""

from io import StringIO

from cached_property import cached_property
from loguru import logger

from fsakit.automata.fsa import KINDS, InvalidAutomatonError, automaton_class

NO_TRANSITION = "-"
DEST_SEP = "|"

_MARKERS = {
    ">": (True, False),
    "<": (False, True),
    "<>": (True, True),
    "><": (True, True),
}


# Exceptions


class FileFormatError(Exception):
    """
    Exception raised when a file does not follow the plain text automaton
    format.

    Attributes:
        message (str): The error message.
        lineno (int): The 1-based line number the error was found on, or None
            if it concerns the file as a whole.
    """

    def __init__(self, message, lineno=None):
        self.message = message
        self.lineno = lineno
        super().__init__(message)

    def __str__(self):
        if self.lineno is not None:
            return "line %d: %s" % (self.lineno, self.message)
        return self.message


# Reading


class AutomatonReader:
    """
    Parses one automaton from a file-like object of text lines.

    The header is parsed lazily and cached, so ``kind`` and ``alphabet`` can
    be inspected before (or without) reading the states.

    Example:
        >>> reader = AutomatonReader(StringIO("DFA a\\n > 0 1\\n < 1 -\\n"))
        >>> reader.kind, reader.alphabet
        ('DFA', ['a'])
        >>> reader.read()
        <DFA with 2 states and 1 transitions>
    """

    def __init__(self, stream, name=None):
        self._stream = stream
        self.name = name or getattr(stream, "name", "<stream>")

    @cached_property
    def lines(self):
        """
        The non-blank lines of the input as ``(lineno, tokens)`` tuples.
        """
        try:
            lines = [
                (lineno, line.split())
                for lineno, line in enumerate(self._stream, 1)
                if line.strip()
            ]
        except UnicodeDecodeError as e:
            raise FileFormatError("%s is not a text file: %s" % (self.name, e)) from e
        if not lines:
            raise FileFormatError("%s is empty" % self.name)
        return lines

    @cached_property
    def kind(self):
        lineno, tokens = self.lines[0]
        if tokens[0] not in KINDS:
            raise FileFormatError(
                "Unknown automaton kind %r, expected one of %s"
                % (tokens[0], ", ".join(sorted(KINDS))),
                lineno,
            )
        return tokens[0]

    @cached_property
    def alphabet(self):
        """
        The header symbols in column order.
        """
        lineno, tokens = self.lines[0]
        symbols = tokens[1:]
        if len(set(symbols)) != len(symbols):
            raise FileFormatError("Duplicate symbols in the alphabet", lineno)
        return symbols

    def read(self):
        """
        Parses the states and returns the automaton.

        Raises:
            FileFormatError: if the input is malformed or describes an
                automaton that breaks the invariants of its kind.
        """
        fsa = automaton_class(self.kind)()
        fsa.alphabet = set(self.alphabet)
        for lineno, tokens in self.lines[1:]:
            self._read_state(fsa, lineno, tokens)

        try:
            fsa.validate()
        except InvalidAutomatonError as e:
            raise FileFormatError("%s: %s" % (self.name, e.message)) from e

        logger.debug("Read {} from {}", fsa, self.name)
        return fsa

    def _read_state(self, fsa, lineno, tokens):
        initial = final = False
        if tokens[0] in _MARKERS:
            initial, final = _MARKERS[tokens[0]]
            tokens = tokens[1:]
        if not tokens:
            raise FileFormatError("Missing state id", lineno)

        state = _parse_id(tokens[0], lineno)
        fields = tokens[1:]
        if len(fields) != len(self.alphabet):
            raise FileFormatError(
                "Expected %d transition fields, found %d"
                % (len(self.alphabet), len(fields)),
                lineno,
            )

        fsa.add_state(state)
        if initial:
            fsa.add_initial_state(state)
        if final:
            fsa.add_final_state(state)
        for label, field in zip(self.alphabet, fields):
            if field == NO_TRANSITION:
                continue
            for dest in field.split(DEST_SEP):
                fsa.add_transition(state, label, _parse_id(dest, lineno))


def _parse_id(token, lineno):
    if not token.isdecimal():
        raise FileFormatError("Invalid state id %r" % token, lineno)
    return int(token)


def read(stream, name=None):
    """
    Reads an automaton from a file-like object.
    """
    return AutomatonReader(stream, name=name).read()


def read_file(path):
    """
    Reads an automaton from the file at ``path``.

    Raises:
        OSError: if the file cannot be opened.
        FileFormatError: if the content is malformed.
    """
    with open(path, encoding="utf-8") as f:
        return read(f, name=str(path))


def loads(text):
    return read(StringIO(text), name="<string>")


# Writing


def _marker(initial, final):
    if initial and final:
        return "<>"
    elif initial:
        return " >"
    elif final:
        return " <"
    return "  "


def write(fsa, stream):
    """
    Writes an automaton to a file-like object.

    Symbols are written in sorted order. A label used by a transition but
    missing from the alphabet (typically the epsilon label of a raw NFA) gets
    its own column, so nothing is lost.

    Args:
        fsa (FSA): The automaton to write.
        stream: A text file-like object.
    """
    symbols = sorted(
        fsa.alphabet
        | {t.label for trans in fsa.transitions.values() for t in trans}
    )
    stream.write(" ".join([fsa.kind] + symbols) + "\n")

    for state in sorted(fsa.states):
        columns = {}
        for label, dest in fsa.outgoing(state):
            columns.setdefault(label, []).append(str(dest))
        fields = [
            DEST_SEP.join(columns[s]) if s in columns else NO_TRANSITION
            for s in symbols
        ]
        marker = _marker(state in fsa.initial_states, state in fsa.final_states)
        stream.write(" ".join([marker, str(state)] + fields) + "\n")


def write_file(fsa, path):
    with open(path, "w", encoding="utf-8") as f:
        write(fsa, f)
    logger.debug("Wrote {} to {}", fsa, path)


def dumps(fsa):
    """
    Returns the plain text form of an automaton as a string.

    Example:
        >>> from fsakit.automata.fsa import DFA
        >>> dfa = DFA()
        >>> dfa.add_initial_state(0)
        >>> dfa.add_transition(0, "a", 1)
        >>> dfa.add_final_state(1)
        >>> print(dumps(dfa), end="")
        DFA a
         > 0 1
         < 1 -
    """
    buf = StringIO()
    write(fsa, buf)
    return buf.getvalue()
