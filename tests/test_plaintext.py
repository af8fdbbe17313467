from io import StringIO

import pytest
from fsakit.automata.fsa import DFA, EPSILON, NFA, InvalidAutomatonError, Transition
from fsakit.codec.plaintext import (
    AutomatonReader,
    FileFormatError,
    dumps,
    loads,
    read_file,
    write_file,
)

NFA_TEXT = """NFA a b *
<> 0 1|2 - -
 > 1 - 2 -
   2 - - 0
 < 3 - 3 -
"""


def test_read_dfa():
    dfa = loads("DFA a b\n > 0 1 -\n < 1 - 1\n")
    assert isinstance(dfa, DFA)
    assert dfa.states == {0, 1}
    assert dfa.initial_states == {0}
    assert dfa.final_states == {1}
    assert dfa.alphabet == {"a", "b"}
    assert list(dfa.triples()) == [(0, "a", 1), (1, "b", 1)]


def test_read_nfa():
    nfa = loads(NFA_TEXT)
    assert isinstance(nfa, NFA)
    assert nfa.states == {0, 1, 2, 3}
    assert nfa.initial_states == {0, 1}
    assert nfa.final_states == {0, 3}
    assert nfa.transitions[0] == {Transition("a", 1), Transition("a", 2)}
    assert nfa.outgoing(2) == [(EPSILON, 0)]
    assert nfa.has_epsilon()


def test_reversed_marker():
    dfa = loads("DFA a\n>< 0 0\n")
    assert dfa.initial_states == {0}
    assert dfa.final_states == {0}


def test_blank_lines_are_skipped():
    dfa = loads("\nDFA a\n\n > 0 1\n\n < 1 -\n\n")
    assert len(dfa) == 2


def test_empty_alphabet():
    dfa = loads("DFA\n<> 0\n")
    assert dfa.alphabet == set()
    assert dfa.final_states == {0}


def test_reader_header():
    reader = AutomatonReader(StringIO(NFA_TEXT), name="sample")
    assert reader.kind == "NFA"
    assert reader.alphabet == ["a", "b", "*"]
    assert reader.name == "sample"


def test_dumps():
    dfa = DFA()
    dfa.add_initial_state(0)
    dfa.add_transition(0, "a", 1)
    dfa.add_transition(1, "b", 1)
    dfa.add_final_state(1)
    assert dumps(dfa) == "DFA a b\n > 0 1 -\n < 1 - 1\n"


def test_dumps_markers_and_sets():
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.add_final_state(0)
    nfa.add_transition(0, "a", 2)
    nfa.add_transition(0, "a", 1)
    nfa.add_state(3)
    assert dumps(nfa) == "NFA a\n<> 0 1|2\n   1 -\n   2 -\n   3 -\n"


def test_dumps_epsilon_column():
    # Epsilon is not part of the alphabet but still gets a column
    nfa = NFA()
    nfa.add_initial_state(0)
    nfa.add_transition(0, EPSILON, 1)
    nfa.add_transition(1, "b", 1)
    nfa.add_final_state(1)
    assert EPSILON not in nfa.alphabet
    assert dumps(nfa) == "NFA * b\n > 0 1 -\n < 1 - 1\n"


def test_dumps_loads():
    nfa = loads(NFA_TEXT)
    assert loads(dumps(nfa)) == nfa


def test_file_round_trip(tmp_path):
    path = tmp_path / "sample.txt"
    nfa = loads(NFA_TEXT)
    write_file(nfa, path)
    assert path.read_text(encoding="utf-8") == dumps(nfa)
    assert read_file(path) == nfa


def test_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_file(tmp_path / "missing.txt")


def test_binary_file(tmp_path):
    path = tmp_path / "binary.txt"
    path.write_bytes(b"\xff\xfe\x00\x81")
    with pytest.raises(FileFormatError):
        read_file(path)


@pytest.mark.parametrize("text", ["", "\n   \n"])
def test_empty_input(text):
    with pytest.raises(FileFormatError) as exc:
        loads(text)
    assert exc.value.lineno is None


def test_unknown_kind():
    with pytest.raises(FileFormatError) as exc:
        loads("PDA a\n > 0 -\n")
    assert exc.value.lineno == 1
    assert str(exc.value).startswith("line 1: ")


def test_duplicate_symbols():
    with pytest.raises(FileFormatError) as exc:
        loads("DFA a b a\n > 0 - - -\n")
    assert exc.value.lineno == 1


@pytest.mark.parametrize(
    "text,lineno",
    [
        ("DFA a\n > 0 -\n < x -\n", 3),
        ("DFA a\n > 0 1|y\n", 2),
        ("DFA a\n > -1 -\n", 2),
        ("DFA a b\n > 0 1\n", 2),
        ("DFA a\n > 0 1 -\n", 2),
        ("DFA a\n >\n", 2),
    ],
)
def test_bad_state_line(text, lineno):
    with pytest.raises(FileFormatError) as exc:
        loads(text)
    assert exc.value.lineno == lineno


def test_dfa_nondeterminism():
    with pytest.raises(FileFormatError) as exc:
        loads("DFA a\n > 0 0|1\n < 1 -\n")
    assert isinstance(exc.value.__cause__, InvalidAutomatonError)


@pytest.mark.parametrize(
    "text",
    [
        "DFA a\n > 0 -\n > 1 -\n",
        "DFA a\n   0 1\n < 1 -\n",
        "DFA a *\n > 0 - 1\n < 1 - -\n",
    ],
)
def test_invalid_dfa(text):
    with pytest.raises(FileFormatError):
        loads(text)


def test_nfa_allows_several_initial_states():
    nfa = loads("NFA a\n > 0 0|1\n > 1 -\n")
    assert nfa.initial_states == {0, 1}
