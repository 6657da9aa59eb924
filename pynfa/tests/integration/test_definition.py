"""
Test the definition codec and JSON files.
"""

import json
from itertools import product

import pytest

from pynfa.core.automaton import Automaton
from pynfa.core.symbols import SymbolGroup
from pynfa.core.types import NO_STATE, Definition, SymbolParseError
from pynfa.io.definition import from_definition, load_definition, save_definition, to_definition


SAMPLE_AUTOMATA = [
    "ab_automaton",
    "epsilon_automaton",
    "branching_automaton",
    "startless_automaton",
]


def _strings(alphabet, max_length=4):
    for length in range(max_length + 1):
        for chars in product(alphabet, repeat=length):
            yield "".join(chars)


# ============================================================================
# from_definition
# ============================================================================


class TestFromDefinition:
    """Building automata from flat definitions."""

    def test_ids_follow_indices(self, alternating_definition):
        """State ids are index + 1 and index 0 is the start state."""
        automaton = from_definition(alternating_definition)
        assert automaton.states == {1, 2, 3}
        assert automaton.start == 1
        assert automaton.accept_states == {2, 3}
        assert dict(automaton.names) == {1: "Start", 2: "a", 3: "b"}
        assert automaton.symbols(1, 3) == SymbolGroup("b")

    def test_accepts_dataclass(self, alternating_definition):
        """A Definition instance loads like its dict form."""
        definition = Definition.from_dict(alternating_definition)
        assert from_definition(definition).accepts("abab")

    def test_duplicate_targets_are_merged(self):
        """Two edges to the same target become one edge with both symbols."""
        automaton = from_definition(Definition(n=2, transitions=[[(1, "a"), (1, "b")]]))
        assert automaton.symbols(1, 2) == SymbolGroup("a, b")

    def test_missing_names_and_rows(self):
        """Missing names get the default name and missing rows no edges."""
        automaton = from_definition({"n": 2})
        assert automaton.name(2) == "New state"
        assert dict(automaton.transitions_from(2)) == {}

    def test_empty_definition(self):
        """n = 0 loads an empty automaton without a start state."""
        automaton = from_definition({"n": 0})
        assert automaton.states == frozenset()
        assert automaton.start == NO_STATE

    def test_fresh_lineage(self, alternating_definition):
        """New ids continue after the loaded states."""
        automaton = from_definition(alternating_definition)
        assert automaton.add_state()[1] == 4

    def test_alphabet(self):
        """An alphabet entry becomes the explicit alphabet."""
        automaton = from_definition({"n": 1, "alphabet": "a-c"})
        assert automaton.explicit_alphabet == SymbolGroup("a-c")

    def test_invalid_target(self):
        """Out-of-range targets raise ValueError."""
        with pytest.raises(ValueError):
            from_definition({"n": 1, "transitions": [[[1, "a"]]]})

    def test_invalid_symbols(self):
        """Disallowed symbol text raises SymbolParseError."""
        with pytest.raises(SymbolParseError):
            from_definition({"n": 2, "transitions": [[[1, "ä"]]]})


# ============================================================================
# to_definition
# ============================================================================


class TestToDefinition:
    """Flattening automata."""

    @pytest.mark.parametrize("fixture", ["alternating_definition", "ab_ba_definition"])
    def test_round_trip(self, fixture, request):
        """Loading then flattening reproduces the definition."""
        data = request.getfixturevalue(fixture)
        assert to_definition(from_definition(data)) == Definition.from_dict(data)

    def test_start_goes_first(self, ab_automaton):
        """The start state is written at index 0, the rest in id order."""
        definition = to_definition(ab_automaton.set_start(2))
        assert definition.names == ["q2", "q1", "q3"]
        assert definition.transitions == [[(2, "b")], [(0, "a")], []]
        assert definition.accept == [2]

        reloaded = from_definition(definition)
        assert reloaded.accepts("b")
        assert not reloaded.accepts("ab")

    def test_without_start_state_adds_inert_first_state(self, startless_automaton):
        """A start-less automaton gets a non-accepting, edgeless state at index 0."""
        definition = to_definition(startless_automaton)
        assert definition.n == 4
        assert definition.names == ["New state", "q1", "q2", "q3"]
        assert definition.transitions == [[], [(2, "a")], [(3, "b")], []]
        assert definition.accept == [3]

    def test_without_start_state_accepts_nothing(self, startless_automaton):
        """Reloading a start-less automaton keeps its empty language."""
        reloaded = from_definition(to_definition(startless_automaton))
        assert not reloaded.accepts("ab")
        assert not reloaded.accepts("")
        assert reloaded.set_start(2).accepts("ab")

    def test_empty_automaton(self):
        """An automaton without states flattens to n = 0."""
        assert to_definition(Automaton()) == Definition(n=0)

    def test_special_symbols_survive(self):
        """Escaped and special symbols come back unchanged."""
        automaton = Automaton.from_parts(
            names={1: "x", 2: "y"},
            transitions={1: {2: r"\,, ␣, ~, \-, a-z"}},
            start=1,
        )
        reloaded = from_definition(to_definition(automaton))
        assert reloaded.symbols(1, 2) == automaton.symbols(1, 2)

    def test_explicit_alphabet(self, ab_automaton):
        """Only an explicit alphabet is written."""
        assert to_definition(ab_automaton).alphabet is None
        assert to_definition(ab_automaton.set_alphabet("a-c")).alphabet == "a-c"

    @pytest.mark.parametrize("fixture", SAMPLE_AUTOMATA)
    def test_language_preserved(self, fixture, request):
        """Every short string is accepted by the reloaded automaton iff by the original."""
        automaton = request.getfixturevalue(fixture)
        reloaded = from_definition(to_definition(automaton))
        for text in _strings("abc"):
            assert reloaded.accepts(text) == automaton.accepts(text), text


# ============================================================================
# JSON files
# ============================================================================


class TestDefinitionFiles:
    """save_definition / load_definition."""

    def test_save_and_load(self, ab_automaton, tmp_path):
        """A saved automaton loads back with its names and language."""
        path = tmp_path / "ab.json"
        save_definition(ab_automaton, path)
        loaded = load_definition(path)
        assert loaded.accepts("ab")
        assert dict(loaded.names) == dict(ab_automaton.names)

    def test_file_is_plain_json(self, ab_automaton, tmp_path):
        """The file is readable UTF-8 JSON with list transitions."""
        path = tmp_path / "ab.json"
        save_definition(ab_automaton.set_name(1, "Ω start"), path)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "Ω start" in text
        assert json.loads(text)["transitions"] == [[[1, "a"]], [[2, "b"]], []]

    def test_load_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_definition(tmp_path / "missing.json")

    def test_load_written_by_hand(self, ab_ba_definition, tmp_path):
        """A hand-written definition file loads."""
        path = tmp_path / "ab_ba.json"
        path.write_text(json.dumps(ab_ba_definition), encoding="utf-8")
        automaton = load_definition(path)
        assert automaton.accepts("abba")
        assert not automaton.accepts("abab")

    def test_start_less_file_round_trip(self, startless_automaton, tmp_path):
        """A start-less automaton saved to disk still accepts nothing."""
        path = tmp_path / "startless.json"
        save_definition(startless_automaton, path)
        assert not load_definition(path).accepts("ab")
