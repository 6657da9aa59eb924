"""
Language-level integration tests.

Enumerates every short string over a small alphabet and checks that trim()
and complete() preserve the accepted language, and that the simulation
agrees with a reference predicate for each sample automaton.
"""

import re
from itertools import product

import pytest

from pynfa.core.simulation import Simulation, accepts
from pynfa.core.types import RunResult
from pynfa.io.definition import from_definition


def _strings(alphabet, max_length=4):
    for length in range(max_length + 1):
        for chars in product(alphabet, repeat=length):
            yield "".join(chars)


def _language(automaton, alphabet="abc"):
    return {text for text in _strings(alphabet) if accepts(automaton, text)}


@pytest.fixture
def samples(
    ab_automaton,
    epsilon_automaton,
    branching_automaton,
    startless_automaton,
    alternating_definition,
    ab_ba_definition,
):
    """Every conftest automaton, including the definitions loaded."""
    return [
        ab_automaton,
        epsilon_automaton,
        branching_automaton,
        startless_automaton,
        from_definition(alternating_definition),
        from_definition(ab_ba_definition),
    ]


# ============================================================================
# Reference languages
# ============================================================================


def test_alternating_language(alternating_definition):
    """Accepts exactly the non-empty strings without two equal neighbours."""
    automaton = from_definition(alternating_definition)
    for text in _strings("ab", 6):
        expected = bool(text) and all(x != y for x, y in zip(text, text[1:]))
        assert accepts(automaton, text) == expected, text


def test_ab_ba_language(ab_ba_definition):
    """Accepts exactly the strings matching ab(.*b)?a."""
    automaton = from_definition(ab_ba_definition)
    for text in _strings("ab", 6):
        expected = re.fullmatch(r"ab(.*b)?a", text) is not None
        assert accepts(automaton, text) == expected, text


def test_run_complete_agrees_with_run(samples):
    """Stopping early at a reject never changes acceptance."""
    for automaton in samples:
        for text in _strings("abc", 3):
            early = Simulation(automaton).reset(text).run()
            full = Simulation(automaton).reset(text).run_complete()
            assert (early.result is RunResult.ACCEPT) == (full.result is RunResult.ACCEPT)


# ============================================================================
# trim / complete preserve the language
# ============================================================================


def test_trim_preserves_language(samples):
    """trim() yields a trimmed automaton with the same language."""
    for automaton in samples:
        trimmed = automaton.trim()
        assert trimmed.is_trimmed
        assert _language(trimmed) == _language(automaton)


def test_trim_removes_unreachable_state(ab_ba_definition):
    """The unreachable state of the ab/ba automaton is removed."""
    automaton = from_definition(ab_ba_definition)
    assert automaton.trim().states == {1, 2, 3, 4, 5}


def test_complete_preserves_language(samples):
    """complete() only adds transitions into non-generating states."""
    for automaton in samples:
        assert _language(automaton.complete()) == _language(automaton)


def test_complete_dfa_has_one_edge_per_symbol(samples):
    """A completed DFA has exactly one edge per alphabet symbol per state."""
    for automaton in samples:
        if not automaton.is_dfa:
            continue
        completed = automaton.complete()
        assert completed.is_dfa
        for state in completed.states:
            for symbol in completed.alphabet:
                targets = [
                    target
                    for target, symbols in completed.transitions_from(state).items()
                    if symbols.has(symbol)
                ]
                assert len(targets) == 1


def test_trim_then_complete(ab_ba_definition):
    """Trimming then completing keeps the language and determinism."""
    automaton = from_definition(ab_ba_definition)
    result = automaton.trim().complete()
    assert _language(result, "ab") == _language(automaton, "ab")
    assert result.is_dfa
