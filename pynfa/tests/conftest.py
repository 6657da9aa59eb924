"""
Pytest configuration and fixtures for pynfa tests.

Provides small automata covering deterministic, nondeterministic and
epsilon-transition cases, plus flat definitions for codec tests.
"""

import pytest


@pytest.fixture
def ab_automaton():
    """
    Three states: 1 (start) -a-> 2 -b-> 3 (accept).

    Accepts exactly "ab".
    """
    from pynfa.core.automaton import Automaton

    return Automaton.from_parts(
        names={1: "q1", 2: "q2", 3: "q3"},
        transitions={1: {2: "a"}, 2: {3: "b"}},
        start=1,
        accept=[3],
    )


@pytest.fixture
def epsilon_automaton():
    """
    Epsilon cycle between 1 (start) and 2, then 2 -a-> 3 (accept).

    Accepts exactly "a".
    """
    from pynfa.core.automaton import Automaton

    return Automaton.from_parts(
        names={1: "s", 2: "loop", 3: "done"},
        transitions={1: {2: "ε"}, 2: {1: "~", 3: "a"}},
        start=1,
        accept=[3],
    )


@pytest.fixture
def branching_automaton():
    """
    Nondeterministic branch on "a": 1 -a-> 2 -b-> 4, 1 -a-> 3 -c-> 4 (accept).

    Accepts "ab" and "ac".
    """
    from pynfa.core.automaton import Automaton

    return Automaton.from_parts(
        names={1: "start", 2: "left", 3: "right", 4: "end"},
        transitions={1: {2: "a", 3: "a"}, 2: {4: "b"}, 3: {4: "c"}},
        start=1,
        accept=[4],
    )


@pytest.fixture
def startless_automaton():
    """
    The ab automaton without a start state: 1 -a-> 2 -b-> 3 (accept).

    Accepts nothing.
    """
    from pynfa.core.automaton import Automaton

    return Automaton.from_parts(
        names={1: "q1", 2: "q2", 3: "q3"},
        transitions={1: {2: "a"}, 2: {3: "b"}},
        accept=[3],
    )


@pytest.fixture
def alternating_definition():
    """
    Strings alternating between a and b, e.g. aba, baba. Regex: a?(ba)*b?
    """
    return {
        "n": 3,
        "names": ["Start", "a", "b"],
        "accept": [1, 2],
        "transitions": [
            [[1, "a"], [2, "b"]],
            [[2, "b"]],
            [[1, "a"]],
        ],
    }


@pytest.fixture
def ab_ba_definition():
    """
    Strings starting with ab and ending with ba, plus an unreachable state.
    Regex: ab(.*b)?a
    """
    return {
        "n": 6,
        "names": ["Start", "First a", "Any b", "a after b", "Anything else", "Unreachable"],
        "accept": [3],
        "transitions": [
            [[1, "a"]],
            [[2, "b"]],
            [[2, "b"], [3, "a"]],
            [[2, "b"], [4, "a"]],
            [[2, "b"], [4, "a"]],
            [[3, "a-c"]],
        ],
    }
