"""Definition codec: flat, index-based automaton form and its JSON files."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from pynfa.core.automaton import Automaton
from pynfa.core.symbols import DEFAULT_DELIMITER, SymbolGroup
from pynfa.core.types import DEFAULT_STATE_NAME, NO_STATE, Definition, State

logger = logging.getLogger(__name__)


def to_definition(automaton: Automaton) -> Definition:
    """Flatten an automaton, placing the start state at index 0 and the rest in id order.

    Index 0 is always loaded as the start state, so an automaton with states
    but no start state gets an extra state at index 0: not accepting and
    without transitions. The loaded automaton then accepts nothing, like
    the original.
    """
    order: list[State] = sorted(automaton.states)
    if automaton.start != NO_STATE:
        order.remove(automaton.start)
        order.insert(0, automaton.start)
    elif order:
        order.insert(0, NO_STATE)
    index = {state: i for i, state in enumerate(order)}

    transitions = [
        [
            (index[target], symbols.to_string(DEFAULT_DELIMITER))
            for target, symbols in sorted(automaton.transitions_from(state).items())
        ]
        for state in order
    ]

    alphabet = automaton.explicit_alphabet
    return Definition(
        n=len(order),
        names=[automaton.name(state) if state != NO_STATE else DEFAULT_STATE_NAME for state in order],
        accept=sorted(index[state] for state in automaton.accept_states),
        transitions=transitions,
        alphabet=None if alphabet is None else alphabet.to_string(DEFAULT_DELIMITER),
    )


def from_definition(definition: Union[Definition, Mapping[str, Any]]) -> Automaton:
    """Build an automaton with a fresh lineage; state ids are ``index + 1``.

    Raises:
        ValueError: If the definition is inconsistent.
        SymbolParseError: If any symbol text is invalid.
    """
    if not isinstance(definition, Definition):
        definition = Definition.from_dict(definition)

    transitions: dict[int, dict[int, SymbolGroup]] = {}
    for origin in range(definition.n):
        edges: dict[int, SymbolGroup] = {}
        for target, text in definition.edges(origin):
            group = SymbolGroup(text)
            if target + 1 in edges:
                group = edges[target + 1].merge(group)
            edges[target + 1] = group
        transitions[origin + 1] = edges

    return Automaton.from_parts(
        names={i + 1: definition.name(i) for i in range(definition.n)},
        transitions=transitions,
        start=1 if definition.n else NO_STATE,
        accept=[index + 1 for index in definition.accept],
        alphabet=definition.alphabet,
    )


def save_definition(automaton: Automaton, path: Union[str, Path]) -> None:
    """Write the automaton's definition to a JSON file.

    Args:
        automaton: Automaton to save
        path: File path where JSON will be written
    """
    definition = to_definition(automaton)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(definition.to_dict(), f, indent=2, ensure_ascii=False)
    logger.debug("saved definition with %d states to %s", definition.n, path)


def load_definition(path: Union[str, Path]) -> Automaton:
    """Load an automaton from a JSON definition file.

    Args:
        path: File path to load from

    Returns:
        Automaton with a fresh lineage

    Raises:
        FileNotFoundError: If path does not exist
    """
    if not Path(path).exists():
        raise FileNotFoundError(f"Definition file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    automaton = from_definition(data)
    logger.debug("loaded definition with %d states from %s", automaton.num_states, path)
    return automaton
