"""
Edit commands: a closed set of automaton operations as plain data.

Editors record commands and replay them with ``apply``; every command maps to
exactly one ``Automaton`` mutator, so ``apply`` keeps the mutators' no-op
identity guarantee.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from functools import reduce
from typing import Union

from pynfa.core.automaton import Automaton
from pynfa.core.symbols import SymbolGroup
from pynfa.core.types import DEFAULT_STATE_NAME, State


@dataclass(frozen=True)
class AddState:
    name: str = DEFAULT_STATE_NAME


@dataclass(frozen=True)
class RemoveState:
    state: State


@dataclass(frozen=True)
class SetTransition:
    origin: State
    target: State
    symbols: Union[str, SymbolGroup]


@dataclass(frozen=True)
class SetTransitionTarget:
    origin: State
    old_target: State
    new_target: State


@dataclass(frozen=True)
class RemoveTransition:
    origin: State
    target: State


@dataclass(frozen=True)
class SetStart:
    state: State


@dataclass(frozen=True)
class SetAccept:
    state: State
    accept: bool = True


@dataclass(frozen=True)
class ToggleAccept:
    state: State


@dataclass(frozen=True)
class SetName:
    state: State
    name: str


@dataclass(frozen=True)
class SetAlphabet:
    symbols: Union[str, SymbolGroup]


@dataclass(frozen=True)
class UnsetAlphabet:
    pass


@dataclass(frozen=True)
class Trim:
    pass


@dataclass(frozen=True)
class Complete:
    pass


Command = Union[
    AddState,
    RemoveState,
    SetTransition,
    SetTransitionTarget,
    RemoveTransition,
    SetStart,
    SetAccept,
    ToggleAccept,
    SetName,
    SetAlphabet,
    UnsetAlphabet,
    Trim,
    Complete,
]


def apply(automaton: Automaton, command: Command) -> Automaton:
    match command:
        case AddState(name=name):
            return automaton.add_state(name)[0]
        case RemoveState(state=state):
            return automaton.remove_state(state)
        case SetTransition(origin=origin, target=target, symbols=symbols):
            return automaton.set_transition(origin, target, symbols)
        case SetTransitionTarget(origin=origin, old_target=old_target, new_target=new_target):
            return automaton.set_transition_target(origin, old_target, new_target)
        case RemoveTransition(origin=origin, target=target):
            return automaton.remove_transition(origin, target)
        case SetStart(state=state):
            return automaton.set_start(state)
        case SetAccept(state=state, accept=accept):
            return automaton.set_accept(state, accept)
        case ToggleAccept(state=state):
            return automaton.toggle_accept(state)
        case SetName(state=state, name=name):
            return automaton.set_name(state, name)
        case SetAlphabet(symbols=symbols):
            return automaton.set_alphabet(symbols)
        case UnsetAlphabet():
            return automaton.unset_alphabet()
        case Trim():
            return automaton.trim()
        case Complete():
            return automaton.complete()
        case _:
            raise TypeError(f"not an automaton command: {command!r}")


def apply_all(automaton: Automaton, commands: Iterable[Command]) -> Automaton:
    return reduce(apply, commands, automaton)
