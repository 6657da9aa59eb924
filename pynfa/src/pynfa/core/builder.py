from __future__ import annotations

from collections.abc import Iterable

from pynfa.core.automaton import Automaton
from pynfa.core.commands import Command, apply
from pynfa.core.symbols import SymbolGroup
from pynfa.core.types import DEFAULT_STATE_NAME, State


class AutomatonBuilder:
    """
    Mutable editing session over an automaton lineage.

    Mutators change the builder in place and return the builder itself, so
    calls chain. ``build()`` hands back the current immutable value; values
    taken out earlier are never affected by later edits.
    """

    def __init__(self, automaton: Automaton | None = None):
        self._origin = automaton if automaton is not None else Automaton()
        self._automaton = self._origin

    @property
    def automaton(self) -> Automaton:
        return self._automaton

    @property
    def modified(self) -> bool:
        return self._automaton is not self._origin

    def build(self) -> Automaton:
        return self._automaton

    def add_state(self, name: str = DEFAULT_STATE_NAME) -> State:
        self._automaton, state = self._automaton.add_state(name)
        return state

    def add_states(self, names: Iterable[str]) -> list[State]:
        return [self.add_state(name) for name in names]

    def remove_state(self, state: State) -> AutomatonBuilder:
        self._automaton = self._automaton.remove_state(state)
        return self

    def set_transition(self, origin: State, target: State, symbols: str | SymbolGroup) -> AutomatonBuilder:
        self._automaton = self._automaton.set_transition(origin, target, symbols)
        return self

    def set_transition_target(self, origin: State, old_target: State, new_target: State) -> AutomatonBuilder:
        self._automaton = self._automaton.set_transition_target(origin, old_target, new_target)
        return self

    def remove_transition(self, origin: State, target: State) -> AutomatonBuilder:
        self._automaton = self._automaton.remove_transition(origin, target)
        return self

    def set_start(self, state: State) -> AutomatonBuilder:
        self._automaton = self._automaton.set_start(state)
        return self

    def set_accept(self, state: State, accept: bool = True) -> AutomatonBuilder:
        self._automaton = self._automaton.set_accept(state, accept)
        return self

    def toggle_accept(self, state: State) -> AutomatonBuilder:
        self._automaton = self._automaton.toggle_accept(state)
        return self

    def set_name(self, state: State, name: str) -> AutomatonBuilder:
        self._automaton = self._automaton.set_name(state, name)
        return self

    def set_alphabet(self, symbols: str | SymbolGroup) -> AutomatonBuilder:
        self._automaton = self._automaton.set_alphabet(symbols)
        return self

    def unset_alphabet(self) -> AutomatonBuilder:
        self._automaton = self._automaton.unset_alphabet()
        return self

    def trim(self) -> AutomatonBuilder:
        self._automaton = self._automaton.trim()
        return self

    def complete(self) -> AutomatonBuilder:
        self._automaton = self._automaton.complete()
        return self

    def apply(self, *commands: Command) -> AutomatonBuilder:
        for command in commands:
            self._automaton = apply(self._automaton, command)
        return self
