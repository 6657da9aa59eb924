"""
Stepwise simulation of an automaton over an input string.

A Simulation is an immutable value: every protocol call returns a new
Simulation (or the same one when nothing changes). Nondeterminism is handled
by tracking the set of current states, closed over empty-symbol edges after
every step.

Ways to run:
    accepts(automaton, "abc")
    Simulation(automaton).reset("abc").step().step()
    Simulation(automaton).reset().run("ab").run("c")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Optional

from pynfa.analysis.graph import epsilon_closure
from pynfa.core.automaton import Automaton
from pynfa.core.types import NO_STATE, RunResult, SimulationError, State

logger = logging.getLogger(__name__)

Edge = tuple[State, State]

NOT_RUNNING = -1


def _no_history() -> Mapping[Edge, int]:
    return MappingProxyType({})


@dataclass(frozen=True, eq=False)
class Simulation:
    """
    Run state of an automaton.

    Attributes:
        automaton: The automaton being run.
        current: Current possible states (empty when not running).
        remaining: Input not yet consumed.
        read_count: Symbols consumed this run, -1 when not running.
        followed: Last read count at which each ``(origin, target)`` edge
            was traversed this run.
    """

    automaton: Automaton
    current: frozenset[State] = frozenset()
    remaining: str = ""
    read_count: int = NOT_RUNNING
    followed: Mapping[Edge, int] = field(default_factory=_no_history)

    @property
    def is_running(self) -> bool:
        return self.read_count != NOT_RUNNING

    @property
    def result(self) -> RunResult:
        """ACCEPT, REJECT if no accept state is reachable any more, else INCONCLUSIVE."""
        if not self.is_running:
            return RunResult.INCONCLUSIVE
        if self.current & self.automaton.accept_states:
            return RunResult.ACCEPT
        if self.current & self.automaton.generating_states:
            return RunResult.INCONCLUSIVE
        return RunResult.REJECT

    @property
    def will_accept(self) -> bool:
        """Whether running the remaining input to the end would accept."""
        if not self.is_running or self.result is RunResult.REJECT:
            return False
        return self.run().result is RunResult.ACCEPT

    def is_current(self, state: State) -> bool:
        return state in self.current

    def has_followed(self, origin: State, target: State) -> bool:
        return (origin, target) in self.followed

    def just_followed(self, origin: State, target: State) -> bool:
        """Whether the edge was traversed while reading the latest symbol."""
        return self.is_running and self.followed.get((origin, target)) == self.read_count

    def set_input(self, text: str) -> Simulation:
        if text == self.remaining:
            return self
        return replace(self, remaining=text)

    def add_input(self, text: str) -> Simulation:
        if not text:
            return self
        return replace(self, remaining=self.remaining + text)

    def reset(self, text: Optional[str] = None) -> Simulation:
        """Start a run from the start state, keeping the previous input if ``text`` is None."""
        followed: list[Edge] = []
        start = self.automaton.start
        current = epsilon_closure(
            [start] if start != NO_STATE else [],
            self.automaton.transitions,
            followed,
        )
        logger.debug("reset simulation at %d state(s)", len(current))
        return replace(
            self,
            current=current,
            remaining=self.remaining if text is None else text,
            read_count=0,
            followed=MappingProxyType({edge: 0 for edge in followed}),
        )

    def step(self) -> Simulation:
        """
        Consume one symbol of the remaining input.

        Raises:
            SimulationError: If the simulation is not running.
        """
        if not self.is_running:
            raise SimulationError("simulation is not running; call reset() first")
        if not self.remaining:
            return self

        symbol = self.remaining[0]
        read_count = self.read_count + 1
        transitions = self.automaton.transitions

        traversed: list[Edge] = []
        successors: set[State] = set()
        for origin in self.current:
            for target, symbols in transitions.get(origin, {}).items():
                if symbols.has(symbol):
                    successors.add(target)
                    traversed.append((origin, target))

        current = epsilon_closure(successors, transitions, traversed)

        followed = dict(self.followed)
        for edge in traversed:
            followed[edge] = read_count

        return replace(
            self,
            current=current,
            remaining=self.remaining[1:],
            read_count=read_count,
            followed=MappingProxyType(followed),
        )

    def run(self, extra: str = "") -> Simulation:
        """
        Step through the remaining input, stopping early at a definite reject.

        Resets first if the simulation is not running.
        """
        simulation = self.add_input(extra)
        if not simulation.is_running:
            simulation = simulation.reset()
        while simulation.remaining and simulation.result is not RunResult.REJECT:
            simulation = simulation.step()
        return simulation

    def run_complete(self, extra: str = "") -> Simulation:
        """Step through all remaining input, even past a definite reject."""
        simulation = self.add_input(extra)
        if not simulation.is_running:
            simulation = simulation.reset()
        while simulation.remaining:
            simulation = simulation.step()
        return simulation

    def stop(self) -> Simulation:
        if not self.is_running:
            return self
        logger.debug("stop simulation after %d symbol(s)", self.read_count)
        return replace(self, current=frozenset(), read_count=NOT_RUNNING, followed=_no_history())

    def with_automaton(self, automaton: Automaton) -> Simulation:
        """
        Continue the run on an edited automaton.

        Current states that no longer exist are dropped and the rest are
        closed over the new automaton's empty-symbol edges, recorded at the
        current read count.
        """
        if automaton is self.automaton:
            return self
        if not self.is_running:
            return replace(self, automaton=automaton)

        survivors = [state for state in self.current if automaton.state(state) != NO_STATE]
        traversed: list[Edge] = []
        current = epsilon_closure(survivors, automaton.transitions, traversed)

        followed = {
            edge: count
            for edge, count in self.followed.items()
            if automaton.has_transition(*edge)
        }
        for edge in traversed:
            followed[edge] = self.read_count

        return replace(self, automaton=automaton, current=current, followed=MappingProxyType(followed))


def accepts(automaton: Automaton, text: str) -> bool:
    """Whether the automaton accepts ``text``."""
    return Simulation(automaton).reset(text).run().result is RunResult.ACCEPT
