"""
Core types for pynfa: State, RunResult, Definition, StateIdAllocator and errors.

Pure data containers with validation. No automaton logic.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Optional

State = int

NO_STATE: State = 0
DEFAULT_STATE_NAME = "New state"
REJECT_STATE_NAME = "Reject"


class SymbolParseError(ValueError):
    """Raised when symbol text contains disallowed characters or ranges."""


class SimulationError(RuntimeError):
    """Raised when the simulation protocol is used out of order."""


class RunResult(IntEnum):
    """Outcome of a run so far."""

    REJECT = -1
    INCONCLUSIVE = 0
    ACCEPT = 1


class StateIdAllocator:
    """
    Hands out state ids for one lineage of automata.

    Every value and builder derived from the same root holds a reference to
    the same allocator, so an id is never reused within the lineage, even by
    values on diverging edit branches.
    """

    def __init__(self, next_id: int = 1):
        if next_id < 1:
            raise ValueError("next_id must be >= 1")
        self._next_id = next_id
        self._lock = threading.Lock()

    @property
    def next_id(self) -> int:
        return self._next_id

    def allocate(self) -> State:
        with self._lock:
            state = self._next_id
            self._next_id += 1
        return state

    def __repr__(self) -> str:
        return f"StateIdAllocator(next_id={self._next_id})"


@dataclass
class Definition:
    """
    Flat, index-based form of an automaton.

    Index 0 is always the start state. ``transitions[i]`` lists the
    ``(target_index, symbol_text)`` pairs leaving state ``i``; missing trailing
    entries mean no outgoing transitions, missing trailing names get the
    default state name.
    """

    n: int
    names: list = field(default_factory=list)
    accept: list = field(default_factory=list)
    transitions: list = field(default_factory=list)
    alphabet: Optional[str] = None

    def __post_init__(self):
        """Validate Definition constraints and normalise transition pairs."""
        if self.n < 0:
            raise ValueError("n must be >= 0")
        if len(self.names) > self.n:
            raise ValueError("names must not outnumber states (n)")
        if len(self.transitions) > self.n:
            raise ValueError("transitions must not outnumber states (n)")

        for index in self.accept:
            if not (0 <= index < self.n):
                raise ValueError(f"accept index {index} out of range")

        normalized = []
        for origin, edges in enumerate(self.transitions):
            row = []
            for edge in edges:
                if len(edge) != 2:
                    raise ValueError(f"transition from {origin} must be a (target, symbols) pair")
                target, symbols = edge
                if not (0 <= target < self.n):
                    raise ValueError(f"transition target {target} from {origin} out of range")
                if not isinstance(symbols, str):
                    raise ValueError(f"transition symbols from {origin} must be a string")
                row.append((int(target), symbols))
            normalized.append(row)
        self.transitions = normalized

        if self.alphabet is not None and not isinstance(self.alphabet, str):
            raise ValueError("alphabet must be a string or None")

    def name(self, index: int) -> str:
        if index < len(self.names):
            return self.names[index]
        return DEFAULT_STATE_NAME

    def edges(self, index: int) -> list:
        if index < len(self.transitions):
            return self.transitions[index]
        return []

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["transitions"] = [[list(edge) for edge in row] for row in self.transitions]
        if self.alphabet is None:
            del data["alphabet"]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Definition:
        if "n" not in data:
            raise ValueError("definition is missing 'n'")
        return cls(
            n=int(data["n"]),
            names=list(data.get("names", [])),
            accept=[int(index) for index in data.get("accept", [])],
            transitions=[list(row) for row in data.get("transitions", [])],
            alphabet=data.get("alphabet"),
        )
