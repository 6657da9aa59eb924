"""
Automaton: immutable NFA value with copy-on-write mutators and cached analyses.

Every mutator returns a new value sharing all untouched collections with its
receiver, or the receiver itself when the call would change nothing. Callers
can therefore compare references (``old is new``, ``old.transitions_from(s)
is new.transitions_from(s)``) to detect what changed. Ids that do not name a
state of the automaton are accepted everywhere and make the call a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Optional

from pynfa.analysis.graph import generating_states, is_deterministic, minimal_alphabet, reachable_states
from pynfa.core.symbols import SymbolGroup
from pynfa.core.types import DEFAULT_STATE_NAME, NO_STATE, REJECT_STATE_NAME, State, StateIdAllocator

if TYPE_CHECKING:
    from pynfa.core.builder import AutomatonBuilder

logger = logging.getLogger(__name__)

TransitionGroup = Mapping[State, SymbolGroup]

_NO_EDGES: TransitionGroup = MappingProxyType({})
_NOTHING = SymbolGroup()


@dataclass
class _Cache:
    """Lazily computed analyses of one automaton value."""

    reachable: Optional[frozenset[State]] = None
    generating: Optional[frozenset[State]] = None
    is_dfa: Optional[bool] = None
    minimal_alphabet: Optional[SymbolGroup] = None

    def keep(
        self,
        reachable: bool = False,
        generating: bool = False,
        is_dfa: bool = False,
        minimal_alphabet: bool = False,
    ) -> _Cache:
        return _Cache(
            reachable=self.reachable if reachable else None,
            generating=self.generating if generating else None,
            is_dfa=self.is_dfa if is_dfa else None,
            minimal_alphabet=self.minimal_alphabet if minimal_alphabet else None,
        )

    def after_removal(self, minimal_alphabet: bool = False) -> _Cache:
        # Removing edges can only turn an NFA into a DFA, never the reverse.
        cache = self.keep(minimal_alphabet=minimal_alphabet)
        cache.is_dfa = True if self.is_dfa else None
        return cache

    def after_new_edge(self) -> _Cache:
        cache = _Cache()
        cache.is_dfa = False if self.is_dfa is False else None
        return cache


def _as_alphabet(symbols: str | SymbolGroup | None) -> Optional[SymbolGroup]:
    if symbols is None:
        return None
    return SymbolGroup(symbols).without_empty()


class Automaton:
    """
    Immutable automaton value.

    Attributes are exposed read-only through properties; use the mutators,
    an ``AutomatonBuilder`` (``automaton.edit()``) or
    ``pynfa.core.commands.apply`` to derive new values.
    """

    __slots__ = ("_start", "_states", "_names", "_accept", "_transitions", "_alphabet", "_ids", "_cache")

    def __init__(self, ids: StateIdAllocator | None = None):
        self._start: State = NO_STATE
        self._states: frozenset[State] = frozenset()
        self._names: dict[State, str] = {}
        self._accept: frozenset[State] = frozenset()
        self._transitions: dict[State, TransitionGroup] = {}
        self._alphabet: Optional[SymbolGroup] = None
        self._ids = ids if ids is not None else StateIdAllocator()
        self._cache = _Cache()

    @classmethod
    def from_parts(
        cls,
        names: Mapping[State, str],
        transitions: Mapping[State, Mapping[State, str | SymbolGroup]] | None = None,
        start: State = NO_STATE,
        accept: Iterable[State] = (),
        alphabet: str | SymbolGroup | None = None,
    ) -> Automaton:
        """Build a value with a fresh lineage from explicit state ids."""
        states = frozenset(names)
        for state in states:
            if not isinstance(state, int) or state <= 0:
                raise ValueError(f"state ids must be positive integers, got {state!r}")
        if start != NO_STATE and start not in states:
            raise ValueError(f"start state {start} is not a state")
        accept_set = frozenset(accept)
        if not accept_set <= states:
            raise ValueError(f"accept states {sorted(accept_set - states)} are not states")

        table: dict[State, dict[State, SymbolGroup]] = {state: {} for state in states}
        for origin, edges in (transitions or {}).items():
            if origin not in states:
                raise ValueError(f"transition origin {origin} is not a state")
            for target, symbols in edges.items():
                if target not in states:
                    raise ValueError(f"transition target {target} is not a state")
                group = SymbolGroup(symbols)
                if group:
                    table[origin][target] = group

        automaton = cls(StateIdAllocator(max(states, default=0) + 1))
        automaton._start = start
        automaton._states = states
        automaton._names = {state: names[state] for state in sorted(states)}
        automaton._accept = accept_set
        automaton._transitions = {state: MappingProxyType(edges) for state, edges in table.items()}
        automaton._alphabet = _as_alphabet(alphabet)
        return automaton

    def _derive(self, cache: _Cache, **fields) -> Automaton:
        derived = object.__new__(Automaton)
        for slot in Automaton.__slots__:
            setattr(derived, slot, getattr(self, slot))
        for name, value in fields.items():
            setattr(derived, "_" + name, value)
        derived._cache = cache
        return derived

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def state(self, state: object) -> State:
        """Return ``state`` if it is a state of this automaton, else ``NO_STATE``."""
        if isinstance(state, int) and state in self._states:
            return state
        return NO_STATE

    @property
    def start(self) -> State:
        return self._start

    @property
    def states(self) -> frozenset[State]:
        return self._states

    @property
    def num_states(self) -> int:
        return len(self._states)

    def __len__(self) -> int:
        return len(self._states)

    @property
    def names(self) -> Mapping[State, str]:
        return MappingProxyType(self._names)

    def name(self, state: State) -> str:
        return self._names.get(self.state(state), "")

    @property
    def accept_states(self) -> frozenset[State]:
        return self._accept

    def is_accept(self, state: State) -> bool:
        return self.state(state) in self._accept

    def is_start(self, state: State) -> bool:
        state = self.state(state)
        return state != NO_STATE and state == self._start

    @property
    def transitions(self) -> Mapping[State, TransitionGroup]:
        return MappingProxyType(self._transitions)

    def transitions_from(self, origin: State) -> TransitionGroup:
        return self._transitions.get(self.state(origin), _NO_EDGES)

    def has_transition(self, origin: State, target: State, symbol: str | None = None) -> bool:
        symbols = self.transitions_from(origin).get(self.state(target))
        if symbols is None:
            return False
        return symbol is None or symbols.has(symbol)

    def symbols(self, origin: State, target: State) -> SymbolGroup:
        """The group on the edge, or a group matching nothing if there is no edge."""
        return self.transitions_from(origin).get(self.state(target), _NOTHING)

    @property
    def explicit_alphabet(self) -> Optional[SymbolGroup]:
        return self._alphabet

    @property
    def alphabet(self) -> SymbolGroup:
        if self._alphabet is not None:
            return self._alphabet
        return self.minimal_alphabet

    # ------------------------------------------------------------------
    # Derived analyses
    # ------------------------------------------------------------------

    @property
    def reachable_states(self) -> frozenset[State]:
        if self._cache.reachable is None:
            self._cache.reachable = reachable_states(self._start, self._transitions)
        return self._cache.reachable

    @property
    def generating_states(self) -> frozenset[State]:
        if self._cache.generating is None:
            self._cache.generating = generating_states(self._accept, self._transitions)
        return self._cache.generating

    @property
    def is_dfa(self) -> bool:
        if self._cache.is_dfa is None:
            self._cache.is_dfa = is_deterministic(self._transitions)
        return self._cache.is_dfa

    @property
    def minimal_alphabet(self) -> SymbolGroup:
        if self._cache.minimal_alphabet is None:
            self._cache.minimal_alphabet = minimal_alphabet(self._transitions)
        return self._cache.minimal_alphabet

    @property
    def is_trimmed(self) -> bool:
        generating = self.generating_states
        if self.reachable_states != self._states:
            return False
        return all(state in generating for state in self._states if state != self._start)

    def reachable(self, state: State) -> bool:
        return self.state(state) in self.reachable_states

    def generating(self, state: State) -> bool:
        return self.state(state) in self.generating_states

    def accepts(self, text: str) -> bool:
        from pynfa.core.simulation import accepts

        return accepts(self, text)

    def edit(self) -> AutomatonBuilder:
        from pynfa.core.builder import AutomatonBuilder

        return AutomatonBuilder(self)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_state(self, name: str = DEFAULT_STATE_NAME) -> tuple[Automaton, State]:
        """Append a state without transitions. Returns the new value and the new id."""
        state = self._ids.allocate()
        derived = self._derive(
            replace(self._cache),
            states=self._states | {state},
            names={**self._names, state: name},
            transitions={**self._transitions, state: _NO_EDGES},
        )
        return derived, state

    def remove_state(self, state: State) -> Automaton:
        state = self.state(state)
        if state == NO_STATE:
            return self

        transitions = {}
        for origin, edges in self._transitions.items():
            if origin == state:
                continue
            if state in edges:
                edges = MappingProxyType({t: g for t, g in edges.items() if t != state})
            transitions[origin] = edges

        names = dict(self._names)
        del names[state]

        return self._derive(
            self._cache.after_removal(),
            start=NO_STATE if self._start == state else self._start,
            states=self._states - {state},
            names=names,
            accept=self._accept - {state} if state in self._accept else self._accept,
            transitions=transitions,
        )

    def set_transition(self, origin: State, target: State, symbols: str | SymbolGroup) -> Automaton:
        """Create the edge or replace its symbols. A group matching nothing removes the edge."""
        origin = self.state(origin)
        target = self.state(target)
        if origin == NO_STATE or target == NO_STATE:
            return self

        group = SymbolGroup(symbols)
        if not group:
            return self.remove_transition(origin, target)

        edges = self._transitions[origin]
        existing = edges.get(target)
        if existing is not None and existing.equals(group):
            return self

        if existing is None:
            cache = self._cache.after_new_edge()
        else:
            cache = self._cache.keep(reachable=True, generating=True)

        transitions = {**self._transitions, origin: MappingProxyType({**edges, target: group})}
        return self._derive(cache, transitions=transitions)

    def set_transition_target(self, origin: State, old_target: State, new_target: State) -> Automaton:
        """Move an edge to a new target, merging it into an existing edge there."""
        origin = self.state(origin)
        old_target = self.state(old_target)
        new_target = self.state(new_target)
        if NO_STATE in (origin, old_target, new_target) or old_target == new_target:
            return self
        if not self.has_transition(origin, old_target):
            return self

        edges = self._transitions[origin]
        merged = edges[old_target].merge(self.symbols(origin, new_target))
        moved = {t: g for t, g in edges.items() if t != old_target}
        moved[new_target] = merged

        transitions = {**self._transitions, origin: MappingProxyType(moved)}
        return self._derive(self._cache.after_removal(minimal_alphabet=True), transitions=transitions)

    def remove_transition(self, origin: State, target: State) -> Automaton:
        origin = self.state(origin)
        target = self.state(target)
        if not self.has_transition(origin, target):
            return self

        edges = MappingProxyType({t: g for t, g in self._transitions[origin].items() if t != target})
        transitions = {**self._transitions, origin: edges}
        return self._derive(self._cache.after_removal(), transitions=transitions)

    def set_start(self, state: State) -> Automaton:
        """Set the start state; ``NO_STATE`` clears it, unknown ids are ignored."""
        if state != NO_STATE:
            state = self.state(state)
            if state == NO_STATE:
                return self
        if state == self._start:
            return self
        return self._derive(
            self._cache.keep(generating=True, is_dfa=True, minimal_alphabet=True),
            start=state,
        )

    def set_accept(self, state: State, accept: bool = True) -> Automaton:
        state = self.state(state)
        accept = bool(accept)
        if state == NO_STATE or (state in self._accept) == accept:
            return self
        return self._derive(
            self._cache.keep(reachable=True, is_dfa=True, minimal_alphabet=True),
            accept=self._accept | {state} if accept else self._accept - {state},
        )

    def toggle_accept(self, state: State) -> Automaton:
        return self.set_accept(state, not self.is_accept(state))

    def set_name(self, state: State, name: str) -> Automaton:
        state = self.state(state)
        if state == NO_STATE or self._names[state] == name:
            return self
        return self._derive(replace(self._cache), names={**self._names, state: name})

    def set_alphabet(self, symbols: str | SymbolGroup) -> Automaton:
        alphabet = _as_alphabet(symbols)
        if self._alphabet is not None and self._alphabet.equals(alphabet):
            return self
        return self._derive(replace(self._cache), alphabet=alphabet)

    def unset_alphabet(self) -> Automaton:
        if self._alphabet is None:
            return self
        return self._derive(replace(self._cache), alphabet=None)

    def trim(self) -> Automaton:
        """Remove every unreachable or non-generating state except the start state."""
        keep = self.reachable_states & self.generating_states
        if self._start != NO_STATE:
            keep = keep | {self._start}
        if keep == self._states:
            return self

        removed = self._states - keep
        transitions = {}
        for origin in keep:
            edges = self._transitions[origin]
            if any(target in removed for target in edges):
                edges = MappingProxyType({t: g for t, g in edges.items() if t in keep})
            transitions[origin] = edges

        logger.debug("trim removed %d of %d states", len(removed), len(self._states))
        return self._derive(
            self._cache.after_removal(),
            states=frozenset(keep),
            names={state: name for state, name in self._names.items() if state in keep},
            accept=self._accept & keep,
            transitions=transitions,
        )

    def complete(self) -> Automaton:
        """
        Give every state a transition on every alphabet symbol.

        Missing symbols are routed to the lowest-id non-generating state, or
        to a new reject state looping on the whole alphabet when every state
        is generating.
        """
        alphabet = self.alphabet
        if not alphabet or not self._states:
            return self

        missing: dict[State, SymbolGroup] = {}
        for state in sorted(self._states):
            covered = SymbolGroup().merge(*self._transitions[state].values())
            lacking = alphabet.subtract(covered)
            if lacking:
                missing[state] = lacking
        if not missing:
            return self

        result = self
        non_generating = sorted(self._states - self.generating_states)
        if non_generating:
            sink = non_generating[0]
        else:
            result, sink = result.add_state(REJECT_STATE_NAME)
            missing[sink] = alphabet
            logger.debug("complete created reject state %d", sink)

        for state, lacking in missing.items():
            result = result.set_transition(state, sink, result.symbols(state, sink).merge(lacking))
        return result

    def __repr__(self) -> str:
        return (
            f"Automaton(states={sorted(self._states)}, start={self._start}, "
            f"accept={sorted(self._accept)})"
        )
