"""
Graph analyses over transition maps.

A transition map has the shape ``{origin: {target: SymbolGroup}}``. Every
function here is pure and terminates on cyclic graphs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pynfa.core.symbols import SymbolGroup
from pynfa.core.types import NO_STATE, State

TransitionMap = Mapping[State, Mapping[State, SymbolGroup]]


def reachable_states(start: State, transitions: TransitionMap) -> frozenset[State]:
    if start == NO_STATE:
        return frozenset()

    visited = {start}
    frontier = [start]
    while frontier:
        origin = frontier.pop()
        for target in transitions.get(origin, {}):
            if target not in visited:
                visited.add(target)
                frontier.append(target)
    return frozenset(visited)


def predecessors(transitions: TransitionMap) -> dict[State, set[State]]:
    reverse: dict[State, set[State]] = {}
    for origin, edges in transitions.items():
        for target in edges:
            reverse.setdefault(target, set()).add(origin)
    return reverse


def generating_states(accept: Iterable[State], transitions: TransitionMap) -> frozenset[State]:
    reverse = predecessors(transitions)
    visited = set(accept)
    frontier = list(visited)
    while frontier:
        target = frontier.pop()
        for origin in reverse.get(target, ()):
            if origin not in visited:
                visited.add(origin)
                frontier.append(origin)
    return frozenset(visited)


def is_deterministic(transitions: TransitionMap) -> bool:
    for edges in transitions.values():
        groups = list(edges.values())
        if any(group.has_empty for group in groups):
            return False
        if SymbolGroup.share_any(groups):
            return False
    return True


def minimal_alphabet(transitions: TransitionMap) -> SymbolGroup:
    groups = [group for edges in transitions.values() for group in edges.values()]
    return SymbolGroup().merge(*groups).without_empty()


def epsilon_closure(
    states: Iterable[State],
    transitions: TransitionMap,
    followed: list[tuple[State, State]] | None = None,
) -> frozenset[State]:
    """
    States reachable from ``states`` through zero or more empty-symbol edges.

    Args:
        states: Starting states (always part of the closure).
        transitions: Transition map to follow.
        followed: If given, every empty-symbol edge traversed is appended to
            it as an ``(origin, target)`` pair.

    Returns:
        The closure as a frozenset.
    """
    closure = set(states)
    frontier = list(closure)
    while frontier:
        origin = frontier.pop()
        for target, symbols in transitions.get(origin, {}).items():
            if not symbols.has_empty:
                continue
            if followed is not None:
                followed.append((origin, target))
            if target not in closure:
                closure.add(target)
                frontier.append(target)
    return frozenset(closure)
