"""Serialisation of automata to and from flat definitions."""
