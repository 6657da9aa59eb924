"""Core data model: symbols, automata, builders, commands and simulation."""
