"""
pynfa: persistent finite automata with stepwise simulation.

- SymbolGroup: parseable set of input symbols used as one transition label
- Automaton: immutable NFA value with copy-on-write edits and cached analyses
- AutomatonBuilder: mutable editing session over an automaton lineage
- Simulation: step/run/reset protocol with nondeterministic branching
"""

from pynfa.core.types import (
    NO_STATE,
    Definition,
    RunResult,
    SimulationError,
    State,
    StateIdAllocator,
    SymbolParseError,
)
from pynfa.core.symbols import SymbolGroup
from pynfa.core.automaton import Automaton
from pynfa.core.commands import apply, apply_all
from pynfa.core.builder import AutomatonBuilder
from pynfa.core.simulation import Simulation, accepts
from pynfa.io.definition import from_definition, load_definition, save_definition, to_definition

__version__ = "0.1.0"

__all__ = [
    "NO_STATE",
    "Automaton",
    "AutomatonBuilder",
    "Definition",
    "RunResult",
    "Simulation",
    "SimulationError",
    "State",
    "StateIdAllocator",
    "SymbolGroup",
    "SymbolParseError",
    "accepts",
    "apply",
    "apply_all",
    "from_definition",
    "load_definition",
    "save_definition",
    "to_definition",
]
