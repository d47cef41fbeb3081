"""Frontend interfaces for the elemental automaton."""

from .cli import CLISimulation

__all__ = ["CLISimulation"]
