"""Core cellular automaton logic."""

from .cell import Cell
from .exceptions import GridError, InvalidDimension, OutOfBounds
from .grid import Grid
from .layouts import Layout, LayoutLibrary, life_demo, fire_demo, sand_demo
from .simulation import Simulation

__all__ = [
    "Cell",
    "Grid",
    "Simulation",
    "Layout",
    "LayoutLibrary",
    "life_demo",
    "fire_demo",
    "sand_demo",
    "GridError",
    "InvalidDimension",
    "OutOfBounds",
]
