"""Five-material cellular automaton: Life, wood, fire and falling sand."""

__version__ = "0.1.0"

from .core.cell import Cell
from .core.exceptions import GridError, InvalidDimension, OutOfBounds
from .core.grid import Grid
from .core.layouts import Layout, LayoutLibrary
from .core.simulation import Simulation

__all__ = [
    "Cell",
    "Grid",
    "Simulation",
    "Layout",
    "LayoutLibrary",
    "GridError",
    "InvalidDimension",
    "OutOfBounds",
]
