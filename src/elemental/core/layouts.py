"""Named starting layouts for grids, including the three demo fields."""

from typing import Callable, Dict, List, Optional

from .cell import Cell
from .grid import Grid

DEMO_WIDTH = 64
DEMO_HEIGHT = 64


class Layout:
    """A deterministic rule for filling a grid, keyed by linear cell index."""

    def __init__(self, name: str, cell_at: Callable[[int], Cell], description: str = "") -> None:
        """Initialize a layout.

        Args:
            name: Layout name
            cell_at: Function mapping a row-major cell index to its material
            description: Optional description
        """
        self.name = name
        self.cell_at = cell_at
        self.description = description

    def build(self, width: int = DEMO_WIDTH, height: int = DEMO_HEIGHT) -> Grid:
        """Create a grid filled by this layout.

        Raises:
            InvalidDimension: If width or height is not positive
        """
        return Grid(width, height, layout=self.cell_at)

    def __repr__(self) -> str:
        return f"Layout({self.name!r})"


def life_cell(index: int) -> Cell:
    """Alive on every second and every seventh cell."""
    return Cell.ALIVE if index % 2 == 0 or index % 7 == 0 else Cell.DEAD


def fire_cell(index: int) -> Cell:
    """A wood field with a single fire seed in the top-left corner."""
    return Cell.FIRE if index == 0 else Cell.WOOD


def sand_cell(index: int) -> Cell:
    """Sand on every third cell."""
    return Cell.SAND if index % 3 == 0 else Cell.DEAD


def empty_cell(index: int) -> Cell:
    return Cell.DEAD


class LayoutLibrary:
    """Manages a collection of layouts."""

    def __init__(self) -> None:
        self._layouts: Dict[str, Layout] = {}
        self._load_builtin_layouts()

    def _load_builtin_layouts(self) -> None:
        self.add_layout(Layout("life", life_cell, "Game of Life field, alive on i % 2 == 0 or i % 7 == 0"))
        self.add_layout(Layout("fire", fire_cell, "Wood field with one fire seed at index 0"))
        self.add_layout(Layout("sand", sand_cell, "Sand on every third cell"))
        self.add_layout(Layout("empty", empty_cell, "Every cell dead"))

    def add_layout(self, layout: Layout) -> None:
        """Register a layout, replacing any layout with the same name."""
        self._layouts[layout.name] = layout

    def get_layout(self, name: str) -> Optional[Layout]:
        """Get a layout by name, or None if it is not registered."""
        return self._layouts.get(name)

    def list_layouts(self) -> List[str]:
        """Get the names of all registered layouts."""
        return list(self._layouts.keys())


def life_demo() -> Grid:
    """64x64 Game of Life demo field."""
    return Grid(DEMO_WIDTH, DEMO_HEIGHT, layout=life_cell)


def fire_demo() -> Grid:
    """64x64 wood field burning from the top-left corner."""
    return Grid(DEMO_WIDTH, DEMO_HEIGHT, layout=fire_cell)


def sand_demo() -> Grid:
    """64x64 field seeded with sand on every third cell."""
    return Grid(DEMO_WIDTH, DEMO_HEIGHT, layout=sand_cell)
