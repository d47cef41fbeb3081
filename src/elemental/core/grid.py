"""Grid engine for the five-material cellular automaton."""

from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple, Union
import numpy as np
import torch
import torch.nn.functional as F

from .cell import Cell
from .exceptions import InvalidDimension, OutOfBounds

LayoutSource = Union[Callable[[int], Cell], Sequence[int]]


class Grid:
    """A fixed-size 2D grid of cells advanced one tick at a time.

    Cells are stored as a flat row-major ``uint8`` buffer
    (``index = row * width + col``) together with a scratch buffer of the
    same size that only has meaning while ``tick()`` runs.

    Life neighbour counts wrap around the edges (toroidal topology). The
    Wood/Fire ignition check and the Sand fall check do not wrap: cells past
    an edge count as absent.
    """

    def __init__(self, width: int, height: int, layout: Optional[LayoutSource] = None) -> None:
        """Initialize a new grid.

        Args:
            width: Number of columns
            height: Number of rows
            layout: Initial cells, either a function mapping a linear index
                to a Cell or a sequence of ``width * height`` cells.
                Defaults to every cell dead.

        Raises:
            InvalidDimension: If width or height is not positive
            ValueError: If a sequence layout has the wrong length or holds
                a value that is not a Cell
        """
        _check_dimension("width", width)
        _check_dimension("height", height)
        self._width = width
        self._height = height
        self._allocate()

        if layout is not None:
            self._cells[:] = self._build_layout(layout)

    def _allocate(self) -> None:
        """(Re)allocate both buffers and the convolution input for the current size."""
        size = self._width * self._height
        self._cells = np.zeros(size, dtype=np.uint8)
        self._next = np.zeros(size, dtype=np.uint8)

        # PyTorch tensors for convolution (reused between ticks)
        self._torch_input = torch.zeros(1, 1, self._height, self._width, dtype=torch.float32)
        self._block_kernel = torch.ones(1, 1, 3, 3, dtype=torch.float32)
        self._cross_kernel = (
            torch.tensor([[0, 1, 0], [1, 0, 1], [0, 1, 0]], dtype=torch.float32).unsqueeze(0).unsqueeze(0)
        )

        # Number of neighbour offsets that are literally (0, 0) and therefore
        # skipped; on a 1-wide or 1-tall grid the wrapped -1 offset is 0 too.
        self._skipped_self = (2 if self._height == 1 else 1) * (2 if self._width == 1 else 1)

    def _build_layout(self, layout: LayoutSource) -> np.ndarray:
        size = self._width * self._height
        if callable(layout):
            values = [layout(index) for index in range(size)]
        else:
            values = list(layout)
            if len(values) != size:
                raise ValueError(
                    f"Layout has {len(values)} cells, expected {size} for a {self._width}x{self._height} grid"
                )

        return np.fromiter((Cell(int(value)) for value in values), dtype=np.uint8, count=size)

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of rows."""
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        """Get grid dimensions as (width, height)."""
        return (self._width, self._height)

    @property
    def cells(self) -> np.ndarray:
        """Read-only flat view of the current cells, row-major."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def as_array(self) -> np.ndarray:
        """Read-only (height, width) view of the current cells."""
        view = self._cells.reshape(self._height, self._width)
        view.flags.writeable = False
        return view

    def get_index(self, row: int, col: int) -> int:
        """Map (row, col) to a position in the flat buffer."""
        return row * self._width + col

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self._height and 0 <= col < self._width):
            raise OutOfBounds(row, col, self._width, self._height)

    def get_cell(self, row: int, col: int) -> Cell:
        """Get the material of a cell.

        Raises:
            OutOfBounds: If the coordinates lie outside the grid
        """
        self._check_bounds(row, col)
        return Cell(int(self._cells[self.get_index(row, col)]))

    def set_cell(self, row: int, col: int, cell: Cell) -> None:
        """Set the material of a single cell.

        Raises:
            OutOfBounds: If the coordinates lie outside the grid
        """
        self.set_cells([(row, col)], cell)

    def set_cells(self, coordinates: Iterable[Tuple[int, int]], cell: Cell) -> None:
        """Set every (row, col) in ``coordinates`` to ``cell``.

        All coordinates are checked before anything is written, so a call
        that raises leaves the grid untouched.

        Args:
            coordinates: (row, col) pairs
            cell: Material to assign

        Raises:
            OutOfBounds: If any coordinate lies outside the grid
        """
        cell = Cell(cell)
        coords = list(coordinates)
        for row, col in coords:
            self._check_bounds(row, col)

        for row, col in coords:
            self._cells[self.get_index(row, col)] = cell

    def set_width(self, width: int) -> None:
        """Set the width of the grid.

        This is a hard reset: every cell becomes dead, including those
        inside the region the old and new sizes share.

        Raises:
            InvalidDimension: If width is not positive
        """
        _check_dimension("width", width)
        self._width = width
        self._allocate()

    def set_height(self, height: int) -> None:
        """Set the height of the grid.

        Like ``set_width``, every cell is reset to dead.

        Raises:
            InvalidDimension: If height is not positive
        """
        _check_dimension("height", height)
        self._height = height
        self._allocate()

    def clear(self) -> None:
        """Clear all cells (set all to dead)."""
        self._cells.fill(Cell.DEAD)

    def copy(self) -> "Grid":
        """Return an independent grid with the same size and cells."""
        duplicate = Grid(self._width, self._height)
        duplicate._cells[:] = self._cells
        return duplicate

    def census(self) -> Dict[Cell, int]:
        """Count the cells of each material."""
        counts = np.bincount(self._cells, minlength=len(Cell))
        return {cell: int(counts[cell]) for cell in Cell}

    @property
    def population(self) -> int:
        """Get the number of cells that are not dead."""
        return int(np.count_nonzero(self._cells))

    def live_neighbour_count(self, row: int, col: int) -> int:
        """Count alive cells among the 8 neighbours, wrapping at the edges.

        The step back is taken as ``+ (size - 1)`` and only offsets that are
        literally (0, 0) are skipped. On a grid one cell tall (or wide) the
        step back is therefore also 0, so the cell's own row (or column)
        offsets collapse onto it and it is skipped for each of them, leaving
        it counted once, through the step forward.

        Args:
            row: Row coordinate
            col: Column coordinate

        Returns:
            Number of alive neighbours (0-8)
        """
        count = 0
        for delta_row in (self._height - 1, 0, 1):
            for delta_col in (self._width - 1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue

                neighbour_row = (row + delta_row) % self._height
                neighbour_col = (col + delta_col) % self._width
                if self._cells[self.get_index(neighbour_row, neighbour_col)] == Cell.ALIVE:
                    count += 1

        return count

    def count_all_live_neighbours(self) -> np.ndarray:
        """Count alive neighbours for every cell using a PyTorch convolution.

        Circular padding with a full 3x3 kernel sums all nine wrapped
        offsets, the cell itself included. Taking the cell back off once
        for every skipped (0, 0) offset gives the same numbers as
        ``live_neighbour_count`` on every grid size.

        Returns:
            Flat row-major array of neighbour counts
        """
        alive = self._torch_mask(self._cells == Cell.ALIVE)

        padded = F.pad(alive, (1, 1, 1, 1), mode="circular")
        neighbours = F.conv2d(padded, self._block_kernel) - self._skipped_self * alive

        return neighbours[0, 0].numpy().astype(np.uint8).reshape(-1)

    def count_all_fire_neighbours(self) -> np.ndarray:
        """Count burning orthogonal neighbours for every cell, without wrapping.

        Zero padding leaves cells past an edge out of the count, matching
        ``is_fire_neighbour``.

        Returns:
            Flat row-major array of counts (0-4)
        """
        fire = self._torch_mask(self._cells == Cell.FIRE)
        neighbours = F.conv2d(fire, self._cross_kernel, padding=1)

        return neighbours[0, 0].numpy().astype(np.uint8).reshape(-1)

    def _torch_mask(self, mask: np.ndarray) -> torch.Tensor:
        """Load a boolean cell mask into the reusable (1, 1, height, width) input tensor."""
        self._torch_input[0, 0] = torch.from_numpy(mask.astype(np.float32).reshape(self._height, self._width))
        return self._torch_input

    def is_fire(self, row: int, col: int) -> bool:
        """Whether (row, col) is inside the grid and currently on fire."""
        if not (0 <= row < self._height and 0 <= col < self._width):
            return False
        return bool(self._cells[self.get_index(row, col)] == Cell.FIRE)

    def is_fire_neighbour(self, row: int, col: int) -> bool:
        """Whether any orthogonal neighbour is on fire. Does not wrap."""
        return (
            self.is_fire(row - 1, col)
            or self.is_fire(row + 1, col)
            or self.is_fire(row, col - 1)
            or self.is_fire(row, col + 1)
        )

    def sand_can_fall(self, row: int, col: int) -> bool:
        """Whether sand can move into (row, col): inside the grid and dead or on fire."""
        if not (0 <= row < self._height and 0 <= col < self._width):
            return False
        return self._cells[self.get_index(row, col)] in (Cell.DEAD, Cell.FIRE)

    def life_state_next_tick(self, row: int, col: int, cell: Cell, live_neighbours: Optional[int] = None) -> Cell:
        """Next state of an alive or dead cell under Conway's rules.

        Args:
            row: Row coordinate
            col: Column coordinate
            cell: Current material (ALIVE or DEAD)
            live_neighbours: Precomputed neighbour count, counted here if omitted
        """
        if live_neighbours is None:
            live_neighbours = self.live_neighbour_count(row, col)

        if cell == Cell.ALIVE:
            # Underpopulation below two, overpopulation above three
            return Cell.ALIVE if live_neighbours in (2, 3) else Cell.DEAD
        if cell == Cell.DEAD and live_neighbours == 3:
            return Cell.ALIVE
        return cell

    def wood_state_next_tick(self, row: int, col: int) -> Cell:
        """Wood catches fire from an orthogonal neighbour, otherwise stays wood."""
        return Cell.FIRE if self.is_fire_neighbour(row, col) else Cell.WOOD

    def fire_state_next_tick(self, row: int, col: int) -> Cell:
        """Fire burns for exactly one tick."""
        return Cell.DEAD

    def sand_state_next_tick(self, row: int, col: int) -> Cell:
        """Next state of a sand cell.

        If the cell below is free (dead or on fire) the grain moves: SAND is
        written straight into the next buffer at (row + 1, col) and this cell
        becomes dead. This is the only rule that writes to the next buffer
        itself. Visiting rows bottom to top means row + 1 was already stored,
        so the grain overrides whatever that cell's own rule produced.
        """
        if self.sand_can_fall(row + 1, col):
            self._next[self.get_index(row + 1, col)] = Cell.SAND
            return Cell.DEAD
        return Cell.SAND

    def tick(self) -> None:
        """Advance the grid by one generation.

        The result is that of visiting every cell once, last row first and
        last column first within each row, storing its rule result (the
        ``*_state_next_tick`` methods) in a copy of the current cells. The
        rules read only the current cells, except Sand, which also writes
        SAND into the cell below; that cell was stored earlier in the pass,
        so the falling grain overrides it.

        Here the pass is done with whole-grid masks. Life, Wood and Fire are
        applied first, then the falling grains: DEAD at each source and SAND
        at each landing cell, last, as in the scan. A source is SAND and a
        landing cell is DEAD or FIRE, so the two never coincide. Changing
        that order changes how sand behaves.
        """
        current = self._cells.reshape(self._height, self._width)
        live_counts = self.count_all_live_neighbours().reshape(self._height, self._width)
        fire_counts = self.count_all_fire_neighbours().reshape(self._height, self._width)

        self._next[:] = self._cells
        following = self._next.reshape(self._height, self._width)

        # Underpopulation below two, overpopulation above three, birth on three
        following[(current == Cell.ALIVE) & ((live_counts < 2) | (live_counts > 3))] = Cell.DEAD
        following[(current == Cell.DEAD) & (live_counts == 3)] = Cell.ALIVE

        following[(current == Cell.WOOD) & (fire_counts > 0)] = Cell.FIRE
        following[current == Cell.FIRE] = Cell.DEAD

        # The bottom row is a floor
        below = current[1:]
        falling = np.zeros(current.shape, dtype=bool)
        falling[:-1] = (current[:-1] == Cell.SAND) & ((below == Cell.DEAD) | (below == Cell.FIRE))
        landing = np.zeros(current.shape, dtype=bool)
        landing[1:] = falling[:-1]

        following[falling] = Cell.DEAD
        following[landing] = Cell.SAND

        self._cells[:] = self._next

    def __eq__(self, other: object) -> bool:
        """Check if two grids are equal."""
        if not isinstance(other, Grid):
            return False
        return self.shape == other.shape and np.array_equal(self._cells, other._cells)

    def __str__(self) -> str:
        """Render the grid with one glyph per cell and one line per row."""
        result = []
        for row in range(self._height):
            start = row * self._width
            result.append("".join(Cell(int(value)).glyph for value in self._cells[start : start + self._width]))
        return "\n".join(result)


def _check_dimension(name: str, value: int) -> None:
    if value <= 0:
        raise InvalidDimension(name, value)
