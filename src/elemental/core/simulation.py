"""Host loop that drives a grid tick by tick and tracks its history."""

from typing import Deque, Dict, Optional, Tuple
from collections import deque
import numpy as np

from .cell import Cell
from .grid import Grid


class StateHistory:
    """The most recent grid states, each mapped to the generation it first appeared.

    Only ``max_states`` states are kept. Recording one more forgets the
    oldest, so a cycle longer than the window goes unnoticed.
    """

    def __init__(self, max_states: int = 1000) -> None:
        if max_states < 1:
            raise ValueError(f"max_states must be positive, got {max_states}")
        self.max_states = max_states
        self._first_seen: Dict[bytes, int] = {}
        self._order: Deque[bytes] = deque()

    def __len__(self) -> int:
        return len(self._first_seen)

    def __contains__(self, state: bytes) -> bool:
        return state in self._first_seen

    def clear(self) -> None:
        self._first_seen.clear()
        self._order.clear()

    def record(self, state: bytes, generation: int) -> Optional[int]:
        """Remember ``state`` as seen at ``generation``.

        Returns:
            The generation the state was first seen at if it is already
            known (nothing is stored then), otherwise None
        """
        if state in self._first_seen:
            return self._first_seen[state]

        self._first_seen[state] = generation
        self._order.append(state)
        if len(self._order) > self.max_states:
            del self._first_seen[self._order.popleft()]
        return None


class Simulation:
    """Runs a grid forward and keeps track of what it does.

    Besides counting generations, the simulation records the number of
    non-dead cells and the per-material census after every tick, and
    notices when the grid returns to a state it has already been in.
    """

    def __init__(self, grid: Grid, max_tracked_states: int = 1000) -> None:
        """Initialize the simulation with a grid.

        Args:
            grid: The grid to advance
            max_tracked_states: How many recent grid states cycle detection
                remembers
        """
        self.grid = grid
        self._generation = 0
        self._population_history: Deque[int] = deque(maxlen=100)
        self._census_history: Deque[Dict[Cell, int]] = deque(maxlen=100)
        self._states = StateHistory(max_tracked_states)
        self._cycle_length = 0
        self._cycle_start_generation = 0

        self._update_history()
        self._record_state()

    @property
    def generation(self) -> int:
        """Number of ticks run so far."""
        return self._generation

    @property
    def population(self) -> int:
        """Current number of cells that are not dead."""
        return self.grid.population

    @property
    def population_history(self) -> list:
        """Population after each generation, oldest first."""
        return list(self._population_history)

    @property
    def census_history(self) -> list:
        """Per-material counts after each generation, oldest first."""
        return list(self._census_history)

    @property
    def tracked_states(self) -> int:
        """Number of grid states currently remembered for cycle detection."""
        return len(self._states)

    @property
    def cycle_detected(self) -> bool:
        return self._cycle_length > 0

    @property
    def cycle_length(self) -> int:
        """Period of the detected cycle, 1 for a grid that stopped changing (0 if none)."""
        return self._cycle_length

    @property
    def cycle_start_generation(self) -> int:
        """First generation of the repeating state (0 if no cycle)."""
        return self._cycle_start_generation

    def step(self) -> None:
        """Advance the grid by one tick and record the state it lands in."""
        self.grid.tick()
        self._generation += 1

        self._update_history()
        self._record_state()

    def _update_history(self) -> None:
        self._population_history.append(self.population)
        self._census_history.append(self.grid.census())

    def _record_state(self) -> None:
        # Once a cycle is known the grid only revisits recorded states
        if self.cycle_detected:
            return

        first_seen = self._states.record(self.grid.cells.tobytes(), self._generation)
        if first_seen is not None:
            self._cycle_length = self._generation - first_seen
            self._cycle_start_generation = first_seen

    def reset(self, clear_grid: bool = True) -> None:
        """Start counting again from generation 0.

        Args:
            clear_grid: Whether to clear the grid as well
        """
        if clear_grid:
            self.grid.clear()

        self._generation = 0
        self._population_history.clear()
        self._census_history.clear()
        self._update_history()
        self.clear_cycle_detection()

    def clear_cycle_detection(self) -> None:
        """Forget all recorded states and start over from the current grid.

        Call this after editing or resizing the grid by hand, since earlier
        states no longer describe where the grid is heading.
        """
        self._cycle_length = 0
        self._cycle_start_generation = 0
        self._states.clear()
        self._record_state()

    def run_until_stable(self, max_generations: int = 10000) -> Tuple[int, str]:
        """Run until the grid empties, repeats itself, or the limit is hit.

        An empty grid is reported as extinction even though it also repeats.

        Args:
            max_generations: Maximum generations to run

        Returns:
            Tuple of (final_generation, reason) where reason is one of
            'extinction', 'cycle', 'max_generations'
        """
        for _ in range(max_generations):
            self.step()

            if self.population == 0:
                return self._generation, "extinction"

            if self.cycle_detected:
                return self._generation, "cycle"

        return self._generation, "max_generations"

    def get_population_change_rate(self, window_size: int = 10) -> float:
        """Average population change per generation over the last ``window_size`` entries."""
        recent = list(self._population_history)[-window_size:]
        if len(recent) < 2:
            return 0.0

        return float(np.mean(np.diff(recent)))

    def get_statistics(self) -> Dict:
        """Summarise the run so far.

        Returns:
            Dictionary with generation, population, census and cycle data
        """
        census = self.grid.census()
        return {
            "generation": self._generation,
            "population": self.population,
            "census": {cell.name.lower(): count for cell, count in census.items()},
            "population_change_rate": self.get_population_change_rate(),
            "population_history": list(self._population_history),
            "cycle_detected": self.cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
            "grid_size": self.grid.shape,
            "population_density": self.population / (self.grid.width * self.grid.height),
        }
