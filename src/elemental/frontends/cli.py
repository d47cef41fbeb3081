"""Command-line interface for the elemental automaton."""

import argparse
import sys
import time
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.cell import Cell
from ..core.exceptions import GridError
from ..core.grid import Grid
from ..core.layouts import DEMO_HEIGHT, DEMO_WIDTH, LayoutLibrary
from ..core.simulation import Simulation

Placement = Tuple[Cell, Tuple[int, int]]


class CLISimulation:
    """Command-line interface for running elemental simulations."""

    def __init__(self) -> None:
        self.layout_library = LayoutLibrary()

    def run_simulation(
        self,
        width: int,
        height: int,
        layout: str,
        max_generations: int,
        placements: Optional[Sequence[Placement]] = None,
        verbose: bool = False,
        show_grid: bool = False,
    ) -> Tuple[int, str, dict]:
        """Run a simulation.

        Args:
            width: Grid width
            height: Grid height
            layout: Name of the starting layout
            max_generations: Maximum generations to run
            placements: Extra (material, (row, col)) cells painted over the layout
            verbose: Print progress updates
            show_grid: Show initial and final grid states

        Returns:
            Tuple of (final_generation, finish_reason, statistics)

        Raises:
            InvalidDimension: If width or height is not positive
            OutOfBounds: If a placement lies outside the grid
        """
        loaded_layout = self.layout_library.get_layout(layout)
        if loaded_layout is None:
            print(f"Warning: Layout '{layout}' not found, using empty grid")
            loaded_layout = self.layout_library.get_layout("empty")

        if verbose:
            print(f"Initializing {width}x{height} grid with layout '{loaded_layout.name}'")

        grid = loaded_layout.build(width, height)

        for cell, coords in _group_placements(placements or []).items():
            if verbose:
                print(f"Placing {len(coords)} {cell.name.lower()} cell(s)")
            grid.set_cells(coords, cell)

        simulation = Simulation(grid)
        initial_population = simulation.population

        if verbose:
            print(f"Initial population: {initial_population} cells")

        if show_grid:
            print("\nInitial grid:")
            print(self._format_grid(grid))

        start_time = time.time()

        if verbose:
            print(f"\nRunning simulation (max {max_generations} generations)...")

        final_generation, reason = simulation.run_until_stable(max_generations)

        duration = time.time() - start_time

        stats = simulation.get_statistics()
        stats["duration_seconds"] = duration
        stats["generations_per_second"] = final_generation / duration if duration > 0 else 0
        stats["initial_population"] = initial_population

        if show_grid and reason != "extinction":
            print(f"\nFinal grid (generation {final_generation}):")
            print(self._format_grid(grid))

        return final_generation, reason, stats

    def _format_grid(self, grid: Grid, max_size: int = 80) -> str:
        """Format grid for display, truncating if too large.

        Args:
            grid: Grid to format
            max_size: Maximum dimension to display

        Returns:
            Formatted grid string
        """
        if grid.width > max_size or grid.height > max_size:
            return f"Grid too large to display ({grid.width}x{grid.height})"

        return str(grid)

    def list_layouts(self) -> None:
        """List available layouts."""
        print("Available layouts:")
        for name in self.layout_library.list_layouts():
            layout = self.layout_library.get_layout(name)
            print(f"  {name}: {layout.description}")

        print("\nMaterials: " + ", ".join(f"{cell.name.lower()} ({cell.glyph})" for cell in Cell))


def _group_placements(placements: Sequence[Placement]) -> Dict[Cell, List[Tuple[int, int]]]:
    grouped: Dict[Cell, List[Tuple[int, int]]] = {}
    for cell, coord in placements:
        grouped.setdefault(cell, []).append(coord)
    return grouped


def parse_placement(value: str) -> Placement:
    """Parse a ``MATERIAL:ROW,COL`` placement string.

    Args:
        value: Placement such as "fire:0,5"

    Returns:
        Tuple of (material, (row, col))

    Raises:
        ValueError: If the string is malformed or names an unknown material
    """
    material, separator, position = value.partition(":")
    if not separator:
        raise ValueError(f"Invalid placement '{value}', expected MATERIAL:ROW,COL")

    parts = position.split(",")
    if len(parts) != 2:
        raise ValueError(f"Invalid placement '{value}', expected MATERIAL:ROW,COL")

    try:
        row, col = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid coordinates in placement '{value}'") from None

    return Cell.from_name(material), (row, col)


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Run Life, wood, fire and sand simulations from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the Game of Life demo field
  elemental-cli --layout life

  # Burn a small wood field and show the grids
  elemental-cli --layout fire -W 10 -H 10 --show-grid

  # Let sand settle on a 20x20 grid with a wooden floor cell
  elemental-cli --layout sand -W 20 -H 20 --place wood:10,3 --verbose

  # List available layouts
  elemental-cli --list-layouts
        """,
    )

    # Grid configuration
    parser.add_argument(
        "-W", "--width", type=int, default=DEMO_WIDTH, help=f"Grid width (default: {DEMO_WIDTH})"
    )

    parser.add_argument(
        "-H", "--height", type=int, default=DEMO_HEIGHT, help=f"Grid height (default: {DEMO_HEIGHT})"
    )

    parser.add_argument(
        "-l",
        "--layout",
        type=str,
        default="life",
        help="Starting layout (default: life)",
    )

    parser.add_argument(
        "--place",
        action="append",
        default=[],
        metavar="MATERIAL:ROW,COL",
        help="Set a cell after the layout is built (repeatable, e.g. --place fire:0,0)",
    )

    # Simulation configuration
    parser.add_argument(
        "-m",
        "--max-generations",
        type=int,
        default=1000,
        help="Maximum generations to simulate (default: 1000)",
    )

    # Output configuration
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print detailed progress information",
    )

    parser.add_argument(
        "-g",
        "--show-grid",
        action="store_true",
        help="Display initial and final grid states (small grids only)",
    )

    parser.add_argument(
        "--list-layouts",
        action="store_true",
        help="List all available layouts and exit",
    )

    return parser


def format_finish_reason(reason: str, stats: dict) -> str:
    """Format the simulation finish reason for display.

    Args:
        reason: Finish reason from Simulation.run_until_stable
        stats: Statistics dictionary

    Returns:
        Formatted reason string
    """
    if reason == "extinction":
        return "Extinction - every cell is dead"
    elif reason == "cycle":
        cycle_len = stats.get("cycle_length", 0)
        cycle_start = stats.get("cycle_start_generation", 0)
        if cycle_len == 1:
            return f"Settled - grid stopped changing at generation {cycle_start}"
        return f"Cycle detected - length {cycle_len}, started at generation {cycle_start}"
    elif reason == "max_generations":
        return f"Maximum generations reached ({stats.get('generation', 0)})"
    else:
        return f"Unknown reason: {reason}"


def print_results(final_generation: int, reason: str, stats: dict, verbose: bool) -> None:
    """Print simulation results.

    Args:
        final_generation: Final generation number
        reason: Finish reason
        stats: Statistics dictionary
        verbose: Whether to show detailed statistics
    """
    print(f"\nSimulation completed after {final_generation} generations")
    print(f"Finish reason: {format_finish_reason(reason, stats)}")

    if verbose:
        print("\nDetailed Statistics:")
        print(f"  Grid size: {stats['grid_size'][0]}x{stats['grid_size'][1]}")
        print(f"  Initial population: {stats['initial_population']}")
        print(f"  Final population: {stats['population']}")
        print(f"  Population density: {stats['population_density']:.2%}")
        print(f"  Population change rate: {stats['population_change_rate']:.2f}")
        print("  Census: " + ", ".join(f"{name} {count}" for name, count in stats["census"].items()))
        if "duration_seconds" in stats:
            print(f"  Duration: {stats['duration_seconds']:.3f} seconds")
            print(f"  Speed: {stats['generations_per_second']:.0f} generations/second")
    else:
        initial_pop = stats["initial_population"]
        final_pop = stats["population"]
        duration = stats.get("duration_seconds", 0)
        speed = stats.get("generations_per_second", 0)

        print(
            "Population: {} -> {}, "
            "Duration: {:.3f}s, "
            "Speed: {:.0f} gen/s".format(initial_pop, final_pop, duration, speed)
        )


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if arguments are valid
    """
    errors = []

    if args.width <= 0:
        errors.append("Width must be positive")

    if args.height <= 0:
        errors.append("Height must be positive")

    if args.max_generations <= 0:
        errors.append("Max generations must be positive")

    for value in args.place:
        try:
            parse_placement(value)
        except ValueError as e:
            errors.append(str(e))

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def main() -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args()

    cli = CLISimulation()

    if args.list_layouts:
        cli.list_layouts()
        return 0

    if not validate_args(args):
        return 1

    if cli.layout_library.get_layout(args.layout) is None:
        available = cli.layout_library.list_layouts()
        print(f"Error: Layout '{args.layout}' not found")
        print(f"Available layouts: {', '.join(available)}")
        return 1

    try:
        final_generation, reason, stats = cli.run_simulation(
            width=args.width,
            height=args.height,
            layout=args.layout,
            max_generations=args.max_generations,
            placements=[parse_placement(value) for value in args.place],
            verbose=args.verbose,
            show_grid=args.show_grid,
        )

        print_results(final_generation, reason, stats, args.verbose)

        return 0

    except GridError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
