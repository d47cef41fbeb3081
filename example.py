#!/usr/bin/env python3
"""
Example usage of the elemental package.
"""

from elemental import Cell, LayoutLibrary, Simulation


def main():
    """Drop sand onto a burning wood floor and watch it settle."""
    library = LayoutLibrary()
    grid = library.get_layout("empty").build(12, 8)

    # A wooden floor with a fire seed at its left end
    grid.set_cells([(5, col) for col in range(12)], Cell.WOOD)
    grid.set_cell(5, 0, Cell.FIRE)

    # A few grains of sand above it
    grid.set_cells([(0, 3), (1, 3), (0, 8), (2, 10)], Cell.SAND)

    simulation = Simulation(grid)

    print("Initial state:")
    print(grid)
    print()

    for _ in range(15):
        simulation.step()
        print(f"Generation {simulation.generation}:")
        print(grid)

        if simulation.cycle_detected:
            print(f"Cycle detected! Length: {simulation.cycle_length}")
            break

        print()

    stats = simulation.get_statistics()
    print("Final statistics:")
    for key, value in stats.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
