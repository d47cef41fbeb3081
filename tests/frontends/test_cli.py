"""Tests for the CLI frontend."""

import argparse
from unittest.mock import Mock, patch
from io import StringIO

import pytest
from elemental.core.cell import Cell
from elemental.core.exceptions import OutOfBounds
from elemental.frontends.cli import (
    CLISimulation,
    create_parser,
    format_finish_reason,
    parse_placement,
    print_results,
    validate_args,
    main,
)


def make_stats(**overrides):
    stats = {
        "generation": 12,
        "grid_size": (20, 20),
        "initial_population": 10,
        "population": 8,
        "census": {"dead": 392, "alive": 0, "wood": 8, "fire": 0, "sand": 0},
        "population_density": 0.02,
        "population_change_rate": 0.0,
        "duration_seconds": 0.5,
        "generations_per_second": 24.0,
        "cycle_length": 0,
        "cycle_start_generation": 0,
    }
    stats.update(overrides)
    return stats


class TestCLISimulation:
    """Test cases for the CLI simulation runner."""

    def test_initialization(self):
        """Test CLI initialization."""
        cli = CLISimulation()
        assert "sand" in cli.layout_library.list_layouts()

    def test_run_simulation_fire(self):
        """Test running the fire layout to extinction."""
        cli = CLISimulation()

        final_gen, reason, stats = cli.run_simulation(
            width=4,
            height=4,
            layout="fire",
            max_generations=100,
        )

        assert final_gen == 7
        assert reason == "extinction"
        assert stats["initial_population"] == 16
        assert stats["population"] == 0
        assert "duration_seconds" in stats

    def test_run_simulation_with_placements(self):
        """Test painting cells over the layout."""
        cli = CLISimulation()

        final_gen, reason, stats = cli.run_simulation(
            width=3,
            height=3,
            layout="empty",
            max_generations=50,
            placements=[(Cell.SAND, (0, 1)), (Cell.WOOD, (2, 1))],
        )

        assert reason == "cycle"
        assert stats["cycle_length"] == 1
        assert stats["census"]["sand"] == 1
        assert stats["census"]["wood"] == 1

    def test_run_simulation_placement_out_of_bounds(self):
        """Test that a placement outside the grid is reported, not clamped."""
        cli = CLISimulation()

        with pytest.raises(OutOfBounds):
            cli.run_simulation(
                width=3,
                height=3,
                layout="empty",
                max_generations=5,
                placements=[(Cell.FIRE, (3, 0))],
            )

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_unknown_layout(self, mock_stdout):
        """Test that an unknown layout falls back to an empty grid."""
        cli = CLISimulation()

        final_gen, reason, stats = cli.run_simulation(
            width=5,
            height=5,
            layout="NoSuchLayout",
            max_generations=10,
        )

        assert "Warning: Layout 'NoSuchLayout' not found" in mock_stdout.getvalue()
        assert stats["initial_population"] == 0

    @patch("sys.stdout", new_callable=StringIO)
    def test_run_simulation_show_grid(self, mock_stdout):
        """Test verbose output with grids."""
        cli = CLISimulation()

        cli.run_simulation(
            width=3,
            height=3,
            layout="empty",
            max_generations=10,
            placements=[(Cell.SAND, (0, 0))],
            verbose=True,
            show_grid=True,
        )

        output = mock_stdout.getvalue()
        assert "Initializing 3x3 grid with layout 'empty'" in output
        assert "Placing 1 sand cell(s)" in output
        assert "o..\n...\n..." in output
        assert "...\n...\no.." in output

    def test_format_grid_too_large(self):
        """Test that large grids are not printed."""
        cli = CLISimulation()
        grid = cli.layout_library.get_layout("empty").build(100, 10)
        assert cli._format_grid(grid) == "Grid too large to display (100x10)"

    @patch("sys.stdout", new_callable=StringIO)
    def test_list_layouts(self, mock_stdout):
        """Test layout listing."""
        CLISimulation().list_layouts()

        output = mock_stdout.getvalue()
        assert "Available layouts:" in output
        for name in ("life", "fire", "sand", "empty"):
            assert f"  {name}: " in output
        assert "sand (o)" in output


class TestParsePlacement:
    """Test cases for placement parsing."""

    def test_valid(self):
        """Test a well-formed placement."""
        assert parse_placement("fire:0,5") == (Cell.FIRE, (0, 5))
        assert parse_placement("Sand:12,3") == (Cell.SAND, (12, 3))

    @pytest.mark.parametrize("value", ["fire", "fire:1", "fire:1,2,3", "fire:a,b", "water:1,1"])
    def test_invalid(self, value):
        """Test malformed placements."""
        with pytest.raises(ValueError):
            parse_placement(value)


class TestCLIUtilities:
    """Test cases for CLI utility functions."""

    def test_create_parser_defaults(self):
        """Test parser defaults."""
        args = create_parser().parse_args([])

        assert args.width == 64
        assert args.height == 64
        assert args.layout == "life"
        assert args.max_generations == 1000
        assert args.place == []
        assert not args.verbose
        assert not args.show_grid
        assert not args.list_layouts

    def test_create_parser_options(self):
        """Test parsing every option."""
        args = create_parser().parse_args(
            ["-W", "10", "-H", "8", "-l", "sand", "-m", "50", "--place", "wood:7,1", "--place", "fire:0,0", "-v", "-g"]
        )

        assert args.width == 10
        assert args.height == 8
        assert args.layout == "sand"
        assert args.max_generations == 50
        assert args.place == ["wood:7,1", "fire:0,0"]
        assert args.verbose
        assert args.show_grid

    def test_format_finish_reason(self):
        """Test finish reason formatting."""
        assert format_finish_reason("extinction", {}) == "Extinction - every cell is dead"
        assert (
            format_finish_reason("cycle", {"cycle_length": 2, "cycle_start_generation": 5})
            == "Cycle detected - length 2, started at generation 5"
        )
        assert (
            format_finish_reason("cycle", {"cycle_length": 1, "cycle_start_generation": 9})
            == "Settled - grid stopped changing at generation 9"
        )
        assert format_finish_reason("max_generations", {"generation": 40}) == "Maximum generations reached (40)"
        assert format_finish_reason("other", {}) == "Unknown reason: other"

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results_compact(self, mock_stdout):
        """Test compact result output."""
        print_results(12, "max_generations", make_stats(), verbose=False)

        output = mock_stdout.getvalue()
        assert "Simulation completed after 12 generations" in output
        assert "Population: 10 -> 8" in output

    @patch("sys.stdout", new_callable=StringIO)
    def test_print_results_verbose(self, mock_stdout):
        """Test detailed result output."""
        print_results(12, "max_generations", make_stats(), verbose=True)

        output = mock_stdout.getvalue()
        assert "Grid size: 20x20" in output
        assert "Census: dead 392, alive 0, wood 8, fire 0, sand 0" in output
        assert "Duration: 0.500 seconds" in output

    def test_validate_args(self):
        """Test argument validation."""
        valid = argparse.Namespace(width=10, height=10, max_generations=5, place=["sand:0,0"])
        assert validate_args(valid)

    @patch("sys.stdout", new_callable=StringIO)
    def test_validate_args_reports_every_error(self, mock_stdout):
        """Test that all problems are listed at once."""
        invalid = argparse.Namespace(width=0, height=-1, max_generations=0, place=["lava:0,0"])
        assert not validate_args(invalid)

        output = mock_stdout.getvalue()
        assert "Width must be positive" in output
        assert "Height must be positive" in output
        assert "Max generations must be positive" in output
        assert "Unknown material 'lava'" in output


class TestMain:
    """Test cases for the main entry point."""

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_list_layouts(self, mock_stdout):
        """Test --list-layouts."""
        with patch("sys.argv", ["elemental-cli", "--list-layouts"]):
            result = main()

        assert result == 0
        assert "Available layouts:" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_invalid_args(self, mock_stdout):
        """Test main function with invalid arguments."""
        with patch("sys.argv", ["elemental-cli", "--width", "-5"]):
            result = main()

        assert result == 1

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_invalid_layout(self, mock_stdout):
        """Test main function with an unknown layout."""
        with patch("sys.argv", ["elemental-cli", "--layout", "lava"]):
            result = main()

        assert result == 1
        assert "Error: Layout 'lava' not found" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_successful_run(self, mock_stdout):
        """Test a real run of a small fire field."""
        with patch("sys.argv", ["elemental-cli", "--layout", "fire", "-W", "5", "-H", "5"]):
            result = main()

        assert result == 0
        assert "Finish reason: Extinction - every cell is dead" in mock_stdout.getvalue()

    @patch("sys.stdout", new_callable=StringIO)
    def test_main_out_of_bounds_placement(self, mock_stdout):
        """Test that an out-of-bounds placement fails cleanly."""
        with patch("sys.argv", ["elemental-cli", "-W", "5", "-H", "5", "--place", "fire:5,0"]):
            result = main()

        assert result == 1
        assert "Error: Coordinates (row=5, col=0) out of bounds for 5x5 grid" in mock_stdout.getvalue()

    @patch("elemental.frontends.cli.CLISimulation")
    @patch("sys.stdout", new_callable=StringIO)
    def test_main_keyboard_interrupt(self, mock_stdout, mock_cli_class):
        """Test handling of keyboard interrupt."""
        mock_cli = Mock()
        mock_cli.run_simulation.side_effect = KeyboardInterrupt()
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["elemental-cli"]):
            result = main()

        assert result == 1
        assert "Simulation interrupted by user" in mock_stdout.getvalue()

    @patch("elemental.frontends.cli.CLISimulation")
    @patch("sys.stdout", new_callable=StringIO)
    def test_main_exception(self, mock_stdout, mock_cli_class):
        """Test handling of unexpected errors."""
        mock_cli = Mock()
        mock_cli.run_simulation.side_effect = RuntimeError("boom")
        mock_cli_class.return_value = mock_cli

        with patch("sys.argv", ["elemental-cli"]):
            result = main()

        assert result == 1
        assert "Error: boom" in mock_stdout.getvalue()
