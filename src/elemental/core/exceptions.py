"""Exceptions raised by the grid engine."""

from typing import Any, Dict, Optional


class GridError(Exception):
    """Base exception for all grid errors.

    Catching this handles every failure the engine reports.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        super().__init__(message)
        self.details = details or {}


class InvalidDimension(GridError, ValueError):
    """Raised when a grid width or height is not a positive integer."""

    def __init__(self, name: str, value: int) -> None:
        super().__init__(
            f"Grid {name} must be positive, got {value}",
            details={"dimension": name, "value": value},
        )
        self.name = name
        self.value = value


class OutOfBounds(GridError, IndexError):
    """Raised when a coordinate lies outside the grid."""

    def __init__(self, row: int, col: int, width: int, height: int) -> None:
        super().__init__(
            f"Coordinates (row={row}, col={col}) out of bounds for {width}x{height} grid",
            details={"row": row, "col": col, "width": width, "height": height},
        )
        self.row = row
        self.col = col
        self.width = width
        self.height = height
