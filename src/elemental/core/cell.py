"""Cell materials for the elemental automaton."""

from enum import IntEnum


class Cell(IntEnum):
    """Material held by a single grid cell.

    The integer value is the byte stored in the grid buffers.
    """

    DEAD = 0
    ALIVE = 1
    WOOD = 2
    FIRE = 3
    SAND = 4

    @property
    def glyph(self) -> str:
        """Single character used when rendering the grid as text."""
        return GLYPHS[self]

    @classmethod
    def from_name(cls, name: str) -> "Cell":
        """Look up a material by name (case-insensitive).

        Args:
            name: Material name such as "sand" or "Fire"

        Returns:
            The matching Cell

        Raises:
            ValueError: If no material has that name
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(member.name.lower() for member in cls)
            raise ValueError(f"Unknown material '{name}' (expected one of: {valid})") from None


GLYPHS = {
    Cell.DEAD: ".",
    Cell.ALIVE: "*",
    Cell.WOOD: "#",
    Cell.FIRE: "^",
    Cell.SAND: "o",
}
