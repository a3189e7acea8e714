"""
A square on the board, and the vectors to move between squares

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8. Just in case we want to try some funky stuff, make it adjustable
BOARD_DIMENSIONS = (8, 8)

# In order, for anyone rendering the board
FILES: str = "abcdefgh"[: BOARD_DIMENSIONS[0]]
RANKS: tuple[int, ...] = tuple(range(1, BOARD_DIMENSIONS[1] + 1))


@dataclass(frozen=True)
class Vector:
    """Difference between two squares, counted in files and ranks"""

    files: int = 0
    ranks: int = 0

    def __neg__(self) -> Vector:
        return Vector(-self.files, -self.ranks)


@dataclass(frozen=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        if len(sq) != 2 or sq[0] not in FILES or sq[1] not in "0123456789":
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square.")
        square = cls(FILES.index(sq[0]) + 1, int(sq[1]))
        if not square.is_within_bounds():
            raise InvalidSquareError(f"Square {sq!r} is not on the board.")
        return square

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def __add__(self, vector: Vector) -> Optional[Square]:
        """Step along the vector. Falling off the board gives None rather than an out-of-bounds square."""
        square = Square(self.file + vector.files, self.rank + vector.ranks)
        return square if square.is_within_bounds() else None

    def __str__(self) -> str:
        return self.to_algebraic()


def all_squares() -> list[Square]:
    """a1, b1, ..., h1, a2, ..., h8"""
    return [Square(file, rank) for rank in RANKS for file in range(1, len(FILES) + 1)]
