"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Self

from src.chess.pieces import Color
from src.chess.square import Square


class CastlingSide(Enum):
    """Values are the notation of the castle"""

    KING_SIDE = "O-O"
    QUEEN_SIDE = "O-O-O"


class CastlingObstacle(StrEnum):
    """Why a castle got refused. Values read as the tail of an error message."""

    IN_CHECK = "cannot castle out of check"
    OBSTRUCTED = "pieces stand between king and rook"
    KING_OUT_OF_POSITION = "king is not on its starting square"
    ROOK_OUT_OF_POSITION = "rook is not on its starting square"
    KING_MOVED = "king has moved before"
    ROOK_MOVED = "rook has moved before"
    PATH_ATTACKED = "king would pass through or land on an attacked square"


def squares_between_on_rank(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same rank

    Needed for checking if you can still castle (the Board will check which of those are empty etc.)
    """
    if from_square.rank != to_square.rank:
        raise ValueError(
            f"squares_between_on_rank requires both squares to lie on the same rank. \n from: {from_square}\n to:{to_square}"
        )

    step = 1 if to_square.file > from_square.file else -1
    return [
        Square(file, from_square.rank)
        for file in range(from_square.file + step, to_square.file, step)
    ]


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: The rook always lands on the square the king passes through.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    @property
    def king_path(self) -> list[Square]:
        """Every square the king steps on, one at a time, ending on its destination"""
        return squares_between_on_rank(self.king_from, self.king_to) + [self.king_to]

    @property
    def between(self) -> list[Square]:
        """Squares that must be empty"""
        return squares_between_on_rank(self.king_from, self.rook_from)


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    (Color.WHITE, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    (Color.BLACK, CastlingSide.KING_SIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    (Color.BLACK, CastlingSide.QUEEN_SIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}
