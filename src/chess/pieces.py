"""Defines the chess pieces: a color paired with a figure"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Self

from src.chess.square import BOARD_DIMENSIONS, Vector


class Figure(Enum):
    PAWN = auto()
    KNIGHT = auto()
    BISHOP = auto()
    ROOK = auto()
    QUEEN = auto()
    KING = auto()


class Color(Enum):
    WHITE = auto()
    BLACK = auto()

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


FEN_TO_FIGURE: dict[str, Figure] = {
    "p": Figure.PAWN,
    "n": Figure.KNIGHT,
    "b": Figure.BISHOP,
    "r": Figure.ROOK,
    "q": Figure.QUEEN,
    "k": Figure.KING,
}

FIGURE_TO_FEN: dict[Figure, str] = {value: key for key, value in FEN_TO_FIGURE.items()}

# Letters used in algebraic notation. Pawns go without one.
FIGURE_TO_LETTER: dict[Figure, str] = {
    Figure.PAWN: "",
    Figure.KNIGHT: "N",
    Figure.BISHOP: "B",
    Figure.ROOK: "R",
    Figure.QUEEN: "Q",
    Figure.KING: "K",
}

LETTER_TO_FIGURE: dict[str, Figure] = {
    letter: figure for figure, letter in FIGURE_TO_LETTER.items() if letter
}

PROMOTION_OPTIONS: tuple[Figure, ...] = (
    Figure.KNIGHT,
    Figure.BISHOP,
    Figure.ROOK,
    Figure.QUEEN,
)


@dataclass(frozen=True)
class Piece:
    color: Color
    figure: Figure

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        figure = FEN_TO_FIGURE[character.lower()]
        return cls(color, figure)

    def to_fen(self) -> str:
        return (
            FIGURE_TO_FEN[self.figure].upper()
            if self.color == Color.WHITE
            else FIGURE_TO_FEN[self.figure].lower()
        )

    @property
    def forward(self) -> Vector:
        """White moves UP the board, black moves DOWN"""
        return Vector(ranks=1 if self.color == Color.WHITE else -1)

    @property
    def start_rank(self) -> int:
        if self.figure == Figure.PAWN:
            return 2 if self.color == Color.WHITE else BOARD_DIMENSIONS[1] - 1
        return 1 if self.color == Color.WHITE else BOARD_DIMENSIONS[1]

    @property
    def promotion_rank(self) -> int:
        """The farthest rank, seen from this piece's side of the board"""
        return BOARD_DIMENSIONS[1] if self.color == Color.WHITE else 1

    def promoted_to(self, figure: Figure) -> "Piece":
        """Pieces are values: promotion hands back a new one of the same color."""
        return Piece(self.color, figure)
