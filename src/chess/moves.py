"""
Geometry/Base movement and capturing rules

Key idea: Use strategy pattern to define the move "shapes" of each figure.
A shape is a list of paths: the squares a piece walks through, in order, along one direction.
Sliding pieces get one long path per direction, knights/kings/pawns get short ones.

Obstruction, captures and legality are handled later by the Board.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from src.chess.pieces import Figure, Piece
from src.chess.square import Square, Vector

Path = list[Square]

STRAIGHTS: list[Vector] = [Vector(1, 0), Vector(-1, 0), Vector(0, 1), Vector(0, -1)]
DIAGONALS: list[Vector] = [Vector(1, 1), Vector(-1, 1), Vector(1, -1), Vector(-1, -1)]
ALL_DIRECTIONS: list[Vector] = STRAIGHTS + DIAGONALS
KNIGHT_DELTAS: list[Vector] = [
    Vector(2, 1),
    Vector(2, -1),
    Vector(-2, 1),
    Vector(-2, -1),
    Vector(1, 2),
    Vector(1, -2),
    Vector(-1, 2),
    Vector(-1, -2),
]


@dataclass(frozen=True)
class Move:
    """A fully resolved translation: which square to which square (and what to promote into)"""

    origin: Square
    target: Square
    promotion: Optional[Figure] = None


# --- PATH BUILDING BLOCKS ---
def ray(origin: Square, direction: Vector) -> Path:
    """
    Raycasting
    -----
    Every square from the origin (exclusive) up to the edge of the board, along the direction.
    """
    path: Path = []
    square = origin + direction
    while square is not None:
        path.append(square)
        square = square + direction
    return path


def rays(origin: Square, directions: list[Vector]) -> list[Path]:
    """One path per direction. Directions that immediately leave the board give no path at all."""
    return [path for path in (ray(origin, direction) for direction in directions) if path]


def single_steps(origin: Square, deltas: list[Vector]) -> list[Path]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights: one single-square path per delta."""
    paths: list[Path] = []
    for delta in deltas:
        target = origin + delta
        if target is not None:
            paths.append([target])
    return paths


# --- MOVEMENT SHAPES ---
def pawn_move_paths(square: Square, piece: Piece) -> list[Path]:
    """
    A pawn moves a single square forward, or two when standing on its starting rank.

    NOTE: Whether the pawn actually still may double-step (its square never touched) is up to the Board.
    """
    one_forward = square + piece.forward
    if one_forward is None:
        return []
    path: Path = [one_forward]
    two_forward = one_forward + piece.forward
    if square.rank == piece.start_rank and two_forward is not None:
        path.append(two_forward)
    return [path]


def pawn_capture_paths(square: Square, piece: Piece) -> list[Path]:
    """Pawns take diagonally, one square forward."""
    forward = piece.forward.ranks
    return single_steps(square, [Vector(-1, forward), Vector(1, forward)])


def knight_paths(square: Square, piece: Piece) -> list[Path]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_steps(square, KNIGHT_DELTAS)


def bishop_paths(square: Square, piece: Piece) -> list[Path]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return rays(square, DIAGONALS)


def rook_paths(square: Square, piece: Piece) -> list[Path]:
    """Rooks move either horizontally or vertically"""
    return rays(square, STRAIGHTS)


def queen_paths(square: Square, piece: Piece) -> list[Path]:
    """The Queen combines the rook moves and the bishop moves"""
    return rays(square, ALL_DIRECTIONS)


def king_paths(square: Square, piece: Piece) -> list[Path]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special compound move (handled by the Board separately).
    """
    return single_steps(square, ALL_DIRECTIONS)


# -- STRATEGY PATTERN: MOVEMENT AND CAPTURE SHAPES ---
PathsFn = Callable[[Square, Piece], list[Path]]
MOVEMENT_PATHS: dict[Figure, PathsFn] = {
    Figure.PAWN: pawn_move_paths,
    Figure.KNIGHT: knight_paths,
    Figure.BISHOP: bishop_paths,
    Figure.ROOK: rook_paths,
    Figure.QUEEN: queen_paths,
    Figure.KING: king_paths,
}

# Only the pawn captures differently from how it moves
CAPTURE_PATHS: dict[Figure, PathsFn] = MOVEMENT_PATHS | {
    Figure.PAWN: pawn_capture_paths,
}


def piece_paths(square: Square, piece: Piece, is_capture: bool) -> list[Path]:
    rules = CAPTURE_PATHS if is_capture else MOVEMENT_PATHS
    return rules[piece.figure](square, piece)
