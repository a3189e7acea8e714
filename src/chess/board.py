"""
The Board implements all rules that affect the `position` (in chess: the configuration of pieces on the board)

A Board is an immutable snapshot. Every accepted mutation hands back a new Board, an illegal one hands back None.
Next to the pieces, a Board carries:
* the en passant square: where the pawn that just made a two-square advance landed (valid for exactly one ply)
* the touched squares: every square a piece ever left or arrived on. Castling rights and pawn double steps are
  derived from it, so there are no "has moved" flags that can drift away from the position they describe.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Self

from src.chess.castling import CASTLING_RULES, CastlingObstacle, CastlingSide
from src.chess.moves import Move, piece_paths
from src.chess.pieces import PROMOTION_OPTIONS, Color, Figure, Piece
from src.chess.square import BOARD_DIMENSIONS, FILES, RANKS, Square
from src.core.config import STARTING_POSITION_FEN
from src.core.exceptions import InvalidPositionError

logger = logging.getLogger(__name__)

# FEN digits: runs of empty squares within a rank
EMPTY_SQUARE_COUNTS = "12345678"


@dataclass(frozen=True)
class Board:
    position: Mapping[Square, Piece]
    en_passant: Optional[Square] = None
    touched: frozenset[Square] = frozenset()

    def __post_init__(self) -> None:
        # private, read-only copy
        object.__setattr__(self, "position", MappingProxyType(dict(self.position)))
        object.__setattr__(self, "touched", frozenset(self.touched))

        for square, piece in self.position.items():
            if not square.is_within_bounds():
                raise InvalidPositionError(f"{piece} placed outside the board: {square!r}")
        for color in Color:
            if len(self.locate(Piece(color, Figure.KING))) > 1:
                raise InvalidPositionError(f"More than one {color.name.lower()} king.")

    def __hash__(self) -> int:
        return hash((frozenset(self.position.items()), self.en_passant, self.touched))

    # --- CREATION ---
    @classmethod
    def empty(cls) -> Self:
        return cls({})

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.
        """
        position: dict[Square, Piece] = {}
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[1]:
            raise InvalidPositionError(f"Expected {BOARD_DIMENSIONS[1]} ranks in {fen_str!r}")

        for rank_idx, fen_one_rank in enumerate(fen_by_ranks):
            # FEN string is read from top rank (8th) to bottom rank (1st)
            rank = BOARD_DIMENSIONS[1] - rank_idx
            # ... but the first character is the a-file, so reads in normal direction
            file = 1
            for character in fen_one_rank:
                if character in EMPTY_SQUARE_COUNTS:
                    # A number denotes the amount of empty squares after each other
                    file += int(character)
                    continue
                try:
                    position[Square(file, rank)] = Piece.from_fen(character)
                except KeyError:
                    raise InvalidPositionError(
                        f"Unknown piece {character!r} in {fen_str!r}"
                    ) from None
                file += 1
            if file != BOARD_DIMENSIONS[0] + 1:
                raise InvalidPositionError(
                    f"Rank {rank} does not cover {BOARD_DIMENSIONS[0]} files in {fen_str!r}"
                )
        return cls(position)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._rank_to_fen(rank) for rank in reversed(RANKS))

    def _rank_to_fen(self, rank: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, len(FILES) + 1):
            piece = self.piece(Square(file, rank))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- LOOKUPS ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def locate(self, piece: Piece) -> list[Square]:
        return [square for square, other in self.position.items() if other == piece]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def king_square(self, color: Color) -> Optional[Square]:
        kings = self.locate(Piece(color, Figure.KING))
        return kings[0] if kings else None

    # --- MOVE GENERATION ---
    def moves_from(self, square: Square, is_capture: bool) -> list[Square]:
        """
        Reachable target squares for the piece on the square
        ----

        Walk every path of the piece's shape:
        * moving: every square up to (not including) the first occupied one
        * capturing: exactly the first occupied square, if it holds an opponent's piece.
          The one exception is en passant, where the square captured on is empty.

        NOTE: This is not yet legality. Moves may still leave your own king in check.
        """
        piece = self.piece(square)
        if piece is None:
            return []

        targets: list[Square] = []
        for path in piece_paths(square, piece, is_capture):
            if self._has_lost_double_step(square, piece, is_capture):
                path = path[:1]

            blocker = next(
                (idx for idx, target in enumerate(path) if target in self.position),
                None,
            )
            if not is_capture:
                targets.extend(path if blocker is None else path[:blocker])
            elif blocker is not None:
                if self.position[path[blocker]].color != piece.color:
                    targets.append(path[blocker])
            elif self._is_en_passant_capture(piece, path[0]):
                targets.append(path[0])
        return targets

    def _has_lost_double_step(
        self, square: Square, piece: Piece, is_capture: bool
    ) -> bool:
        """A pawn may only advance two squares if nothing ever moved from or onto its square."""
        return piece.figure == Figure.PAWN and not is_capture and square in self.touched

    def _is_en_passant_capture(self, piece: Piece, target: Square) -> bool:
        """
        The en passant rule
        ----
        Capture "through" the square the opponent's pawn just skipped over.
        """
        if piece.figure != Figure.PAWN or self.en_passant is None:
            return False
        skipped_square = self.en_passant + piece.forward
        victim = self.piece(self.en_passant)
        return target == skipped_square and victim == Piece(
            piece.color.opposite, Figure.PAWN
        )

    def candidate_origins(
        self,
        piece: Piece,
        target: Square,
        is_capture: bool,
        file: Optional[int] = None,
        rank: Optional[int] = None,
    ) -> list[Square]:
        """Squares holding this piece (optionally on the given file/rank) that can reach the target"""
        return [
            square
            for square in self.locate(piece)
            if (file is None or square.file == file)
            and (rank is None or square.rank == rank)
            and target in self.moves_from(square, is_capture)
        ]

    def _pseudo_legal_moves(self, color: Color) -> Iterator[tuple[Square, Square]]:
        for origin in self.locate_color(color):
            for is_capture in (False, True):
                for target in self.moves_from(origin, is_capture):
                    yield origin, target

    def legal_moves(self, color: Color) -> list[Move]:
        """
        Every move the player with the 'color' pieces can make, castling aside.

        Pawn pushes onto the final rank get expanded into one move per figure to promote into.
        """
        moves: list[Move] = []
        for origin, target in self._pseudo_legal_moves(color):
            if self.mutated(origin, target) is None:
                continue
            piece = self.position[origin]
            if piece.figure == Figure.PAWN and target.rank == piece.promotion_rank:
                moves.extend(Move(origin, target, figure) for figure in PROMOTION_OPTIONS)
            else:
                moves.append(Move(origin, target))
        return moves

    # --- CHECKS FOR ENDING THE GAME ---
    def is_check(self, color: Color) -> bool:
        """Is the king of this color attacked by any of the opponent's pieces?"""
        king = self.king_square(color)
        if king is None:
            return False
        return any(
            king in self.moves_from(square, is_capture=True)
            for square in self.locate_color(color.opposite)
        )

    def has_legal_move(self, color: Color) -> bool:
        """
        NOTE: Castling never needs to be considered. It is never available in check, and whenever it is
        available, the single king step towards the rook is as well.
        """
        return any(
            self.mutated(origin, target) is not None
            for origin, target in self._pseudo_legal_moves(color)
        )

    def is_checkmate(self, color: Color) -> bool:
        return self.is_check(color) and not self.has_legal_move(color)

    def is_stalemate(self, color: Color) -> bool:
        return not self.is_check(color) and not self.has_legal_move(color)

    # --- MUTATIONS ---
    def mutated(
        self, origin: Square, target: Square, promotion: Optional[Figure] = None
    ) -> Optional["Board"]:
        """
        The board after moving the piece on origin to target
        ----

        1. No piece on the origin? Rejected.
        2. Promotion requested? Only a pawn reaching its final rank, and only into a knight, bishop, rook or queen.
        3. A pawn moving diagonally onto an empty square captures en passant: remove the pawn behind the target.
        4. A pawn advancing two squares opens up en passant for the next ply. Any other move closes it.
        5. Rejected if the mover's own king ends up in check (covers pins and walking into check alike).
        """
        piece = self.piece(origin)
        if piece is None:
            return None

        if promotion is not None and not self._is_valid_promotion(
            piece, target, promotion
        ):
            return None

        position = dict(self.position)
        if (
            piece.figure == Figure.PAWN
            and origin.file != target.file
            and target not in position
        ):
            captured_square = target + -piece.forward
            if captured_square is not None:
                position.pop(captured_square, None)

        del position[origin]
        position[target] = piece.promoted_to(promotion) if promotion else piece

        is_double_step = (
            piece.figure == Figure.PAWN and abs(target.rank - origin.rank) == 2
        )
        board = Board(
            position,
            en_passant=target if is_double_step else None,
            touched=self.touched | {origin, target},
        )

        if board.is_check(piece.color):
            logger.debug(
                "%s%s leaves the %s king in check",
                origin,
                target,
                piece.color.name.lower(),
            )
            return None
        return board

    @staticmethod
    def _is_valid_promotion(piece: Piece, target: Square, promotion: Figure) -> bool:
        return (
            piece.figure == Figure.PAWN
            and target.rank == piece.promotion_rank
            and promotion in PROMOTION_OPTIONS
        )

    # --- CASTLING ---
    def castling_obstacle(
        self, color: Color, side: CastlingSide
    ) -> Optional[CastlingObstacle]:
        """
        What (if anything) forbids castling right now
        ---

        **you are allowed to castle if**

        * Both king and rook are on their starting squares, and neither ever left it.
        * You are not currently in check (you cannot castle out of a check).
        * There are no pieces in between the king and the rook.

        Whether the king passes through an attacked square is only found out by actually castling (see `castled()`).
        """
        squares = CASTLING_RULES[(color, side)]
        if self.piece(squares.king_from) != Piece(color, Figure.KING):
            return CastlingObstacle.KING_OUT_OF_POSITION
        if squares.king_from in self.touched:
            return CastlingObstacle.KING_MOVED

        if self.piece(squares.rook_from) != Piece(color, Figure.ROOK):
            return CastlingObstacle.ROOK_OUT_OF_POSITION
        if squares.rook_from in self.touched:
            return CastlingObstacle.ROOK_MOVED

        if self.is_check(color):
            return CastlingObstacle.IN_CHECK
        if any(square in self.position for square in squares.between):
            return CastlingObstacle.OBSTRUCTED
        return None

    def castled(self, color: Color, side: CastlingSide) -> Optional["Board"]:
        """
        Castling is a compound mutation: the king moves two squares towards the rook, the rook lands on the square the
        king passed through.

        The king is displaced one square at a time, so `mutated()` rejects the castle as soon as the king would stand
        on an attacked square. All or nothing: any failure gives None.
        """
        if self.castling_obstacle(color, side) is not None:
            return None

        squares = CASTLING_RULES[(color, side)]
        board = self
        king_square = squares.king_from
        for step in squares.king_path:
            next_board = board.mutated(king_square, step)
            if next_board is None:
                return None
            board, king_square = next_board, step

        return board.mutated(squares.rook_from, squares.rook_to)
