"""
Algebraic notation
----

Two way mapping between move text ("Nf3", "exd5", "O-O", "a8=Q+", "1-0") and structured move intents.

Kept in three steps:
1. Parsing: text -> intent. Pure grammar, no board needed. The origin square of a move is still unknown.
2. Resolving: intent + Board -> origin square. Which piece is meant? Uses the same candidate filter as move generation.
3. Formatting: resolved move + Board -> canonical intent -> text, with minimal disambiguation and computed punctuation.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.chess.board import Board
from src.chess.castling import CastlingSide
from src.chess.moves import Move
from src.chess.pieces import FIGURE_TO_LETTER, LETTER_TO_FIGURE, Color, Figure, Piece
from src.chess.square import FILES, RANKS, Square
from src.core.exceptions import (
    AmbiguousMoveError,
    NoLegalCandidateError,
    SelfCheckError,
    UnparseableNotationError,
)

CAPTURE_MARKER = "x"
PROMOTION_MARKER = "="

# The grammar accepts a pawn/king as promotion figure, so that the Game can reject it as an illegal promotion
PROMOTION_LETTERS: dict[str, Figure] = LETTER_TO_FIGURE | {"P": Figure.PAWN}
PROMOTION_TO_LETTER: dict[Figure, str] = {
    figure: letter for letter, figure in PROMOTION_LETTERS.items()
}

_FILE = f"[{FILES}]"
_RANK = f"[{''.join(str(rank) for rank in RANKS)}]"
MOVE_PATTERN = re.compile(
    rf"(?P<figure>[{''.join(LETTER_TO_FIGURE)}])?"
    rf"(?P<file>{_FILE})?"
    rf"(?P<rank>{_RANK})?"
    rf"(?P<capture>{CAPTURE_MARKER})?"
    rf"(?P<target>{_FILE}{_RANK})"
    rf"(?:{PROMOTION_MARKER}(?P<promotion>[{''.join(PROMOTION_LETTERS)}]))?"
)


class GameEnd(Enum):
    """Terminal tokens: the game ends without a move on the board"""

    WHITE_WINS = "1-0"
    BLACK_WINS = "0-1"
    DRAW = "1/2-1/2"

    @property
    def victor(self) -> Optional[Color]:
        if self == GameEnd.WHITE_WINS:
            return Color.WHITE
        if self == GameEnd.BLACK_WINS:
            return Color.BLACK
        return None


class Punctuation(Enum):
    CHECK = "+"
    CHECKMATE = "#"


@dataclass(frozen=True)
class Castle:
    side: CastlingSide
    punctuation: Optional[Punctuation] = None


@dataclass(frozen=True)
class Translation:
    """
    A piece moving from one square to another, as far as the notation tells.

    NOTE: files and ranks are numbers (a = 1), just like on a Square.
    """

    figure: Figure
    target: Square
    is_capture: bool = False
    disambiguation_file: Optional[int] = None
    disambiguation_rank: Optional[int] = None
    promotion: Optional[Figure] = None
    punctuation: Optional[Punctuation] = None


Intent = GameEnd | Castle | Translation


# --- PARSING ---
def parse_notation(notation: str) -> Intent:
    """
    Grammar
    ----
    * end:    1-0 | 0-1 | 1/2-1/2
    * castle: O-O | O-O-O, optionally followed by punctuation
    * move:   [Figure][file][rank][x]square[=Figure], optionally followed by punctuation
    * punctuation: + (check) | # (checkmate)

    Raises UnparseableNotationError for anything else.
    """
    try:
        return GameEnd(notation)
    except ValueError:
        pass

    body, punctuation = _split_punctuation(notation)
    try:
        return Castle(CastlingSide(body), punctuation)
    except ValueError:
        pass

    match = MOVE_PATTERN.fullmatch(body)
    if match is None:
        raise UnparseableNotationError(notation, "not algebraic notation")

    figure_letter = match["figure"]
    file = match["file"]
    rank = match["rank"]
    promotion = match["promotion"]
    return Translation(
        figure=LETTER_TO_FIGURE[figure_letter] if figure_letter else Figure.PAWN,
        target=Square.from_algebraic(match["target"]),
        is_capture=match["capture"] is not None,
        disambiguation_file=FILES.index(file) + 1 if file else None,
        disambiguation_rank=int(rank) if rank else None,
        promotion=PROMOTION_LETTERS[promotion] if promotion else None,
        punctuation=punctuation,
    )


def _split_punctuation(notation: str) -> tuple[str, Optional[Punctuation]]:
    """Only a single trailing '+' or '#' is punctuation"""
    for punctuation in Punctuation:
        if notation.endswith(punctuation.value):
            return notation[: -len(punctuation.value)], punctuation
    return notation, None


# --- FORMATTING ---
def format_notation(intent: Intent) -> str:
    """Inverse of `parse_notation()`"""
    if isinstance(intent, GameEnd):
        return intent.value

    punctuation = intent.punctuation.value if intent.punctuation else ""
    if isinstance(intent, Castle):
        return f"{intent.side.value}{punctuation}"

    figure = FIGURE_TO_LETTER[intent.figure]
    file = FILES[intent.disambiguation_file - 1] if intent.disambiguation_file else ""
    rank = str(intent.disambiguation_rank) if intent.disambiguation_rank else ""
    capture = CAPTURE_MARKER if intent.is_capture else ""
    promotion = (
        f"{PROMOTION_MARKER}{PROMOTION_TO_LETTER[intent.promotion]}"
        if intent.promotion
        else ""
    )
    return f"{figure}{file}{rank}{capture}{intent.target}{promotion}{punctuation}"


def translation_for(
    board: Board, move: Move, punctuation: Optional[Punctuation] = None
) -> Translation:
    """
    The canonical intent of a resolved move on the board *before* it is made.
    ----

    Disambiguation is added only when another piece of the same kind could legally go to the same square:
    the file if that is enough, otherwise the rank, otherwise both. Pawn captures always name the file they come from.
    """
    piece = board.piece(move.origin)
    if piece is None:
        raise ValueError(f"No piece on {move.origin} to move.")

    is_en_passant = (
        piece.figure == Figure.PAWN
        and move.origin.file != move.target.file
        and board.piece(move.target) is None
    )
    is_capture = board.piece(move.target) is not None or is_en_passant

    file: Optional[int] = None
    rank: Optional[int] = None
    if piece.figure == Figure.PAWN:
        if is_capture:
            file = move.origin.file
    else:
        rivals = [
            square
            for square in board.candidate_origins(piece, move.target, is_capture)
            if square != move.origin and board.mutated(square, move.target) is not None
        ]
        if rivals:
            if all(square.file != move.origin.file for square in rivals):
                file = move.origin.file
            elif all(square.rank != move.origin.rank for square in rivals):
                rank = move.origin.rank
            else:
                file, rank = move.origin.file, move.origin.rank

    return Translation(
        figure=piece.figure,
        target=move.target,
        is_capture=is_capture,
        disambiguation_file=file,
        disambiguation_rank=rank,
        promotion=move.promotion,
        punctuation=punctuation,
    )


def punctuation_for(board: Board, color: Color) -> Optional[Punctuation]:
    """What the last move did to the player with the 'color' pieces (the one to move next on this board)"""
    if not board.is_check(color):
        return None
    if board.has_legal_move(color):
        return Punctuation.CHECK
    return Punctuation.CHECKMATE


# --- RESOLVING AGAINST THE BOARD ---
def resolve_origin(
    board: Board, color: Color, translation: Translation, notation: str
) -> Square:
    """
    Find the one square the translation moves from.
    ----

    1. Candidates: pieces of the right figure and color, on the disambiguation file/rank (if given),
       that reach the target moving or capturing (whichever the notation says).
    2. None? Nothing can make this move.
    3. More than one? Keep those that do not leave your own king in check. Exactly one should survive.

    The original notation is only used for error messages.
    """
    piece = Piece(color, translation.figure)
    candidates = board.candidate_origins(
        piece,
        translation.target,
        translation.is_capture,
        file=translation.disambiguation_file,
        rank=translation.disambiguation_rank,
    )
    action = "capture on" if translation.is_capture else "move to"
    piece_name = f"{color.name.lower()} {translation.figure.name.lower()}"
    if not candidates:
        raise NoLegalCandidateError(
            notation, f"no {piece_name} can {action} {translation.target}"
        )
    if len(candidates) == 1:
        return candidates[0]

    legal = [
        square
        for square in candidates
        if board.mutated(square, translation.target) is not None
    ]
    if len(legal) == 1:
        return legal[0]
    if not legal:
        raise SelfCheckError(
            notation, f"every {piece_name} that can {action} {translation.target} is pinned"
        )
    origins = ", ".join(str(square) for square in sorted(legal, key=lambda sq: (sq.file, sq.rank)))
    raise AmbiguousMoveError(
        notation, f"{piece_name}s on {origins} can all {action} {translation.target}"
    )
