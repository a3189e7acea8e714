"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Status

SquareName = str
FenPiece = str

FEN_PIECES = "pnbrqkPNBRQK"


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False
    return value[0] in "abcdefgh" and value[1] in "12345678"


def _clean_notation(value: str) -> str:
    value = value.strip()
    if not value or any(character.isspace() for character in value):
        raise InvalidRequestError(
            f"Expected a single move in algebraic notation, got {value!r}."
        )
    return value


# --- REQUEST MODELS ---
class NewGameRequest(BaseModel):
    """
    Start from the standard position, unless either
    * `position`: a mapping of square names to FEN piece letters, ex. {"e1": "K", "e8": "k"}
    * `starting_fen`: the piece placement part of a FEN string
    is given (`position` wins if both are).
    """

    position: Optional[dict[SquareName, FenPiece]] = None
    starting_fen: Optional[str] = None

    @field_validator("position")
    @classmethod
    def validate_position(
        cls, value: Optional[dict[SquareName, FenPiece]]
    ) -> Optional[dict[SquareName, FenPiece]]:
        if value is None:
            return value

        for square, piece in value.items():
            if not _is_algebraic_notation(square):
                raise InvalidRequestError(
                    f"Cannot interpret {square!r} as a valid square name."
                )
            if len(piece) != 1 or piece not in FEN_PIECES:
                raise InvalidRequestError(
                    f"Cannot interpret {piece!r} on {square} as a piece. Use one of {FEN_PIECES!r}."
                )
        return value

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if len(value.split("/")) != 8:
            raise InvalidRequestError(
                "Piece placement must contain 8 slash-separated ranks."
            )
        return value


class MoveRequest(BaseModel):
    notation: str

    @field_validator("notation")
    @classmethod
    def validate_notation(cls, value: str) -> str:
        return _clean_notation(value)


class ReplayRequest(NewGameRequest):
    """Start a new game and play the whole transcript, in order."""

    moves: list[str]

    @field_validator("moves")
    @classmethod
    def validate_moves(cls, value: list[str]) -> list[str]:
        return [_clean_notation(notation) for notation in value]


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    position: dict[SquareName, FenPiece]
    move_history: list[str]
    status: Status
    color_to_move: Color
    victor: Optional[Color]
    is_game_over: bool
    is_check: bool
    description: str


class LegalMovesResponse(BaseModel):
    color: Color
    legal_moves: list[str]
