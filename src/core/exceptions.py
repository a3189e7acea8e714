"""
Exceptions shared across layers.

Domain code raises these, the service layer lets them propagate, so a caller only ever has to catch `GameError`.
"""


class GameError(Exception):
    """Base class for everything the chess package raises on purpose."""


class InvalidSquareError(GameError):
    """A square name outside a1-h8."""


class InvalidPositionError(GameError):
    """A starting layout that cannot be turned into a Board."""


class InvalidRequestError(GameError):
    """Raised by the request validators (not a ValueError, so pydantic lets it through unwrapped)."""


class GameStateError(GameError):
    """The game is not in a state where the request makes sense."""


# --- MOVE REJECTIONS ---
class MoveError(GameError):
    """
    A move was rejected.
    ----

    Always carries the notation exactly as the caller typed it, plus a short reason. The game is left untouched.
    """

    def __init__(self, notation: str, reason: str = "") -> None:
        self.notation = notation
        self.reason = reason
        message = f"Move {notation!r} rejected"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnparseableNotationError(MoveError):
    """Input does not match any recognized notation."""


class AmbiguousMoveError(MoveError):
    """More than one piece could make the move. Needs a file and/or rank to disambiguate."""


class NoLegalCandidateError(MoveError):
    """No piece of the stated figure can reach the target square."""


class IllegalCastleError(MoveError):
    """In check, path obstructed or attacked, king or rook moved or missing."""


class IllegalPromotionError(MoveError):
    """Missing promotion, promotion of a non-pawn, promotion off the last rank, or promotion to king/pawn."""


class SelfCheckError(MoveError):
    """The move would leave the mover's own king in check."""


class PunctuationMismatchError(MoveError):
    """Declared check/checkmate does not match the resulting position."""


class GameOverError(MoveError):
    """No moves are accepted after checkmate, stalemate, resignation or draw."""
