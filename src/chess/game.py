"""
The Game class is the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn:
parse the notation, find the piece that is meant, let the Board judge the move, check the declared punctuation,
and only then commit the new Board and the canonical notation of the move.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, StrEnum, auto
from typing import Mapping, Optional, Self

from src.chess.board import Board
from src.chess.castling import CastlingObstacle, CastlingSide
from src.chess.moves import Move
from src.chess.notation import (
    Castle,
    GameEnd,
    Punctuation,
    Translation,
    format_notation,
    parse_notation,
    punctuation_for,
    resolve_origin,
    translation_for,
)
from src.chess.pieces import PROMOTION_OPTIONS, Color, Figure, Piece
from src.chess.square import Square
from src.core.exceptions import (
    GameOverError,
    GameStateError,
    IllegalCastleError,
    IllegalPromotionError,
    MoveError,
    PunctuationMismatchError,
    SelfCheckError,
)
from src.core.models import GameModel

logger = logging.getLogger(__name__)


class Status(Enum):
    IN_PROGRESS = auto()
    CHECKMATE = auto()
    STALEMATE = auto()
    RESIGNED = auto()
    DRAW = auto()


class PromotionViolation(StrEnum):
    MISSING = "a pawn reaching the last rank must promote"
    NOT_A_PAWN = "only pawns can promote"
    NOT_ON_LAST_RANK = "pawns only promote on reaching the last rank"
    INVALID_FIGURE = "pawns promote to a knight, bishop, rook or queen"


class PunctuationViolation(StrEnum):
    NOT_CHECK = "move does not give check"
    IS_CHECKMATE = "move gives checkmate, not just check"
    NOT_CHECKMATE = "move does not give checkmate"


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    starting_board: Board
    board: Board
    history: list[str] = field(default_factory=list)  # canonical notation, one entry per ply
    status: Status = Status.IN_PROGRESS

    @classmethod
    def new_game(cls) -> Self:
        """Standard starting position, white to move."""
        return cls._from_board(Board.starting_position())

    @classmethod
    def from_position(cls, position: Mapping[Square, Piece]) -> Self:
        """Any arrangement of pieces. White moves first."""
        return cls._from_board(Board(position))

    @classmethod
    def from_fen(cls, placement: str) -> Self:
        """Arrangement given as the piece placement part of a FEN string. White moves first."""
        return cls._from_board(Board.from_fen(placement))

    @classmethod
    def _from_board(cls, board: Board) -> Self:
        game = cls(starting_board=board, board=board)
        # a custom position might already be decided
        game._update_game_status()
        return game

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has: replay the moves."""
        status_name = model.status.replace(" ", "_").upper()
        if status_name not in Status.__members__:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join([status.name.lower() for status in Status])}"
            )

        game = cls.from_fen(model.starting_fen)
        for notation in model.moves:
            game.move(notation)

        if game.status != Status[status_name]:
            raise GameStateError(
                f"Replaying the moves ends in status {game.status.name.lower()!r}, not {model.status!r}"
            )
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            starting_fen=self.starting_board.to_fen(),
            moves=list(self.history),
            status=self.status.name.lower(),
        )

    # --- QUERIES ---
    @property
    def color_to_move(self) -> Color:
        """Derived from the number of plies played, never stored."""
        return Color.WHITE if len(self.history) % 2 == 0 else Color.BLACK

    @property
    def is_game_over(self) -> bool:
        return self.status != Status.IN_PROGRESS

    @property
    def is_check(self) -> bool:
        return self.board.is_check(self.color_to_move)

    @property
    def victor(self) -> Optional[Color]:
        """
        Checkmate: the player to move just got mated, so the opponent won.
        Resignation: the terminal token says who won.
        """
        if self.status == Status.CHECKMATE:
            return self.color_to_move.opposite
        if self.status == Status.RESIGNED:
            return GameEnd(self.history[-1]).victor
        return None

    def describe(self) -> str:
        """One line summary of the state of the game"""
        victor = self.victor
        if victor is not None:
            return f"{victor.name.capitalize()} wins."
        if self.is_game_over:
            return "Draw."
        return f"{self.color_to_move.name.capitalize()} to move."

    def legal_moves(self) -> list[str]:
        """
        Every move the player to move can make, in canonical notation.
        ----
        These can be used to display to the user, or to feed a bot.
        """
        if self.is_game_over:
            return []

        color = self.color_to_move
        notations: list[str] = []
        for move in self.board.legal_moves(color):
            after = self.board.mutated(move.origin, move.target, move.promotion)
            assert after is not None
            punctuation = punctuation_for(after, color.opposite)
            notations.append(
                format_notation(translation_for(self.board, move, punctuation))
            )

        for side in CastlingSide:
            after = self.board.castled(color, side)
            if after is not None:
                notations.append(
                    format_notation(Castle(side, punctuation_for(after, color.opposite)))
                )
        return notations

    # --- MAKING A MOVE ---
    def move(self, notation: str) -> None:
        """
        Attempt to make a move
        -----

        1. parse the notation. Terminal tokens (1-0, 0-1, 1/2-1/2) end the game right away.
        2. castle, or resolve the piece that moves and let the Board produce the new position
        3. enforce the promotion rules
        4. check the declared punctuation against the new position (omitted punctuation gets filled in)
        5. commit the Board, append the canonical notation, update the status

        Any MoveError leaves the game exactly as it was.
        """
        try:
            self._play(notation)
        except MoveError as error:
            logger.info("Rejected %r: %s", notation, error.reason)
            raise

    def _play(self, notation: str) -> None:
        if self.is_game_over:
            raise GameOverError(notation, f"the game is over. {self.describe()}")

        intent = parse_notation(notation)
        if isinstance(intent, GameEnd):
            self._end_game(intent)
            return

        color = self.color_to_move
        if isinstance(intent, Castle):
            new_board = self._castle(intent, color, notation)
            punctuation = punctuation_for(new_board, color.opposite)
            canonical = Castle(intent.side, punctuation)
        else:
            move = self._resolve_translation(intent, color, notation)
            new_board = self._mutate(move, notation)
            punctuation = punctuation_for(new_board, color.opposite)
            canonical = translation_for(self.board, move, punctuation)

        self._validate_punctuation(intent.punctuation, punctuation, notation)

        # Nothing raised: commit
        self.board = new_board
        self.history.append(format_notation(canonical))
        self._update_game_status()
        logger.debug("%s played %s", color.name.lower(), self.history[-1])

    def _end_game(self, end: GameEnd) -> None:
        self.history.append(end.value)
        self._change_status(Status.DRAW if end.victor is None else Status.RESIGNED)

    def _castle(self, castle: Castle, color: Color, notation: str) -> Board:
        obstacle = self.board.castling_obstacle(color, castle.side)
        if obstacle is not None:
            raise IllegalCastleError(notation, obstacle)

        new_board = self.board.castled(color, castle.side)
        if new_board is None:
            raise IllegalCastleError(notation, CastlingObstacle.PATH_ATTACKED)
        return new_board

    def _resolve_translation(
        self, translation: Translation, color: Color, notation: str
    ) -> Move:
        origin = resolve_origin(self.board, color, translation, notation)
        self._validate_promotion(translation, color, notation)
        return Move(origin, translation.target, translation.promotion)

    def _mutate(self, move: Move, notation: str) -> Board:
        new_board = self.board.mutated(move.origin, move.target, move.promotion)
        if new_board is None:
            raise SelfCheckError(notation, "own king would be left in check")
        return new_board

    # -- PROMOTION RULE HELPERS ---
    @staticmethod
    def _validate_promotion(
        translation: Translation, color: Color, notation: str
    ) -> None:
        """
        * a pawn reaching the final rank must promote
        * only pawns promote, and only when reaching the final rank
        * only into a knight, bishop, rook or queen
        """
        promotion_rank = Piece(color, Figure.PAWN).promotion_rank
        reaches_last_rank = translation.target.rank == promotion_rank
        is_pawn = translation.figure == Figure.PAWN

        if translation.promotion is None:
            if is_pawn and reaches_last_rank:
                raise IllegalPromotionError(notation, PromotionViolation.MISSING)
            return

        if not is_pawn:
            raise IllegalPromotionError(notation, PromotionViolation.NOT_A_PAWN)
        if not reaches_last_rank:
            raise IllegalPromotionError(notation, PromotionViolation.NOT_ON_LAST_RANK)
        if translation.promotion not in PROMOTION_OPTIONS:
            raise IllegalPromotionError(notation, PromotionViolation.INVALID_FIGURE)

    # -- PUNCTUATION HELPERS ---
    @staticmethod
    def _validate_punctuation(
        declared: Optional[Punctuation],
        actual: Optional[Punctuation],
        notation: str,
    ) -> None:
        """
        Declared punctuation must match what the move actually does.
        Omitted punctuation is never an error: the canonical notation gets it filled in.
        """
        if declared is None or declared == actual:
            return
        if declared == Punctuation.CHECKMATE:
            raise PunctuationMismatchError(notation, PunctuationViolation.NOT_CHECKMATE)
        if actual == Punctuation.CHECKMATE:
            raise PunctuationMismatchError(notation, PunctuationViolation.IS_CHECKMATE)
        raise PunctuationMismatchError(notation, PunctuationViolation.NOT_CHECK)

    # --- CHECKS FOR ENDING THE GAME ---
    def _update_game_status(self) -> None:
        """Performs checks to see if game has ended and changes status accordingly.

        NOTE the history has already been updated. At this point the player to move is the opponent of the player that just moved.
        """
        color = self.color_to_move
        if self.board.is_checkmate(color):
            self._change_status(Status.CHECKMATE)
        elif self.board.is_stalemate(color):
            self._change_status(Status.STALEMATE)

    def _change_status(self, new_status: Status) -> None:
        if new_status != self.status:
            logger.info("Game status: %s -> %s", self.status.name.lower(), new_status.name.lower())
        self.status = new_status
