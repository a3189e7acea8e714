"""Orchestration of communication from the request/response models to the business logic (and the reverse direction)."""

import logging
from typing import Optional

from src.api.models import (
    GameResponse,
    LegalMovesResponse,
    MoveRequest,
    NewGameRequest,
    ReplayRequest,
)
from src.chess.game import Game
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.exceptions import GameStateError
from src.core.models import GameModel
from src.core.shared_types import Color, Status

logger = logging.getLogger(__name__)


class ChessService:
    """
    Orchestration of layers for a single chess game.

    Holds the game in memory. Calls must be made one at a time, the Game is not meant to be moved concurrently.
    """

    def __init__(self, game: Optional[Game] = None) -> None:
        self.game = game

    # -- Request logic ---
    def new_game(self, request: NewGameRequest) -> GameResponse:
        """Start over with the requested position."""
        self.game = self._create_game(request)
        logger.info("New game started: %s", self.game.describe())
        return self._create_game_response(self.game)

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Play one move. Errors propagate untouched, the game stays as it was."""
        game = self._fetch_game()
        game.move(request.notation)
        return self._create_game_response(game)

    def replay(self, request: ReplayRequest) -> GameResponse:
        """
        Replay a transcript from the requested starting position.
        ----
        All or nothing: if any move is rejected, the previous game (if any) is kept.
        """
        game = self._create_game(request)
        for notation in request.moves:
            game.move(notation)
        self.game = game
        return self._create_game_response(game)

    def export_game(self) -> GameModel:
        """Transcript of the current game: starting placement + moves + status."""
        return self._fetch_game().to_model()

    def load_game(self, model: GameModel) -> GameResponse:
        """Rebuild a game from an exported transcript by replaying it."""
        self.game = Game.from_model(model)
        return self._create_game_response(self.game)

    def get_game_state(self) -> GameResponse:
        return self._create_game_response(self._fetch_game())

    def legal_moves(self) -> LegalMovesResponse:
        game = self._fetch_game()
        return LegalMovesResponse(
            color=Color(game.color_to_move.name.lower()),
            legal_moves=game.legal_moves(),
        )

    # -- Helpers ---
    def _fetch_game(self) -> Game:
        if self.game is None:
            raise GameStateError("No game in progress. Start a new game first.")
        return self.game

    @staticmethod
    def _create_game(request: NewGameRequest) -> Game:
        if request.position is not None:
            position = {
                Square.from_algebraic(square): Piece.from_fen(piece)
                for square, piece in request.position.items()
            }
            return Game.from_position(position)
        if request.starting_fen is not None:
            return Game.from_fen(request.starting_fen)
        return Game.new_game()

    @staticmethod
    def _create_game_response(game: Game) -> GameResponse:
        victor = game.victor
        return GameResponse(
            position={
                square.to_algebraic(): piece.to_fen()
                for square, piece in game.board.position.items()
            },
            move_history=list(game.history),
            status=Status(game.status.name.lower()),
            color_to_move=Color(game.color_to_move.name.lower()),
            victor=Color(victor.name.lower()) if victor else None,
            is_game_over=game.is_game_over,
            is_check=game.is_check,
            description=game.describe(),
        )
