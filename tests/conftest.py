"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable

import pytest

from src.chess.game import Game


@pytest.fixture
def play() -> Callable[[Game, list[str]], Game]:
    """Call the inner function with a game and a list of notations: plays them one after the other."""

    def _play(game: Game, moves: list[str]) -> Game:
        for notation in moves:
            game.move(notation)
        return game

    return _play


@pytest.fixture
def new_game() -> Game:
    return Game.new_game()
