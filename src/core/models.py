"""
Contract for the Service layer.

Domain level data model of information representing a Game.
"""

from dataclasses import dataclass


@dataclass
class GameModel:
    """
    Transport-safe representation of a game.

    The move list doubles as a replayable transcript: starting placement + moves is enough to rebuild the Game.
    """

    starting_fen: str  # piece placement field only
    moves: list[str]
    status: str
