"""
Type definitions used across layers

NOTE: The domain layer has its own Color / Status enums. These are the string versions for the boundary,
the imports show which versions are used in what part of the code.
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in_progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    RESIGNED = "resigned"
    DRAW = "draw"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"
