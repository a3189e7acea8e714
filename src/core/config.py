"""
Configuration constants.

Nothing is read from the environment: the engine has no outside surface to configure.
"""

import logging

# Piece placement of the standard starting position (first field of a FEN string)
STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

DEFAULT_LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
