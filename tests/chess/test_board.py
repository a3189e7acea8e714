"""Unit tests for /src/chess/board.py"""

from typing import Callable

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingObstacle, CastlingSide
from src.chess.moves import Move
from src.chess.pieces import Color, Figure, Piece
from src.chess.square import Square
from src.core.config import STARTING_POSITION_FEN
from src.core.exceptions import InvalidPositionError

EMPTY_FEN = "/".join(["8"] * 8)


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def targets(board: Board, square: str, is_capture: bool) -> set[str]:
    return {target.to_algebraic() for target in board.moves_from(sq(square), is_capture)}


def board_of(**pieces: str) -> Board:
    """board_of(e1="K", e8="k") -> Board with a white king on e1 and a black king on e8"""
    return Board({sq(square): Piece.from_fen(char) for square, char in pieces.items()})


@pytest.fixture
def board_with_single_piece() -> Callable[[Figure, Color, str], Board]:
    """Call the inner function that will be returned with the desired figure, color, and square"""

    def _create_board(figure: Figure, color: Color, square_name: str = "d4") -> Board:
        return Board({sq(square_name): Piece(color, figure)})

    return _create_board


# -- CREATION LOGIC --
def test_starting_position() -> None:
    board = Board.starting_position()
    assert len(board.position) == 32
    assert board.piece(sq("e1")) == Piece(Color.WHITE, Figure.KING)
    assert board.piece(sq("d8")) == Piece(Color.BLACK, Figure.QUEEN)
    assert board.piece(sq("e4")) is None
    assert board.en_passant is None
    assert board.touched == frozenset()


def test_fen_roundtrip() -> None:
    fen = "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1"
    assert Board.from_fen(fen).to_fen() == fen
    assert Board.starting_position().to_fen() == STARTING_POSITION_FEN
    assert Board.from_fen(EMPTY_FEN) == Board.empty()


@pytest.mark.parametrize(
    "fen",
    [
        "8/8/8/8/8/8/8",  # 7 ranks
        "8/8/8/8/8/8/8/7",  # rank too short
        "8/8/8/8/8/8/8/9",  # rank too long
        "8/8/8/8/8/8/8/x7",  # no such piece
        "k7/8/8/8/8/8/8/k7",  # two black kings
        "8/8/8/8/8/8/8/\u00b2K5k",  # superscript two: only ASCII digits count empty squares
    ],
)
def test_invalid_fen(fen: str) -> None:
    with pytest.raises(InvalidPositionError):
        _ = Board.from_fen(fen)


def test_piece_off_the_board() -> None:
    with pytest.raises(InvalidPositionError):
        _ = Board({Square(9, 1): Piece(Color.WHITE, Figure.ROOK)})


def test_board_is_immutable() -> None:
    """The position can not be changed from the outside, not even through the dict it was created from"""
    position = {sq("e1"): Piece(Color.WHITE, Figure.KING)}
    board = Board(position)
    position[sq("e2")] = Piece(Color.WHITE, Figure.PAWN)
    assert board.piece(sq("e2")) is None
    with pytest.raises(TypeError):
        board.position[sq("e2")] = Piece(Color.WHITE, Figure.PAWN)  # type: ignore[index]


def test_boards_compare_by_value() -> None:
    assert board_of(e1="K", e8="k") == board_of(e8="k", e1="K")
    assert board_of(e1="K", e8="k") != board_of(e1="K", d8="k")


def test_equal_boards_hash_equal() -> None:
    board = Board.starting_position()
    assert hash(board) == hash(Board.from_fen(STARTING_POSITION_FEN))
    assert len({board, Board.starting_position(), Board.empty()}) == 2

    after = board.mutated(sq("e2"), sq("e4"))
    assert after is not None
    assert after not in {board}


# --- MOVE GENERATION ON AN EMPTY BOARD ---
def test_rook_on_empty_board(board_with_single_piece: Callable[..., Board]) -> None:
    """A rook on d4 reaches all of the d-file and the 4th rank minus d4 itself"""
    board = board_with_single_piece(Figure.ROOK, Color.WHITE, "d4")
    expected = {f"d{rank}" for rank in range(1, 9)} | {f"{file}4" for file in "abcdefgh"}
    assert targets(board, "d4", is_capture=False) == expected - {"d4"}
    # nothing to take
    assert targets(board, "d4", is_capture=True) == set()


@pytest.mark.parametrize(
    "figure, square, expected_count",
    [
        (Figure.BISHOP, "d4", 13),
        (Figure.BISHOP, "a1", 7),
        (Figure.QUEEN, "d4", 27),
        (Figure.KNIGHT, "d4", 8),
        (Figure.KNIGHT, "h8", 2),
        (Figure.KING, "d4", 8),
        (Figure.KING, "h1", 3),
    ],
)
def test_move_counts_on_empty_board(
    board_with_single_piece: Callable[..., Board],
    figure: Figure,
    square: str,
    expected_count: int,
) -> None:
    board = board_with_single_piece(figure, Color.BLACK, square)
    assert len(board.moves_from(sq(square), is_capture=False)) == expected_count


def test_no_piece_no_moves() -> None:
    assert Board.empty().moves_from(sq("e4"), is_capture=False) == []


# --- OBSTRUCTION AND CAPTURES ---
def test_sliding_piece_stops_before_blocker() -> None:
    """Moving: up to, not including, the first occupied square (whatever color)"""
    board = board_of(d2="R", d5="p", d1="N")
    assert targets(board, "d2", is_capture=False) == {"d3", "d4"} | {
        f"{file}2" for file in "abcefgh"
    }


def test_sliding_piece_captures_first_opponent() -> None:
    """Capturing: exactly the first occupied square of a path, if it holds an opponent's piece"""
    board = board_of(d2="R", d5="p", d7="p", d1="N", b2="p")
    assert targets(board, "d2", is_capture=True) == {"d5", "b2"}


def test_knight_jumps_over_pieces() -> None:
    board = Board.starting_position()
    assert targets(board, "g1", is_capture=False) == {"f3", "h3"}
    assert targets(board, "g1", is_capture=True) == set()


def test_king_does_not_capture_own_piece() -> None:
    board = board_of(e1="K", e2="P", d2="p")
    assert targets(board, "e1", is_capture=True) == {"d2"}
    assert "e2" not in targets(board, "e1", is_capture=False)


# --- PAWNS ---
def test_pawn_double_step_from_start() -> None:
    board = Board.starting_position()
    assert targets(board, "e2", is_capture=False) == {"e3", "e4"}
    assert targets(board, "e7", is_capture=False) == {"e6", "e5"}


def test_pawn_double_step_needs_both_squares_empty() -> None:
    assert targets(board_of(e2="P", e3="n"), "e2", is_capture=False) == set()
    assert targets(board_of(e2="P", e4="n"), "e2", is_capture=False) == {"e3"}


def test_pawn_double_step_lost_once_its_square_was_touched() -> None:
    """Something moved away from (or onto) e2 earlier: the pawn standing there now can only step once"""
    board = Board({sq("e2"): Piece(Color.WHITE, Figure.PAWN)}, touched=frozenset({sq("e2")}))
    assert targets(board, "e2", is_capture=False) == {"e3"}


def test_pawn_does_not_capture_forward() -> None:
    board = board_of(e4="P", e5="p")
    assert targets(board, "e4", is_capture=False) == set()
    assert targets(board, "e4", is_capture=True) == set()


def test_pawn_captures_diagonally() -> None:
    board = board_of(e4="P", d5="p", f5="P")
    assert targets(board, "e4", is_capture=True) == {"d5"}


def test_en_passant_capture_target() -> None:
    """Black just played d7-d5: the white pawn on e5 may capture on d6"""
    board = Board(
        {
            sq("e5"): Piece(Color.WHITE, Figure.PAWN),
            sq("d5"): Piece(Color.BLACK, Figure.PAWN),
        },
        en_passant=sq("d5"),
    )
    assert targets(board, "e5", is_capture=True) == {"d6"}


def test_no_en_passant_without_marker() -> None:
    board = board_of(e5="P", d5="p")
    assert targets(board, "e5", is_capture=True) == set()


def test_en_passant_only_for_adjacent_pawns() -> None:
    board = Board(
        {
            sq("c5"): Piece(Color.WHITE, Figure.PAWN),
            sq("e5"): Piece(Color.WHITE, Figure.KNIGHT),
            sq("d5"): Piece(Color.BLACK, Figure.PAWN),
        },
        en_passant=sq("d5"),
    )
    assert targets(board, "c5", is_capture=True) == {"d6"}
    assert "d6" not in targets(board, "e5", is_capture=True)


# --- CHECK ---
def test_is_check() -> None:
    assert board_of(e1="K", e8="r").is_check(Color.WHITE)
    assert not board_of(e1="K", e8="r", e4="P").is_check(Color.WHITE)
    assert board_of(e1="K", d2="p").is_check(Color.WHITE)
    assert not board_of(e1="K", e2="p").is_check(Color.WHITE)
    assert board_of(e8="k", f6="N").is_check(Color.BLACK)


def test_no_king_no_check() -> None:
    assert not board_of(a7="P", a8="r").is_check(Color.WHITE)


# --- MUTATIONS ---
def test_mutation_returns_new_board() -> None:
    board = Board.starting_position()
    new_board = board.mutated(sq("e2"), sq("e4"))
    assert new_board is not None
    assert new_board.piece(sq("e4")) == Piece(Color.WHITE, Figure.PAWN)
    assert new_board.piece(sq("e2")) is None
    assert new_board.touched == frozenset({sq("e2"), sq("e4")})
    # the original is left alone
    assert board == Board.starting_position()


def test_mutation_without_piece_is_rejected() -> None:
    assert Board.starting_position().mutated(sq("e4"), sq("e5")) is None


def test_double_step_sets_en_passant_for_one_ply() -> None:
    board = Board.starting_position().mutated(sq("e2"), sq("e4"))
    assert board is not None
    assert board.en_passant == sq("e4")
    board = board.mutated(sq("g8"), sq("f6"))
    assert board is not None
    assert board.en_passant is None


def test_en_passant_removes_captured_pawn() -> None:
    board = Board(
        {
            sq("e1"): Piece(Color.WHITE, Figure.KING),
            sq("e8"): Piece(Color.BLACK, Figure.KING),
            sq("e5"): Piece(Color.WHITE, Figure.PAWN),
            sq("d5"): Piece(Color.BLACK, Figure.PAWN),
        },
        en_passant=sq("d5"),
    )
    new_board = board.mutated(sq("e5"), sq("d6"))
    assert new_board is not None
    assert new_board.piece(sq("d6")) == Piece(Color.WHITE, Figure.PAWN)
    assert new_board.piece(sq("d5")) is None
    assert len(new_board.position) == 3


def test_moving_into_check_is_rejected() -> None:
    board = board_of(e1="K", d8="r")
    assert board.mutated(sq("e1"), sq("d1")) is None
    assert board.mutated(sq("e1"), sq("f1")) is not None


def test_pinned_piece_cannot_move() -> None:
    """The bishop on e2 shields its king from the rook on e8"""
    board = board_of(e1="K", e2="B", e8="r")
    assert board.mutated(sq("e2"), sq("d3")) is None


def test_valid_promotion() -> None:
    board = board_of(a7="P")
    new_board = board.mutated(sq("a7"), sq("a8"), Figure.QUEEN)
    assert new_board is not None
    assert new_board.piece(sq("a8")) == Piece(Color.WHITE, Figure.QUEEN)


@pytest.mark.parametrize(
    "origin, target, promotion",
    [
        ("a7", "a8", Figure.KING),  # no promoting into a king
        ("a7", "a8", Figure.PAWN),  # ... or a pawn
        ("b6", "b7", Figure.QUEEN),  # not on the last rank
        ("c7", "c8", Figure.QUEEN),  # not a pawn
    ],
)
def test_invalid_promotion(origin: str, target: str, promotion: Figure) -> None:
    board = board_of(a7="P", b6="P", c7="R")
    assert board.mutated(sq(origin), sq(target), promotion) is None


# --- LEGAL MOVES / END OF GAME ---
def test_legal_moves_in_starting_position() -> None:
    board = Board.starting_position()
    assert len(board.legal_moves(Color.WHITE)) == 20
    assert len(board.legal_moves(Color.BLACK)) == 20


def test_legal_moves_expand_promotions() -> None:
    board = board_of(a7="P", h1="K", h8="k")
    promotions = [move for move in board.legal_moves(Color.WHITE) if move.origin == sq("a7")]
    assert {move.promotion for move in promotions} == {
        Figure.KNIGHT,
        Figure.BISHOP,
        Figure.ROOK,
        Figure.QUEEN,
    }
    assert all(move == Move(sq("a7"), sq("a8"), move.promotion) for move in promotions)


def test_candidate_origins() -> None:
    board = board_of(a1="R", h1="R", e8="k")
    rook = Piece(Color.WHITE, Figure.ROOK)
    assert set(board.candidate_origins(rook, sq("d1"), is_capture=False)) == {sq("a1"), sq("h1")}
    assert board.candidate_origins(rook, sq("d1"), is_capture=False, file=1) == [sq("a1")]
    assert board.candidate_origins(rook, sq("d1"), is_capture=True) == []


def test_checkmate() -> None:
    """Back rank mate"""
    board = board_of(g1="K", f2="P", g2="P", h2="P", a1="r", g8="k")
    assert board.is_check(Color.WHITE)
    assert board.is_checkmate(Color.WHITE)
    assert not board.is_stalemate(Color.WHITE)


def test_check_but_not_mate() -> None:
    board = board_of(g1="K", f2="P", h2="P", a1="r", g8="k")
    assert board.is_check(Color.WHITE)
    assert not board.is_checkmate(Color.WHITE)


def test_stalemate() -> None:
    board = board_of(e6="K", e7="P", e8="k")
    assert not board.is_check(Color.BLACK)
    assert board.is_stalemate(Color.BLACK)
    assert not board.is_checkmate(Color.BLACK)


# --- CASTLING ---
@pytest.fixture
def castling_board() -> Board:
    """Only the Kings and the Rooks. Ready to perform any castling move (if allowed)."""
    return board_of(e1="K", a1="R", h1="R", e8="k", a8="r", h8="r")


@pytest.mark.parametrize(
    "color, side, king, rook",
    [
        (Color.WHITE, CastlingSide.KING_SIDE, "g1", "f1"),
        (Color.WHITE, CastlingSide.QUEEN_SIDE, "c1", "d1"),
        (Color.BLACK, CastlingSide.KING_SIDE, "g8", "f8"),
        (Color.BLACK, CastlingSide.QUEEN_SIDE, "c8", "d8"),
    ],
)
def test_castling(
    castling_board: Board, color: Color, side: CastlingSide, king: str, rook: str
) -> None:
    assert castling_board.castling_obstacle(color, side) is None
    board = castling_board.castled(color, side)
    assert board is not None
    assert board.piece(sq(king)) == Piece(color, Figure.KING)
    assert board.piece(sq(rook)) == Piece(color, Figure.ROOK)
    assert len(board.position) == 6


def test_cannot_castle_out_of_check(castling_board: Board) -> None:
    board = Board({**castling_board.position, sq("e4"): Piece(Color.BLACK, Figure.QUEEN)})
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) == CastlingObstacle.IN_CHECK
    assert board.castled(Color.WHITE, CastlingSide.KING_SIDE) is None


def test_cannot_castle_through_pieces(castling_board: Board) -> None:
    board = Board({**castling_board.position, sq("b1"): Piece(Color.WHITE, Figure.KNIGHT)})
    assert board.castling_obstacle(Color.WHITE, CastlingSide.QUEEN_SIDE) == CastlingObstacle.OBSTRUCTED
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) is None


@pytest.mark.parametrize("attacked_square", ["f4", "g4"])
def test_cannot_castle_through_or_into_attack(castling_board: Board, attacked_square: str) -> None:
    """A black rook on the f-file attacks the square the king passes, on the g-file the square it lands on"""
    board = Board(
        {**castling_board.position, sq(attacked_square): Piece(Color.BLACK, Figure.ROOK)}
    )
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) is None
    assert board.castled(Color.WHITE, CastlingSide.KING_SIDE) is None


def test_attacked_rook_does_not_stop_castling(castling_board: Board) -> None:
    """Only the king's squares matter: the b1 square may be attacked on the queen side"""
    board = Board({**castling_board.position, sq("b4"): Piece(Color.BLACK, Figure.ROOK)})
    assert board.castled(Color.WHITE, CastlingSide.QUEEN_SIDE) is not None


def test_cannot_castle_after_king_moved(castling_board: Board) -> None:
    """King went e1-e2-e1: back on its square, but touched"""
    board = castling_board.mutated(sq("e1"), sq("e2"))
    assert board is not None
    board = board.mutated(sq("e2"), sq("e1"))
    assert board is not None
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) == CastlingObstacle.KING_MOVED
    assert board.castled(Color.WHITE, CastlingSide.QUEEN_SIDE) is None


def test_cannot_castle_after_rook_moved(castling_board: Board) -> None:
    board = castling_board.mutated(sq("h1"), sq("h2"))
    assert board is not None
    board = board.mutated(sq("h2"), sq("h1"))
    assert board is not None
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) == CastlingObstacle.ROOK_MOVED
    assert board.castling_obstacle(Color.WHITE, CastlingSide.QUEEN_SIDE) is None


def test_missing_rook() -> None:
    board = board_of(e1="K", a1="R", e8="k")
    assert (
        board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE)
        == CastlingObstacle.ROOK_OUT_OF_POSITION
    )


def test_new_rook_on_touched_square_cannot_castle() -> None:
    """A rook arriving on h1 later (the original one was captured there) does not bring back castling"""
    board = Board(
        {
            sq("e1"): Piece(Color.WHITE, Figure.KING),
            sq("h1"): Piece(Color.WHITE, Figure.ROOK),
            sq("e8"): Piece(Color.BLACK, Figure.KING),
        },
        touched=frozenset({sq("h1"), sq("h3")}),
    )
    assert board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE) == CastlingObstacle.ROOK_MOVED


def test_missing_king() -> None:
    board = board_of(d1="K", h1="R")
    assert (
        board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE)
        == CastlingObstacle.KING_OUT_OF_POSITION
    )


def test_displaced_king_is_reported_before_obstruction() -> None:
    """King standing on f1, in between its own starting square and the rook"""
    board = board_of(f1="K", h1="R", e8="k")
    assert (
        board.castling_obstacle(Color.WHITE, CastlingSide.KING_SIDE)
        == CastlingObstacle.KING_OUT_OF_POSITION
    )
