"""Unit tests for /src/blitz/moves.py"""

from itertools import product
from typing import Callable
from unittest.mock import patch

import pytest

import src.blitz.moves as mv
from src.blitz.moves import (
    DIAGONALS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    STRAIGHTS,
    CandidateMovesFn,
    Move,
    Vector,
    candidate_bishop_moves,
    candidate_king_moves,
    candidate_knight_moves,
    candidate_pawn_moves,
    candidate_queen_moves,
    candidate_rook_moves,
    generate_moves,
    occupancy,
    raycasting_move,
    single_step_move,
)
from src.blitz.game import GameState
from src.blitz.pieces import Piece
from src.blitz.square import Square
from src.core.shared_types import PieceType, Side

StateFactory = Callable[..., GameState]

W = Side.WHITE
B = Side.BLACK


def squares(*names: str) -> list[Square]:
    return [Square.from_algebraic(name) for name in names]


def lone_piece(piece_type: PieceType, side: Side, name: str) -> Piece:
    return Piece.create(piece_type, side, Square.from_algebraic(name))


# -- MOVE ENCODING ---
def test_move_transition_encoding() -> None:
    """Stored transitions are 'rank,file-rank,file'"""
    move = Move(Square(1, 4), Square(3, 4))
    assert move.to_transition() == "1,4-3,4"
    assert Move.from_transition("1,4-3,4") == move


def test_move_is_capture(place: StateFactory) -> None:
    state = place((PieceType.ROOK, W, "a1"), (PieceType.PAWN, B, "a5"))
    assert Move(Square(0, 0), Square(4, 0)).is_capture(state.board)
    assert not Move(Square(0, 0), Square(3, 0)).is_capture(state.board)


# --- MOVEMENT RULES ---
def test_raycasting_move_empty_board() -> None:
    """On an empty board, movements should only be restricted by board dimensions"""
    rook = lone_piece(PieceType.ROOK, W, "a5")
    moves = raycasting_move(rook, {}, [(0, 1), (0, -1)])
    assert len(moves) == 7
    assert all(square.rank == rook.position.rank for square in moves)

    moves = raycasting_move(rook, {}, [(1, 0), (-1, 0)])
    assert len(moves) == 7
    assert all(square.file == rook.position.file for square in moves)


def test_raycasting_move_w_enemy_blocker(place: StateFactory) -> None:
    """When running into an enemy piece, include it (capture) and stop there"""
    state = place((PieceType.ROOK, W, "d2"), (PieceType.PAWN, B, "d5"))
    rook = state.piece_at(Square.from_algebraic("d2"))
    assert rook is not None
    moves = raycasting_move(rook, occupancy(state.pieces), [(1, 0), (-1, 0)])
    assert set(moves) == set(squares("d3", "d4", "d5", "d1"))


def test_raycasting_move_w_friendly_blocker(place: StateFactory) -> None:
    """Your own piece blocks the ray, and its square is not included"""
    state = place((PieceType.BISHOP, B, "d2"), (PieceType.PAWN, B, "f4"))
    bishop = state.piece_at(Square.from_algebraic("d2"))
    assert bishop is not None
    moves = raycasting_move(bishop, occupancy(state.pieces), DIAGONALS)
    assert set(moves) == set(squares("c1", "e1", "c3", "b4", "a5", "e3"))


def test_raycasting_never_jumps_over_blockers(place: StateFactory) -> None:
    """Blockers of both colors: nothing beyond the first occupied square of a ray"""
    state = place(
        (PieceType.ROOK, W, "a5"),
        (PieceType.PAWN, W, "a7"),
        (PieceType.PAWN, B, "a2"),
        (PieceType.PAWN, B, "a1"),
    )
    rook = state.piece_at(Square.from_algebraic("a5"))
    assert rook is not None
    moves = raycasting_move(rook, occupancy(state.pieces), [(1, 0), (-1, 0)])
    assert moves == squares("a6", "a4", "a3", "a2")


def test_single_step_move_out_of_bounds() -> None:
    """Attempt to move your piece outside of the board: Should return empty list"""
    knight = lone_piece(PieceType.KNIGHT, W, "d4")
    assert single_step_move(knight, {}, [(42, 23)]) == []


def test_single_step_w_enemy_and_friendly_blockers(place: StateFactory) -> None:
    state = place(
        (PieceType.KING, W, "d4"),
        (PieceType.PAWN, B, "d5"),
        (PieceType.PAWN, W, "d3"),
    )
    king = state.piece_at(Square.from_algebraic("d4"))
    assert king is not None
    moves = single_step_move(king, occupancy(state.pieces), [(1, 0), (-1, 0)])
    assert moves == squares("d5")


def test_candidate_knight_moves_wiring() -> None:
    """Check the knight uses the single step rule with the fixed list of L-shaped jumps"""
    knight = lone_piece(PieceType.KNIGHT, W, "d4")
    with patch.object(mv, "single_step_move") as mock_single_step:
        candidate_knight_moves(knight, {})
        mock_single_step.assert_called_once_with(knight, {}, KNIGHT_DELTAS)

    assert len(candidate_knight_moves(knight, {})) == 8


def test_candidate_king_moves_wiring() -> None:
    king = lone_piece(PieceType.KING, W, "d4")
    with patch.object(mv, "single_step_move") as mock_single_step:
        candidate_king_moves(king, {})
        mock_single_step.assert_called_once_with(king, {}, KING_DELTAS)

    assert len(candidate_king_moves(king, {})) == 8


@pytest.mark.parametrize(
    "rule, directions, expected_count",
    [
        (candidate_bishop_moves, DIAGONALS, 13),
        (candidate_rook_moves, STRAIGHTS, 14),
        (candidate_queen_moves, DIAGONALS + STRAIGHTS, 27),
    ],
)
def test_sliding_piece_wiring(
    rule: CandidateMovesFn, directions: list[Vector], expected_count: int
) -> None:
    """Sliding pieces ray-cast along their direction set (queen: diagonals first, then straights)"""
    piece = lone_piece(PieceType.QUEEN, W, "d4")
    with patch.object(mv, "raycasting_move") as mock_raycasting:
        rule(piece, {})
        mock_raycasting.assert_called_once_with(piece, {}, directions)

    assert len(rule(piece, {})) == expected_count


def test_knight_in_the_corner_scenario() -> None:
    """Knight on (0,1) on an empty board: only 3 of the 8 jumps stay on the board"""
    knight = Piece.create(PieceType.KNIGHT, W, Square(0, 1))
    moves = generate_moves(knight, {knight.id: knight})
    assert moves == [Square(1, 3), Square(2, 0), Square(2, 2)]


def test_knight_own_piece_blocks_single_jump(place: StateFactory) -> None:
    state = place((PieceType.KNIGHT, W, "b1"), (PieceType.PAWN, W, "d2"))
    knight = state.piece_at(Square.from_algebraic("b1"))
    assert knight is not None
    assert set(generate_moves(knight, state.pieces)) == set(squares("a3", "c3"))


def test_king_may_step_next_to_enemy_king(place: StateFactory) -> None:
    """No check awareness"""
    state = place((PieceType.KING, W, "e4"), (PieceType.KING, B, "e6"))
    king = state.piece_at(Square.from_algebraic("e4"))
    assert king is not None
    assert Square.from_algebraic("e5") in generate_moves(king, state.pieces)


# --- PAWNS ---
def test_pawn_double_step_scenario() -> None:
    """White pawn on (1,4) that has not moved, no blockers"""
    pawn = Piece.create(PieceType.PAWN, W, Square(1, 4))
    assert generate_moves(pawn, {pawn.id: pawn}) == [Square(2, 4), Square(3, 4)]


def test_black_pawn_moves_down_the_board() -> None:
    pawn = Piece.create(PieceType.PAWN, B, Square(6, 4))
    assert generate_moves(pawn, {pawn.id: pawn}) == [Square(5, 4), Square(4, 4)]


def test_pawn_without_double_step_after_moving(place: StateFactory) -> None:
    state = place((PieceType.PAWN, W, "e3"), moved=True)
    pawn = state.piece_at(Square.from_algebraic("e3"))
    assert pawn is not None
    assert candidate_pawn_moves(pawn, occupancy(state.pieces)) == squares("e4")


def test_pawn_blocked_in_front(place: StateFactory) -> None:
    """A piece right in front blocks both the single and the double step, of either color"""
    for blocker_side in (W, B):
        state = place(
            (PieceType.PAWN, W, "e2"), (PieceType.KNIGHT, blocker_side, "e3")
        )
        pawn = state.piece_at(Square.from_algebraic("e2"))
        assert pawn is not None
        assert generate_moves(pawn, state.pieces) == []


def test_pawn_double_step_blocked_on_target(place: StateFactory) -> None:
    state = place((PieceType.PAWN, W, "e2"), (PieceType.PAWN, B, "e4"))
    pawn = state.piece_at(Square.from_algebraic("e2"))
    assert pawn is not None
    assert generate_moves(pawn, state.pieces) == squares("e3")


def test_pawn_takes_diagonally(place: StateFactory) -> None:
    """Only opponent pieces on the forward diagonals can be taken. Empty diagonals give nothing (no en passant)."""
    state = place(
        (PieceType.PAWN, W, "d4"),
        (PieceType.PAWN, B, "e5"),
        (PieceType.PAWN, B, "c5"),
        (PieceType.PAWN, B, "e3"),
        moved=True,
    )
    pawn = state.piece_at(Square.from_algebraic("d4"))
    assert pawn is not None
    assert generate_moves(pawn, state.pieces) == squares("d5", "e5", "c5")


def test_pawn_does_not_take_own_piece(place: StateFactory) -> None:
    state = place((PieceType.PAWN, W, "d4"), (PieceType.PAWN, W, "e5"), moved=True)
    pawn = state.piece_at(Square.from_algebraic("d4"))
    assert pawn is not None
    assert generate_moves(pawn, state.pieces) == squares("d5")


def test_pawn_on_last_rank_stays_on_board() -> None:
    """No promotion: a pawn on the far rank simply has nowhere to go"""
    pawn = Piece.create(PieceType.PAWN, W, Square(7, 0))
    assert generate_moves(pawn, {pawn.id: pawn}) == []


# --- PROPERTIES ---
@pytest.mark.parametrize(
    "piece_type, side, rank, file",
    [
        (piece_type, side, rank, file)
        for piece_type in PieceType
        for side in Side
        for rank, file in product((0, 3, 7), (0, 4, 7))
    ],
)
def test_destinations_stay_on_board(
    piece_type: PieceType, side: Side, rank: int, file: int
) -> None:
    piece = Piece.create(piece_type, side, Square(rank, file))
    moves = generate_moves(piece, {piece.id: piece})
    assert all(square.is_within_bounds() for square in moves)
    assert piece.position not in moves
