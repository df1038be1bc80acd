"""
Geometry/Base movement rules

Key idea: Use strategy pattern to define the pseudo-legal move sets for each piece type.

There is no check awareness: a move only has to respect the board bounds and the occupancy of the target squares.
The order of the direction lists below matters. Agents pick moves at random from these lists, so the enumeration
order has to be fixed for a seeded game to be reproducible.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Protocol, Self

from src.blitz.pieces import Piece
from src.blitz.square import Square
from src.core.shared_types import PieceType, Side

Vector = tuple[int, int]  # (delta rank, delta file)
Occupancy = Mapping[Square, Piece]


class Board(Protocol):
    """Just the part of the board a Move needs"""

    def piece_id(self, square: Square) -> str | None: ...


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square

    @classmethod
    def from_transition(cls, transition: str) -> Self:
        """
        Compact encoding used to store the inputs of a transition:
        "1,4-3,4" moves whatever stands on (rank 1, file 4) to (rank 3, file 4)
        """
        from_part, to_part = transition.split("-")
        from_rank, from_file = (int(value) for value in from_part.split(","))
        to_rank, to_file = (int(value) for value in to_part.split(","))
        return cls(Square(from_rank, from_file), Square(to_rank, to_file))

    def to_transition(self) -> str:
        return (
            f"{self.from_square.rank},{self.from_square.file}"
            f"-{self.to_square.rank},{self.to_square.file}"
        )

    def is_capture(self, board: Board) -> bool:
        return board.piece_id(self.to_square) is not None


def occupancy(pieces: Mapping[str, Piece]) -> dict[Square, Piece]:
    """Index the piece map by square"""
    return {piece.position: piece for piece in pieces.values()}


# --- DIRECTIONS ---
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
DIAGONALS: list[Vector] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
STRAIGHTS: list[Vector] = [(-1, 0), (1, 0), (0, -1), (0, 1)]
KING_DELTAS: list[Vector] = [
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
]


def pawn_direction(side: Side) -> int:
    """White pawns move up the board (increasing rank), black pawns move down."""
    return 1 if side == Side.WHITE else -1


# --- MOVEMENT RULES ---
def raycasting_move(
    piece: Piece, board: Occupancy, directions: list[Vector]
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    The first occupied square ends the ray. It is only included if the opponent stands there (a capture).
    """
    squares: list[Square] = []
    for dr, df in directions:
        target_square = piece.position
        while True:
            target_square = target_square.offset(dr, df)
            if not target_square.is_within_bounds():
                break

            blocker = board.get(target_square)
            if blocker is not None:
                if blocker.is_opponent_of(piece):
                    squares.append(target_square)
                break

            squares.append(target_square)
    return squares


def single_step_move(
    piece: Piece, board: Occupancy, deltas: list[Vector]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump to a square"""
    squares: list[Square] = []
    for dr, df in deltas:
        target_square = piece.position.offset(dr, df)
        if not target_square.is_within_bounds():
            continue

        occupant = board.get(target_square)
        if occupant is None or occupant.is_opponent_of(piece):
            squares.append(target_square)
    return squares


def candidate_pawn_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square only.
    - may move by two on its first move. Only considered when the single step was possible, so both squares are empty.
    - takes diagonally forward, and only when an opponent's piece stands there (no en passant).
    """
    squares: list[Square] = []
    forward = pawn_direction(piece.side)

    single_step = piece.position.offset(forward, 0)
    if single_step.is_within_bounds() and single_step not in board:
        squares.append(single_step)
        double_step = piece.position.offset(2 * forward, 0)
        if (
            not piece.has_moved
            and double_step.is_within_bounds()
            and double_step not in board
        ):
            squares.append(double_step)

    for df in (1, -1):
        target_square = piece.position.offset(forward, df)
        if not target_square.is_within_bounds():
            continue
        occupant = board.get(target_square)
        if occupant is not None and occupant.is_opponent_of(piece):
            squares.append(target_square)
    return squares


def candidate_knight_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """Knights always move such that |delta_rank| + |delta_file| = 3"""
    return single_step_move(piece, board, KNIGHT_DELTAS)


def candidate_bishop_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    return raycasting_move(piece, board, DIAGONALS)


def candidate_rook_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(piece, board, STRAIGHTS)


def candidate_queen_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """
    The Queen combines the bishop moves (diagonal movement) and the rook moves (horizontal + vertical movements)
    """
    return raycasting_move(piece, board, DIAGONALS + STRAIGHTS)


def candidate_king_moves(piece: Piece, board: Occupancy) -> list[Square]:
    """
    The king can move by a single square at the time.

    NOTE: no castling, and the king may step next to the enemy king or into any attacked square.
    """
    return single_step_move(piece, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Piece, Occupancy], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def generate_moves(piece: Piece, pieces: Mapping[str, Piece]) -> list[Square]:
    """Destination squares for a single piece, given every piece on the board."""
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(piece, occupancy(pieces))
