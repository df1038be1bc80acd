"""The board: which piece (by id) stands on which square. Also knows how the armies are set up at the start."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from src.blitz.pieces import Piece
from src.blitz.square import BOARD_DIMENSIONS, Square
from src.core.shared_types import PieceType, Side

Row = tuple[Optional[str], ...]

BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


@dataclass(frozen=True)
class SideSetup:
    """Where one army starts: the back rank (read from the a-file onwards) and the rank of the pawns"""

    side: Side
    main_rank: int
    pawn_rank: int
    back_rank: tuple[PieceType, ...] = field(default=BACK_RANK)

    def pieces(self) -> list[Piece]:
        back = [
            Piece.create(piece_type, self.side, Square(self.main_rank, file))
            for file, piece_type in enumerate(self.back_rank)
        ]
        pawns = [
            Piece.create(PieceType.PAWN, self.side, Square(self.pawn_rank, file))
            for file in range(BOARD_DIMENSIONS[1])
        ]
        return back + pawns


# The French (White) start at the bottom, the British (Black) at the top.
STANDARD_SETUP: tuple[SideSetup, ...] = (
    SideSetup(Side.WHITE, main_rank=0, pawn_rank=1),
    SideSetup(Side.BLACK, main_rank=7, pawn_rank=6),
)


def setup_pieces(setups: tuple[SideSetup, ...] = STANDARD_SETUP) -> dict[str, Piece]:
    """Piece map of a fresh game. Insertion order: side by side, back rank first, then pawns."""
    return {piece.id: piece for setup in setups for piece in setup.pieces()}


@dataclass(frozen=True)
class Board:
    grid: tuple[Row, ...]

    @classmethod
    def empty(cls) -> Board:
        ranks, files = BOARD_DIMENSIONS
        return cls(tuple((None,) * files for _ in range(ranks)))

    @classmethod
    def from_pieces(cls, pieces: Mapping[str, Piece]) -> Board:
        """Occupancy grid built from the piece map: every piece id lands on the cell of its position."""
        ranks, files = BOARD_DIMENSIONS
        cells: list[list[Optional[str]]] = [[None] * files for _ in range(ranks)]
        for piece in pieces.values():
            cells[piece.position.rank][piece.position.file] = piece.id
        return cls(tuple(tuple(row) for row in cells))

    def piece_id(self, square: Square) -> Optional[str]:
        if not square.is_within_bounds():
            return None
        return self.grid[square.rank][square.file]

    def with_move(self, from_square: Square, to_square: Square) -> Board:
        """
        A new board where the content of from_square replaced whatever stood on to_square.
        (this board is left untouched)
        """
        moving_id = self.piece_id(from_square)
        cells = [list(row) for row in self.grid]
        cells[from_square.rank][from_square.file] = None
        cells[to_square.rank][to_square.file] = moving_id
        return Board(tuple(tuple(row) for row in cells))

    def occupied_squares(self) -> list[Square]:
        return [
            Square(rank, file)
            for rank, row in enumerate(self.grid)
            for file, cell in enumerate(row)
            if cell is not None
        ]

    def to_rows(self) -> list[list[Optional[str]]]:
        """Plain nested lists (rank 0 first), for serialization"""
        return [list(row) for row in self.grid]
