"""Defines the pieces and what they are worth"""

from __future__ import annotations

from dataclasses import dataclass, replace

from src.blitz.square import Square
from src.core.shared_types import PieceType, Side

# Canonical material table: evaluation is computed with these values.
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
    PieceType.KING: 100,
}

# The "army power" display used a table ten times larger (pawn=10 ... queen=90). Same proportions.
DISPLAY_SCALE = 10

PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.PAWN: "",
    # NOTE "K" is taken by the king
    PieceType.KNIGHT: "N",
    PieceType.BISHOP: "B",
    PieceType.ROOK: "R",
    PieceType.QUEEN: "Q",
    PieceType.KING: "K",
}


def piece_id(side: Side, piece_type: PieceType, square: Square) -> str:
    """Identifiers are derived from the starting square, so they stay unique for a whole game."""
    return f"{side}-{piece_type}-{square.rank}-{square.file}"


@dataclass(frozen=True)
class Piece:
    id: str
    type: PieceType
    side: Side
    position: Square
    has_moved: bool = False

    @classmethod
    def create(cls, piece_type: PieceType, side: Side, square: Square) -> Piece:
        return cls(piece_id(side, piece_type, square), piece_type, side, square)

    @property
    def value(self) -> int:
        return PIECE_VALUES[self.type]

    @property
    def letter(self) -> str:
        return PIECE_LETTERS[self.type]

    def moved_to(self, square: Square) -> Piece:
        """A new record for the same piece (same id) standing on the given square."""
        return replace(self, position=square, has_moved=True)

    def is_opponent_of(self, other: Piece) -> bool:
        return self.side != other.side
