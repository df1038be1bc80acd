"""
Type definitions used across layers
"""

from __future__ import annotations

from enum import StrEnum


class Status(StrEnum):
    """Setup -> Playing -> Game over. Game over is terminal until a restart."""

    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game over"


class Side(StrEnum):
    # White moves first (the French), Black moves second (the British)
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> Side:
        return Side.BLACK if self == Side.WHITE else Side.WHITE


class Outcome(StrEnum):
    WHITE = "white"
    BLACK = "black"
    DRAW = "draw"

    @classmethod
    def victory(cls, side: Side) -> Outcome:
        return cls(side.value)


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Strategy(StrEnum):
    """
    Agent selection per side.

    NOTE: MINIMAX and AGGRESSIVE are labels only. They play the same capture-biased random policy as RANDOM.
    """

    RANDOM = "Random"
    MINIMAX = "Minimax"
    AGGRESSIVE = "Aggressive"
    GEMINI = "Gemini (GM)"

    @property
    def is_remote(self) -> bool:
        return self == Strategy.GEMINI
