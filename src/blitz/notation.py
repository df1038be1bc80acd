"""Short algebraic-like notation for the battlefield log. No disambiguation, no check marks."""

from src.blitz.pieces import Piece
from src.blitz.square import Square


def format_move(piece: Piece, destination: Square, is_capture: bool) -> str:
    """'e4', 'Nc3', 'Bxf7' ..."""
    capture_mark = "x" if is_capture else ""
    return f"{piece.letter}{capture_mark}{destination.to_algebraic()}"
