"""
The game state and its transitions.

Every transition is a pure function: old GameState in, new GameState out. A published state is never modified,
so whoever holds a reference to an earlier state (the renderer, the log, the archive) keeps a consistent snapshot.

Control flow of a half-move:
1. an agent picks a (from, to) pair from `legal_moves()` (or gets one from the remote model)
2. `apply_move()` validates the occupancy of the source square and produces the next state
3. the notation is recorded in the history and the material evaluation recomputed
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from src.blitz.board import STANDARD_SETUP, Board, SideSetup, setup_pieces
from src.blitz.moves import Move, generate_moves
from src.blitz.notation import format_move
from src.blitz.pieces import DISPLAY_SCALE, Piece
from src.blitz.square import Square
from src.core.shared_types import Outcome, PieceType, Side, Status

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AcceptedMove:
    """History entry: snapshot of a move once it has been played"""

    from_square: Square
    to_square: Square
    piece_id: str
    captured_piece_id: Optional[str]
    notation: str
    timestamp: datetime = field(default_factory=utc_now, compare=False)

    @property
    def is_capture(self) -> bool:
        return self.captured_piece_id is not None

    def to_move(self) -> Move:
        return Move(self.from_square, self.to_square)


@dataclass(frozen=True)
class GameState:
    board: Board
    pieces: dict[str, Piece]
    turn: Side
    history: tuple[AcceptedMove, ...] = ()
    is_game_over: bool = False
    winner: Optional[Outcome] = None
    evaluation: int = 0

    @property
    def status(self) -> Status:
        if self.is_game_over:
            return Status.GAME_OVER
        if not self.history:
            return Status.SETUP
        return Status.PLAYING

    def piece_at(self, square: Square) -> Optional[Piece]:
        piece_id = self.board.piece_id(square)
        return self.pieces[piece_id] if piece_id is not None else None

    def side_pieces(self, side: Side) -> list[Piece]:
        return [piece for piece in self.pieces.values() if piece.side == side]

    def army_power(self, side: Side, scale: int = 1) -> int:
        """Total material of one side. Use scale=DISPLAY_SCALE for the legacy display numbers."""
        return scale * sum(piece.value for piece in self.side_pieces(side))

    def display_power(self, side: Side) -> int:
        return self.army_power(side, scale=DISPLAY_SCALE)

    def notations(self) -> list[str]:
        return [move.notation for move in self.history]

    def transitions(self) -> list[Move]:
        """The inputs of every transition so far. Feeding them to `replay()` rebuilds this state."""
        return [move.to_move() for move in self.history]


def evaluate(pieces: Mapping[str, Piece]) -> int:
    """Material balance. Positive favors White."""
    return sum(
        piece.value if piece.side == Side.WHITE else -piece.value
        for piece in pieces.values()
    )


def new_game(setups: tuple[SideSetup, ...] = STANDARD_SETUP) -> GameState:
    """Fresh game: both armies on their starting ranks, White to move."""
    pieces = setup_pieces(setups)
    return GameState(
        board=Board.from_pieces(pieces),
        pieces=pieces,
        turn=Side.WHITE,
        evaluation=evaluate(pieces),
    )


def legal_moves(state: GameState) -> list[Move]:
    """
    Every pseudo-legal move of the side to move.
    ----

    Pieces are visited in the insertion order of the piece map, and each piece's destinations in the order
    the movement rules enumerate them.
    """
    return [
        Move(piece.position, destination)
        for piece in state.side_pieces(state.turn)
        for destination in generate_moves(piece, state.pieces)
    ]


def apply_move(state: GameState, from_square: Square, to_square: Square) -> GameState:
    """
    Attempt to make a move
    -----

    The move is silently ignored (the same state is returned) if:
    * the game is already over
    * either square lies off the board, or both are the same square
    * there is no piece on from_square, or it does not belong to the side to move

    NOTE the destination is not checked against the movement rules. Whatever stands on it gets removed,
    even a piece of the moving side. Taking your own king still ends the game, with the moving side as winner.
    """
    if state.is_game_over:
        return state
    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        return state
    if from_square == to_square:
        return state

    moving = state.piece_at(from_square)
    if moving is None or moving.side != state.turn:
        logger.debug(
            "Ignoring move %s -> %s for %s", from_square, to_square, state.turn
        )
        return state

    captured = state.piece_at(to_square)
    pieces = dict(state.pieces)
    if captured is not None:
        del pieces[captured.id]
    pieces[moving.id] = moving.moved_to(to_square)

    accepted_move = AcceptedMove(
        from_square=from_square,
        to_square=to_square,
        piece_id=moving.id,
        captured_piece_id=captured.id if captured else None,
        notation=format_move(moving, to_square, captured is not None),
    )

    # Taking the king ends the game. Nothing else does (no check/mate detection).
    king_taken = captured is not None and captured.type == PieceType.KING

    new_state = GameState(
        board=state.board.with_move(from_square, to_square),
        pieces=pieces,
        turn=state.turn.opponent,
        history=state.history + (accepted_move,),
        is_game_over=king_taken,
        winner=Outcome.victory(moving.side) if king_taken else None,
        evaluation=evaluate(pieces),
    )
    logger.debug("%s plays %s", moving.side, accepted_move.notation)
    if king_taken:
        logger.info(
            "King captured by %s after %d half-moves",
            moving.side,
            len(new_state.history),
        )
    return new_state


def declare_draw(state: GameState) -> GameState:
    """The side to move has no legal moves: the game ends in a draw."""
    if state.is_game_over:
        return state
    return replace(state, is_game_over=True, winner=Outcome.DRAW)


def replay(
    moves: Iterable[Move], setups: tuple[SideSetup, ...] = STANDARD_SETUP
) -> GameState:
    """Rebuild a game from the inputs of its transitions"""
    state = new_game(setups)
    for move in moves:
        state = apply_move(state, move.from_square, move.to_square)
    return state
