"""
Move selection for the side to move.

The remote strategy's answer is fetched by the service layer (it is the only part that waits on the network) and
handed in here as a raw recommendation. Everything else is decided locally and synchronously, so a game never
stalls on a slow or broken remote call.
"""

import logging
import random
from collections.abc import Mapping
from typing import Any, Optional

from src.blitz.game import GameState, legal_moves
from src.blitz.moves import Move
from src.blitz.square import Square
from src.core.shared_types import Strategy

logger = logging.getLogger(__name__)

# Probability of picking a capture when at least one is available.
CAPTURE_BIAS = 0.6


def parse_recommendation(raw: Optional[Mapping[str, Any]]) -> Optional[Move]:
    """
    A recommendation is well-formed if it has both endpoints, each a [rank, file] pair on the board.

    ex. {"from": [1, 4], "to": [3, 4]}
    """
    if not isinstance(raw, Mapping):
        return None
    squares: list[Square] = []
    for key in ("from", "to"):
        square = _parse_square(raw.get(key))
        if square is None:
            return None
        squares.append(square)
    return Move(squares[0], squares[1])


def _parse_square(value: Any) -> Optional[Square]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    # NOTE bool is a subclass of int
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        return None
    square = Square(value[0], value[1])
    return square if square.is_within_bounds() else None


def capture_biased_move(
    state: GameState,
    rng: Optional[random.Random] = None,
    capture_bias: float = CAPTURE_BIAS,
) -> Optional[Move]:
    """
    The local policy
    ----

    1. enumerate every legal move of the side to move
    2. if some of them are captures: with probability `capture_bias` pick one of the captures (uniformly)
    3. otherwise pick uniformly among all legal moves

    Returns None if the side to move has no legal moves at all.
    """
    rng = rng or random.Random()
    moves = legal_moves(state)
    if not moves:
        return None

    captures = [move for move in moves if move.is_capture(state.board)]
    if captures and rng.random() > 1 - capture_bias:
        return rng.choice(captures)
    return rng.choice(moves)


def select_move(
    state: GameState,
    strategy: Strategy,
    recommendation: Optional[Mapping[str, Any]] = None,
    rng: Optional[random.Random] = None,
    capture_bias: float = CAPTURE_BIAS,
) -> Optional[Move]:
    """
    Choose the next move for the side to move.

    The remote recommendation is taken verbatim when the strategy is remote and the answer is well-formed.
    (it is NOT checked against the legal moves, `apply_move` ignores it if the source square is not ours)
    MINIMAX and AGGRESSIVE have no search of their own: they use the local policy like RANDOM.
    """
    if strategy.is_remote:
        recommended = parse_recommendation(recommendation)
        if recommended is not None:
            return recommended
        logger.debug("No usable recommendation for %s, playing locally", state.turn)

    return capture_biased_move(state, rng, capture_bias)
