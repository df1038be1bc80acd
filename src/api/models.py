"""Requests and Response models"""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Outcome, PieceType, Side, Status, Strategy

PieceId = str


# --- REQUEST MODELS ---
class StrategyRequest(BaseModel):
    side: Side
    strategy: Strategy

    @field_validator("strategy", mode="before")
    @classmethod
    def validate_strategy(cls, value: Any) -> Any:
        """Accept the display value ('Gemini (GM)') as well as the member name ('gemini', 'GEMINI')."""
        if isinstance(value, Strategy):
            return value
        if not isinstance(value, str):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a strategy.")

        if value in Strategy._value2member_map_:
            return Strategy(value)
        name = value.strip().upper()
        if name in Strategy.__members__:
            return Strategy[name]
        raise InvalidRequestError(
            f"Unknown strategy: {value!r}. Pick one from {', '.join(s.value for s in Strategy)}"
        )


# --- RESPONSE MODELS ---
class PieceResponse(BaseModel):
    id: PieceId
    type: PieceType
    side: Side
    position: tuple[int, int]
    has_moved: bool


class BoardStateResponse(BaseModel):
    """A position and how it came about"""

    status: Status
    turn: Side
    board: list[list[Optional[PieceId]]]
    pieces: list[PieceResponse]
    history: list[str]
    evaluation: int
    army_power: dict[Side, int]
    is_game_over: bool
    winner: Optional[Outcome]


class GameStateResponse(BoardStateResponse):
    """Everything the renderer needs to draw the board and the side panels"""

    epoch: int
    commentary: str
    paused: bool
    strategies: dict[Side, Strategy]


class ReplayResponse(BoardStateResponse):
    """An archived game rebuilt move by move"""

    game_id: UUID


class ArchivedGameResponse(BaseModel):
    game_id: UUID
    moves: list[str]
    notations: list[str]
    winner: Optional[str]
    white_strategy: str
    black_strategy: str
    evaluation: int
