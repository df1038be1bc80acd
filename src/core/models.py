"""
Boundary layer data model(s).

The Service hands finished games to the repository using the model defined here, and gets the same model back.
(Decouples the data model specific to the DB layer from the domain's GameState)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Type aliases to make GameModel easier to read
Transition = str  # "r,f-r,f" : the inputs of a single apply_move call
Notation = str


@dataclass
class GameModel:
    """Transport-safe representation of a finished game (a game abandoned by a restart is not archived)."""

    moves: list[Transition]
    notations: list[Notation]
    winner: Optional[str]
    white_strategy: str
    black_strategy: str
    evaluation: int = 0
    created_at: Optional[datetime] = field(default=None, compare=False)
