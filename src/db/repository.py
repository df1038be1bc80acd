"""Protocol repository (the service only knows this contract, SQLAlchemy implements it)"""

from typing import Protocol
from uuid import UUID

from src.core.models import GameModel


class GameRepository(Protocol):
    """Archive of played games"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store a game and return the stored data + newly created game ID."""
        ...

    def list_games(self) -> list[tuple[UUID, GameModel]]:
        """All stored games, oldest first."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        ...
