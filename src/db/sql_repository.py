"""Implementation of (Game)Repository using SQLAlchemy"""

from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import GameModel
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store a game and return the stored data + newly created game ID."""
        new_id = uuid4()
        game_db = DBGame(
            id=new_id,
            moves=game.moves,
            notations=game.notations,
            winner=game.winner,
            white_strategy=game.white_strategy,
            black_strategy=game.black_strategy,
            evaluation=game.evaluation,
        )
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def list_games(self) -> list[tuple[UUID, GameModel]]:
        """All stored games, oldest first."""
        query = select(DBGame).order_by(DBGame.created_at)
        return [
            (game_db.id, self._to_model(game_db)) for game_db in self.db.scalars(query)
        ]

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            moves=list(game_db.moves),
            notations=list(game_db.notations),
            winner=game_db.winner,
            white_strategy=game_db.white_strategy,
            black_strategy=game_db.black_strategy,
            evaluation=game_db.evaluation,
            created_at=game_db.created_at,
        )
