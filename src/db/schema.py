"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    """A finished game. The moves are the inputs of its transitions, so the game can be replayed."""

    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    moves: Mapped[list[str]] = mapped_column(JSON, default=list)
    notations: Mapped[list[str]] = mapped_column(JSON, default=list)
    winner: Mapped[Optional[str]]
    white_strategy: Mapped[str]
    black_strategy: Mapped[str]
    evaluation: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
