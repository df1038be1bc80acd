"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.blitz.board import Board
from src.blitz.game import GameState, evaluate
from src.blitz.pieces import Piece
from src.blitz.square import Square
from src.core.shared_types import PieceType, Side
from src.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

PieceSpec = tuple[PieceType, Side, str]
StateFactory = Callable[..., GameState]


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def place() -> StateFactory:
    """
    Build a position from scratch: place((PieceType.ROOK, Side.WHITE, "a1"), ..., turn=Side.WHITE)

    Squares are given in algebraic notation to keep the tests readable.
    """

    def _place(
        *specs: PieceSpec, turn: Side = Side.WHITE, moved: bool = False
    ) -> GameState:
        pieces: dict[str, Piece] = {}
        for piece_type, side, algebraic in specs:
            piece = Piece.create(piece_type, side, Square.from_algebraic(algebraic))
            if moved:
                piece = Piece(piece.id, piece.type, piece.side, piece.position, True)
            pieces[piece.id] = piece
        return GameState(
            board=Board.from_pieces(pieces),
            pieces=pieces,
            turn=turn,
            evaluation=evaluate(pieces),
        )

    return _place
