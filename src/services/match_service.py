"""
Orchestration of a self-playing match: agents, the current game state, commentary and the archive.

The service is the single writer of the current GameState. Readers (API, renderer, logs) only ever get
already-published snapshots.
"""

import asyncio
import logging
import random
from typing import Any, Optional
from uuid import UUID

from src.api.models import (
    ArchivedGameResponse,
    GameStateResponse,
    PieceResponse,
    ReplayResponse,
)
from src.blitz.agents import capture_biased_move, select_move
from src.blitz.game import (
    AcceptedMove,
    GameState,
    apply_move,
    declare_draw,
    new_game,
    replay,
)
from src.blitz.moves import Move
from src.core.config import Settings
from src.core.exceptions import RemoteAgentError, RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Side, Strategy
from src.db.repository import GameRepository
from src.services.remote import (
    FAILED_COMMENTARY,
    OPENING_COMMENTARY,
    RESTART_COMMENTARY,
    Recommendation,
    RemoteAgent,
)

logger = logging.getLogger(__name__)


class MatchService:
    """
    Runs one game at a time
    ----

    * `play_turn()` runs one decision cycle. A cycle never starts while another one is in flight.
    * `restart()` bumps the epoch. Anything still in flight from an earlier epoch is dropped when it returns.
    * `pause()` stops future decision cycles. Moves already played stay played.
    """

    def __init__(
        self,
        repository: GameRepository,
        remote: RemoteAgent,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.remote = remote
        self.settings = settings or Settings()
        self.rng = rng or random.Random()

        self.state: GameState = new_game()
        self.epoch = 0
        self.paused = False
        self.strategies: dict[Side, Strategy] = self.settings.strategies()
        self.commentary = OPENING_COMMENTARY

        self._in_flight = False
        self._background: set[asyncio.Task] = set()

    # -- Controls --
    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def restart(self) -> GameState:
        """Fresh setup. In-flight remote answers of the previous game will be ignored."""
        self.epoch += 1
        self.state = new_game()
        self.paused = False
        self.commentary = RESTART_COMMENTARY
        logger.info("Game restarted (epoch %d)", self.epoch)
        return self.state

    def set_strategy(self, side: Side, strategy: Strategy) -> None:
        self.strategies[side] = strategy

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    # -- Game loop --
    async def play_turn(self) -> Optional[GameState]:
        """
        One decision cycle
        ----

        1. Nothing to do if the game is over, paused, or another cycle is still running.
        2. Remote strategy? Ask for a recommendation (bounded by the remote timeout).
        3. Game restarted while we were waiting? Drop everything.
        4. Select a move (local policy if the recommendation is unusable), apply it, publish the new state.
           A recommended move that cannot be played is replaced by a local move in the same cycle.
           No move at all means a draw.
        """
        if self.state.is_game_over or self.paused or self._in_flight:
            return None

        self._in_flight = True
        try:
            epoch = self.epoch
            state = self.state
            strategy = self.strategies[state.turn]

            recommendation: Optional[Recommendation] = None
            if strategy.is_remote:
                recommendation = await self._fetch_recommendation(state)
                if epoch != self.epoch:
                    logger.info("Dropping a recommendation made for epoch %d", epoch)
                    return None

            move = select_move(
                state,
                strategy,
                recommendation,
                rng=self.rng,
                capture_bias=self.settings.capture_bias,
            )
            new_state = state
            if move is not None:
                new_state = apply_move(state, move.from_square, move.to_square)
            if new_state is state:
                if move is not None:
                    logger.info(
                        "Recommended move %s cannot be played by %s, playing locally",
                        move.to_transition(),
                        state.turn,
                    )
                new_state = self._play_locally(state)

            self._publish(state, new_state)
            return new_state
        finally:
            self._in_flight = False

    async def run(self, delay: Optional[float] = None) -> None:
        """Play forever, with a fixed delay between half-moves. Stop by cancelling the task."""
        delay = self.settings.move_delay if delay is None else delay
        while True:
            await asyncio.sleep(delay)
            try:
                await self.play_turn()
            except Exception:
                # a failed cycle never ends the loop
                logger.exception("Decision cycle failed")

    async def aclose(self) -> None:
        for task in list(self._background):
            task.cancel()
        await asyncio.gather(*self._background, return_exceptions=True)
        await self.remote.aclose()

    # -- Archive --
    def archived_games(self) -> list[ArchivedGameResponse]:
        return [
            self._archived_game_response(game_id, model)
            for game_id, model in self.repo.list_games()
        ]

    def archived_game(self, game_id: UUID) -> ArchivedGameResponse:
        return self._archived_game_response(game_id, self._fetch_game(game_id))

    def replay_archived_game(self, game_id: UUID) -> GameState:
        """Rebuild a stored game by feeding its transitions through the engine again."""
        model = self._fetch_game(game_id)
        return replay(Move.from_transition(move) for move in model.moves)

    def delete_archived_game(self, game_id: UUID) -> ArchivedGameResponse:
        deleted = self.repo.delete_game(game_id)
        if deleted is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        logger.info("Deleted archived game %s", game_id)
        return self._archived_game_response(game_id, deleted)

    # -- Responses --
    def game_response(self) -> GameStateResponse:
        return GameStateResponse(
            **_board_fields(self.state),
            epoch=self.epoch,
            commentary=self.commentary,
            paused=self.paused,
            strategies=dict(self.strategies),
        )

    def replay_response(self, game_id: UUID) -> ReplayResponse:
        return ReplayResponse(
            **_board_fields(self.replay_archived_game(game_id)), game_id=game_id
        )

    # -- Internal helpers --
    async def _fetch_recommendation(
        self, state: GameState
    ) -> Optional[Recommendation]:
        try:
            return await asyncio.wait_for(
                self.remote.recommend_move(state),
                timeout=self.settings.remote_timeout,
            )
        except (RemoteAgentError, TimeoutError) as exc:
            logger.warning("No remote recommendation (%r), playing locally", exc)
            return None
        except Exception:
            logger.exception("Remote agent raised, playing locally")
            return None

    def _play_locally(self, state: GameState) -> GameState:
        move = capture_biased_move(state, self.rng, self.settings.capture_bias)
        if move is None:
            logger.info("%s has no legal moves: draw", state.turn)
            return declare_draw(state)
        return apply_move(state, move.from_square, move.to_square)

    def _publish(self, previous: GameState, new_state: GameState) -> None:
        self.state = new_state
        if new_state.is_game_over:
            logger.info("Game over, winner: %s", new_state.winner)
            self._archive(new_state)
            return

        move_played = len(new_state.history) > len(previous.history)
        cadence = self.settings.commentary_every
        if move_played and len(new_state.history) % cadence == 0:
            self._request_commentary(
                new_state.history[-1], new_state.evaluation, self.epoch
            )

    def _request_commentary(
        self, move: AcceptedMove, evaluation: int, epoch: int
    ) -> None:
        """Fire and forget: the game goes on while the commentary is being written."""
        task = asyncio.create_task(self._comment(move, evaluation, epoch))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _comment(self, move: AcceptedMove, evaluation: int, epoch: int) -> None:
        try:
            text = await asyncio.wait_for(
                self.remote.commentary(move, evaluation),
                timeout=self.settings.remote_timeout,
            )
        except (RemoteAgentError, TimeoutError) as exc:
            logger.warning("Commentary unavailable: %s", exc)
            text = FAILED_COMMENTARY
        except Exception:
            logger.exception("Commentator raised")
            text = FAILED_COMMENTARY

        # only keep commentary on the game that is still being played
        if epoch == self.epoch:
            self.commentary = text

    def _archive(self, state: GameState) -> None:
        model = GameModel(
            moves=[move.to_transition() for move in state.transitions()],
            notations=state.notations(),
            winner=str(state.winner) if state.winner else None,
            white_strategy=str(self.strategies[Side.WHITE]),
            black_strategy=str(self.strategies[Side.BLACK]),
            evaluation=state.evaluation,
        )
        _, game_id = self.repo.create_game(model)
        logger.info("Archived game %s", game_id)

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model

    def _archived_game_response(
        self, game_id: UUID, model: GameModel
    ) -> ArchivedGameResponse:
        return ArchivedGameResponse(
            game_id=game_id,
            moves=model.moves,
            notations=model.notations,
            winner=model.winner,
            white_strategy=model.white_strategy,
            black_strategy=model.black_strategy,
            evaluation=model.evaluation,
        )


def _board_fields(state: GameState) -> dict[str, Any]:
    """The part of a response that only depends on the position"""
    return dict(
        status=state.status,
        turn=state.turn,
        board=state.board.to_rows(),
        pieces=[
            PieceResponse(
                id=piece.id,
                type=piece.type,
                side=piece.side,
                position=piece.position.as_pair(),
                has_moved=piece.has_moved,
            )
            for piece in state.pieces.values()
        ],
        history=state.notations(),
        evaluation=state.evaluation,
        army_power={side: state.army_power(side) for side in Side},
        is_game_over=state.is_game_over,
        winner=state.winner,
    )
