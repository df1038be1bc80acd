"""
Remote language model collaborators: move recommendations and commentary.

Both calls are best-effort. No retries: a failed, slow or malformed answer means "no recommendation" (the local
policy plays instead) or one of the canned commentary lines.
"""

import json
import logging
from typing import Any, Optional, Protocol, Self

import httpx

from src.blitz.game import AcceptedMove, GameState
from src.core.config import Settings
from src.core.exceptions import RemoteAgentError

logger = logging.getLogger(__name__)

Recommendation = dict[str, Any]

EMPTY_COMMENTARY = "A bold maneuver upon the field of honor!"
FAILED_COMMENTARY = "The lines hold steady, for now."
OPENING_COMMENTARY = "The battle lines are drawn..."
RESTART_COMMENTARY = "Charge! The dawn brings glory!"


class MoveRecommender(Protocol):
    async def recommend_move(self, state: GameState) -> Optional[Recommendation]:
        """Raw {"from": [r, f], "to": [r, f]} answer, or None."""
        ...


class Commentator(Protocol):
    async def commentary(self, move: AcceptedMove, evaluation: int) -> str: ...


class RemoteAgent(MoveRecommender, Commentator, Protocol):
    """What the match service needs from the remote collaborator"""

    async def aclose(self) -> None: ...


# --- PROMPTS ---
def move_prompt(state: GameState) -> str:
    pieces = [
        {
            "t": str(piece.type),
            "s": str(piece.side),
            "p": list(piece.position.as_pair()),
        }
        for piece in state.pieces.values()
    ]
    return (
        "You are a Grandmaster chess engine.\n"
        f"Current Turn: {state.turn}\n"
        f"Board State: {json.dumps(pieces)}\n"
        f"History: {', '.join(state.notations())}\n\n"
        'Return the best move in JSON format: {"from": [rank, file], "to": [rank, file]}.\n'
        "Only valid moves."
    )


def commentary_prompt(move: AcceptedMove, evaluation: int) -> str:
    return (
        "You are a witty Napoleonic-era Grandmaster.\n"
        f"A move was just played: {move.notation}.\n"
        f"The current evaluation is: {evaluation}.\n"
        "Provide a one-sentence commentary in the style of a 19th-century military general. "
        "Keep it under 20 words."
    )


class GeminiClient:
    """Thin client of the Generative Language REST API (`models/{model}:generateContent`)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-flash-preview",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        if not settings.gemini_api_key:
            raise RemoteAgentError("No API key configured for the remote agent.")
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.remote_timeout,
        )

    async def recommend_move(self, state: GameState) -> Optional[Recommendation]:
        try:
            text = await self.generate(move_prompt(state), json_response=True)
            result = json.loads(text or "{}")
        except (RemoteAgentError, json.JSONDecodeError) as exc:
            logger.warning("Remote move recommendation failed: %s", exc)
            return None

        if isinstance(result, dict) and "from" in result and "to" in result:
            return result
        return None

    async def commentary(self, move: AcceptedMove, evaluation: int) -> str:
        try:
            text = await self.generate(commentary_prompt(move, evaluation))
        except RemoteAgentError as exc:
            logger.warning("Remote commentary failed: %s", exc)
            return FAILED_COMMENTARY
        return text.strip() or EMPTY_COMMENTARY

    async def generate(self, prompt: str, json_response: bool = False) -> str:
        """Send a single prompt, return the text of the first candidate."""
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if json_response:
            body["generationConfig"] = {"responseMimeType": "application/json"}

        try:
            response = await self.http.post(
                f"/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=body,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteAgentError(f"Request to {self.model} failed: {exc}") from exc
        return _candidate_text(payload)

    async def aclose(self) -> None:
        await self.http.aclose()


def _candidate_text(payload: Any) -> str:
    """candidates[0].content.parts[*].text, joined"""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise RemoteAgentError(f"Unexpected response layout: {exc!r}") from exc


class OfflineClient:
    """Stand-in when no API key is configured: never recommends a move, always gives the canned line."""

    async def recommend_move(self, state: GameState) -> Optional[Recommendation]:
        return None

    async def commentary(self, move: AcceptedMove, evaluation: int) -> str:
        return FAILED_COMMENTARY

    async def aclose(self) -> None:
        return None


def remote_client(settings: Settings) -> GeminiClient | OfflineClient:
    if settings.gemini_api_key:
        return GeminiClient.from_settings(settings)
    logger.info("No API key configured, remote strategy falls back to local play")
    return OfflineClient()
