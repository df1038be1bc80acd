"""
Application settings and logging setup.

All knobs live on a single pydantic model. `Settings.from_env()` reads them from BLITZ_* environment variables,
anything not set keeps its default.
"""

import logging
import os
from typing import Optional, Self

from pydantic import BaseModel, Field, field_validator

from src.core.shared_types import Side, Strategy

ENV_PREFIX = "BLITZ_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    # pacing of the self-playing loop (seconds between half-moves)
    move_delay: float = Field(default=0.6, ge=0.0)
    # request commentary after every n-th half-move
    commentary_every: int = Field(default=4, ge=1)
    # probability of picking a capture whenever one is available
    capture_bias: float = Field(default=0.6, ge=0.0, le=1.0)
    remote_timeout: float = Field(default=10.0, gt=0.0)

    gemini_model: str = "gemini-3-flash-preview"
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # In-memory by default: a session's games are gone when the process stops.
    database_url: str = "sqlite:///:memory:"

    white_strategy: Strategy = Strategy.RANDOM
    black_strategy: Strategy = Strategy.GEMINI
    autoplay: bool = True
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> Self:
        """Collect BLITZ_<FIELD> variables (+ the API key under its usual names)."""
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw

        if "gemini_api_key" not in values:
            api_key = env.get("GEMINI_API_KEY") or env.get("API_KEY")
            if api_key:
                values["gemini_api_key"] = api_key
        return cls.model_validate(values)

    def strategies(self) -> dict[Side, Strategy]:
        return {Side.WHITE: self.white_strategy, Side.BLACK: self.black_strategy}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
