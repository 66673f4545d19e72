"""
Application settings

Defaults match a casual 10 minute game against the computer. Every value can be overridden with an
environment variable named CHESS_<FIELD NAME IN CAPITALS>, e.g. CHESS_OPPONENT_DELAY_MS=0
"""

import logging
import os
from typing import Self

from pydantic import BaseModel, ConfigDict, field_validator

from src.core.shared_types import Color

ENV_PREFIX = "CHESS_"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    initial_time_seconds: int = 10 * 60
    # pause before the computer's reply is applied, purely for the user's benefit
    opponent_delay_ms: int = 500
    # None: search the full fixed depth, no matter how long it takes
    search_time_limit_ms: int | None = 500
    computer_color: Color = Color.BLACK
    log_level: str = "INFO"

    @field_validator("initial_time_seconds", "opponent_delay_ms")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Expected a non-negative number, got {value}")
        return value

    @field_validator("search_time_limit_ms")
    @classmethod
    def validate_time_limit(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError(f"Search time limit must be positive, got {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        """Collect overrides from the environment. Unset variables keep their default."""
        environ = dict(os.environ) if environ is None else environ
        overrides: dict[str, str | None] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            # "none" switches off the optional search deadline
            overrides[name] = None if raw.lower() == "none" else raw
        return cls.model_validate(overrides)


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger (no-op if the application already did)"""
    logging.basicConfig(level=level, format=LOG_FORMAT)
