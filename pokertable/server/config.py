"""
Server configuration.

Values come from environment variables prefixed with ``POKERTABLE_``;
``PORT`` is honoured on its own for hosting platforms that set it.
"""

import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from pokertable.core.rules import (
    DEFAULT_ACTION_TIMEOUT, DEFAULT_BIG_BLIND, DEFAULT_BUY_IN,
    DEFAULT_SMALL_BLIND, MAX_PLAYERS, MIN_PLAYERS,
)


ENV_PREFIX = "POKERTABLE_"


class ServerConfig(BaseModel):
    """Process-wide settings for the poker server."""
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    small_blind: int = Field(default=DEFAULT_SMALL_BLIND, gt=0)
    big_blind: int = Field(default=DEFAULT_BIG_BLIND, gt=0)
    buy_in: int = Field(default=DEFAULT_BUY_IN, gt=0)
    max_players: int = Field(default=MAX_PLAYERS, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    action_timeout: float = Field(default=DEFAULT_ACTION_TIMEOUT, gt=0)
    log_level: str = "INFO"
    static_dir: str = "public"

    @model_validator(mode="after")
    def check_blinds(self) -> "ServerConfig":
        if self.big_blind < self.small_blind:
            raise ValueError("big_blind must be >= small_blind")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from the environment, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        if "port" not in values and "PORT" in environ:
            values["port"] = environ["PORT"]
        return cls.model_validate(values)
