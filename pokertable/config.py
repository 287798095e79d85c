#!/usr/bin/env python3
"""Configuration management for the poker table."""

import logging
import os
from typing import Iterable, List, Optional

from pokertable.game_state import MAX_PLAYERS, MIN_PLAYERS

ENV_PREFIX = "POKERTABLE_"


def _first_env(
    names: Iterable[str],
    default: Optional[str] = None,
) -> Optional[str]:
    """Return the first environment variable that is set from ``names``."""

    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value
    return default


def _setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read ``POKERTABLE_<name>`` falling back to the bare ``<name>``."""

    return _first_env((f"{ENV_PREFIX}{name}", name), default=default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse a boolean environment variable value."""

    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(name: str, default: int) -> int:
    raw = _setting(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


class Config:
    """Load and validate configuration from environment variables."""

    def __init__(self) -> None:
        # Redis snapshot storage
        self.USE_REDIS: bool = _parse_bool(_setting("USE_REDIS"), default=False)
        self.REDIS_HOST: str = _setting("REDIS_HOST", default="localhost")
        self.REDIS_PORT: int = _parse_int("REDIS_PORT", 6379)
        self.REDIS_DB: int = _parse_int("REDIS_DB", 0)
        self.REDIS_PASS: str = _setting("REDIS_PASS", default="") or ""
        self.SNAPSHOT_TTL_SECONDS: int = _parse_int(
            "SNAPSHOT_TTL_SECONDS", 12 * 60 * 60
        )

        # Debug mode
        self.DEBUG: bool = _parse_bool(_setting("DEBUG"), default=False)

        # Table settings
        self.SMALL_BLIND: int = _parse_int("SMALL_BLIND", 5)
        self.BIG_BLIND: int = _parse_int("BIG_BLIND", 10)
        self.INITIAL_CHIPS: int = _parse_int("INITIAL_CHIPS", 1000)
        raw_names = _setting("PLAYER_NAMES", default="Player 0,Player 1") or ""
        self.PLAYER_NAMES: List[str] = [
            name.strip() for name in raw_names.split(",") if name.strip()
        ]

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.DEBUG else logging.INFO

    def validate(self) -> None:
        """Validate configuration and raise if invalid."""
        if self.SMALL_BLIND <= 0 or self.BIG_BLIND <= 0:
            raise ValueError("Blinds must be positive")
        if self.SMALL_BLIND > self.BIG_BLIND:
            raise ValueError(
                f"Small blind {self.SMALL_BLIND} exceeds big blind {self.BIG_BLIND}"
            )
        if self.INITIAL_CHIPS < self.BIG_BLIND:
            raise ValueError(
                "POKERTABLE_INITIAL_CHIPS must cover at least one big blind"
            )
        if not MIN_PLAYERS <= len(self.PLAYER_NAMES) <= MAX_PLAYERS:
            raise ValueError(
                f"POKERTABLE_PLAYER_NAMES must list {MIN_PLAYERS}..{MAX_PLAYERS} "
                f"players, got {len(self.PLAYER_NAMES)}"
            )
        if self.REDIS_PORT < 1 or self.REDIS_PORT > 65535:
            raise ValueError(f"Invalid Redis port: {self.REDIS_PORT}")
