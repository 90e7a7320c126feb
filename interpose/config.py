"""Configuration for interpose.

Loads settings from environment variables with sensible defaults.
"""
from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

_COPY_MODES = ("shallow", "deep")
_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class InterposeConfig:
    """Behaviour knobs for response resolution and matching."""
    prototype_copy: str = "shallow"  # "shallow" | "deep"
    strict_equality: bool = False  # conditional matches also require identical types
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.prototype_copy not in _COPY_MODES:
            raise ValueError(f"prototype_copy must be one of {_COPY_MODES}, got {self.prototype_copy!r}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")

    @property
    def copier(self) -> Callable[[Any], Any]:
        return copy.deepcopy if self.prototype_copy == "deep" else copy.copy

    @classmethod
    def from_env(cls) -> "InterposeConfig":
        return cls(
            prototype_copy=os.getenv("INTERPOSE_PROTOTYPE_COPY", "shallow").lower(),
            strict_equality=_env_flag("INTERPOSE_STRICT_EQUALITY"),
            log_level=os.getenv("INTERPOSE_LOG_LEVEL", "WARNING"),
        )


def configure_logging(level: str | None = None) -> None:
    """Set the level of the ``interpose`` logger tree (defaults to INTERPOSE_LOG_LEVEL)."""
    if level is None:
        level = InterposeConfig.from_env().log_level
    logging.getLogger("interpose").setLevel(level.upper())
