"""
Service Configuration - Settings for the datagraph service.

Settings are layered:
1. Defaults on ServiceConfig
2. A JSON config file (snake_case or camelCase keys)
3. DATAGRAPH_* environment variables
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

ENV_PREFIX = "DATAGRAPH_"
STORE_KINDS = ("memory", "http")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServiceConfig:
    """
    Service-level settings.

    Attributes:
        host: Interface the HTTP server binds to
        port: Port the HTTP server listens on
        stage: Deployment stage; "prod" hides stack traces in error bodies
        store: "memory" (optionally snapshot-backed) or "http" (remote store)
        store_url: Base URL of the remote store when store == "http"
        snapshot_path: JSON snapshot loaded into the memory store
        resolve_timeout: Seconds allowed for store access per resolution
        log_level: Root logging level
    """
    host: str = "0.0.0.0"
    port: int = 8080
    stage: str = "dev"
    store: str = "memory"
    store_url: str | None = None
    snapshot_path: Path | None = None
    resolve_timeout: float | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Check settings for consistency.

        Raises:
            ValueError: If a setting is invalid
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.store not in STORE_KINDS:
            raise ValueError(f"store must be one of {', '.join(STORE_KINDS)}, got {self.store!r}")
        if self.store == "http" and not self.store_url:
            raise ValueError("store_url is required when store is 'http'")
        if self.resolve_timeout is not None and self.resolve_timeout <= 0:
            raise ValueError("resolve_timeout must be positive")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        self.log_level = self.log_level.upper()

    @property
    def is_production(self) -> bool:
        return self.stage == "prod"

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "host": self.host,
            "port": self.port,
            "stage": self.stage,
            "store": self.store,
            "store_url": self.store_url,
            "snapshot_path": str(self.snapshot_path) if self.snapshot_path else None,
            "resolve_timeout": self.resolve_timeout,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceConfig:
        """
        Create settings from a dictionary.

        Unknown keys are ignored; camelCase keys are accepted.
        """
        values = {_snake_case(key): value for key, value in data.items()}
        known = {f.name for f in fields(cls)}
        return cls(**_coerce({k: v for k, v in values.items() if k in known}))

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ServiceConfig:
        """
        Load settings from an optional JSON file and the environment.

        Raises:
            FileNotFoundError: If path is given but doesn't exist
            ValueError: If the file or an override is invalid
        """
        data: dict[str, Any] = {}

        if path is not None:
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")
            with open(path, "r", encoding="utf-8") as f:
                try:
                    loaded = json.load(f)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Failed to parse config: {path}: {e}")
            if not isinstance(loaded, dict):
                raise ValueError(f"Invalid config format: {path}")
            data.update({_snake_case(k): v for k, v in loaded.items()})

        environ = os.environ if environ is None else environ
        for key, value in environ.items():
            if key.startswith(ENV_PREFIX):
                data[key[len(ENV_PREFIX):].lower()] = value

        return cls.from_dict(data)

    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def _snake_case(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Convert string values (from the environment) to field types."""
    try:
        if "port" in values:
            values["port"] = int(values["port"])
        if values.get("resolve_timeout") not in (None, ""):
            values["resolve_timeout"] = float(values["resolve_timeout"])
        else:
            values.pop("resolve_timeout", None)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid numeric setting: {e}") from e
    if values.get("snapshot_path"):
        values["snapshot_path"] = Path(values["snapshot_path"])
    else:
        values.pop("snapshot_path", None)
    if not values.get("store_url"):
        values.pop("store_url", None)
    return values
