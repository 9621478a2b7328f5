from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'json' (default) or 'memory'
    - ACTIVITIES_FILE: path to the activities JSON document. Default './data/activities.json'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: INFO)
    - LOG_JSON: 'true' (default) to render log lines as JSON, 'false' for console output
    """

    persistence_backend: str
    activities_file: str
    cors_allow_origins: List[str]
    log_level: str
    log_json: bool


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "json").strip().lower()
    if backend not in {"json", "memory"}:
        backend = "json"

    activities_file = _get_env("ACTIVITIES_FILE", "./data/activities.json").strip()
    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    log_json = _parse_bool(_get_env("LOG_JSON", "true"), True)

    return Settings(
        persistence_backend=backend,
        activities_file=activities_file,
        cors_allow_origins=origins,
        log_level=log_level,
        log_json=log_json,
    )
