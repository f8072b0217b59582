"""Application configuration helpers.

Settings come from environment variables (optionally seeded from a ``.env``
file in the base directory) and are exposed as a frozen :class:`AppConfig`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .vocabulary import DEFAULT_GRAPH

DEFAULT_SPARQL_ENDPOINT = "http://database:8890/sparql"
STORE_BACKENDS = ("sparql", "memory")
LOG_FORMATS = ("json", "text")


def _env(key: str, default: str) -> str:
    value = os.getenv(key)
    return value.strip() if value is not None and value.strip() else default


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_float(key: str, default: float) -> float:
    try:
        return float(_env(key, str(default)))
    except ValueError:
        return default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _load_dotenv(base_dir: Path) -> None:
    env_path = base_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)


@dataclass(frozen=True)
class AppConfig:
    base_dir: Path
    sparql_endpoint: str = DEFAULT_SPARQL_ENDPOINT
    graph: str = DEFAULT_GRAPH
    store_backend: str = "sparql"
    sudo_updates: bool = False
    max_workers: int = 1
    host: str = "0.0.0.0"
    port: int = 3000
    max_content_length: int = 50 * 1024 * 1024
    http_timeout: float = 60.0
    http_connect_timeout: float = 10.0
    http_retries: int = 3
    http_backoff_factor: float = 0.5
    log_level: str = "INFO"
    log_format: str = "json"
    log_file_path: Optional[Path] = None
    sentry_dsn: str = ""
    sentry_environment: str = ""

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "AppConfig":
        base_dir = base_dir or Path(os.getenv("RATING_HOME", Path.cwd()))
        _load_dotenv(base_dir)

        backend = _env("RATING_STORE_BACKEND", "sparql").lower()
        if backend not in STORE_BACKENDS:
            backend = "sparql"
        log_format = _env("RATING_LOG_FORMAT", "json").lower()
        if log_format not in LOG_FORMATS:
            log_format = "json"
        log_file = os.getenv("RATING_LOG_FILE", "").strip()

        return cls(
            base_dir=base_dir,
            sparql_endpoint=_env("MU_SPARQL_ENDPOINT", DEFAULT_SPARQL_ENDPOINT),
            graph=_env("MU_APPLICATION_GRAPH", DEFAULT_GRAPH),
            store_backend=backend,
            sudo_updates=_getenv_bool("RATING_SUDO_UPDATES", False),
            max_workers=max(1, _env_int("RATING_MAX_WORKERS", 1)),
            host=_env("RATING_HOST", "0.0.0.0"),
            port=_env_int("RATING_PORT", 3000),
            max_content_length=_env_int("RATING_MAX_CONTENT_LENGTH", 50 * 1024 * 1024),
            http_timeout=_env_float("RATING_HTTP_TIMEOUT", 60.0),
            http_connect_timeout=_env_float("RATING_HTTP_CONNECT_TIMEOUT", 10.0),
            http_retries=_env_int("RATING_HTTP_RETRIES", 3),
            http_backoff_factor=_env_float("RATING_HTTP_BACKOFF", 0.5),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
            log_file_path=(base_dir / log_file) if log_file else None,
            sentry_dsn=_env("SENTRY_DSN", ""),
            sentry_environment=_env("SENTRY_ENVIRONMENT", ""),
        )

    def to_flask_config(self) -> Dict[str, Any]:
        return {
            "MAX_CONTENT_LENGTH": self.max_content_length,
            "LOG_LEVEL": self.log_level,
            "RATING_GRAPH": self.graph,
            "RATING_STORE_BACKEND": self.store_backend,
        }


def load_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    return AppConfig.load(base_dir)
