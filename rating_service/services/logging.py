"""Logging helpers for the rating service."""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

from flask import Flask

_HANDLER_MARK = "_rating_service_handler"


class SensitiveDataFilter(logging.Filter):
    """Masks credentials that may leak through endpoint URLs or headers."""

    _PATTERNS: Iterable[tuple[re.Pattern[str], str]] = (
        (re.compile(r"(://[^/\s:@]+:)([^@\s/]+)(@)"), r"\1***\3"),
        (re.compile(r"(authorization=)([^\s]+)", re.I), r"\1***"),
        (re.compile(r"(api[_-]?key=)([^&\s]+)", re.I), r"\1***"),
        (re.compile(r"(password=)([^&\s]+)", re.I), r"\1***"),
        (re.compile(r"Bearer\s+[A-Za-z0-9._-]+"), "Bearer ***"),
    )

    def __init__(self) -> None:
        super().__init__(name="SensitiveDataFilter")

    @staticmethod
    def _sanitize_value(value: object) -> object:
        if isinstance(value, str):
            sanitized = value
            for pattern, repl in SensitiveDataFilter._PATTERNS:
                sanitized = pattern.sub(repl, sanitized)
            return sanitized
        if isinstance(value, (list, tuple)):
            return type(value)(SensitiveDataFilter._sanitize_value(v) for v in value)
        if isinstance(value, dict):
            return {k: SensitiveDataFilter._sanitize_value(v) for k, v in value.items()}
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._sanitize_value(record.msg)
        if record.args:
            record.args = self._sanitize_value(record.args)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        if record.__dict__.get("extra"):
            data["extra"] = record.__dict__["extra"]
        return json.dumps(data, ensure_ascii=False)


TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "INFO").upper())
    if isinstance(resolved, str):  # unknown name returns string
        return logging.INFO
    return resolved


def _prepare(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    setattr(handler, _HANDLER_MARK, True)
    return handler


def configure_logging(
    app: Optional[Flask] = None,
    *,
    level: str | int | None = None,
    fmt: str = "json",
    log_file_path: Optional[Path] = None,
    sentry_dsn: str | None = None,
    sentry_environment: str | None = None,
) -> logging.Logger:
    """Attach structured handlers to the root logger; safe to call repeatedly."""
    resolved_level = resolve_level(level or (app.config.get("LOG_LEVEL") if app else None))
    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.addHandler(_prepare(logging.StreamHandler(sys.stderr), resolved_level, fmt))
    if log_file_path is not None:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=100 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        root_logger.addHandler(_prepare(file_handler, resolved_level, "json"))

    logger = logging.getLogger("rating_service")
    if app is not None:
        app.logger.setLevel(resolved_level)

    if sentry_dsn:
        try:
            import sentry_sdk
            from sentry_sdk.integrations.logging import LoggingIntegration

            sentry_logging = LoggingIntegration(
                level=resolved_level,
                event_level=logging.ERROR,
            )
            sentry_sdk.init(
                dsn=sentry_dsn,
                environment=sentry_environment,
                integrations=[sentry_logging],
                traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0")),
            )
            logger.info("Sentry initialised")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise Sentry: %s", exc)
    return logger
