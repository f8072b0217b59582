"""Error responses for the rating service HTTP surface."""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

LOGGER = logging.getLogger("rating_service.http_errors")


def json_error(message: str, status: int = 400):
    """Return a JSON error tuple suitable as a Flask view return value."""
    return jsonify({"error": str(message)}), int(status)


def register_error_handlers(app: Flask) -> None:
    """Turn anything escaping a view into a JSON error response."""

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return json_error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(exc: Exception):
        LOGGER.exception("Unhandled error while processing %s", type(exc).__name__)
        return json_error("Internal server error", 500)
