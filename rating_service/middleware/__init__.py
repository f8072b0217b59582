"""Middleware utilities for the rating service Flask application."""

from .errors import json_error, register_error_handlers

__all__ = ["json_error", "register_error_handlers"]
