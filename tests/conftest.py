"""Shared pytest fixtures for the rating service.

Every fixture runs against :class:`MemoryStore`, so no SPARQL endpoint is
needed; the HTTP client for the SPARQL backend is exercised with mocks in
``test_sparql_store.py``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent))

from rating_service.config import AppConfig  # noqa: E402
from rating_service.engine import RatingPipeline  # noqa: E402
from rating_service.store import MemoryStore  # noqa: E402


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def pipeline(memory_store: MemoryStore) -> RatingPipeline:
    return RatingPipeline(memory_store)


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(base_dir=tmp_path, store_backend="memory", log_format="text", log_level="DEBUG")


@pytest.fixture()
def app(app_config: AppConfig, memory_store: MemoryStore):
    """Flask application wired to the in-memory store."""
    from rating_service.app import create_app

    flask_app = create_app(app_config, store=memory_store)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _detach_log_handlers():
    """Drop handlers installed by ``configure_logging`` so tests stay independent."""
    yield
    import logging

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_rating_service_handler", False):
            root.removeHandler(handler)
            handler.close()
