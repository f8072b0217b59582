"""Triple store backends for the rating service."""

from __future__ import annotations

from typing import Any

from .base import Bindings, StoreClient, TriplePattern, UpdateStatement, Variable
from .memory import MemoryStore
from .sparql import SparqlStore, build_select, build_update, sparql_escape_string, sparql_escape_uri

__all__ = [
    "Bindings",
    "StoreClient",
    "TriplePattern",
    "UpdateStatement",
    "Variable",
    "MemoryStore",
    "SparqlStore",
    "build_select",
    "build_update",
    "sparql_escape_string",
    "sparql_escape_uri",
    "load_store",
]


def load_store(kind: str, *, graph: str, endpoint: str | None = None, **kwargs: Any) -> StoreClient:
    """Instantiate a store backend by name (``sparql`` or ``memory``).

    ``endpoint`` and the remaining keyword arguments only apply to ``sparql``.
    """
    name = (kind or "sparql").strip().lower()
    if name == "memory":
        return MemoryStore(graph=graph)
    if name == "sparql":
        if not endpoint:
            raise ValueError("SPARQL endpoint is required for the sparql store backend")
        return SparqlStore(endpoint, graph, **kwargs)
    raise ValueError(f"Unknown store backend: {kind}")
