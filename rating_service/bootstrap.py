"""Bootstrap context for the rating service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import AppConfig, load_app_config
from .engine import RatingPipeline
from .services.http import HttpSettings, SparqlHttpClient
from .store import StoreClient, load_store


@dataclass
class RatingContext:
    config: AppConfig
    store: StoreClient
    pipeline: RatingPipeline


def build_context(
    config: Optional[AppConfig] = None,
    *,
    store: Optional[StoreClient] = None,
) -> RatingContext:
    cfg = config or load_app_config()
    if store is None:
        options = {}
        if cfg.store_backend == "sparql":
            settings = HttpSettings(
                timeout=cfg.http_timeout,
                connect_timeout=cfg.http_connect_timeout,
                retries=cfg.http_retries,
                backoff_factor=cfg.http_backoff_factor,
            )
            options = {"sudo": cfg.sudo_updates, "client": SparqlHttpClient(settings)}
        store = load_store(
            cfg.store_backend,
            graph=cfg.graph,
            endpoint=cfg.sparql_endpoint,
            **options,
        )
    pipeline = RatingPipeline(store, max_workers=cfg.max_workers)
    return RatingContext(config=cfg, store=store, pipeline=pipeline)
