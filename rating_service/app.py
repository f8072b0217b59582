"""Flask application entry point for the rating service."""

from __future__ import annotations

import json
import logging
from typing import Optional

import click
from flask import Flask

from .api.routes import create_blueprint
from .bootstrap import build_context
from .config import AppConfig
from .middleware import register_error_handlers
from .services.logging import configure_logging
from .store import StoreClient

logger = logging.getLogger("rating_service")


def create_app(config: Optional[AppConfig] = None, *, store: Optional[StoreClient] = None) -> Flask:
    """Instantiate and configure the Flask application."""
    ctx = build_context(config, store=store)
    cfg = ctx.config
    app = Flask(__name__)
    app.config.update(cfg.to_flask_config())
    app.config["RATING_CONFIG"] = cfg
    app.extensions["rating_service"] = ctx
    configure_logging(
        app,
        level=cfg.log_level,
        fmt=cfg.log_format,
        log_file_path=cfg.log_file_path,
        sentry_dsn=cfg.sentry_dsn or None,
        sentry_environment=cfg.sentry_environment or None,
    )
    app.register_blueprint(create_blueprint(ctx.pipeline))
    register_error_handlers(app)
    _register_commands(app)
    logger.info("Rating service ready: backend=%s graph=%s", cfg.store_backend, cfg.graph)
    return app


def _register_commands(app: Flask) -> None:
    @app.cli.command("recompute")
    @click.argument("targets", nargs=-1, required=True)
    def recompute_command(targets: tuple[str, ...]) -> None:
        """Recompute and store the average rating of the given target URIs."""
        ctx = app.extensions["rating_service"]
        failed = False
        for target in targets:
            try:
                value = ctx.pipeline.recompute(target)
            except Exception as exc:  # noqa: BLE001
                failed = True
                click.echo(json.dumps({"target": target, "error": str(exc)}, ensure_ascii=False), err=True)
                continue
            click.echo(json.dumps({"target": target, "average": value}, ensure_ascii=False))
        if failed:
            raise click.ClickException("Some targets could not be recomputed.")


if __name__ == "__main__":
    application = create_app()
    cfg = application.config["RATING_CONFIG"]
    application.run(host=cfg.host, port=cfg.port)
