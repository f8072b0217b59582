"""Flask blueprint receiving delta notifications."""

from __future__ import annotations

import json
import logging

from flask import Blueprint, current_app, jsonify, request

from ..engine import RatingPipeline
from ..models import parse_delta
from . import schemas

LOGGER = logging.getLogger("rating_service.api")


def _read_payload():
    # The delta notifier does not always send a JSON content type.
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        LOGGER.warning("Delta body is not valid JSON; treating it as empty")
    return payload


def create_blueprint(pipeline: RatingPipeline) -> Blueprint:
    bp = Blueprint("rating_api", __name__)

    @bp.route("/health", methods=["GET"])
    def health():
        return jsonify(schemas.success({"status": "ok"}).to_dict())

    @bp.route("/delta", methods=["POST"])
    def delta():
        payload = _read_payload()
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("Received delta %s", json.dumps(payload, indent=2, ensure_ascii=False))
        batch = parse_delta(payload, default_graph=current_app.config.get("RATING_GRAPH"))
        report = pipeline.process(batch)
        return jsonify(schemas.success(report.to_dict()).to_dict())

    return bp
