"""
HTTP ingest API.

Routes
------
POST /api/gasdata   publish a raw reading ``{"mq2": n, "mq7": n}``
GET  /api/gasdata   latest raw reading (zero-valued default before any publish)
GET  /api/snapshot  latest monitor snapshot, 503 before the first cycle
GET  /health        liveness probe

State is memory-resident only; everything is lost on restart.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from gasmon.core.state.reading_store import ReadingStore
from gasmon.core.state_store import StateStore
from gasmon.transport.payload import InvalidPayloadError, parse_raw_payload, raw_reading_to_dict, snapshot_to_dict

logger = logging.getLogger(__name__)


def create_ingest_app(readings: ReadingStore, snapshots: Optional[StateStore] = None) -> Flask:
    """
    Build the Flask app serving the ingest API.

    Parameters
    ----------
    readings
        Reading store written by ``POST /api/gasdata``.
    snapshots
        State store served by ``GET /api/snapshot``. If None, the route
        answers 503.

    Returns
    -------
    Flask
        Configured application.
    """
    app = Flask(__name__)

    @app.post("/api/gasdata")
    def publish_reading():
        body = request.get_json(silent=True)
        try:
            mq2, mq7 = parse_raw_payload(body)
        except InvalidPayloadError as e:
            logger.info("rejected reading: %s", e, extra={"reason": "invalid_payload"})
            return jsonify({"error": str(e)}), 400

        reading = readings.publish(mq2, mq7)
        logger.debug("received reading mq2=%s mq7=%s", reading.mq2, reading.mq7)
        return jsonify({"message": "Data received"}), 200

    @app.get("/api/gasdata")
    def latest_reading():
        return jsonify(raw_reading_to_dict(readings.fetch_latest())), 200

    @app.get("/api/snapshot")
    def latest_snapshot():
        snap = snapshots.latest if snapshots is not None else None
        if snap is None:
            return jsonify({"error": "no data yet"}), 503
        return jsonify(snapshot_to_dict(snap)), 200

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    return app
