from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import Flask

from gasmon.core.config.yaml_config import AppConfig, load_app_config
from gasmon.core.random_source import build_random_source
from gasmon.core.sources import ReadingSource
from gasmon.core.state.alert_ledger import AlertLedger
from gasmon.core.state.history_window import HistoryWindow
from gasmon.core.state.reading_store import ReadingStore
from gasmon.core.state_store import StateStore
from gasmon.runtime.monitoring_loop_thread import MonitoringLoopThread
from gasmon.services.controller import MonitoringController
from gasmon.transport.http_source import HttpReadingSource, HttpSourceConfig
from gasmon.transport.ingest_server import create_ingest_app


@dataclass(frozen=True)
class AppWiring:
    """Everything the entrypoint needs to run the system."""
    config: AppConfig
    readings: ReadingStore
    store: StateStore
    controller: MonitoringController
    loop: MonitoringLoopThread
    ingest_app: Flask


def build_reading_source(cfg: AppConfig, readings: ReadingStore) -> ReadingSource:
    if cfg.ingest.source == "http":
        return HttpReadingSource(HttpSourceConfig(url=cfg.ingest.url, timeout_s=cfg.ingest.timeout_s))
    return readings


def build_controller(cfg: AppConfig, source: ReadingSource, store: StateStore) -> MonitoringController:
    # Calibration and prediction share one random source so a seed reproduces a whole run.
    rng = build_random_source(cfg.monitor.random_seed)
    return MonitoringController(
        source=source,
        store=store,
        rng=rng,
        history=HistoryWindow(capacity=cfg.monitor.history_capacity),
        ledger=AlertLedger(capacity=cfg.monitor.alert_capacity, table=cfg.thresholds),
    )


def build_app_system(config_path: Optional[str] = None, cfg: Optional[AppConfig] = None) -> AppWiring:
    cfg = cfg or load_app_config(config_path)

    # --- STATE ---
    readings = ReadingStore()
    store = StateStore()

    # --- MONITORING ---
    source = build_reading_source(cfg, readings)
    controller = build_controller(cfg, source, store)
    loop = MonitoringLoopThread(controller, interval_s=cfg.monitor.poll_interval_s)

    # --- TRANSPORT ---
    ingest_app = create_ingest_app(readings, store)

    return AppWiring(
        config=cfg,
        readings=readings,
        store=store,
        controller=controller,
        loop=loop,
        ingest_app=ingest_app,
    )


def shutdown_app_system(wiring: AppWiring, timeout: float = 2.0) -> None:
    """
    Stop the monitoring loop, then release the reading source.

    Sources holding network resources (the HTTP source's session) expose
    ``close()``; the in-process reading store does not.
    """
    wiring.loop.stop()
    wiring.loop.join(timeout=timeout)
    close = getattr(wiring.controller.source, "close", None)
    if close is not None:
        close()
