from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gasmon.core.alert.thresholds import DEFAULT_THRESHOLDS, ThresholdTable, make_threshold_table
from gasmon.domain.models import GAS_ORDER, Gas, GasThreshold

CONFIG_ENV = "GASMON_CONFIG"
LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class MonitorConfig:
    """Monitoring loop cadence, window sizes and random seed."""
    poll_interval_s: float = 3.0
    history_capacity: int = 20
    alert_capacity: int = 10
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class IngestConfig:
    """
    Ingest API bind address and where the loop reads from.

    ``source`` is ``"local"`` (in-process reading store) or ``"http"``
    (poll ``url``).
    """
    host: str = "127.0.0.1"
    port: int = 3000
    source: str = "local"
    url: str = "http://127.0.0.1:3000/api/gasdata"
    timeout_s: float = 2.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """
    Root application configuration loaded from YAML.

    This is the single source of truth for runtime-tunable values. The
    threshold table is built once here and is read-only afterwards.
    """
    monitor: MonitorConfig
    thresholds: ThresholdTable
    ingest: IngestConfig
    logging: LoggingConfig


def _read_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("config.yaml must contain a YAML mapping at the root")
    return data


def _resolve_default_config_path() -> Path:
    """
    Resolve config.yaml location.

    Priority:
    1) GASMON_CONFIG env var if provided
    2) config.yaml next to the interpreter executable
    3) ./config.yaml in current working directory
    """
    env = os.getenv(CONFIG_ENV)
    if env:
        return Path(env).expanduser().resolve()

    exe_dir = Path(sys.executable).resolve().parent
    candidate = exe_dir / "config.yaml"
    if candidate.exists():
        return candidate

    return Path("config.yaml").resolve()


def _positive_int(raw: Dict[str, Any], key: str, default: int) -> int:
    value = int(raw.get(key, default))
    if value <= 0:
        raise ValueError(f"monitor.{key} must be positive, got {value}")
    return value


def _parse_thresholds(raw: Dict[str, Any]) -> ThresholdTable:
    entries: Dict[Gas, GasThreshold] = dict(DEFAULT_THRESHOLDS)
    for key, item in raw.items():
        try:
            gas = Gas(key)
        except ValueError as e:
            known = ", ".join(g.value for g in GAS_ORDER)
            raise ValueError(f"unknown gas {key!r} in thresholds (expected one of: {known})") from e
        if not isinstance(item, dict):
            raise ValueError(f"thresholds.{key} must be a mapping")
        base = entries[gas]
        entries[gas] = GasThreshold(
            safe=float(item.get("safe", base.safe)),
            warning=float(item.get("warning", base.warning)),
            danger=float(item.get("danger", base.danger)),
            unit=str(item.get("unit", base.unit)),
        )
    return make_threshold_table(entries)


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML and convert into typed config objects.

    Parameters
    ----------
    path
        Explicit path to config.yaml. If None, uses default resolution.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If a field is invalid (unknown gas, unordered thresholds, bad
        capacity or interval, unknown source).
    """
    cfg_path = Path(path).expanduser().resolve() if path else _resolve_default_config_path()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    raw = _read_yaml(cfg_path)

    # ---- monitor ----
    m = raw.get("monitor") or {}
    seed = m.get("random_seed")
    monitor = MonitorConfig(
        poll_interval_s=float(m.get("poll_interval_s", 3.0)),
        history_capacity=_positive_int(m, "history_capacity", 20),
        alert_capacity=_positive_int(m, "alert_capacity", 10),
        random_seed=None if seed is None else int(seed),
    )
    if monitor.poll_interval_s <= 0:
        raise ValueError(f"monitor.poll_interval_s must be positive, got {monitor.poll_interval_s}")

    # ---- thresholds ----
    thresholds = _parse_thresholds(raw.get("thresholds") or {})

    # ---- ingest ----
    i = raw.get("ingest") or {}
    ingest = IngestConfig(
        host=str(i.get("host", "127.0.0.1")),
        port=int(i.get("port", 3000)),
        source=str(i.get("source", "local")),
        url=str(i.get("url", "http://127.0.0.1:3000/api/gasdata")),
        timeout_s=float(i.get("timeout_s", 2.0)),
    )
    if ingest.source not in ("local", "http"):
        raise ValueError(f"ingest.source must be 'local' or 'http', got {ingest.source!r}")

    # ---- logging ----
    lg = raw.get("logging") or {}
    level = os.getenv(LOG_LEVEL_ENV) or str(lg.get("level", "INFO"))

    return AppConfig(
        monitor=monitor,
        thresholds=thresholds,
        ingest=ingest,
        logging=LoggingConfig(level=level.upper()),
    )
