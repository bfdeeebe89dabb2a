from __future__ import annotations

import math
import numbers
from datetime import datetime
from typing import Any, Dict, Mapping, Tuple

from gasmon.core.analytics import alert_counts, history_stats
from gasmon.domain.models import AlertRecord, CalibratedSample, MonitorSnapshot, PredictionSnapshot, RawReading

CHANNELS = ("mq2", "mq7")


class InvalidPayloadError(ValueError):
    """Raised when a raw reading payload is not two numeric channels."""


def _iso(ts: datetime) -> str:
    """
    Convert datetime to ISO-8601 string with second precision.

    Parameters
    ----------
    ts
        Timestamp to convert.

    Returns
    -------
    str
        ISO-8601 formatted timestamp (seconds precision).
    """
    return ts.isoformat(timespec="seconds")


def _channel(body: Mapping[str, Any], name: str) -> float:
    if name not in body:
        raise InvalidPayloadError(f"missing channel {name!r}")
    value = body[name]
    # bool is a numbers.Number subclass; a JSON true/false is not a reading.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidPayloadError(f"channel {name!r} must be numeric, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise InvalidPayloadError(f"channel {name!r} is out of float range") from e
    # json.loads accepts NaN/Infinity literals; they would be served back as invalid JSON.
    if not math.isfinite(number):
        raise InvalidPayloadError(f"channel {name!r} must be finite, got {value!r}")
    return number


def parse_raw_payload(body: Any) -> Tuple[float, float]:
    """
    Validate an ingest payload and extract its channels.

    Parameters
    ----------
    body
        Decoded JSON body, expected ``{"mq2": number, "mq7": number}``.
        Extra keys are ignored.

    Returns
    -------
    tuple of float
        ``(mq2, mq7)`` as floats at face value (no range checks).

    Raises
    ------
    InvalidPayloadError
        If the body is not a mapping, or a channel is missing, non-numeric,
        non-finite or too large for a float.
    """
    if not isinstance(body, Mapping):
        raise InvalidPayloadError("payload must be a JSON object")
    return _channel(body, "mq2"), _channel(body, "mq7")


def raw_reading_to_dict(reading: RawReading) -> Dict[str, Any]:
    return {"mq2": reading.mq2, "mq7": reading.mq7, "timestamp": _iso(reading.timestamp)}


def raw_reading_from_dict(body: Any, default_ts: datetime) -> RawReading:
    """
    Decode a reading returned by ``GET /api/gasdata``.

    Parameters
    ----------
    body
        Decoded JSON body.
    default_ts
        Timestamp used when the body carries none.

    Returns
    -------
    RawReading
        Decoded reading.

    Raises
    ------
    InvalidPayloadError
        If the channels or the timestamp cannot be decoded.
    """
    mq2, mq7 = parse_raw_payload(body)
    ts_raw = body.get("timestamp")
    if ts_raw is None:
        return RawReading(mq2=mq2, mq7=mq7, timestamp=default_ts)
    try:
        ts = datetime.fromisoformat(str(ts_raw).replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidPayloadError(f"bad timestamp {ts_raw!r}") from e
    return RawReading(mq2=mq2, mq7=mq7, timestamp=ts)


def sample_to_dict(sample: CalibratedSample) -> Dict[str, Any]:
    return {
        "methane": sample.methane_pct,
        "carbonMonoxide": sample.co_ppm,
        "hydrogenSulfide": sample.h2s_ppm,
        "timestamp": _iso(sample.timestamp),
    }


def alert_to_dict(alert: AlertRecord) -> Dict[str, Any]:
    return {
        "id": alert.id,
        "type": alert.severity.value,
        "gas": alert.gas.value,
        "value": alert.value,
        "message": alert.message,
        "timestamp": _iso(alert.timestamp),
    }


def prediction_to_dict(prediction: PredictionSnapshot) -> Dict[str, Any]:
    """Prediction with change to one decimal and projections to two."""
    out: Dict[str, Any] = {
        "trend": prediction.trend.value,
        "change": f"{prediction.change_pct:.1f}",
    }
    for gas, value in prediction.projected.items():
        out[gas.value] = f"{value:.2f}"
    return out


def snapshot_to_dict(snapshot: MonitorSnapshot) -> Dict[str, Any]:
    """
    Build the JSON payload for a published monitor snapshot.

    The payload includes:
    - "current", "history", "alerts", "prediction": the cycle outputs
    - "stats": history averages/peaks and alert counts by severity

    Parameters
    ----------
    snapshot
        Snapshot published by the monitoring loop.

    Returns
    -------
    dict
        JSON-serializable payload.
    """
    stats = history_stats(snapshot.history)
    return {
        "cycle": snapshot.cycle,
        "published_at": _iso(snapshot.published_at) if snapshot.published_at else None,
        "current": sample_to_dict(snapshot.sample),
        "history": [sample_to_dict(s) for s in snapshot.history],
        "alerts": [alert_to_dict(a) for a in snapshot.alerts],
        "prediction": prediction_to_dict(snapshot.prediction),
        "stats": {
            "readings": stats.count,
            "average": {g.value: round(v, 2) for g, v in stats.average.items()},
            "peak": {g.value: round(v, 2) for g, v in stats.peak.items()},
            "alerts": alert_counts(snapshot.alerts),
        },
    }
