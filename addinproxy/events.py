# addinproxy/events.py
"""Normalize add-in telemetry into Splunk HEC event records.

Input arrives as untyped JSON. ``normalize`` coerces each item into a
``TelemetryEvent`` right away; only ``TelemetryEvent.to_dict()`` output is
ever forwarded.

Metadata precedence for index/host/source/sourcetype:
  1. value on the event itself
  2. default from the environment (``MetadataDefaults``)
  3. omitted
"""
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

_METADATA_FIELDS = ("index", "host", "source", "sourcetype")


@dataclass(frozen=True)
class MetadataDefaults:
    index: str | None = None
    host: str | None = None
    source: str | None = None
    sourcetype: str | None = None


@dataclass(frozen=True)
class TelemetryEvent:
    time: int
    event: Any
    index: str | None = None
    source: str | None = None
    sourcetype: str | None = None
    host: str | None = None
    fields: dict | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"time": self.time, "event": self.event}
        for name in ("index", "source", "sourcetype", "host", "fields"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out


def _now() -> int:
    return math.floor(time.time())


def _parse_timestamp(value: Any) -> int | None:
    """Return unix seconds for an ISO-8601 string or epoch-millisecond number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return math.floor(value / 1000)
    if isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return math.floor(dt.timestamp())
    return None


def _coerce_time(value: Any) -> int:
    """HEC ``time`` is already in seconds; accept numbers and numeric strings."""
    if isinstance(value, bool):
        return _now()
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return _now()
    if isinstance(value, (int, float)) and math.isfinite(value):
        return math.floor(value)
    return _now()


def _meta(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _resolve(raw: Mapping, defaults: MetadataDefaults) -> dict[str, str | None]:
    return {
        name: _meta(raw.get(name)) or getattr(defaults, name)
        for name in _METADATA_FIELDS
    }


def is_canonical(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and raw.get("event") is not None
        and raw.get("time") is not None
    )


def normalize(raw: Any, defaults: MetadataDefaults | None = None) -> TelemetryEvent:
    """Coerce one inbound item into a canonical event. Never raises."""
    defaults = defaults or MetadataDefaults()

    if not isinstance(raw, Mapping):
        # A JSON null carries no body; an empty object keeps the result canonical.
        return TelemetryEvent(
            time=_now(), event=raw if raw is not None else {}, **_resolve({}, defaults)
        )

    if is_canonical(raw):
        # Already HEC shaped: fill gaps from defaults, never overwrite.
        return TelemetryEvent(
            time=_coerce_time(raw["time"]),
            event=raw["event"],
            fields=raw.get("fields") if isinstance(raw.get("fields"), dict) else None,
            **_resolve(raw, defaults),
        )

    ts = _parse_timestamp(raw.get("timestamp"))
    data = raw.get("data")
    return TelemetryEvent(
        time=ts if ts is not None else _now(),
        event=data if data is not None else dict(raw),
        **_resolve(raw, defaults),
    )


def normalize_payload(payload: Any, defaults: MetadataDefaults | None = None):
    """Normalize a single event or a list of events.

    Returns canonical dicts in the input's shape: a list (order preserved)
    for a list, a single dict otherwise.
    """
    if isinstance(payload, list):
        return [normalize(item, defaults).to_dict() for item in payload]
    return normalize(payload, defaults).to_dict()
