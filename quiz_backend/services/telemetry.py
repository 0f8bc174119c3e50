# FILE: quiz_backend/services/telemetry.py
"""
Attempt lifecycle telemetry (rotated JSONL)

- Stores summary-only events to disk (append-only JSONL), one file per UTC day.
- Keeps a small in-memory tail and per-event counters for GET /metrics.
- Never carries answer vectors or passwords.
"""
from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Deque, Dict

from quiz_backend.config import get_settings
from quiz_backend.services.correlation import get_correlation_id

logger = logging.getLogger(__name__)

_MAX_IN_MEMORY_EVENTS = 200
_RETENTION_DAYS = 90
_recent_events: Deque[Dict[str, Any]] = deque(maxlen=_MAX_IN_MEMORY_EVENTS)
_counters: Dict[str, int] = defaultdict(int)
_lock = threading.Lock()


@dataclass(frozen=True)
class TelemetryConfig:
    enabled: bool
    logs_dir: Path


def _get_config() -> TelemetryConfig:
    settings = get_settings()
    return TelemetryConfig(
        enabled=bool(settings.telemetry_enabled),
        logs_dir=Path(settings.logs_dir),
    )


def _telemetry_dir(cfg: TelemetryConfig) -> Path:
    d = cfg.logs_dir / "telemetry"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _event_file_path(cfg: TelemetryConfig, now_utc: datetime) -> Path:
    return _telemetry_dir(cfg) / f"events-{now_utc.date().isoformat()}.jsonl"


def _prune_old_files(cfg: TelemetryConfig) -> None:
    """Delete rotated telemetry files older than the retention window"""
    cutoff = datetime.now(timezone.utc) - timedelta(days=_RETENTION_DAYS)
    for p in _telemetry_dir(cfg).glob("events-*.jsonl"):
        date_part = p.name.replace("events-", "").replace(".jsonl", "")
        try:
            file_date = datetime.fromisoformat(date_part).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
        if file_date < cutoff:
            p.unlink(missing_ok=True)


def init_telemetry() -> None:
    """Initialize telemetry (create dirs + retention prune)."""
    cfg = _get_config()
    if not cfg.enabled:
        logger.info("Telemetry disabled")
        return

    try:
        _prune_old_files(cfg)
    except OSError as e:
        logger.warning("Telemetry prune skipped: %s", e)
    logger.info("Telemetry initialized (dir=%s)", str(cfg.logs_dir))


def record_event(event: str, **fields: Any) -> None:
    """Record telemetry event (summary-only)"""
    cfg = _get_config()
    if not cfg.enabled:
        return

    now_utc = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "ts": now_utc.isoformat(),
        "event": event,
        "correlation_id": get_correlation_id(),
        **fields,
    }

    with _lock:
        _recent_events.append(payload)
        _counters[event] += 1

    try:
        path = _event_file_path(cfg, now_utc)
        line = json.dumps(payload, ensure_ascii=False, default=str)
        with _lock, open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as e:
        # Telemetry failure never fails the operation
        logger.warning("Failed to write telemetry event under %s: %s", str(cfg.logs_dir), e)


def get_telemetry_summary() -> Dict[str, Any]:
    """Lightweight summary (does NOT scan JSONL files)"""
    with _lock:
        return {
            "enabled": bool(get_settings().telemetry_enabled),
            "total_events_in_memory": len(_recent_events),
            "counters_in_memory": dict(_counters),
            "recent_events": list(_recent_events)[-10:],
        }


def reset_telemetry() -> None:
    """Clear in-memory state (tests)"""
    with _lock:
        _recent_events.clear()
        _counters.clear()
