from __future__ import annotations

import os
import threading
import time
from typing import Dict


_lock = threading.Lock()
_counters: Dict[str, int] = {}
_gauges: Dict[str, int] = {}
_started_ms = int(time.time() * 1000)


def metrics_enabled() -> bool:
    v = (os.environ.get("STAKELOCK_METRICS_ENABLED") or "").strip().lower()
    if not v:
        return False
    return v in {"1", "true", "yes", "y", "on"}


def inc_counter(name: str, value: int = 1) -> None:
    n = str(name or "").strip()
    if not n:
        return
    with _lock:
        _counters[n] = int(_counters.get(n, 0)) + int(value)


def set_gauge(name: str, value: int) -> None:
    n = str(name or "").strip()
    if not n:
        return
    with _lock:
        _gauges[n] = int(value)


def reset() -> None:
    with _lock:
        _counters.clear()
        _gauges.clear()


def snapshot() -> dict:
    with _lock:
        now_ms = int(time.time() * 1000)
        return {
            "ts_ms": now_ms,
            "started_ms": int(_started_ms),
            "uptime_ms": now_ms - int(_started_ms),
            "counters": dict(_counters),
            "gauges": dict(_gauges),
        }


def format_prometheus(prefix: str = "stakelock_") -> str:
    """Prometheus exposition text for integer counters/gauges."""
    snap = snapshot()
    lines = [f"{prefix}uptime_ms {int(snap['uptime_ms'])}"]
    for name, v in sorted(snap["counters"].items()):
        metric = prefix + _sanitize(name)
        lines.append(f"# TYPE {metric} counter")
        lines.append(f"{metric} {int(v)}")
    for name, v in sorted(snap["gauges"].items()):
        metric = prefix + _sanitize(name)
        lines.append(f"# TYPE {metric} gauge")
        lines.append(f"{metric} {int(v)}")
    return "\n".join(lines) + "\n"


def _sanitize(name: str) -> str:
    return "".join(c if (c.isalnum() or c == "_") else "_" for c in name)
