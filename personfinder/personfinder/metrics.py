"""In-memory counters and gauges with a plain-text exposition format."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any


class MetricsCollector:
    """Counters and gauges owned by one application instance."""

    def __init__(self) -> None:
        self._counters: dict[str, float] = {}
        self._gauges: dict[str, float] = {}
        self._lock = threading.Lock()

    def increment(self, name: str, value: float = 1) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = value

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

    def render(self) -> str:
        """Render as ``# TYPE <name> counter|gauge`` followed by ``<name> <value>``."""
        snap = self.snapshot()
        lines: list[str] = []
        for kind in ("counter", "gauge"):
            for name, value in sorted(snap[f"{kind}s"].items()):
                lines.append(f"# TYPE {name} {kind}")
                lines.append(f"{name} {_format_value(value)}")
        return "\n".join(lines) + ("\n" if lines else "")


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
