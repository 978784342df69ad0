"""Per-call tracing and latency accounting for remote tool invocations."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(slots=True)
class CallTrace:
    """Trace record for one `tools/call` round trip."""

    tool: str
    arguments: dict[str, Any]
    outcome: str
    envelope: str | None
    result_count: int
    latency_ms: float
    timestamp_utc: str

    @property
    def failed(self) -> bool:
        return self.outcome != "ok"


class CallTraceStore:
    """Bounded in-memory trace storage; usable directly as a client observer."""

    def __init__(self, max_records: int = 1000) -> None:
        self._records: deque[CallTrace] = deque(maxlen=max_records)

    def __call__(self, trace: CallTrace) -> None:
        self.record(trace)

    def record(self, trace: CallTrace) -> None:
        self._records.append(trace)

    def list_recent(self, limit: int = 20) -> list[CallTrace]:
        if limit <= 0:
            return []
        return list(self._records)[-limit:]

    def summary(self) -> dict[str, float | int]:
        """Aggregate call metrics for dashboard display."""
        records = list(self._records)
        total = len(records)
        if total == 0:
            return {
                "total_calls": 0,
                "failed_calls": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "total_results": 0,
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_calls": total,
            "failed_calls": sum(1 for record in records if record.failed),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "total_results": sum(record.result_count for record in records),
        }


class Timer:
    """Simple context timer used around each remote call."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
