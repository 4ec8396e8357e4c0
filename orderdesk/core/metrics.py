from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass
class EndpointMetric:
    total_requests: int = 0
    total_duration_ms: float = 0.0
    error_count: int = 0


class InMemoryRequestMetrics:
    def __init__(self) -> None:
        self._metrics: dict[tuple[str, str], EndpointMetric] = {}
        self._lock = Lock()

    def observe(self, endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
        key = (endpoint, method)
        with self._lock:
            metric = self._metrics.setdefault(key, EndpointMetric())
            metric.total_requests += 1
            metric.total_duration_ms += duration_ms
            if status_code >= 400:
                metric.error_count += 1

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            result: dict[str, dict[str, float | int]] = {}
            for (endpoint, method), metric in self._metrics.items():
                avg = metric.total_duration_ms / metric.total_requests if metric.total_requests else 0.0
                result[f"{method} {endpoint}"] = {
                    "total_requests": metric.total_requests,
                    "total_duration_ms": round(metric.total_duration_ms, 2),
                    "avg_duration_ms": round(avg, 2),
                    "error_count": metric.error_count,
                }
            return result

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()


class StatusChangeCounters:
    """Counts status-change requests by role, requested status and outcome."""

    OUTCOMES = ("allowed", "denied", "rejected")

    def __init__(self) -> None:
        self._counts: dict[tuple[str, str], dict[str, int]] = {}
        self._lock = Lock()

    def record(self, role: str, status: str, outcome: str) -> None:
        if outcome not in self.OUTCOMES:
            raise ValueError(f"Unknown status change outcome: {outcome}")
        key = ((role or "").strip().lower(), (status or "").strip().lower())
        with self._lock:
            counts = self._counts.setdefault(key, dict.fromkeys(self.OUTCOMES, 0))
            counts[outcome] += 1

    def snapshot(self) -> dict[str, dict[str, int]]:
        with self._lock:
            return {f"{role} -> {status}": dict(counts) for (role, status), counts in self._counts.items()}

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()


request_metrics = InMemoryRequestMetrics()
status_change_metrics = StatusChangeCounters()
