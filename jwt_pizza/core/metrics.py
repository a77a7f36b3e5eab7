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


class PizzaMetrics:
    """Process-wide telemetry for orders and auth. Advisory only, never read by business logic."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.total_orders = 0
        self.pizzas_sold = 0
        self.revenue = 0.0
        self.fulfillment_failures = 0
        self.creation_latency_total_ms = 0.0
        self.creation_latency_count = 0
        self.auth_successes = 0
        self.auth_failures = 0

    def order_attempted(self) -> None:
        with self._lock:
            self.total_orders += 1

    def order_persisted(self, *, pizzas: int, revenue: float, latency_ms: float) -> None:
        with self._lock:
            self.pizzas_sold += pizzas
            self.revenue += revenue
            self.creation_latency_total_ms += latency_ms
            self.creation_latency_count += 1

    def fulfillment_failed(self) -> None:
        with self._lock:
            self.fulfillment_failures += 1

    def auth_attempt(self, *, success: bool) -> None:
        with self._lock:
            if success:
                self.auth_successes += 1
            else:
                self.auth_failures += 1

    def snapshot(self) -> dict[str, float | int]:
        with self._lock:
            avg_latency = (
                self.creation_latency_total_ms / self.creation_latency_count if self.creation_latency_count else 0.0
            )
            return {
                "total_orders": self.total_orders,
                "pizzas_sold": self.pizzas_sold,
                "revenue": round(self.revenue, 8),
                "fulfillment_failures": self.fulfillment_failures,
                "avg_creation_latency_ms": round(avg_latency, 2),
                "auth_successes": self.auth_successes,
                "auth_failures": self.auth_failures,
            }
