from __future__ import annotations

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from app.promohub.core.config import settings


@dataclass
class MetricsSnapshot:
    content: bytes
    content_type: str


class Metrics:
    def __init__(self) -> None:
        self.enabled = bool(settings.METRICS_ENABLED)
        self._registry = None
        self._http_requests_total = None
        self._http_request_duration_ms = None
        self._promotion_mutations_total = None
        self._listing_cache_total = None
        self._carousel_updates_total = None
        if self.enabled:
            self._initialize_registry()

    def _initialize_registry(self) -> None:
        self._registry = CollectorRegistry()
        self._http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by route/method/status.",
            ["route", "method", "status"],
            registry=self._registry,
        )
        self._http_request_duration_ms = Histogram(
            "http_request_duration_ms",
            "HTTP request latency in milliseconds.",
            ["route", "method", "status"],
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000),
            registry=self._registry,
        )
        self._promotion_mutations_total = Counter(
            "promotion_mutations_total",
            "Promotion store mutations by action.",
            ["action"],
            registry=self._registry,
        )
        self._listing_cache_total = Counter(
            "promotion_listing_cache_total",
            "Promotion listing cache lookups by result.",
            ["result"],
            registry=self._registry,
        )
        self._carousel_updates_total = Counter(
            "carousel_updates_total",
            "Carousel replacements by audit action.",
            ["action"],
            registry=self._registry,
        )

    def reset(self) -> None:
        if not self.enabled:
            return
        self._initialize_registry()

    def record_http_request(self, *, route: str, method: str, status_code: int, latency_ms: float) -> None:
        if not self.enabled:
            return
        labels = {"route": route, "method": method, "status": str(status_code)}
        self._http_requests_total.labels(**labels).inc()
        self._http_request_duration_ms.labels(**labels).observe(latency_ms)

    def increment_promotion_mutation(self, action: str) -> None:
        if not self.enabled:
            return
        self._promotion_mutations_total.labels(action=action).inc()

    def record_listing_cache(self, *, hit: bool) -> None:
        if not self.enabled:
            return
        self._listing_cache_total.labels(result="hit" if hit else "miss").inc()

    def increment_carousel_update(self, action: str) -> None:
        if not self.enabled:
            return
        self._carousel_updates_total.labels(action=action).inc()

    def render(self) -> MetricsSnapshot:
        if not self.enabled:
            return MetricsSnapshot(content=b"metrics_disabled\n", content_type="text/plain")
        return MetricsSnapshot(content=generate_latest(self._registry), content_type=CONTENT_TYPE_LATEST)


metrics = Metrics()
