"""
Shared metrics configuration for the platform plugin client.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Histogram, CollectorRegistry


class ClientMetrics:
    """Prometheus metrics for the resource loader, storage pipeline and transport."""

    def __init__(self, service_name: str = "platform_client", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # The global registry rejects a second client registering the same names
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up client metrics."""

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests sent to the platform",
            ["method", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "Platform HTTP request duration in seconds",
            ["method"],
            registry=self.registry
        )

        # Loader metrics
        self._metrics["loader_cache_hits_total"] = Counter(
            "loader_cache_hits_total",
            "Resource loads answered from cache",
            ["resource_type"],
            registry=self.registry
        )

        self._metrics["loader_cache_misses_total"] = Counter(
            "loader_cache_misses_total",
            "Resource loads that needed a fetch or joined one in flight",
            ["resource_type"],
            registry=self.registry
        )

        self._metrics["loader_fetches_total"] = Counter(
            "loader_fetches_total",
            "Upstream resource fetches issued by the loader",
            ["resource_type", "status"],
            registry=self.registry
        )

        self._metrics["loader_batch_size"] = Histogram(
            "loader_batch_size",
            "Unique keys per dispatched loader batch",
            buckets=(1, 2, 5, 10, 25, 50, 100),
            registry=self.registry
        )

        self._metrics["absorbed_resources_total"] = Counter(
            "absorbed_resources_total",
            "Resources primed into the cache from responses",
            ["resource_type"],
            registry=self.registry
        )

        # Storage metrics
        self._metrics["storage_commands_total"] = Counter(
            "storage_commands_total",
            "Storage commands submitted",
            ["action"],
            registry=self.registry
        )

    def record_http_request(self, method: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method
        ).observe(duration)

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        """Increment a counter metric."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        with self._lock:
            (metric.labels(**labels) if labels else metric).inc(amount)

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        metric = self._metrics.get(metric_name)
        if metric is None:
            return
        (metric.labels(**labels) if labels else metric).observe(value)

    def sample(self, name: str, **labels) -> float:
        """Read back the current value of a sample, 0.0 when it was never touched."""
        value = self.registry.get_sample_value(name, labels or None)
        return value or 0.0

