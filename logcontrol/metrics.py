# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Metrics collection for the log controller."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Import prometheus_client with graceful fallback
try:
    from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram
    PROMETHEUS_AVAILABLE = True
except ImportError:
    PROMETHEUS_AVAILABLE = False


class MetricsCollector(ABC):
    """Abstract base class for metrics collectors."""

    @abstractmethod
    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter metric."""
        pass

    @abstractmethod
    def observe(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Observe a value for histogram metrics (e.g. a duration)."""
        pass

    @abstractmethod
    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Set a gauge metric to a specific value."""
        pass


class NoOpMetricsCollector(MetricsCollector):
    """Metrics collector that keeps every call in memory.

    Useful for tests and for deployments without a metrics backend.
    """

    def __init__(self, **kwargs):
        self.counters: List[Tuple[str, float, Optional[Dict[str, str]]]] = []
        self.observations: List[Tuple[str, float, Optional[Dict[str, str]]]] = []
        self.gauges: List[Tuple[str, float, Optional[Dict[str, str]]]] = []

    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        self.counters.append((name, value, tags))

    def observe(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.observations.append((name, value, tags))

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.gauges.append((name, value, tags))

    def get_counter_total(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        """Sum a counter, optionally restricted to calls with exactly these tags."""
        return sum(
            value
            for counter_name, value, counter_tags in self.counters
            if counter_name == name and (tags is None or counter_tags == tags)
        )


class PrometheusMetricsCollector(MetricsCollector):
    """Prometheus metrics collector.

    All calls to the same metric name must use the same label keys.

    Note: Requires prometheus_client to be installed.
    Install with: pip install prometheus-client
    """

    def __init__(self, registry: Optional["CollectorRegistry"] = None, namespace: str = "logcontrol"):
        if not PROMETHEUS_AVAILABLE:
            raise ImportError(
                "prometheus_client is required for PrometheusMetricsCollector. "
                "Install with: pip install prometheus-client"
            )
        self.registry = registry
        self.namespace = namespace
        self._counters: Dict[str, Counter] = {}
        self._histograms: Dict[str, Histogram] = {}
        self._gauges: Dict[str, Gauge] = {}

    def _metric(self, cache: Dict, metric_class, name: str, tags: Optional[Dict[str, str]]):
        if name not in cache:
            kwargs = {"namespace": self.namespace, "labelnames": sorted(tags or {})}
            if self.registry is not None:
                kwargs["registry"] = self.registry
            cache[name] = metric_class(name, f"{name} ({metric_class.__name__.lower()})", **kwargs)
        metric = cache[name]
        return metric.labels(**tags) if tags else metric

    def increment(self, name: str, value: float = 1.0, tags: Optional[Dict[str, str]] = None) -> None:
        try:
            self._metric(self._counters, Counter, name, tags).inc(value)
        except Exception as e:
            logger.warning(f"Failed to increment metric {name}: {e}")

    def observe(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        try:
            self._metric(self._histograms, Histogram, name, tags).observe(value)
        except Exception as e:
            logger.warning(f"Failed to observe metric {name}: {e}")

    def gauge(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        try:
            self._metric(self._gauges, Gauge, name, tags).set(value)
        except Exception as e:
            logger.warning(f"Failed to set gauge {name}: {e}")


def create_metrics_collector(collector_type: str = "noop", **kwargs) -> MetricsCollector:
    """Create a metrics collector ("noop" or "prometheus").

    Raises:
        ValueError: If collector_type is not recognized
    """
    if collector_type == "noop":
        return NoOpMetricsCollector(**kwargs)
    elif collector_type == "prometheus":
        return PrometheusMetricsCollector(**kwargs)
    raise ValueError(f"Unknown collector_type: {collector_type}")
