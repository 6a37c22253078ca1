"""
Prometheus metrics for the RtF engine.

A custom collector reads the engine counters, the stampede registry and the
cache driver metrics at scrape time and renders them into a dedicated
registry. Nothing on the request path touches Prometheus objects.
"""

import logging
from typing import Iterator

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import Collector

from application.ports import WeekGoalsCache
from backend.core.rtf_stats import RtfStats
from infrastructure.cache.stampede import InFlightRegistry

logger = logging.getLogger(__name__)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


class RtfCollector(Collector):
    """Snapshots RtF counters into metric families on each scrape."""

    def __init__(self, stats: RtfStats, cache: WeekGoalsCache, in_flight: InFlightRegistry):
        self._stats = stats
        self._cache = cache
        self._in_flight = in_flight

    def collect(self) -> Iterator:
        stats = self._stats

        yield GaugeMetricFamily(
            "rtf_week_goals_hit_rate",
            "Week goals cache hit rate",
            value=stats.week_goals_hit_rate,
        )
        yield GaugeMetricFamily(
            "rtf_forecast_hit_rate",
            "Forecast cache hit rate",
            value=stats.forecast_hit_rate,
        )

        cache_metrics = self._cache.metrics()
        yield GaugeMetricFamily(
            "rtf_cache_hit_rate",
            "Driver-level RtF cache hit rate",
            value=float(cache_metrics.get("hit_rate", 0.0)),
        )
        if "l1_size" in cache_metrics:
            yield GaugeMetricFamily(
                "rtf_layered_l1_entries",
                "Live entries in the layered cache L1 tier",
                value=float(cache_metrics["l1_size"]),
            )
            yield GaugeMetricFamily(
                "rtf_layered_l1_hit_rate",
                "Share of layered cache hits served from L1",
                value=float(cache_metrics.get("l1_hit_rate", 0.0)),
            )

        yield CounterMetricFamily(
            "rtf_stampede_wait_total",
            "Requests that awaited an in-flight computation",
            value=self._in_flight.waits,
        )
        yield CounterMetricFamily(
            "rtf_stampede_bypass_total",
            "Requests that started a computation",
            value=self._in_flight.bypasses,
        )
        yield CounterMetricFamily(
            "rtf_tm_adjustments_total",
            "Applied Training-Max adjustments",
            value=stats.tm_adjustments,
        )
        yield CounterMetricFamily(
            "rtf_tm_guardrail_rejections_total",
            "TM adjustments rejected by the max-delta guardrail",
            value=stats.tm_guardrail_rejections,
        )
        yield CounterMetricFamily(
            "rtf_tm_unknown_exercise_rejections_total",
            "TM adjustments rejected for exercises outside the routine's RtF set",
            value=stats.tm_unknown_exercise_rejections,
        )
        yield CounterMetricFamily(
            "rtf_tm_routine_access_rejections_total",
            "Routine requests rejected for ownership",
            value=stats.tm_routine_access_rejections,
        )


class MetricsCollector:
    """Owns the Prometheus registry exposed at /metrics."""

    def __init__(self, stats: RtfStats, cache: WeekGoalsCache, in_flight: InFlightRegistry):
        self.registry = CollectorRegistry(auto_describe=False)
        self.registry.register(RtfCollector(stats, cache, in_flight))

    def render(self) -> bytes:
        """Text exposition of all RtF metrics."""
        return generate_latest(self.registry)
