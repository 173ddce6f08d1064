"""
Prometheus Metrics Integration.

Provides metrics collection and export for RewardPool.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest


class MetricsCollector:
    """
    Prometheus metrics collector for RewardPool.

    Exposes metrics:
    - rewardpool_calculations_total{operation="..."}
    - rewardpool_contributions_persisted_total
    - rewardpool_persist_failures_total
    - rewardpool_active_pool / rewardpool_future_pool / rewardpool_multiplier

    Each collector owns its registry, so several distributors can live in
    one process without colliding metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics collector."""
        self.registry = registry or CollectorRegistry()

        self.calculations_total = Counter(
            "rewardpool_calculations_total",
            "Number of reward pipeline evaluations",
            ["operation"],
            registry=self.registry,
        )

        self.contributions_persisted_total = Counter(
            "rewardpool_contributions_persisted_total",
            "Number of opted-out contributions written to the store",
            registry=self.registry,
        )

        self.persist_failures_total = Counter(
            "rewardpool_persist_failures_total",
            "Number of contribution batches rejected by the store",
            registry=self.registry,
        )

        self.active_pool = Gauge(
            "rewardpool_active_pool",
            "Pool share distributed to the active cohort",
            registry=self.registry,
        )

        self.future_pool = Gauge(
            "rewardpool_future_pool",
            "Pool share carried forward by opted-out participants",
            registry=self.registry,
        )

        self.multiplier = Gauge(
            "rewardpool_multiplier",
            "Reward per unit of boosted score for the active cohort",
            registry=self.registry,
        )

    def record_calculation(self, operation: str):
        """Record one pipeline evaluation."""
        self.calculations_total.labels(operation=operation).inc()

    def set_pool(self, active_pool: float, future_pool: float, multiplier: float):
        """Publish the latest pool split."""
        self.active_pool.set(active_pool)
        self.future_pool.set(future_pool)
        self.multiplier.set(multiplier)

    def record_persisted(self, count: int):
        self.contributions_persisted_total.inc(count)

    def record_persist_failure(self):
        self.persist_failures_total.inc()

    def export(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)
