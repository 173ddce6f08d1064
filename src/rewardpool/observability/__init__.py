"""
Observability components for RewardPool.

Provides Prometheus metrics for reward calculations and contribution writes.
"""

from .metrics import MetricsCollector

__all__ = ["MetricsCollector"]
