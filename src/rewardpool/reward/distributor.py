"""
Rewards Distributor.

Public entry point of the distribution engine. Runs the pipeline

    ranked entries -> boost -> rank filter / partition -> pool allocation
    -> per-participant rewards -> (opted-out cohort) contribution persistence

Every operation except :meth:`RewardsDistributor.store_opted_out_contributions`
is pure and may be called concurrently.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..config import RewardsConfig
from ..exceptions import ConfigurationError, StorageError
from ..models import (
    Contribution,
    PoolAllocation,
    PoolSummary,
    RankedEntry,
    RewardResult,
)
from ..observability.metrics import MetricsCollector
from .allocation import PoolAllocator, RewardAllocator
from .formatting import ZERO_REWARD, format_reward
from .persister import ContributionPersister
from .scoring import BoostedScoreResolver, CohortPartitioner, is_boost_eligible

logger = logging.getLogger(__name__)


class RewardsDistributor:
    """Distributes the sponsor pool among the top of a leaderboard.

    Opted-out participants receive nothing; their proportional share of the
    pool is carved out as a carry-forward contribution instead of being
    redistributed to the active cohort.

    Example:
        >>> distributor = RewardsDistributor(RewardsConfig(total_pool=5000))
        >>> results = distributor.calculate_rewards_with_optouts(entries)
    """

    def __init__(
        self,
        config: Optional[RewardsConfig] = None,
        persister: Optional[ContributionPersister] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.config = config or RewardsConfig()
        self._persister = persister
        self._metrics = metrics
        self._resolver = BoostedScoreResolver(self.config.boost_factor)
        self._partitioner = CohortPartitioner(self.config.rank_threshold)
        self._pool_allocator = PoolAllocator()
        self._reward_allocator = RewardAllocator()

    @property
    def total_pool(self) -> float:
        return self.config.total_pool

    def is_boost_eligible(self, token_balance: float) -> bool:
        """Return True if *token_balance* meets the configured boost threshold."""
        return is_boost_eligible(token_balance, self.config.boost_token_threshold)

    def _allocate(self, entries: Iterable[RankedEntry], operation: str):
        eligible = self._partitioner.eligible(entries)
        boosted = self._resolver.boost_all(eligible)
        split = self._partitioner.partition(boosted)
        allocation = self._pool_allocator.allocate(
            split.active, split.opted_out, self.total_pool
        )
        logger.debug(
            "%s: %d eligible (%d active, %d opted out), multiplier=%.6f",
            operation,
            len(boosted),
            len(split.active),
            len(split.opted_out),
            allocation.multiplier,
        )
        if self._metrics is not None:
            self._metrics.record_calculation(operation)
            self._metrics.set_pool(
                allocation.active_pool_share,
                allocation.future_pool,
                allocation.multiplier,
            )
        return boosted, split, allocation

    def allocate_pool(self, entries: Iterable[RankedEntry]) -> PoolAllocation:
        """Return the raw cohort aggregates and multiplier."""
        _, _, allocation = self._allocate(entries, "allocate_pool")
        return allocation

    def calculate_rewards_with_optouts(
        self, entries: Iterable[RankedEntry]
    ) -> list[RewardResult]:
        """Compute one result per reward-eligible entry, sorted by rank.

        Entries ranked beyond the threshold are dropped; their reward is 0.
        """
        boosted, _, allocation = self._allocate(entries, "calculate_rewards")
        return self._reward_allocator.allocate_all(boosted, allocation)

    def get_rewards_summary(self, entries: Iterable[RankedEntry]) -> PoolSummary:
        _, split, allocation = self._allocate(entries, "summary")
        return PoolSummary(
            total_pool=self.total_pool,
            total_eligible_scores=allocation.sum_active,
            opted_out_users=len(split.opted_out),
            opted_out_contribution=allocation.future_pool,
            multiplier=allocation.multiplier,
            active_pool=allocation.active_pool_share,
            future_pool=allocation.future_pool,
        )

    def calculate_user_reward(
        self,
        score: float,
        rank: Optional[int],
        is_boosted: bool,
        is_opted_out: bool,
        entries: Iterable[RankedEntry],
    ) -> str:
        """Return a participant's reward as a display string.

        Rank eligibility and the opt-out are checked before any math, so
        ineligible or opted-out participants always see ``$0``.
        """
        if not rank or rank > self.config.rank_threshold:
            return ZERO_REWARD
        if is_opted_out:
            return ZERO_REWARD

        boosted_score = score * self.config.boost_factor if is_boosted else score
        _, _, allocation = self._allocate(entries, "user_reward")
        if allocation.multiplier == 0:
            return ZERO_REWARD
        return format_reward(boosted_score * allocation.multiplier)

    def get_future_pool_amount(self, entries: Iterable[RankedEntry]) -> float:
        """Amount carried forward by opted-out participants."""
        return self.allocate_pool(entries).future_pool

    def get_active_pool_amount(self, entries: Iterable[RankedEntry]) -> float:
        """Amount distributed to the active cohort."""
        return self.allocate_pool(entries).active_pool_share

    def opted_out_contributions(
        self, entries: Iterable[RankedEntry]
    ) -> list[Contribution]:
        return [
            Contribution(
                participant_id=r.participant_id,
                contribution_amount=r.opted_out_contribution,
            )
            for r in self.calculate_rewards_with_optouts(entries)
            if r.is_opted_out
        ]

    async def store_opted_out_contributions(
        self, entries: Iterable[RankedEntry]
    ) -> None:
        """Run the pipeline and persist the opted-out cohort's contributions.

        Raises:
            ConfigurationError: If the distributor has no persister.
            StorageError: If the store rejects the batch.
        """
        if self._persister is None:
            raise ConfigurationError("No contribution persister configured")

        contributions = self.opted_out_contributions(entries)
        try:
            await self._persister.persist(contributions)
        except StorageError:
            if self._metrics is not None:
                self._metrics.record_persist_failure()
            raise
        if self._metrics is not None:
            self._metrics.record_persisted(len(contributions))
