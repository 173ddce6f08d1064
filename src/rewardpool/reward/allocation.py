"""
Pool and per-participant reward allocation.

``PoolAllocator`` is the single place the active/opted-out split and the
per-unit-score multiplier are computed. ``RewardAllocator`` turns that
multiplier into one :class:`RewardResult` per eligible participant.
"""

from __future__ import annotations

from typing import Iterable

from ..models import BoostedEntry, PoolAllocation, RewardResult


class PoolAllocator:
    """Carves the opted-out cohort's proportional share out of the pool.

    The active cohort's multiplier depends only on the *proportion* of
    boosted score the opted-out cohort represents, not on how many
    participants opted out.
    """

    def allocate(
        self,
        active: list[BoostedEntry],
        opted_out: list[BoostedEntry],
        total_pool: float,
    ) -> PoolAllocation:
        sum_active = sum(e.boosted_score for e in active)
        sum_opted_out = sum(e.boosted_score for e in opted_out)
        sum_all = sum_active + sum_opted_out

        if sum_all == 0:
            return PoolAllocation(
                total_pool=total_pool,
                sum_active=sum_active,
                sum_opted_out=sum_opted_out,
                sum_all=sum_all,
            )

        active_pool_share = (sum_active / sum_all) * total_pool
        multiplier = active_pool_share / sum_active if sum_active > 0 else 0.0
        return PoolAllocation(
            total_pool=total_pool,
            sum_active=sum_active,
            sum_opted_out=sum_opted_out,
            sum_all=sum_all,
            active_pool_share=active_pool_share,
            multiplier=multiplier,
        )


class RewardAllocator:
    """Computes individual rewards and opted-out contributions."""

    def allocate(
        self,
        entry: BoostedEntry,
        multiplier: float,
        total_pool: float,
        sum_all: float,
    ) -> RewardResult:
        if entry.is_opted_out:
            base_reward = 0.0
            final_reward = 0.0
            contribution = (
                (entry.boosted_score / sum_all) * total_pool if sum_all > 0 else 0.0
            )
        else:
            base_reward = entry.raw_score * multiplier
            final_reward = entry.boosted_score * multiplier
            contribution = 0.0

        return RewardResult(
            participant_id=entry.participant_id,
            rank=entry.rank,
            base_score=entry.raw_score,
            boosted_score=entry.boosted_score,
            is_boosted=entry.is_boosted,
            is_opted_out=entry.is_opted_out,
            base_reward=base_reward,
            final_reward=final_reward,
            opted_out_contribution=contribution,
            name=entry.name,
        )

    def allocate_all(
        self,
        entries: Iterable[BoostedEntry],
        allocation: PoolAllocation,
    ) -> list[RewardResult]:
        """Allocate every entry and return results sorted by ascending rank.

        The sort is stable, so entries sharing a rank keep their input order.
        """
        results = [
            self.allocate(
                e, allocation.multiplier, allocation.total_pool, allocation.sum_all
            )
            for e in entries
        ]
        return sorted(results, key=lambda r: r.rank)
