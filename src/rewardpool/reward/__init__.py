"""
Reward Distribution Engine

Boosts scores, splits the eligible leaderboard into active and opted-out
cohorts, allocates the sponsor pool and persists carry-forward
contributions.
"""

from .scoring import BoostedScoreResolver, CohortPartitioner, is_boost_eligible
from .allocation import PoolAllocator, RewardAllocator
from .formatting import format_reward
from .persister import ContributionPersister
from .distributor import RewardsDistributor

__all__ = [
    "BoostedScoreResolver",
    "CohortPartitioner",
    "is_boost_eligible",
    "PoolAllocator",
    "RewardAllocator",
    "format_reward",
    "ContributionPersister",
    "RewardsDistributor",
]
