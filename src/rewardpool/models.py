"""
Reward Distribution Models.

Closed record types flowing through the distribution pipeline: ranked
input entries, their boosted form, cohort and pool aggregates, and the
per-participant results and contribution records.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class RankedEntry(BaseModel):
    """A leaderboard position supplied by the leaderboard provider."""

    model_config = {"extra": "forbid", "allow_inf_nan": False}

    participant_id: str = Field(min_length=1)
    rank: int = Field(ge=1, description="1 = top of the leaderboard")
    raw_score: float = Field(ge=0.0)
    is_boosted: bool = False
    is_opted_out: bool = False
    name: Optional[str] = None


class BoostedEntry(RankedEntry):
    """A ranked entry with its boost applied."""

    boosted_score: float = Field(ge=0.0)


class CohortSplit(BaseModel):
    """Disjoint active / opted-out cohorts of the eligible entries."""

    active: list[BoostedEntry] = Field(default_factory=list)
    opted_out: list[BoostedEntry] = Field(default_factory=list)


class PoolAllocation(BaseModel):
    """How the total pool splits between the two cohorts."""

    total_pool: float
    sum_active: float = 0.0
    sum_opted_out: float = 0.0
    sum_all: float = 0.0
    active_pool_share: float = 0.0
    multiplier: float = 0.0

    @property
    def future_pool(self) -> float:
        """Portion of the pool carried forward by the opted-out cohort."""
        if self.sum_all <= 0:
            return 0.0
        return self.total_pool - self.active_pool_share


class PoolSummary(BaseModel):
    """Aggregate pool statistics for one leaderboard snapshot."""

    total_pool: float
    total_eligible_scores: float = 0.0
    opted_out_users: int = 0
    opted_out_contribution: float = 0.0
    multiplier: float = 0.0
    active_pool: float = 0.0
    future_pool: float = 0.0


class RewardResult(BaseModel):
    """Reward outcome for a single eligible participant."""

    participant_id: str
    rank: int
    base_score: float
    boosted_score: float
    is_boosted: bool
    is_opted_out: bool
    base_reward: float
    final_reward: float
    opted_out_contribution: float
    name: Optional[str] = None


class Contribution(BaseModel):
    """An opted-out participant's share of the pool, before persistence."""

    model_config = {"extra": "forbid", "allow_inf_nan": False}

    participant_id: str = Field(min_length=1)
    contribution_amount: float = Field(ge=0.0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContributionRecord(Contribution):
    """A persisted contribution, upserted by ``participant_id``."""

    computed_at: datetime = Field(default_factory=_utcnow)
