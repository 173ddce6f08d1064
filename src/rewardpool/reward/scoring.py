"""
Boost resolution and cohort partitioning.

The first two pipeline stages: turn ranked entries into boosted entries
and split the reward-eligible ones into active and opted-out cohorts.
"""

from __future__ import annotations

from typing import Iterable

from ..constants import BOOST_FACTOR, BOOST_TOKEN_THRESHOLD, RANK_THRESHOLD
from ..models import BoostedEntry, CohortSplit, RankedEntry


def is_boost_eligible(
    token_balance: float, threshold: float = BOOST_TOKEN_THRESHOLD
) -> bool:
    """Return True if a token balance qualifies for the score boost."""
    return token_balance >= threshold


class BoostedScoreResolver:
    """Applies the boost factor to boosted participants' scores."""

    def __init__(self, boost_factor: float = BOOST_FACTOR) -> None:
        self.boost_factor = boost_factor

    def resolve(self, entry: RankedEntry) -> float:
        if entry.is_boosted:
            return entry.raw_score * self.boost_factor
        return entry.raw_score

    def boost(self, entry: RankedEntry) -> BoostedEntry:
        data = entry.model_dump(exclude={"boosted_score"})
        return BoostedEntry(**data, boosted_score=self.resolve(entry))

    def boost_all(self, entries: Iterable[RankedEntry]) -> list[BoostedEntry]:
        return [self.boost(e) for e in entries]


class CohortPartitioner:
    """Splits eligible entries into active and opted-out cohorts.

    Both operations keep the input order, so downstream code can rely on
    a stable sort by rank.
    """

    def __init__(self, rank_threshold: int = RANK_THRESHOLD) -> None:
        self.rank_threshold = rank_threshold

    def eligible(self, entries: Iterable[RankedEntry]) -> list[RankedEntry]:
        """Keep only entries ranked within the threshold."""
        return [e for e in entries if e.rank <= self.rank_threshold]

    def partition(self, entries: Iterable[BoostedEntry]) -> CohortSplit:
        active: list[BoostedEntry] = []
        opted_out: list[BoostedEntry] = []
        for entry in entries:
            (opted_out if entry.is_opted_out else active).append(entry)
        return CohortSplit(active=active, opted_out=opted_out)
