"""Shared fixtures for RewardPool tests."""

import pytest

from rewardpool import RankedEntry, RewardsConfig, RewardsDistributor


@pytest.fixture
def config() -> RewardsConfig:
    return RewardsConfig(total_pool=5000)


@pytest.fixture
def distributor(config) -> RewardsDistributor:
    return RewardsDistributor(config)


@pytest.fixture
def scenario_entries() -> list[RankedEntry]:
    """A boosted active leader, an active runner-up and an opted-out third."""
    return [
        RankedEntry(participant_id="A", rank=1, raw_score=1000, is_boosted=True),
        RankedEntry(participant_id="B", rank=2, raw_score=500),
        RankedEntry(participant_id="C", rank=3, raw_score=300, is_opted_out=True),
    ]
