"""Tests for contribution persistence through the distributor."""

import pytest

from rewardpool import (
    ConfigurationError,
    Contribution,
    ContributionPersister,
    ContributionValidationError,
    RankedEntry,
    RewardsConfig,
    RewardsDistributor,
    StorageError,
)
from rewardpool.storage import MemoryContributionStore


class RejectingStore(MemoryContributionStore):
    """Memory store that refuses every batch."""

    def __init__(self, error: Exception):
        super().__init__()
        self.error = error
        self.calls = 0

    async def upsert(self, records):
        self.calls += 1
        raise self.error


class CountingStore(MemoryContributionStore):
    def __init__(self):
        super().__init__()
        self.batches = []

    async def upsert(self, records):
        self.batches.append(list(records))
        await super().upsert(records)


@pytest.fixture
async def store():
    store = CountingStore()
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture
def persister(store) -> ContributionPersister:
    return ContributionPersister(store)


# ---------------------------------------------------------------------------
# ContributionPersister
# ---------------------------------------------------------------------------

class TestContributionModel:
    @pytest.mark.parametrize(
        "fields",
        [
            {"participant_id": "", "contribution_amount": 1.0},
            {"participant_id": "a", "contribution_amount": -0.01},
            {"participant_id": "a", "contribution_amount": float("nan")},
            {"participant_id": "a", "contribution_amount": float("inf")},
            {"participant_id": "a", "contribution_amount": 1.0, "wallet": "0xabc"},
        ],
    )
    def test_invalid_contribution_rejected(self, fields):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            Contribution(**fields)

    def test_zero_amount_allowed(self):
        assert Contribution(participant_id="a", contribution_amount=0).contribution_amount == 0


class TestContributionPersister:
    @pytest.mark.asyncio
    async def test_single_batch(self, persister, store):
        await persister.persist([
            Contribution(participant_id="a", contribution_amount=1.5),
            Contribution(participant_id="b", contribution_amount=2.5),
        ])
        assert len(store.batches) == 1
        assert len(store) == 2
        first, second = store.batches[0]
        assert first.computed_at == second.computed_at

    @pytest.mark.asyncio
    async def test_empty_batch_skips_store(self, persister, store):
        await persister.persist([])
        assert store.batches == []

    @pytest.mark.asyncio
    async def test_duplicates_collapse_last_wins(self, persister, store):
        await persister.persist([
            Contribution(participant_id="a", contribution_amount=1.0),
            Contribution(participant_id="a", contribution_amount=3.0),
        ])
        assert len(store.batches[0]) == 1
        assert (await persister.get("a")).contribution_amount == 3.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "contribution",
        [
            Contribution.model_construct(participant_id="", contribution_amount=1.0),
            Contribution(participant_id="  ", contribution_amount=1.0),
            Contribution.model_construct(participant_id="a", contribution_amount=-1.0),
            Contribution.model_construct(participant_id="a", contribution_amount=float("nan")),
        ],
    )
    async def test_invalid_batch_writes_nothing(self, persister, store, contribution):
        batch = [Contribution(participant_id="ok", contribution_amount=1.0), contribution]
        with pytest.raises(ContributionValidationError):
            await persister.persist(batch)
        assert store.batches == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_storage_error_propagates(self):
        store = RejectingStore(StorageError("constraint violation"))
        with pytest.raises(StorageError, match="constraint violation"):
            await ContributionPersister(store).persist(
                [Contribution(participant_id="a", contribution_amount=1.0)]
            )
        assert store.calls == 1

    @pytest.mark.asyncio
    async def test_driver_error_wrapped(self):
        store = RejectingStore(ConnectionError("store unavailable"))
        with pytest.raises(StorageError) as exc_info:
            await ContributionPersister(store).persist(
                [Contribution(participant_id="a", contribution_amount=1.0)]
            )
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_get_missing(self, persister):
        assert await persister.get("nobody") is None
        assert await persister.get("") is None


# ---------------------------------------------------------------------------
# RewardsDistributor.store_opted_out_contributions
# ---------------------------------------------------------------------------

class TestStoreOptedOutContributions:
    @pytest.mark.asyncio
    async def test_only_opted_out_persisted(self, config, persister, scenario_entries):
        distributor = RewardsDistributor(config, persister=persister)
        await distributor.store_opted_out_contributions(scenario_entries)

        records = await persister.list_all()
        assert [r.participant_id for r in records] == ["C"]
        assert records[0].contribution_amount == pytest.approx(789.47, abs=0.01)

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, config, persister, scenario_entries):
        distributor = RewardsDistributor(config, persister=persister)
        await distributor.store_opted_out_contributions(scenario_entries)
        first = await persister.get("C")
        await distributor.store_opted_out_contributions(scenario_entries)
        second = await persister.get("C")

        assert len(await persister.list_all()) == 1
        assert second.contribution_amount == first.contribution_amount

    @pytest.mark.asyncio
    async def test_refreshed_snapshot_converges(self, config, persister, scenario_entries):
        distributor = RewardsDistributor(config, persister=persister)
        await distributor.store_opted_out_contributions(scenario_entries)

        refreshed = scenario_entries[:2] + [
            RankedEntry(participant_id="C", rank=3, raw_score=600, is_opted_out=True)
        ]
        await distributor.store_opted_out_contributions(refreshed)

        record = await persister.get("C")
        assert record.contribution_amount == pytest.approx(600 / 2200 * 5000)

    @pytest.mark.asyncio
    async def test_no_opted_out_skips_store(self, config, persister, store):
        distributor = RewardsDistributor(config, persister=persister)
        await distributor.store_opted_out_contributions(
            [RankedEntry(participant_id="a", rank=1, raw_score=10)]
        )
        assert store.batches == []

    @pytest.mark.asyncio
    async def test_without_persister(self, distributor, scenario_entries):
        with pytest.raises(ConfigurationError):
            await distributor.store_opted_out_contributions(scenario_entries)

    @pytest.mark.asyncio
    async def test_failure_propagates(self, scenario_entries):
        distributor = RewardsDistributor(
            RewardsConfig(total_pool=5000),
            persister=ContributionPersister(RejectingStore(StorageError("down"))),
        )
        with pytest.raises(StorageError):
            await distributor.store_opted_out_contributions(scenario_entries)
