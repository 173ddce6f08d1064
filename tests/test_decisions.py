"""Tests for the rewards decision registry."""

import threading

import pytest

from rewardpool import (
    DecisionError,
    DecisionRegistry,
    RankedEntry,
    RewardsDecision,
    apply_decisions,
)


class TestDecisionRegistry:
    def test_opt_out(self):
        registry = DecisionRegistry()
        assert registry.opt_out("alice")
        assert registry.is_opted_out("alice")
        assert not registry.is_opted_out("bob")

    def test_opt_out_is_idempotent(self):
        registry = DecisionRegistry()
        assert registry.opt_out("alice")
        assert not registry.opt_out("alice")
        assert len(registry) == 1

    def test_initial_ids(self):
        registry = DecisionRegistry(["b", "a"])
        assert registry.opted_out_ids() == ["a", "b"]

    @pytest.mark.parametrize("participant_id", ["", "   "])
    def test_invalid_id(self, participant_id):
        with pytest.raises(DecisionError):
            DecisionRegistry().opt_out(participant_id)


class TestDecisionStates:
    def test_undecided_is_none(self):
        registry = DecisionRegistry()
        assert registry.decision("alice") is None
        assert not registry.is_opted_out("alice")
        assert len(registry) == 0

    def test_opt_in(self):
        registry = DecisionRegistry()
        assert registry.opt_in("alice")
        assert not registry.opt_in("alice")
        assert registry.decision("alice") is RewardsDecision.OPTED_IN
        assert not registry.is_opted_out("alice")
        assert registry.opted_out_ids() == []
        assert len(registry) == 1

    def test_opt_out_after_opt_in(self):
        registry = DecisionRegistry()
        registry.opt_in("alice")
        assert registry.opt_out("alice")
        assert registry.decision("alice") is RewardsDecision.OPTED_OUT
        assert len(registry) == 1

    def test_opt_in_after_opt_out_rejected(self):
        registry = DecisionRegistry(["alice"])
        with pytest.raises(DecisionError, match="already opted out"):
            registry.opt_in("alice")
        assert registry.is_opted_out("alice")

    @pytest.mark.parametrize("participant_id", ["", "   "])
    def test_opt_in_invalid_id(self, participant_id):
        with pytest.raises(DecisionError):
            DecisionRegistry().opt_in(participant_id)

    def test_decision_values(self):
        assert RewardsDecision.OPTED_IN.value == "opted_in"
        assert RewardsDecision.OPTED_OUT.value == "opted_out"


class TestOptedOutPercentage:
    def test_no_decisions(self):
        assert DecisionRegistry().opted_out_percentage() == 0

    def test_counts_decided_only(self):
        registry = DecisionRegistry(["a", "b"])
        registry.opt_in("c")
        # 2 of 3 decided participants
        assert registry.opted_out_percentage() == 67

    def test_rounds_half_up(self):
        registry = DecisionRegistry(["a"])
        for pid in ("b", "c", "d", "e", "f", "g", "h"):
            registry.opt_in(pid)
        # 1 of 8 is 12.5%
        assert registry.opted_out_percentage() == 13

    def test_all_opted_out(self):
        assert DecisionRegistry(["a", "b"]).opted_out_percentage() == 100


class TestConcurrentDecisions:
    def test_parallel_opt_outs(self):
        registry = DecisionRegistry()
        ids = [f"p{i}" for i in range(200)]

        def worker(chunk):
            for pid in chunk:
                registry.opt_out(pid)
                registry.is_opted_out(pid)

        threads = [threading.Thread(target=worker, args=(ids[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 200
        assert registry.opted_out_ids() == sorted(ids)
        assert registry.opted_out_percentage() == 100


class TestApplyDecisions:
    def test_flags_from_registry(self):
        entries = [
            RankedEntry(participant_id="a", rank=1, raw_score=10),
            RankedEntry(participant_id="b", rank=2, raw_score=5),
        ]
        applied = apply_decisions(entries, DecisionRegistry(["b"]))
        assert [e.is_opted_out for e in applied] == [False, True]
        # originals untouched
        assert not entries[1].is_opted_out

    def test_existing_flag_kept(self):
        entries = [RankedEntry(participant_id="a", rank=1, raw_score=10, is_opted_out=True)]
        applied = apply_decisions(entries, DecisionRegistry())
        assert applied[0].is_opted_out

    def test_feeds_distributor(self, distributor):
        entries = [
            RankedEntry(participant_id="a", rank=1, raw_score=10),
            RankedEntry(participant_id="b", rank=2, raw_score=10),
        ]
        results = distributor.calculate_rewards_with_optouts(
            apply_decisions(entries, DecisionRegistry(["b"]))
        )
        assert results[0].final_reward == pytest.approx(2500)
        assert results[1].final_reward == 0
        assert results[1].opted_out_contribution == pytest.approx(2500)
