"""
Rewards Decision Registry

Records whether each participant keeps their reward or pays it forward,
and stamps opt-outs onto ranked entries before distribution.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Iterable, Optional

from .exceptions import DecisionError
from .models import RankedEntry

logger = logging.getLogger(__name__)


class RewardsDecision(str, Enum):
    """A participant's choice for their reward. Undecided is ``None``."""

    OPTED_IN = "opted_in"
    OPTED_OUT = "opted_out"


def _check_id(participant_id: str) -> None:
    if not participant_id or not participant_id.strip():
        raise DecisionError("Invalid participant id provided")


class DecisionRegistry:
    """Thread-safe record of participants' rewards decisions.

    Opting out is permanent: repeating it is a no-op, and a later opt-in
    for the same participant raises :class:`DecisionError`. Opting in can
    be followed by an opt-out.
    """

    def __init__(self, opted_out: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._decisions: dict[str, RewardsDecision] = {}
        for participant_id in opted_out:
            self.opt_out(participant_id)

    def opt_out(self, participant_id: str) -> bool:
        """Record an opt-out. Returns True if it was not already recorded."""
        _check_id(participant_id)
        with self._lock:
            if self._decisions.get(participant_id) is RewardsDecision.OPTED_OUT:
                return False
            self._decisions[participant_id] = RewardsDecision.OPTED_OUT
        logger.info("Participant %s opted out of rewards", participant_id)
        return True

    def opt_in(self, participant_id: str) -> bool:
        """Record an opt-in. Returns True if it was not already recorded.

        Raises:
            DecisionError: If the participant has already opted out.
        """
        _check_id(participant_id)
        with self._lock:
            current = self._decisions.get(participant_id)
            if current is RewardsDecision.OPTED_OUT:
                raise DecisionError(
                    f"Participant {participant_id} has already opted out"
                )
            if current is RewardsDecision.OPTED_IN:
                return False
            self._decisions[participant_id] = RewardsDecision.OPTED_IN
        logger.info("Participant %s opted in to rewards", participant_id)
        return True

    def decision(self, participant_id: str) -> Optional[RewardsDecision]:
        with self._lock:
            return self._decisions.get(participant_id)

    def is_opted_out(self, participant_id: str) -> bool:
        return self.decision(participant_id) is RewardsDecision.OPTED_OUT

    def opted_out_ids(self) -> list[str]:
        with self._lock:
            return sorted(
                pid
                for pid, decision in self._decisions.items()
                if decision is RewardsDecision.OPTED_OUT
            )

    def opted_out_percentage(self) -> int:
        """Share of decided participants who opted out, rounded to a whole percent.

        Returns 0 when nobody has decided yet.
        """
        with self._lock:
            decided = len(self._decisions)
            opted_out = sum(
                1 for d in self._decisions.values() if d is RewardsDecision.OPTED_OUT
            )
        if decided == 0:
            return 0
        return int(opted_out * 100 / decided + 0.5)

    def __len__(self) -> int:
        """Number of participants with a recorded decision."""
        with self._lock:
            return len(self._decisions)


def apply_decisions(
    entries: Iterable[RankedEntry], registry: DecisionRegistry
) -> list[RankedEntry]:
    """Return copies of *entries* with ``is_opted_out`` taken from *registry*.

    An entry already flagged as opted out stays flagged.
    """
    return [
        entry.model_copy(
            update={
                "is_opted_out": entry.is_opted_out
                or registry.is_opted_out(entry.participant_id)
            }
        )
        for entry in entries
    ]
