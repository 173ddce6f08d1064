"""
Contribution Persister.

Idempotently records each opted-out participant's contribution in a
contribution store, keyed by participant id.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from ..exceptions import ContributionValidationError, StorageError
from ..models import Contribution, ContributionRecord
from ..storage.provider import AbstractContributionStore

logger = logging.getLogger(__name__)


class ContributionPersister:
    """Upserts contribution batches into a store.

    A batch is validated as a whole before anything is written and handed
    to the store in a single ``upsert`` call. Store failures propagate as
    :class:`StorageError`; retrying is the caller's decision and is always
    safe because writes are keyed upserts.
    """

    def __init__(self, store: AbstractContributionStore) -> None:
        self._store = store

    @property
    def store(self) -> AbstractContributionStore:
        return self._store

    @staticmethod
    def _validate(contribution: Contribution) -> None:
        if not contribution.participant_id or not contribution.participant_id.strip():
            raise ContributionValidationError("Invalid participant id in contribution batch")
        amount = contribution.contribution_amount
        if not math.isfinite(amount) or amount < 0:
            raise ContributionValidationError(
                f"Invalid contribution amount {amount!r} for {contribution.participant_id}"
            )

    async def persist(self, contributions: Iterable[Contribution]) -> None:
        """Store *contributions*, overwriting earlier values per participant.

        Raises:
            ContributionValidationError: If any item is invalid; nothing is written.
            StorageError: If the store rejects the batch.
        """
        batch = list(contributions)
        if not batch:
            return

        for contribution in batch:
            self._validate(contribution)

        # Later entries for the same participant win.
        computed_at = datetime.now(timezone.utc)
        by_participant: dict[str, ContributionRecord] = {}
        for c in batch:
            if c.participant_id in by_participant:
                logger.warning("Duplicate contribution for %s in batch", c.participant_id)
            by_participant[c.participant_id] = ContributionRecord(
                participant_id=c.participant_id,
                contribution_amount=c.contribution_amount,
                computed_at=computed_at,
            )
        records = list(by_participant.values())

        try:
            await self._store.upsert(records)
        except StorageError:
            logger.error("Failed to persist %d contributions", len(records))
            raise
        except Exception as exc:
            logger.exception("Unexpected error persisting %d contributions", len(records))
            raise StorageError(f"Failed to persist contributions: {exc}") from exc

        logger.info("Persisted contributions for %d participants", len(records))

    async def get(self, participant_id: str) -> Optional[ContributionRecord]:
        """Return the stored contribution for a participant, if any."""
        if not participant_id:
            return None
        return await self._store.get(participant_id)

    async def list_all(self) -> list[ContributionRecord]:
        return await self._store.list_all()
