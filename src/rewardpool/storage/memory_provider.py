"""
In-Memory Contribution Store.

Simple in-memory implementation for development and testing.
"""

from typing import Optional
import asyncio

from ..models import ContributionRecord
from .provider import AbstractContributionStore, StorageConfig


class MemoryContributionStore(AbstractContributionStore):
    """
    In-memory contribution store.

    Uses a dictionary keyed by participant id. Data is lost on restart.
    Suitable for development and testing only.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize in-memory storage."""
        super().__init__(config or StorageConfig(backend="memory"))
        self._records: dict[str, ContributionRecord] = {}
        self._lock = asyncio.Lock()
        self._connected = False

    async def connect(self) -> None:
        """Establish connection (no-op for memory)."""
        self._connected = True

    async def disconnect(self) -> None:
        """Close connection (no-op for memory)."""
        self._connected = False

    async def health_check(self) -> bool:
        """Check if storage is healthy."""
        return self._connected

    async def upsert(self, records: list[ContributionRecord]) -> None:
        """Insert or overwrite records; the whole batch lands under one lock."""
        async with self._lock:
            for record in records:
                self._records[record.participant_id] = record.model_copy()

    async def get(self, participant_id: str) -> Optional[ContributionRecord]:
        record = self._records.get(participant_id)
        return record.model_copy() if record else None

    async def list_all(self) -> list[ContributionRecord]:
        return [self._records[k].model_copy() for k in sorted(self._records)]

    def __len__(self) -> int:
        return len(self._records)
