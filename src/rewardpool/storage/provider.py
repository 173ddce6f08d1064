"""
Abstract Contribution Store Interface.

Defines the contract that all contribution storage backends must implement.
"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel, Field

from ..models import ContributionRecord


class StorageConfig(BaseModel):
    """Configuration for a contribution store."""

    backend: str = Field(default="memory", description="Storage backend type")
    connection_string: Optional[str] = Field(default=None, description="Connection string")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="Operation timeout")

    # Redis-specific
    redis_host: Optional[str] = Field(default="localhost")
    redis_port: int = Field(default=6379, ge=1, le=65535)
    redis_db: int = Field(default=0, ge=0)
    redis_password: Optional[str] = None
    redis_ssl: bool = False
    key_prefix: str = Field(default="rewardpool:", description="Redis key prefix")

    # PostgreSQL-specific
    postgres_host: Optional[str] = Field(default="localhost")
    postgres_port: int = Field(default=5432, ge=1, le=65535)
    postgres_database: Optional[str] = Field(default="rewardpool")
    postgres_user: Optional[str] = None
    postgres_password: Optional[str] = None
    postgres_ssl_mode: str = Field(default="prefer")
    table_name: str = Field(default="reward_contributions")


class AbstractContributionStore(ABC):
    """
    Abstract contribution store.

    All storage backends (memory, Redis, Postgres) must implement this
    interface. Writes are upserts keyed by ``participant_id``, so replaying
    a batch converges to the same state instead of duplicating rows.
    A backend applies one ``upsert`` call atomically where it can and
    raises :class:`~rewardpool.exceptions.StorageError` when the batch
    is rejected.
    """

    def __init__(self, config: StorageConfig):
        """Initialize store with configuration."""
        self.config = config

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to storage backend."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to storage backend."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if storage backend is healthy."""
        pass

    @abstractmethod
    async def upsert(self, records: list[ContributionRecord]) -> None:
        """Insert or overwrite each record by ``participant_id``."""
        pass

    @abstractmethod
    async def get(self, participant_id: str) -> Optional[ContributionRecord]:
        """Get the stored record for a participant, if any."""
        pass

    @abstractmethod
    async def list_all(self) -> list[ContributionRecord]:
        """Get every stored record, ordered by participant id."""
        pass
