"""
Contribution stores for RewardPool.

Provides the abstract store interface and its memory, Redis and
PostgreSQL implementations.
"""

from ..exceptions import ConfigurationError
from .provider import AbstractContributionStore, StorageConfig
from .memory_provider import MemoryContributionStore
from .redis_provider import RedisContributionStore
from .postgres_provider import PostgresContributionStore

_BACKENDS = {
    "memory": MemoryContributionStore,
    "redis": RedisContributionStore,
    "postgres": PostgresContributionStore,
}


def create_store(config: StorageConfig) -> AbstractContributionStore:
    """Build the store selected by ``config.backend`` (not yet connected)."""
    store_cls = _BACKENDS.get(config.backend)
    if store_cls is None:
        raise ConfigurationError(
            f"Unknown storage backend '{config.backend}'. "
            f"Available: {sorted(_BACKENDS)}"
        )
    return store_cls(config)


__all__ = [
    "AbstractContributionStore",
    "StorageConfig",
    "MemoryContributionStore",
    "RedisContributionStore",
    "PostgresContributionStore",
    "create_store",
]
