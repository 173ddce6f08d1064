"""
Redis Contribution Store.

Production-ready Redis backend with connection pooling and error handling.
"""

from datetime import datetime
from typing import Optional
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ..exceptions import StorageError
from ..models import ContributionRecord
from .provider import AbstractContributionStore, StorageConfig

logger = logging.getLogger(__name__)


class RedisContributionStore(AbstractContributionStore):
    """
    Redis contribution store.

    Layout:
    - ``{prefix}contribution:{participant_id}`` hash with ``amount`` and
      ``computed_at`` fields
    - ``{prefix}contributions`` set of every stored participant id

    A batch is written in one MULTI/EXEC transaction, so concurrent
    batches touching the same participant resolve last-write-wins.
    """

    RECORD_SUFFIX = "contribution"
    IDS_SET_KEY = "contributions"

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        client: Optional[aioredis.Redis] = None,
    ):
        """Initialize Redis storage, optionally around an existing client."""
        super().__init__(config or StorageConfig(backend="redis"))
        self._client = client
        self._pool = None
        self._owns_client = client is None

    # -- Key helpers ----------------------------------------------------------

    def _key(self, participant_id: str) -> str:
        return f"{self.config.key_prefix}{self.RECORD_SUFFIX}:{participant_id}"

    def _ids_key(self) -> str:
        return f"{self.config.key_prefix}{self.IDS_SET_KEY}"

    # -- Lifecycle ------------------------------------------------------------

    def _build_pool(self) -> aioredis.ConnectionPool:
        """Create the connection pool described by the store config.

        A ``connection_string`` wins over the host fields; use a
        ``rediss://`` URL there for TLS.
        """
        if self.config.connection_string:
            return aioredis.ConnectionPool.from_url(
                self.config.connection_string,
                max_connections=self.config.pool_size,
                socket_timeout=self.config.timeout_seconds,
                decode_responses=True,
            )
        connection_class = (
            aioredis.SSLConnection if self.config.redis_ssl else aioredis.Connection
        )
        return aioredis.ConnectionPool(
            connection_class=connection_class,
            host=self.config.redis_host,
            port=self.config.redis_port,
            db=self.config.redis_db,
            password=self.config.redis_password,
            max_connections=self.config.pool_size,
            socket_timeout=self.config.timeout_seconds,
            socket_connect_timeout=self.config.timeout_seconds,
            decode_responses=True,
        )

    async def connect(self) -> None:
        """Establish connection to Redis."""
        if self._client is None:
            self._pool = self._build_pool()
            self._client = aioredis.Redis(connection_pool=self._pool)

        try:
            await self._client.ping()
        except RedisError as exc:
            raise StorageError(f"Cannot reach Redis: {exc}") from exc

    async def disconnect(self) -> None:
        """Close connection to Redis."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None

    async def health_check(self) -> bool:
        """Check if Redis is healthy."""
        try:
            if self._client:
                await self._client.ping()
                return True
        except RedisError:
            logger.debug("Redis health check failed", exc_info=True)
        return False

    def _require_client(self) -> aioredis.Redis:
        if self._client is None:
            raise StorageError("RedisContributionStore is not connected")
        return self._client

    # -- Records --------------------------------------------------------------

    async def upsert(self, records: list[ContributionRecord]) -> None:
        """Write every record in a single transaction."""
        client = self._require_client()
        try:
            async with client.pipeline(transaction=True) as pipe:
                for record in records:
                    pipe.hset(
                        self._key(record.participant_id),
                        mapping={
                            "amount": repr(record.contribution_amount),
                            "computed_at": record.computed_at.isoformat(),
                        },
                    )
                    pipe.sadd(self._ids_key(), record.participant_id)
                await pipe.execute()
        except RedisError as exc:
            raise StorageError(f"Redis upsert failed: {exc}") from exc

    @staticmethod
    def _to_record(participant_id: str, data: dict) -> Optional[ContributionRecord]:
        if not data:
            return None
        return ContributionRecord(
            participant_id=participant_id,
            contribution_amount=float(data["amount"]),
            computed_at=datetime.fromisoformat(data["computed_at"]),
        )

    async def get(self, participant_id: str) -> Optional[ContributionRecord]:
        client = self._require_client()
        try:
            data = await client.hgetall(self._key(participant_id))
        except RedisError as exc:
            raise StorageError(f"Redis read failed: {exc}") from exc
        return self._to_record(participant_id, data)

    async def list_all(self) -> list[ContributionRecord]:
        client = self._require_client()
        try:
            ids = sorted(await client.smembers(self._ids_key()))
            async with client.pipeline(transaction=False) as pipe:
                for participant_id in ids:
                    pipe.hgetall(self._key(participant_id))
                rows = await pipe.execute()
        except RedisError as exc:
            raise StorageError(f"Redis read failed: {exc}") from exc

        records = []
        for participant_id, data in zip(ids, rows):
            record = self._to_record(participant_id, data)
            if record is not None:
                records.append(record)
        return records
