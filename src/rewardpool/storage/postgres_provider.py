"""
PostgreSQL Contribution Store.

Relational backend built on the async SQLAlchemy engine. PostgreSQL is the
production target; any SQLAlchemy URL whose dialect supports
``INSERT ... ON CONFLICT`` (e.g. ``sqlite+aiosqlite``) works for local runs.
"""

from typing import Optional
import logging

from sqlalchemy import Column, DateTime, Float, MetaData, String, Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..exceptions import StorageError
from ..models import ContributionRecord
from .provider import AbstractContributionStore, StorageConfig

logger = logging.getLogger(__name__)


def contributions_table(name: str, metadata: MetaData) -> Table:
    """Schema of the contributions table."""
    return Table(
        name,
        metadata,
        Column("participant_id", String(255), primary_key=True),
        Column("contribution_amount", Float, nullable=False),
        Column("computed_at", DateTime(timezone=True), nullable=False),
    )


class PostgresContributionStore(AbstractContributionStore):
    """
    PostgreSQL contribution store.

    Features:
    - Async SQLAlchemy engine with connection pooling
    - One transaction per batch: all rows commit or none do
    - Per-row ``ON CONFLICT (participant_id) DO UPDATE`` upserts

    Requires: sqlalchemy[asyncio] and asyncpg (or aiosqlite for SQLite URLs)
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize PostgreSQL storage."""
        super().__init__(config or StorageConfig(backend="postgres"))
        self._engine: Optional[AsyncEngine] = None
        self._metadata = MetaData()
        self._table = contributions_table(self.config.table_name, self._metadata)

    def _connection_string(self) -> str:
        if self.config.connection_string:
            return self.config.connection_string
        password_part = (
            f":{self.config.postgres_password}"
            if self.config.postgres_password
            else ""
        )
        conn_str = (
            f"postgresql+asyncpg://{self.config.postgres_user}"
            f"{password_part}@{self.config.postgres_host}"
            f":{self.config.postgres_port}/{self.config.postgres_database}"
        )
        if self.config.postgres_ssl_mode != "disable":
            conn_str += f"?ssl={self.config.postgres_ssl_mode}"
        return conn_str

    async def connect(self) -> None:
        """Establish connection and create the table if needed."""
        conn_str = self._connection_string()
        engine_kwargs = {"pool_pre_ping": True, "echo": False}
        if not conn_str.startswith("sqlite"):
            engine_kwargs.update(pool_size=self.config.pool_size, max_overflow=20)
        self._engine = create_async_engine(conn_str, **engine_kwargs)

        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(self._metadata.create_all)
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot initialize contributions table: {exc}") from exc

    async def disconnect(self) -> None:
        """Close connection to PostgreSQL."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None

    async def health_check(self) -> bool:
        """Check if the database is reachable."""
        if not self._engine:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(select(1))
            return True
        except SQLAlchemyError:
            logger.debug("Database health check failed", exc_info=True)
        return False

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StorageError("PostgresContributionStore is not connected")
        return self._engine

    def _upsert_statement(self, dialect_name: str, rows: list[dict]):
        if dialect_name == "postgresql":
            stmt = postgresql.insert(self._table).values(rows)
        elif dialect_name == "sqlite":
            stmt = sqlite.insert(self._table).values(rows)
        else:
            raise StorageError(f"Unsupported dialect for upsert: {dialect_name}")
        return stmt.on_conflict_do_update(
            index_elements=[self._table.c.participant_id],
            set_={
                "contribution_amount": stmt.excluded.contribution_amount,
                "computed_at": stmt.excluded.computed_at,
            },
        )

    async def upsert(self, records: list[ContributionRecord]) -> None:
        """Upsert the batch inside one transaction."""
        if not records:
            return
        engine = self._require_engine()
        rows = [
            {
                "participant_id": r.participant_id,
                "contribution_amount": r.contribution_amount,
                "computed_at": r.computed_at,
            }
            for r in records
        ]
        stmt = self._upsert_statement(engine.dialect.name, rows)
        try:
            async with engine.begin() as conn:
                await conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(f"Contribution upsert failed: {exc}") from exc

    @staticmethod
    def _to_record(row) -> ContributionRecord:
        return ContributionRecord(
            participant_id=row.participant_id,
            contribution_amount=row.contribution_amount,
            computed_at=row.computed_at,
        )

    async def get(self, participant_id: str) -> Optional[ContributionRecord]:
        engine = self._require_engine()
        stmt = select(self._table).where(self._table.c.participant_id == participant_id)
        try:
            async with engine.connect() as conn:
                row = (await conn.execute(stmt)).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Contribution read failed: {exc}") from exc
        return self._to_record(row) if row else None

    async def list_all(self) -> list[ContributionRecord]:
        engine = self._require_engine()
        stmt = select(self._table).order_by(self._table.c.participant_id)
        try:
            async with engine.connect() as conn:
                rows = (await conn.execute(stmt)).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Contribution read failed: {exc}") from exc
        return [self._to_record(row) for row in rows]
