from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Protocol

import asyncpg  # type: ignore[import-untyped]

from flex_reviews.core.config import get_settings
from flex_reviews.core.errors import StoreUnavailableError
from flex_reviews.core.models import ApprovalRecord

UNKNOWN_LISTING_NAME = "Unknown"

_SCHEMA_SQL = """
create table if not exists review_approvals (
  review_id bigint primary key,
  listing_name text not null,
  approved boolean not null,
  created_at timestamptz not null,
  updated_at timestamptz not null
)
"""


class ApprovalStore(Protocol):
    async def upsert(self, review_id: int, listing_name: str | None, approved: bool) -> ApprovalRecord: ...

    async def list_all(self, approved: bool | None = None) -> list[ApprovalRecord]: ...

    async def close(self) -> None: ...


async def approval_decisions(store: ApprovalStore) -> dict[int, bool]:
    return {record.review_id: record.approved for record in await store.list_all()}


class InMemoryApprovalStore:
    """Approval decisions held for the process lifetime, keyed by review id."""

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._records: dict[int, ApprovalRecord] = {}
        self._lock = threading.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def upsert(self, review_id: int, listing_name: str | None, approved: bool) -> ApprovalRecord:
        with self._lock:
            now = self._clock()
            existing = self._records.get(review_id)
            if existing is None:
                record = ApprovalRecord(
                    review_id=review_id,
                    listing_name=listing_name or UNKNOWN_LISTING_NAME,
                    approved=approved,
                    created_at=now,
                    updated_at=now,
                )
                self._records[review_id] = record
            else:
                existing.approved = approved
                if listing_name:
                    existing.listing_name = listing_name
                existing.updated_at = max(existing.updated_at, now)
                record = existing
            return replace(record)

    async def list_all(self, approved: bool | None = None) -> list[ApprovalRecord]:
        with self._lock:
            records = [replace(record) for record in self._records.values()]
        if approved is not None:
            records = [record for record in records if record.approved == approved]
        return records

    async def close(self) -> None:
        return None


class PostgresApprovalStore:
    def __init__(self, database_url: str | None, min_pool_size: int, max_pool_size: int) -> None:
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def upsert(self, review_id: int, listing_name: str | None, approved: bool) -> ApprovalRecord:
        pool = await self._get_pool()
        row = await pool.fetchrow(
            """
            insert into review_approvals (review_id, listing_name, approved, created_at, updated_at)
            values ($1, coalesce(nullif($2, ''), $4), $3, now(), now())
            on conflict (review_id) do update
            set
              approved = excluded.approved,
              listing_name = coalesce(nullif($2, ''), review_approvals.listing_name),
              updated_at = greatest(review_approvals.updated_at, excluded.updated_at)
            returning review_id, listing_name, approved, created_at, updated_at
            """,
            review_id,
            listing_name or "",
            approved,
            UNKNOWN_LISTING_NAME,
        )
        return self._row_to_record(row)

    async def list_all(self, approved: bool | None = None) -> list[ApprovalRecord]:
        pool = await self._get_pool()
        rows = await pool.fetch(
            """
            select review_id, listing_name, approved, created_at, updated_at
            from review_approvals
            where $1::boolean is null or approved = $1::boolean
            order by review_id asc
            """,
            approved,
        )
        return [self._row_to_record(row) for row in rows]

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise StoreUnavailableError("FR_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=15,
            )
            await pool.execute(_SCHEMA_SQL)
        except Exception as exc:  # pragma: no cover - depends on environment
            raise StoreUnavailableError("approval database unavailable") from exc
        self._pool = pool
        return pool

    @staticmethod
    def _row_to_record(row: asyncpg.Record) -> ApprovalRecord:
        return ApprovalRecord(
            review_id=int(row["review_id"]),
            listing_name=row["listing_name"],
            approved=bool(row["approved"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@lru_cache
def get_approval_store() -> ApprovalStore:
    settings = get_settings()
    if settings.database_url:
        return PostgresApprovalStore(
            database_url=settings.database_url,
            min_pool_size=settings.database_pool_min_size,
            max_pool_size=settings.database_pool_max_size,
        )
    return InMemoryApprovalStore()
