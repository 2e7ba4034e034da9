from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from flex_reviews.services.approvals import InMemoryApprovalStore, approval_decisions


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def test_upsert_is_idempotent_per_review() -> None:
    clock = FakeClock()
    store = InMemoryApprovalStore(clock=clock)

    async def run():
        first = await store.upsert(7453, "2B E1 - 33 St Clements", True)
        clock.now += timedelta(minutes=5)
        second = await store.upsert(7453, "2B E1 - 33 St Clements", True)
        return first, second, await store.list_all()

    first, second, records = asyncio.run(run())
    assert len(records) == 1
    assert second.created_at == first.created_at
    assert second.updated_at == first.updated_at + timedelta(minutes=5)
    assert second.approved is True


def test_updated_at_never_moves_backwards() -> None:
    clock = FakeClock()
    store = InMemoryApprovalStore(clock=clock)

    async def run():
        first = await store.upsert(1, "A", True)
        clock.now -= timedelta(hours=1)
        return first, await store.upsert(1, "A", False)

    first, second = asyncio.run(run())
    assert second.updated_at == first.updated_at
    assert second.approved is False


def test_listing_name_defaults_and_is_only_replaced_when_given() -> None:
    store = InMemoryApprovalStore()

    async def run():
        created = await store.upsert(5, "", True)
        named = await store.upsert(5, "The Putney Apart", True)
        kept = await store.upsert(5, None, False)
        return created, named, kept

    created, named, kept = asyncio.run(run())
    assert created.listing_name == "Unknown"
    assert named.listing_name == "The Putney Apart"
    assert kept.listing_name == "The Putney Apart"


def test_returned_records_are_copies() -> None:
    store = InMemoryApprovalStore()

    async def run():
        record = await store.upsert(5, "A", True)
        record.approved = False
        return await store.list_all()

    assert [record.approved for record in asyncio.run(run())] == [True]


def test_list_all_filters_and_decisions_map() -> None:
    store = InMemoryApprovalStore()

    async def run():
        await store.upsert(1, "A", True)
        await store.upsert(2, "B", False)
        approved = await store.list_all(approved=True)
        rejected = await store.list_all(approved=False)
        return approved, rejected, await approval_decisions(store)

    approved, rejected, decisions = asyncio.run(run())
    assert [record.review_id for record in approved] == [1]
    assert [record.review_id for record in rejected] == [2]
    assert decisions == {1: True, 2: False}


class TickingClock:
    def __init__(self) -> None:
        self.start = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.ticks = 0

    def __call__(self) -> datetime:
        now = self.start + timedelta(seconds=self.ticks)
        self.ticks += 1
        return now


def test_concurrent_upserts_keep_one_record_and_last_decision() -> None:
    clock = TickingClock()
    store = InMemoryApprovalStore(clock=clock)
    decisions = [index % 3 != 0 for index in range(25)]

    async def run():
        await asyncio.gather(
            *(store.upsert(7453, "2B E1 - 33 St Clements", approved) for approved in decisions)
        )
        return await store.list_all()

    records = asyncio.run(run())
    assert len(records) == 1
    record = records[0]
    assert record.created_at == clock.start
    assert record.updated_at == clock.start + timedelta(seconds=len(decisions) - 1)
    assert record.approved is decisions[-1]
