"""Unit tests for ObjectStorage: identity, lookup, refresh and tx changes."""
from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeDataSource, make_object
from suidouble.errors import InvalidIdentity
from suidouble.objects import SuiObject
from suidouble.storage import ObjectStorage, RetryPolicy


class TestPush:
    def test_variants_resolve_to_same_instance(self, storage: ObjectStorage) -> None:
        first = storage.push("0X02")
        second = storage.push("2")
        assert first is second
        assert len(storage) == 1

    def test_pushing_object_registers_it(self, storage: ObjectStorage) -> None:
        obj = SuiObject(id="0x5")
        assert storage.push(obj) is obj
        assert "0x0005" in storage
        assert obj in storage

    def test_pushing_duplicate_object_returns_tracked(self, storage: ObjectStorage) -> None:
        tracked = storage.push("0x5")
        assert storage.push(SuiObject(id="0x05")) is tracked

    def test_invalid_id_returns_none(self, storage: ObjectStorage) -> None:
        assert storage.push("not an id") is None
        assert storage.push(None) is None
        assert len(storage) == 0

    def test_object_without_id_returns_none(self, storage: ObjectStorage) -> None:
        assert storage.push(SuiObject()) is None

    def test_strict_raises(self, storage: ObjectStorage) -> None:
        with pytest.raises(InvalidIdentity):
            storage.push("zz", strict=True)

    def test_added_callback(self, storage: ObjectStorage) -> None:
        seen: list[SuiObject] = []
        storage.added.subscribe(seen.append)
        obj = storage.push("0x5")
        storage.push("0x5")
        assert seen == [obj]

    def test_batch_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ObjectStorage(batch_size=0)


class TestLookup:
    def test_by_id_normalizes(self, storage: ObjectStorage) -> None:
        obj = storage.push("0xabc")
        assert storage.by_id("0x0ABC") is obj
        assert storage.by_id("bad") is None
        assert storage.by_id("0x1") is None

    def test_find(self, storage: ObjectStorage) -> None:
        storage.push(SuiObject(payload=make_object("0x1", fields={"n": 1})))
        target = storage.push(SuiObject(payload=make_object("0x2", fields={"n": 2})))
        assert storage.find(lambda obj: obj.fields.get("n") == 2) is target
        assert storage.find(lambda obj: obj.fields.get("n") == 3) is None

    def test_find_most_recent_tie_goes_to_later(self, storage: ObjectStorage) -> None:
        first = storage.push("0x1")
        second = storage.push("0x2")
        with patch.object(SuiObject, "constructed_at", new=first.constructed_at):
            assert storage.find_most_recent(lambda obj: True) is second

    def test_find_most_recent_by_type_name(self, storage: ObjectStorage) -> None:
        storage.push(SuiObject(payload=make_object("0x1", type_tag="0xabc::m::Other")))
        shop = storage.push(SuiObject(payload=make_object("0x2")))
        assert storage.find_most_recent_by_type_name("ChatShop") is shop
        assert storage.find_most_recent_by_type_name("Missing") is None

    def test_as_list_keeps_insertion_order(self, storage: ObjectStorage) -> None:
        objects = [storage.push(f"0x{i}") for i in range(1, 4)]
        assert storage.as_list() == objects


class TestRefreshAll:
    @pytest.mark.asyncio
    async def test_batches_of_fifty(self, storage: ObjectStorage, source: FakeDataSource) -> None:
        for i in range(1, 121):
            source.add_object(hex(i))
            storage.push(hex(i))

        report = await storage.refresh_all()

        assert len(source.multi_get_calls) == 3
        assert [len(batch) for batch in source.multi_get_calls] == [50, 50, 20]
        assert report.requested == 120
        assert report.batches == 3
        assert report.updated == 120

    @pytest.mark.asyncio
    async def test_applies_updates_and_deletions(
        self, storage: ObjectStorage, source: FakeDataSource
    ) -> None:
        source.add_object("0x1", version=7, fields={"price": "5"})
        source.delete_object("0x2")
        live = storage.push("0x1")
        gone = storage.push("0x2")
        unknown = storage.push("0x3")

        updated: list[SuiObject] = []
        deleted: list[SuiObject] = []
        storage.updated.subscribe(updated.append)
        storage.deleted.subscribe(deleted.append)

        report = await storage.refresh_all()

        assert live.version == 7
        assert live.fields == {"price": "5"}
        assert gone.is_deleted
        assert not unknown.is_deleted
        assert unknown.version is None
        assert updated == [live]
        assert deleted == [gone]
        assert (report.updated, report.deleted, report.missing) == (1, 1, 1)

    @pytest.mark.asyncio
    async def test_deleted_objects_are_not_requested_again(
        self, storage: ObjectStorage, source: FakeDataSource
    ) -> None:
        source.delete_object("0x2")
        storage.push("0x2")
        await storage.refresh_all()
        report = await storage.refresh_all()

        assert report.requested == 0
        assert len(source.multi_get_calls) == 1
        assert len(storage) == 1

    @pytest.mark.asyncio
    async def test_idempotent_without_remote_changes(
        self, storage: ObjectStorage, source: FakeDataSource
    ) -> None:
        source.add_object("0x1", version=3, fields={"a": 1})
        obj = storage.push("0x1")
        await storage.refresh_all()
        snapshot = (obj.version, dict(obj.fields), obj.owner, obj.is_deleted)
        await storage.refresh_all()
        assert (obj.version, obj.fields, obj.owner, obj.is_deleted) == snapshot

    @pytest.mark.asyncio
    async def test_failed_batch_is_skipped(self, source: FakeDataSource) -> None:
        storage = ObjectStorage(source=source, batch_size=2)
        for i in range(1, 5):
            source.add_object(hex(i), version=2)
            storage.push(hex(i))
        source.fail_multi_get = 1

        report = await storage.refresh_all()

        assert report.failed_batches == 1
        assert report.updated == 2
        versions = [obj.version for obj in storage.as_list()]
        assert versions == [None, None, 2, 2]

    @pytest.mark.asyncio
    async def test_malformed_entry_does_not_stop_later_batches(
        self, source: FakeDataSource
    ) -> None:
        storage = ObjectStorage(source=source, batch_size=1)
        source.add_object("0x1", version="not-a-number")
        source.add_object("0x2", version=7)
        broken = storage.push("0x1")
        healthy = storage.push("0x2")

        report = await storage.refresh_all()

        assert broken.version is None
        assert healthy.version == 7
        assert report.batches == 2
        assert (report.updated, report.missing) == (1, 1)

    @pytest.mark.asyncio
    async def test_updated_fires_only_on_change(
        self, storage: ObjectStorage, source: FakeDataSource
    ) -> None:
        source.add_object("0x1", version=3, fields={"a": 1})
        obj = storage.push("0x1")
        updated: list[SuiObject] = []
        storage.updated.subscribe(updated.append)

        await storage.refresh_all()
        report = await storage.refresh_all()
        assert updated == [obj]
        assert report.updated == 1

        source.add_object("0x1", version=4, fields={"a": 2})
        await storage.refresh_all()
        assert updated == [obj, obj]

    @pytest.mark.asyncio
    async def test_retry_policy(self, source: FakeDataSource) -> None:
        storage = ObjectStorage(source=source, retry_policy=RetryPolicy(attempts=2))
        source.add_object("0x1", version=2)
        obj = storage.push("0x1")
        source.fail_multi_get = 1

        report = await storage.refresh_all()

        assert len(source.multi_get_calls) == 2
        assert report.failed_batches == 0
        assert obj.version == 2

    @pytest.mark.asyncio
    async def test_without_source_raises(self) -> None:
        with pytest.raises(ValueError):
            await ObjectStorage().refresh_all()

    @pytest.mark.asyncio
    async def test_explicit_source_overrides(self, source: FakeDataSource) -> None:
        storage = ObjectStorage()
        source.add_object("0x1", version=1)
        obj = storage.push("0x1")
        await storage.refresh_all(source)
        assert obj.version == 1


class TestApplyObjectChanges:
    def test_created_mutated_deleted(self, storage: ObjectStorage) -> None:
        existing = storage.push(SuiObject(payload=make_object("0x1", version=1)))
        doomed = storage.push("0x3")

        changes = storage.apply_object_changes(
            [
                {"type": "mutated", "objectId": "0x1", "version": "2", "objectType": "0xabc::chat::ChatShop"},
                {"type": "created", "objectId": "0x2", "version": "2", "objectType": "0xabc::chat::ChatTopMessage"},
                {"type": "published", "packageId": "0x9", "version": "1"},
            ],
            deleted=[{"objectId": "0x3", "version": "2"}],
        )

        assert changes.mutated == (existing,)
        assert existing.version == 2
        assert len(changes.created) == 1
        assert changes.created[0].type_name == "ChatTopMessage"
        assert storage.by_id("0x2") is changes.created[0]
        assert changes.deleted == (doomed,)
        assert doomed.is_deleted
        assert storage.by_id("0x9") is None

    def test_deleted_change_not_reported_twice(self, storage: ObjectStorage) -> None:
        changes = storage.apply_object_changes(
            [{"type": "deleted", "objectId": "0x4", "version": "3"}],
            deleted=[{"objectId": "0x4"}],
        )
        assert len(changes.deleted) == 1
        assert changes.deleted[0].is_deleted
