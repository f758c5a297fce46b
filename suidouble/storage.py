"""In-memory object storage shared by everything connected to one chain."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from .callbacks import CallbackRegistry
from .errors import InvalidIdentity
from .interfaces.chain import RemoteDataSource
from .models import DEFAULT_OBJECT_OPTIONS, ObjectPayload, RefreshReport
from .objects import ObjectChanges, SuiObject
from .utils import normalize_sui_address

logger = logging.getLogger(__name__)

# sui_multiGetObjects accepts at most 50 ids per call.
DEFAULT_BATCH_SIZE = 50

_MUTATED_KINDS = frozenset({"mutated", "transferred", "wrapped", "unwrapped"})


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a failed refresh batch is attempted before it is skipped."""

    attempts: int = 1
    delay_seconds: float = 0.0


class ObjectStorage:
    """Keyed store of SuiObject instances, one per normalized id.

    Objects are never removed; deleted ones stay as tombstones so repeated
    lookups give a consistent answer without another round trip.
    """

    def __init__(
        self,
        source: RemoteDataSource | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        retry_policy: RetryPolicy | None = None,
        name: str = "",
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.name = name
        self._source = source
        self._batch_size = batch_size
        self._retry_policy = retry_policy or RetryPolicy()
        self._objects: dict[str, SuiObject] = {}

        self.added: CallbackRegistry[SuiObject] = CallbackRegistry("added")
        self.updated: CallbackRegistry[SuiObject] = CallbackRegistry("updated")
        self.deleted: CallbackRegistry[SuiObject] = CallbackRegistry("deleted")

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, id_or_object: Any) -> bool:
        address = getattr(id_or_object, "address", id_or_object)
        return self.by_id(address) is not None

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def source(self) -> RemoteDataSource | None:
        return self._source

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    def push(self, id_or_object: Any, strict: bool = False) -> SuiObject | None:
        """Track an object or id, returning the instance kept for it.

        Pushing something already tracked returns the existing instance.
        Returns None for input that is neither a valid id nor an object with
        an id, unless ``strict`` is set, in which case invalid ids raise
        InvalidIdentity.
        """
        if isinstance(id_or_object, SuiObject):
            address = id_or_object.address
            if address is None:
                return None
            existing = self._objects.get(address)
            if existing is not None:
                return existing
            self._objects[address] = id_or_object
            self.added.notify(id_or_object)
            return id_or_object

        try:
            address = normalize_sui_address(id_or_object)
        except InvalidIdentity as e:
            if strict:
                raise
            logger.debug("Not pushing %r: %s", id_or_object, e)
            return None

        existing = self._objects.get(address)
        if existing is not None:
            return existing

        obj = SuiObject(id=address)
        self._objects[address] = obj
        self.added.notify(obj)
        return obj

    def by_id(self, object_id: Any) -> SuiObject | None:
        try:
            return self._objects.get(normalize_sui_address(object_id))
        except InvalidIdentity:
            return None

    def as_list(self) -> list[SuiObject]:
        return list(self._objects.values())

    def find(self, predicate: Callable[[SuiObject], bool]) -> SuiObject | None:
        for obj in self._objects.values():
            if predicate(obj):
                return obj
        return None

    def find_most_recent(
        self, predicate: Callable[[SuiObject], bool]
    ) -> SuiObject | None:
        """Matching object constructed last; on a tie the later-iterated one wins."""
        most_recent: SuiObject | None = None
        for obj in self._objects.values():
            if not predicate(obj):
                continue
            if most_recent is None or most_recent.constructed_at <= obj.constructed_at:
                most_recent = obj
        return most_recent

    def find_most_recent_by_type_name(self, name: str) -> SuiObject | None:
        return self.find_most_recent(lambda obj: obj.type_name == name)

    # ------------------------------------------------------------------
    # Remote refresh
    # ------------------------------------------------------------------

    async def _fetch_batch(
        self, source: RemoteDataSource, batch: list[str]
    ) -> list[dict[str, Any]] | None:
        attempts = max(1, self._retry_policy.attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await source.multi_get_objects(batch, DEFAULT_OBJECT_OPTIONS)
            except Exception as e:
                logger.error(
                    "Refresh batch of %d objects failed (attempt %d/%d): %s",
                    len(batch),
                    attempt,
                    attempts,
                    e,
                )
                if attempt < attempts and self._retry_policy.delay_seconds > 0:
                    await asyncio.sleep(self._retry_policy.delay_seconds)
        return None

    @staticmethod
    def _index_results(
        results: Iterable[dict[str, Any]],
    ) -> tuple[dict[str, ObjectPayload], set[str]]:
        """Split a multi-get response into found payloads and deleted ids."""
        found: dict[str, ObjectPayload] = {}
        removed: set[str] = set()

        for entry in results:
            try:
                payload = ObjectPayload.from_rpc(entry)
                if not payload.object_id:
                    continue
                address = normalize_sui_address(payload.object_id)
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed object entry: %s", e)
                continue

            if payload.deleted:
                removed.add(address)
            elif payload.error_code is None:
                found[address] = payload

        return found, removed

    async def refresh_all(self, source: RemoteDataSource | None = None) -> RefreshReport:
        """Re-read every live tracked object from the node, in batches.

        Batches run one after another and each batch's updates are applied
        before the next is requested. A failed batch is logged and skipped;
        its objects keep their last known state, as do objects whose entry
        cannot be parsed. ``report.updated`` counts every object re-read,
        while the ``updated`` channel fires only for objects that changed.
        """
        source = source or self._source
        if source is None:
            raise ValueError("Object storage has no remote data source attached")

        addresses = list(
            dict.fromkeys(
                obj.address for obj in self._objects.values() if not obj.is_deleted
            )
        )
        logger.debug("Refreshing %d objects in '%s'", len(addresses), self.name)

        batches = updated = deleted = missing = failed = 0

        for start in range(0, len(addresses), self._batch_size):
            batch = addresses[start : start + self._batch_size]
            batches += 1

            results = await self._fetch_batch(source, batch)
            if results is None:
                failed += 1
                continue

            found, removed = self._index_results(results)
            logger.debug("Got %d objects for batch %d", len(found), batches)

            for address in batch:
                obj = self._objects[address]
                if address in found:
                    updated += 1
                    if obj.absorb(found[address]):
                        self.updated.notify(obj)
                elif address in removed:
                    obj.mark_deleted()
                    deleted += 1
                    self.deleted.notify(obj)
                else:
                    missing += 1
                    logger.debug("Object %s not found in results", address)

        report = RefreshReport(
            requested=len(addresses),
            batches=batches,
            updated=updated,
            deleted=deleted,
            missing=missing,
            failed_batches=failed,
        )
        if failed:
            logger.warning(
                "Refresh of '%s' incomplete: %d of %d batches failed",
                self.name,
                failed,
                batches,
            )
        return report

    # ------------------------------------------------------------------
    # Transaction results
    # ------------------------------------------------------------------

    def apply_object_changes(
        self,
        object_changes: Iterable[dict[str, Any]],
        deleted: Iterable[dict[str, Any]] = (),
    ) -> ObjectChanges:
        """Absorb a transaction's objectChanges and effects.deleted into storage."""
        created: list[SuiObject] = []
        mutated: list[SuiObject] = []
        removed: list[SuiObject] = []

        for change in object_changes:
            if not change.get("objectId"):
                continue
            payload = ObjectPayload.from_rpc(change)
            obj = self.by_id(payload.object_id)
            if obj is None:
                obj = self.push(SuiObject(payload=payload))
            else:
                obj.absorb(payload)

            if payload.deleted:
                removed.append(obj)
                self.deleted.notify(obj)
            elif payload.change_kind == "created":
                created.append(obj)
            elif payload.change_kind in _MUTATED_KINDS:
                mutated.append(obj)
                self.updated.notify(obj)

        for reference in deleted:
            obj = self.push(reference.get("objectId"))
            if obj is None or obj in removed:
                continue
            logger.debug("Object is deleted: %s", obj.address)
            obj.mark_deleted()
            removed.append(obj)
            self.deleted.notify(obj)

        return ObjectChanges(
            created=tuple(created),
            mutated=tuple(mutated),
            deleted=tuple(removed),
            objects=tuple(dict.fromkeys(created + mutated + removed)),
        )
