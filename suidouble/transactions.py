"""Read-only wrapper over an executed transaction block."""
from __future__ import annotations

from typing import Any

from .events import SuiEvent
from .models import ObjectPayload
from .objects import ObjectChanges, SuiObject
from .utils import normalize_sui_address


class SuiTransaction:
    """Executed transaction as returned by the node.

    ``results`` builds standalone SuiObject instances from the response; to
    merge them into a shared storage use ObjectStorage.apply_object_changes.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}
        self._events: list[SuiEvent] | None = None
        self._results: ObjectChanges | None = None

    def __repr__(self) -> str:
        return f"<SuiTransaction {self.digest} {self.status}>"

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    @property
    def digest(self) -> str | None:
        return self._data.get("digest")

    @property
    def status(self) -> str | None:
        effects = self._data.get("effects") or {}
        return (effects.get("status") or {}).get("status")

    def is_successful(self) -> bool:
        return self.status == "success"

    @property
    def timestamp_ms(self) -> int | None:
        value = self._data.get("timestampMs")
        if value is None or value == "":
            return None
        return int(value)

    @property
    def object_changes(self) -> list[dict[str, Any]]:
        return list(self._data.get("objectChanges") or [])

    @property
    def deleted_references(self) -> list[dict[str, Any]]:
        effects = self._data.get("effects") or {}
        return list(effects.get("deleted") or [])

    @property
    def events(self) -> list[SuiEvent]:
        if self._events is None:
            self._events = [SuiEvent(raw) for raw in self._data.get("events") or []]
        return self._events

    @property
    def results(self) -> ObjectChanges:
        """Created, mutated and deleted objects, keyed off the effects lists."""
        if self._results is not None:
            return self._results

        objects: dict[str, SuiObject] = {}
        for change in self.object_changes:
            if not change.get("objectId"):
                continue
            obj = SuiObject(payload=ObjectPayload.from_rpc(change))
            objects.setdefault(obj.address, obj)

        effects = self._data.get("effects") or {}
        grouped: dict[str, list[SuiObject]] = {"created": [], "mutated": []}
        for kind, bucket in grouped.items():
            for effect in effects.get(kind) or []:
                object_id = (effect.get("reference") or {}).get("objectId")
                if not object_id:
                    continue
                obj = objects.get(normalize_sui_address(object_id))
                if obj is not None:
                    bucket.append(obj)

        deleted: list[SuiObject] = []
        for reference in self.deleted_references:
            object_id = reference.get("objectId")
            if not object_id:
                continue
            address = normalize_sui_address(object_id)
            obj = objects.get(address)
            if obj is None:
                obj = SuiObject(id=address)
                objects[address] = obj
            obj.mark_deleted()
            deleted.append(obj)

        self._results = ObjectChanges(
            created=tuple(grouped["created"]),
            mutated=tuple(grouped["mutated"]),
            deleted=tuple(deleted),
            objects=tuple(objects.values()),
        )
        return self._results
