"""Local mirror of a single on-chain object."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .errors import IdentityMismatch
from .models import (
    DEFAULT_OBJECT_OPTIONS,
    AddressOwned,
    Immutable,
    ObjectPayload,
    Owner,
    Shared,
    Unknown,
)
from .utils import ids_equal, normalize_sui_address, type_name

if TYPE_CHECKING:
    from .interfaces.chain import RemoteDataSource
    from .paginated import PaginatedResponse

logger = logging.getLogger(__name__)


class SuiObject:
    """Locally cached state of one on-chain object.

    State only changes through ``absorb`` (authoritative data from the node)
    and ``mark_deleted``. Deleted objects are kept as tombstones.
    """

    def __init__(
        self,
        id: str | None = None,
        payload: ObjectPayload | dict[str, Any] | None = None,
    ) -> None:
        self._id: str | None = None
        self._address: str | None = None
        if id is not None:
            self._set_id(id)

        self._version: int | None = None
        self._type: str | None = None
        self._fields: dict[str, Any] = {}
        self._display: dict[str, Any] = {}
        self._owner: Owner = Unknown()
        self._is_deleted = False

        # Scratch space for callers; never sent to the chain.
        self.local_properties: dict[str, Any] = {}

        if payload is not None:
            self.absorb(payload)

        self._constructed_at = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        state = " deleted" if self._is_deleted else ""
        return f"<SuiObject {self._address} {self.type_name}{state}>"

    def _set_id(self, value: str) -> None:
        self._address = normalize_sui_address(value)
        self._id = value

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def address(self) -> str | None:
        """Normalized id, the key this object is tracked under."""
        return self._address

    @property
    def version(self) -> int | None:
        return self._version

    @property
    def type(self) -> str | None:
        return self._type

    @property
    def type_name(self) -> str | None:
        """Struct name without package/module prefix and generic suffix."""
        return type_name(self._type)

    @property
    def fields(self) -> dict[str, Any]:
        return self._fields

    @property
    def display(self) -> dict[str, Any]:
        return self._display

    @property
    def owner(self) -> Owner:
        return self._owner

    @property
    def is_deleted(self) -> bool:
        return self._is_deleted

    @property
    def is_shared(self) -> bool:
        return isinstance(self._owner, Shared)

    @property
    def is_immutable(self) -> bool:
        return isinstance(self._owner, Immutable)

    @property
    def constructed_at(self) -> datetime:
        return self._constructed_at

    # ------------------------------------------------------------------
    # Identity and ownership
    # ------------------------------------------------------------------

    def id_equals(self, other_id: str | None) -> bool:
        if not other_id or self._address is None:
            return False
        return ids_equal(self._address, other_id)

    def is_owned_by(self, address_or_object: "str | SuiObject") -> bool:
        target = getattr(address_or_object, "address", address_or_object)
        if not isinstance(self._owner, AddressOwned) or not target:
            return False
        return ids_equal(self._owner.address, target)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def mark_deleted(self) -> None:
        self._is_deleted = True

    def absorb(self, payload: ObjectPayload | dict[str, Any]) -> bool:
        """Merge authoritative data for this object.

        Returns True when the version, type, fields, display, owner or
        deleted flag differ afterwards.

        Raises:
            IdentityMismatch: if the payload belongs to a different object.
        """
        if not isinstance(payload, ObjectPayload):
            payload = ObjectPayload.from_rpc(payload)

        if payload.object_id:
            if self._address is None:
                self._set_id(payload.object_id)
            elif not self.id_equals(payload.object_id):
                raise IdentityMismatch(self._address, payload.object_id)

        before = self._snapshot()

        if payload.deleted:
            self.mark_deleted()

        # Last write wins; batches are assumed internally consistent.
        if payload.version is not None:
            self._version = payload.version
        if payload.type:
            self._type = payload.type

        for key, value in payload.fields.items():
            if key != "id":
                self._fields[key] = value
        self._display.update(payload.display)

        if payload.owner is not None:
            self._owner = payload.owner

        return self._snapshot() != before

    def _snapshot(self) -> tuple[Any, ...]:
        return (
            self._version,
            self._type,
            dict(self._fields),
            dict(self._display),
            self._owner,
            self._is_deleted,
        )

    # ------------------------------------------------------------------
    # Remote helpers
    # ------------------------------------------------------------------

    async def fetch_fields(self, source: "RemoteDataSource") -> None:
        """Refresh this object alone with a single get_object call."""
        result = await source.get_object(self.address, DEFAULT_OBJECT_OPTIONS)
        if result:
            self.absorb(result)

    async def get_past_object(
        self, source: "RemoteDataSource", version: int | None = None
    ) -> "SuiObject | None":
        """Load a past version of this object as a new, untracked instance.

        Nodes are not required to keep past versions, so this may return
        None even for versions that existed.
        """
        if version is None:
            if self._version is None:
                return None
            version = self._version - 1

        result = await source.try_get_past_object(
            self.address, version, DEFAULT_OBJECT_OPTIONS
        )
        details = (result or {}).get("details")
        if (result or {}).get("status") != "VersionFound" or not isinstance(details, dict):
            logger.debug("No past version %s of %s", version, self.address)
            return None
        return SuiObject(payload=details)

    async def query_transaction_blocks(
        self,
        source: "RemoteDataSource",
        limit: int = 10,
        order: str | None = None,
    ) -> "PaginatedResponse":
        """Transactions that used this object as an input."""
        from .paginated import PaginatedResponse

        response = PaginatedResponse(
            source,
            "queryTransactionBlocks",
            {
                "filter": {"InputObject": self.address},
                "options": {
                    "showInput": True,
                    "showEffects": True,
                    "showEvents": True,
                    "showObjectChanges": True,
                    "showBalanceChanges": True,
                },
                "limit": limit,
            },
            order=order,
        )
        await response.fetch()
        return response

    async def get_dynamic_fields(
        self,
        source: "RemoteDataSource",
        limit: int = 50,
        order: str | None = None,
    ) -> "PaginatedResponse":
        from .paginated import PaginatedResponse

        response = PaginatedResponse(
            source,
            "getDynamicFields",
            {"parentId": self.address, "limit": limit},
            order=order,
        )
        await response.fetch()
        return response


@dataclass(frozen=True)
class ObjectChanges:
    """Objects touched by a transaction, grouped by what happened to them."""

    created: tuple[SuiObject, ...] = ()
    mutated: tuple[SuiObject, ...] = ()
    deleted: tuple[SuiObject, ...] = ()
    objects: tuple[SuiObject, ...] = ()
