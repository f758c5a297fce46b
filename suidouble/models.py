"""Data models: all frozen (immutable).

Wire payloads from the RPC node are mapped into these structs in one place
(``ObjectPayload.from_rpc`` / ``parse_owner`` / ``Page.from_rpc``) so the rest
of the package never digs through raw response dicts.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .errors import InvalidIdentity
from .utils import normalize_sui_address

# ---------------------------------------------------------------------------
# Owner (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AddressOwned:
    address: str


@dataclass(frozen=True)
class ObjectOwned:
    parent_id: str


@dataclass(frozen=True)
class Shared:
    initial_shared_version: int | None = None


@dataclass(frozen=True)
class Immutable:
    pass


@dataclass(frozen=True)
class Unknown:
    raw: Any = None


Owner = Union[AddressOwned, ObjectOwned, Shared, Immutable, Unknown]


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def parse_owner(raw: Any) -> Owner | None:
    """Map an RPC owner descriptor into the Owner union.

    Returns None when the payload carries no owner at all.
    """
    if raw is None:
        return None
    if raw == "Immutable":
        return Immutable()
    if isinstance(raw, dict):
        try:
            if "AddressOwner" in raw:
                return AddressOwned(normalize_sui_address(raw["AddressOwner"]))
            if "ObjectOwner" in raw:
                return ObjectOwned(normalize_sui_address(raw["ObjectOwner"]))
        except InvalidIdentity:
            return Unknown(raw)
        if "Shared" in raw:
            shared = raw["Shared"] or {}
            return Shared(_to_int(shared.get("initial_shared_version")))
    return Unknown(raw)


# ---------------------------------------------------------------------------
# Object payloads
# ---------------------------------------------------------------------------

# Values of "type" on objectChanges entries; anywhere else "type" is a Move type tag.
OBJECT_CHANGE_KINDS = frozenset(
    {
        "created",
        "mutated",
        "deleted",
        "wrapped",
        "published",
        "transferred",
        "unwrapped",
        "unwrappedThenDeleted",
    }
)


DEFAULT_OBJECT_OPTIONS: dict[str, bool] = {
    "showType": True,
    "showContent": True,
    "showOwner": True,
    "showDisplay": True,
}


@dataclass(frozen=True)
class ObjectPayload:
    """Authoritative object data as received from the node."""

    object_id: str | None = None
    version: int | None = None
    type: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    display: dict[str, Any] = field(default_factory=dict)
    owner: Owner | None = None
    deleted: bool = False
    error_code: str | None = None
    change_kind: str | None = None

    @classmethod
    def from_rpc(cls, raw: dict[str, Any]) -> "ObjectPayload":
        """Build a payload from any object-bearing RPC shape.

        Accepts a ``sui_getObject`` / ``sui_multiGetObjects`` entry
        (``{"data": ...}`` or ``{"error": ...}``), a bare object data dict, or a
        transaction ``objectChanges`` entry.
        """
        if not isinstance(raw, dict):
            raise TypeError(f"Object payload must be a dict, got {type(raw).__name__}")

        error = raw.get("error")
        if isinstance(error, dict) and not raw.get("data"):
            code = error.get("code")
            return cls(
                object_id=error.get("object_id") or error.get("objectId"),
                version=_to_int(error.get("version")),
                deleted=code == "deleted",
                error_code=code,
            )

        if not raw.get("objectId") and isinstance(raw.get("data"), dict):
            raw = raw["data"]

        change_kind = raw.get("type") if raw.get("type") in OBJECT_CHANGE_KINDS else None
        if change_kind:
            type_tag = raw.get("objectType")
        else:
            type_tag = raw.get("type") or raw.get("objectType")

        content = raw.get("content") or {}
        if not type_tag and isinstance(content, dict):
            type_tag = content.get("type")

        fields = content.get("fields") if isinstance(content, dict) else None
        display = (raw.get("display") or {}).get("data")

        return cls(
            object_id=raw.get("objectId") or raw.get("packageId"),
            version=_to_int(raw.get("version")),
            type=type_tag,
            fields=dict(fields or {}),
            display=dict(display or {}),
            owner=parse_owner(raw.get("owner")),
            deleted=change_kind == "deleted",
            change_kind=change_kind,
        )


# ---------------------------------------------------------------------------
# Pagination and refresh results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Page:
    """One page of a paginated RPC query."""

    rows: tuple[Any, ...] = ()
    has_next_page: bool = False
    next_cursor: Any = None

    @classmethod
    def from_rpc(cls, result: dict[str, Any]) -> "Page":
        has_next = bool(result.get("hasNextPage", False))
        return cls(
            rows=tuple(result.get("data") or ()),
            has_next_page=has_next,
            next_cursor=result.get("nextCursor") if has_next else None,
        )


@dataclass(frozen=True)
class RefreshReport:
    """Outcome of one ObjectStorage.refresh_all run."""

    requested: int = 0
    batches: int = 0
    updated: int = 0
    deleted: int = 0
    missing: int = 0
    failed_batches: int = 0
