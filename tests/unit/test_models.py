"""Unit tests for wire payload mapping."""
from __future__ import annotations

import pytest

from suidouble.models import (
    AddressOwned,
    Immutable,
    ObjectOwned,
    ObjectPayload,
    Page,
    Shared,
    Unknown,
    parse_owner,
)

OWNER = "0x" + "ab" * 32


class TestParseOwner:
    def test_none(self) -> None:
        assert parse_owner(None) is None

    def test_immutable(self) -> None:
        assert parse_owner("Immutable") == Immutable()

    def test_address_owner_is_normalized(self) -> None:
        assert parse_owner({"AddressOwner": "0xAB"}) == AddressOwned("0x" + "0" * 62 + "ab")

    def test_object_owner(self) -> None:
        assert parse_owner({"ObjectOwner": "0x5"}) == ObjectOwned("0x" + "0" * 63 + "5")

    def test_shared(self) -> None:
        owner = parse_owner({"Shared": {"initial_shared_version": "17"}})
        assert owner == Shared(17)

    def test_invalid_address_becomes_unknown(self) -> None:
        raw = {"AddressOwner": "not-hex"}
        assert parse_owner(raw) == Unknown(raw)

    def test_unrecognized_shape(self) -> None:
        raw = {"ConsensusV2": {}}
        assert parse_owner(raw) == Unknown(raw)


class TestObjectPayload:
    def test_get_object_entry(self) -> None:
        payload = ObjectPayload.from_rpc(
            {
                "data": {
                    "objectId": "0x5",
                    "version": "12",
                    "type": "0xabc::chat::ChatShop",
                    "owner": {"AddressOwner": OWNER},
                    "content": {"fields": {"id": {"id": "0x5"}, "price": "10"}},
                    "display": {"data": {"name": "Shop"}},
                }
            }
        )
        assert payload.object_id == "0x5"
        assert payload.version == 12
        assert payload.type == "0xabc::chat::ChatShop"
        assert payload.fields["price"] == "10"
        assert payload.display == {"name": "Shop"}
        assert payload.owner == AddressOwned(OWNER)
        assert not payload.deleted

    def test_deleted_error_entry(self) -> None:
        payload = ObjectPayload.from_rpc(
            {"error": {"code": "deleted", "object_id": "0x5", "version": "3"}}
        )
        assert payload.object_id == "0x5"
        assert payload.deleted
        assert payload.error_code == "deleted"
        assert payload.version == 3

    def test_not_exists_error_entry(self) -> None:
        payload = ObjectPayload.from_rpc({"error": {"code": "notExists", "object_id": "0x5"}})
        assert not payload.deleted
        assert payload.error_code == "notExists"

    def test_object_change_entry(self) -> None:
        payload = ObjectPayload.from_rpc(
            {
                "type": "created",
                "objectId": "0x9",
                "objectType": "0xabc::chat::ChatTopMessage",
                "version": "4",
                "owner": "Immutable",
            }
        )
        assert payload.change_kind == "created"
        assert payload.type == "0xabc::chat::ChatTopMessage"
        assert payload.owner == Immutable()
        assert not payload.deleted

    def test_deleted_object_change(self) -> None:
        payload = ObjectPayload.from_rpc({"type": "deleted", "objectId": "0x9", "version": "5"})
        assert payload.deleted

    def test_content_type_fallback(self) -> None:
        payload = ObjectPayload.from_rpc(
            {"objectId": "0x1", "content": {"type": "0x2::clock::Clock", "fields": {}}}
        )
        assert payload.type == "0x2::clock::Clock"

    def test_non_dict_raises(self) -> None:
        with pytest.raises(TypeError):
            ObjectPayload.from_rpc(["0x1"])  # type: ignore[arg-type]


class TestPage:
    def test_from_rpc(self) -> None:
        page = Page.from_rpc({"data": [1, 2], "hasNextPage": True, "nextCursor": "c1"})
        assert page.rows == (1, 2)
        assert page.has_next_page
        assert page.next_cursor == "c1"

    def test_cursor_dropped_without_next_page(self) -> None:
        page = Page.from_rpc({"data": [], "hasNextPage": False, "nextCursor": "stale"})
        assert page.next_cursor is None
