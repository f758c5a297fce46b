"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from suidouble.config import AppConfig, ChainConfig, PaginationConfig, StorageConfig
from suidouble.errors import RemoteUnavailable
from suidouble.models import Page
from suidouble.registry import StorageRegistry
from suidouble.storage import ObjectStorage
from suidouble.utils import normalize_sui_address

OWNER = "0x" + "ab" * 32
CHAT_SHOP_TYPE = "0xabc::chat::ChatShop"


def make_object(
    object_id: str,
    version: int = 1,
    type_tag: str = CHAT_SHOP_TYPE,
    fields: dict[str, Any] | None = None,
    owner: Any = None,
) -> dict[str, Any]:
    """A ``sui_getObject`` style entry."""
    return {
        "data": {
            "objectId": object_id,
            "version": str(version),
            "digest": "digest",
            "type": type_tag,
            "owner": owner if owner is not None else {"AddressOwner": OWNER},
            "content": {
                "dataType": "moveObject",
                "type": type_tag,
                "fields": {"id": {"id": object_id}, **(fields or {})},
            },
        }
    }


class FakeDataSource:
    """In-memory RemoteDataSource that records every call it receives.

    ``rows`` holds the full result list per paginated method; pages are cut
    from it by ``limit`` with the row offset as cursor.
    """

    def __init__(self) -> None:
        self.objects: dict[str, dict[str, Any]] = {}
        self.deleted: set[str] = set()
        self.rows: dict[str, list[Any]] = {}
        self.past_objects: dict[tuple[str, int], dict[str, Any]] = {}
        self.coin_metadata: dict[str, dict[str, Any]] = {}
        self.normalized_modules: dict[tuple[str, str], dict[str, Any]] = {}

        self.get_object_calls: list[str] = []
        self.multi_get_calls: list[list[str]] = []
        self.page_calls: list[tuple[str, dict[str, Any]]] = []

        # Number of upcoming multi_get_objects calls that raise.
        self.fail_multi_get = 0

    def add_object(self, object_id: str, **kwargs: Any) -> str:
        address = normalize_sui_address(object_id)
        self.objects[address] = make_object(object_id, **kwargs)
        return address

    def delete_object(self, object_id: str) -> None:
        address = normalize_sui_address(object_id)
        self.objects.pop(address, None)
        self.deleted.add(address)

    def _entry(self, object_id: str) -> dict[str, Any]:
        address = normalize_sui_address(object_id)
        if address in self.deleted:
            return {"error": {"code": "deleted", "object_id": object_id}}
        if address in self.objects:
            return self.objects[address]
        return {"error": {"code": "notExists", "object_id": object_id}}

    async def get_object(
        self, object_id: str, options: dict[str, bool] | None = None
    ) -> dict[str, Any]:
        self.get_object_calls.append(object_id)
        return self._entry(object_id)

    async def multi_get_objects(
        self, object_ids: list[str], options: dict[str, bool] | None = None
    ) -> list[dict[str, Any]]:
        self.multi_get_calls.append(list(object_ids))
        if self.fail_multi_get > 0:
            self.fail_multi_get -= 1
            raise RemoteUnavailable("sui_multiGetObjects", ConnectionError("down"))
        return [self._entry(object_id) for object_id in object_ids]

    async def query_page(self, method: str, params: dict[str, Any]) -> Page:
        self.page_calls.append((method, dict(params)))
        rows = self.rows.get(method, [])
        limit = params.get("limit") or 50
        start = int(params.get("cursor") or 0)
        chunk = rows[start : start + limit]
        end = start + len(chunk)
        has_next = end < len(rows)
        return Page(
            rows=tuple(chunk),
            has_next_page=has_next,
            next_cursor=str(end) if has_next else None,
        )

    async def try_get_past_object(
        self, object_id: str, version: int, options: dict[str, bool] | None = None
    ) -> dict[str, Any]:
        entry = self.past_objects.get((normalize_sui_address(object_id), version))
        if entry is None:
            return {"status": "VersionNotFound", "details": [object_id, version]}
        return {"status": "VersionFound", "details": entry["data"]}

    async def get_coin_metadata(self, coin_type: str) -> dict[str, Any] | None:
        return self.coin_metadata.get(coin_type)

    async def get_normalized_move_module(
        self, package: str, module: str
    ) -> dict[str, Any]:
        return self.normalized_modules.get((package, module), {})


# ---------------------------------------------------------------------------
# Data source / storage fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def source() -> FakeDataSource:
    return FakeDataSource()


@pytest.fixture()
def storage(source: FakeDataSource) -> ObjectStorage:
    return ObjectStorage(source=source, name="test")


@pytest.fixture()
def registry() -> StorageRegistry:
    return StorageRegistry()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def sample_app_config(sample_chain_config: ChainConfig) -> AppConfig:
    return AppConfig(
        default_chain="testnet",
        chains={"testnet": sample_chain_config},
        storage=StorageConfig(batch_size=25, refresh_retries=2, retry_delay_seconds=0.0),
        pagination=PaginationConfig(page_limit=20, order="ascending"),
    )


SAMPLE_YAML = textwrap.dedent("""\
    default_chain: testnet
    chains:
      testnet:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
      localnet:
        rpc_endpoints: ["http://127.0.0.1:9000"]
    storage:
      batch_size: 25
      refresh_retries: 2
      retry_delay_seconds: 0.5
    pagination:
      page_limit: 20
      order: ascending
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
