"""SUI RPC client with fallback support."""
import logging
import ssl
from typing import Any, Callable

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import RemoteUnavailable
from ...models import DEFAULT_OBJECT_OPTIONS, Page

logger = logging.getLogger(__name__)


def _descending(params: dict[str, Any]) -> bool:
    return params.get("order", "descending") == "descending"


def _query_events_params(params: dict[str, Any]) -> list[Any]:
    return [
        params.get("query"),
        params.get("cursor"),
        params.get("limit"),
        _descending(params),
    ]


def _owned_objects_params(params: dict[str, Any]) -> list[Any]:
    return [
        params["owner"],
        {
            "filter": params.get("filter"),
            "options": params.get("options", DEFAULT_OBJECT_OPTIONS),
        },
        params.get("cursor"),
        params.get("limit"),
    ]


def _transaction_blocks_params(params: dict[str, Any]) -> list[Any]:
    return [
        {"filter": params.get("filter"), "options": params.get("options")},
        params.get("cursor"),
        params.get("limit"),
        _descending(params),
    ]


def _dynamic_fields_params(params: dict[str, Any]) -> list[Any]:
    return [params["parentId"], params.get("cursor"), params.get("limit")]


def _coins_params(params: dict[str, Any]) -> list[Any]:
    return [
        params["owner"],
        params.get("coinType"),
        params.get("cursor"),
        params.get("limit"),
    ]


# Logical query name → (RPC method, builder of positional params).
PAGED_METHODS: dict[str, tuple[str, Callable[[dict[str, Any]], list[Any]]]] = {
    "queryEvents": ("suix_queryEvents", _query_events_params),
    "getOwnedObjects": ("suix_getOwnedObjects", _owned_objects_params),
    "queryTransactionBlocks": (
        "suix_queryTransactionBlocks",
        _transaction_blocks_params,
    ),
    "getDynamicFields": ("suix_getDynamicFields", _dynamic_fields_params),
    "getCoins": ("suix_getCoins", _coins_params),
}


class SuiClient:
    """SUI blockchain RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints.

        Raises:
            RemoteUnavailable: when every endpoint failed.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed for %s: %s", rpc_url, method, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RemoteUnavailable(method, last_error)

    async def get_object(
        self, object_id: str, options: dict[str, bool] | None = None
    ) -> dict[str, Any]:
        """Get detailed information about an object."""
        result = await self.rpc_call(
            "sui_getObject", [object_id, options or DEFAULT_OBJECT_OPTIONS]
        )
        return result or {}

    async def multi_get_objects(
        self, object_ids: list[str], options: dict[str, bool] | None = None
    ) -> list[dict[str, Any]]:
        """Get many objects in one call; one entry per id, data or error."""
        result = await self.rpc_call(
            "sui_multiGetObjects",
            [list(object_ids), options or DEFAULT_OBJECT_OPTIONS],
        )
        return result or []

    async def try_get_past_object(
        self, object_id: str, version: int, options: dict[str, bool] | None = None
    ) -> dict[str, Any]:
        result = await self.rpc_call(
            "sui_tryGetPastObject",
            [object_id, int(version), options or DEFAULT_OBJECT_OPTIONS],
        )
        return result or {}

    async def query_page(self, method: str, params: dict[str, Any]) -> Page:
        """Run one page of a paginated query such as ``queryEvents``."""
        try:
            rpc_method, build_params = PAGED_METHODS[method]
        except KeyError:
            raise ValueError(
                f"Unsupported paginated method '{method}'. Available: {list(PAGED_METHODS)}"
            )
        result = await self.rpc_call(rpc_method, build_params(params))
        return Page.from_rpc(result or {})

    async def get_coin_metadata(self, coin_type: str) -> dict[str, Any] | None:
        return await self.rpc_call("suix_getCoinMetadata", [coin_type])

    async def get_normalized_move_module(
        self, package: str, module: str
    ) -> dict[str, Any]:
        result = await self.rpc_call(
            "sui_getNormalizedMoveModule", [package, module]
        )
        return result or {}
