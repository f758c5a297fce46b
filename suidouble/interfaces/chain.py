"""Remote data source protocol: blockchain RPC abstraction."""
from typing import Any, Protocol

from ..models import Page


class RemoteDataSource(Protocol):
    """Abstract interface for the Sui node calls the object cache needs."""

    async def get_object(
        self, object_id: str, options: dict[str, bool] | None = None
    ) -> dict[str, Any]: ...

    async def multi_get_objects(
        self, object_ids: list[str], options: dict[str, bool] | None = None
    ) -> list[dict[str, Any]]: ...

    async def query_page(self, method: str, params: dict[str, Any]) -> Page: ...

    async def try_get_past_object(
        self, object_id: str, version: int, options: dict[str, bool] | None = None
    ) -> dict[str, Any]: ...

    async def get_coin_metadata(self, coin_type: str) -> dict[str, Any] | None: ...

    async def get_normalized_move_module(
        self, package: str, module: str
    ) -> dict[str, Any]: ...
