"""SuiMaster: entry point tying a data source, storage and helpers together."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from .chains.sui import SuiClient
from .coins import SuiCoins
from .config import AppConfig, PaginationConfig, StorageConfig
from .interfaces.chain import RemoteDataSource
from .interfaces.signer import Signer
from .objects import SuiObject
from .packages import SuiPackage
from .paginated import PaginatedResponse
from .registry import StorageRegistry
from .storage import ObjectStorage, RetryPolicy
from .transactions import SuiTransaction
from .utils import endpoint_key, normalize_sui_address

logger = logging.getLogger(__name__)

DEFAULT_EXECUTE_OPTIONS = {
    "showEffects": True,
    "showEvents": True,
    "showObjectChanges": True,
}


class SuiMaster:
    """One connection to one Sui network.

    Masters built with the same registry and pointed at the same network share
    a single ObjectStorage, so an object fetched through one is the same
    instance seen through the others.
    """

    def __init__(
        self,
        client: RemoteDataSource,
        chain: str | None = None,
        registry: StorageRegistry | None = None,
        signer: Signer | None = None,
        storage_config: StorageConfig | None = None,
        pagination_config: PaginationConfig | None = None,
    ) -> None:
        self.client = client
        self.signer = signer
        self.registry = registry if registry is not None else StorageRegistry()
        if chain is None:
            # first endpoint URL of a SuiClient, else mainnet
            endpoints = getattr(client, "endpoints", None) or ["mainnet"]
            chain = endpoints[0]
        self.connected_chain = endpoint_key(chain)

        storage_config = storage_config or StorageConfig()
        self._pagination = pagination_config or PaginationConfig()

        self._storage = self.registry.instance_for(
            self.connected_chain,
            source=client,
            batch_size=storage_config.batch_size,
            retry_policy=RetryPolicy(
                attempts=storage_config.refresh_retries + 1,
                delay_seconds=storage_config.retry_delay_seconds,
            ),
        )
        self._coins = SuiCoins(client, self.connected_chain)
        self._packages: dict[str, SuiPackage] = {}

    def __repr__(self) -> str:
        return f"<SuiMaster {self.connected_chain} {self.address}>"

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        chain: str | None = None,
        registry: StorageRegistry | None = None,
        signer: Signer | None = None,
    ) -> "SuiMaster":
        """Build a master with a SuiClient for ``chain`` (default chain if None)."""
        chain_name = chain or config.default_chain
        chain_cfg = config.chains.get(chain_name)
        if chain_cfg is None:
            raise ValueError(
                f"Chain '{chain_name}' is not configured. Available: {list(config.chains)}"
            )
        return cls(
            SuiClient(chain_cfg),
            chain=chain_name,
            registry=registry,
            signer=signer,
            storage_config=config.storage,
            pagination_config=config.pagination,
        )

    @property
    def object_storage(self) -> ObjectStorage:
        return self._storage

    @property
    def coins(self) -> SuiCoins:
        return self._coins

    @property
    def address(self) -> str | None:
        if self.signer is None:
            return None
        return normalize_sui_address(self.signer.address)

    @property
    def packages(self) -> list[SuiPackage]:
        return list(self._packages.values())

    def add_package(
        self, id: str | None = None, modules: Iterable[str] | str | None = None
    ) -> SuiPackage:
        """Package handle for ``id``; the same instance is returned per id.

        Packages without an id (to be located by ``modules``) are never cached.
        """
        if id:
            cached = self._packages.get(normalize_sui_address(id))
            if cached is not None:
                return cached
        package = SuiPackage(self.client, self._storage, id=id, modules=modules)
        if package.address:
            self._packages[package.address] = package
        return package

    def _owner_or_self(self, owner: str | None) -> str:
        owner = owner or self.address
        if not owner:
            raise ValueError("No owner address given and no signer attached")
        return normalize_sui_address(owner)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_object(self, object_id: str) -> SuiObject:
        """Tracked instance for ``object_id`` with freshly loaded fields."""
        obj = self._storage.push(object_id, strict=True)
        await obj.fetch_fields(self.client)
        return obj

    async def get_owned_objects(
        self,
        owner: str | None = None,
        filter: dict[str, Any] | None = None,
        limit: int | None = None,
        order: str | None = None,
    ) -> PaginatedResponse:
        params: dict[str, Any] = {
            "owner": self._owner_or_self(owner),
            "limit": limit or self._pagination.page_limit,
        }
        if filter:
            params["filter"] = filter
        response = PaginatedResponse(
            self.client,
            "getOwnedObjects",
            params,
            order=order or self._pagination.order,
            storage=self._storage,
        )
        await response.fetch()
        return response

    async def fetch_events(
        self,
        query: dict[str, Any],
        limit: int | None = None,
        order: str | None = None,
    ) -> PaginatedResponse:
        response = PaginatedResponse(
            self.client,
            "queryEvents",
            {"query": query, "limit": limit or self._pagination.page_limit},
            order=order or self._pagination.order,
        )
        await response.fetch()
        return response

    async def fetch_transactions(
        self,
        from_address: str | None = None,
        limit: int | None = None,
        order: str | None = None,
    ) -> PaginatedResponse:
        """Transaction blocks sent by ``from_address`` (default: our signer)."""
        response = PaginatedResponse(
            self.client,
            "queryTransactionBlocks",
            {
                "filter": {"FromAddress": self._owner_or_self(from_address)},
                "options": {
                    "showInput": True,
                    "showEffects": True,
                    "showEvents": True,
                    "showObjectChanges": True,
                },
                "limit": limit or self._pagination.page_limit,
            },
            order=order or self._pagination.order,
        )
        await response.fetch()
        return response

    async def get_balance(self, coin_type: str = "sui", owner: str | None = None) -> int:
        return await self._coins.get(coin_type).get_balance(self._owner_or_self(owner))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def sign_and_execute_transaction(
        self, transaction: Any, options: dict[str, bool] | None = None
    ) -> SuiTransaction:
        """Execute through the attached signer and merge results into storage."""
        if self.signer is None:
            raise ValueError("No signer attached; cannot execute transactions")

        raw = await self.signer.sign_and_execute_transaction(
            transaction, options or DEFAULT_EXECUTE_OPTIONS
        )
        result = SuiTransaction(raw)
        logger.info("Executed transaction %s: %s", result.digest, result.status)

        changes = self._storage.apply_object_changes(
            result.object_changes, result.deleted_references
        )
        logger.debug(
            "Transaction %s created %d, mutated %d, deleted %d objects",
            result.digest,
            len(changes.created),
            len(changes.mutated),
            len(changes.deleted),
        )
        await self._storage.refresh_all(self.client)
        return result
