"""Published Move packages and their modules (read-only side)."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from .interfaces.chain import RemoteDataSource
from .models import RefreshReport
from .objects import SuiObject
from .paginated import PaginatedResponse
from .storage import ObjectStorage
from .utils import normalize_sui_address

logger = logging.getLogger(__name__)

UPGRADE_CAP_TYPE = "0x2::package::UpgradeCap"

_PACKAGE_OPTIONS = {"showType": True, "showContent": True}


def _module_names(modules: Iterable[str] | str | None) -> list[str]:
    """Accept a list or a comma separated string; strip and de-duplicate."""
    if modules is None:
        return []
    if isinstance(modules, str):
        modules = modules.split(",")
    names: list[str] = []
    for name in modules:
        name = name.strip()
        if name and name not in names:
            names.append(name)
    return names


class SuiPackageModule:
    """One module of a published package; objects live in the shared storage."""

    def __init__(self, package: "SuiPackage", name: str) -> None:
        self._package = package
        self._name = name
        self._normalized_module: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"<SuiPackageModule {self._package.address}::{self._name}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def package(self) -> "SuiPackage":
        return self._package

    @property
    def storage(self) -> ObjectStorage:
        return self._package.storage

    @property
    def objects(self) -> list[SuiObject]:
        return self.storage.as_list()

    def push_object(self, id_or_object: Any) -> SuiObject | None:
        return self.storage.push(id_or_object)

    async def fetch_objects(self) -> RefreshReport:
        return await self.storage.refresh_all(self._package.source)

    async def get_normalized_package_address(self) -> str | None:
        """Address of the package's first version, which Move types refer to."""
        if not self._normalized_module.get("address"):
            self._normalized_module = await self._package.source.get_normalized_move_module(
                self._package.address, self._name
            )
        return self._normalized_module.get("address")

    async def fetch_events(
        self,
        event_type_name: str | None = None,
        limit: int = 50,
        order: str | None = None,
    ) -> PaginatedResponse:
        package_address = await self.get_normalized_package_address()
        if package_address:
            package_address = normalize_sui_address(package_address)
        else:
            package_address = self._package.address

        if event_type_name:
            query: dict[str, Any] = {
                "MoveEventType": f"{package_address}::{self._name}::{event_type_name}"
            }
            logger.debug("Querying for events of type %s", query["MoveEventType"])
        else:
            query = {"MoveModule": {"package": package_address, "module": self._name}}
            logger.debug("Querying for all events of module %s", self._name)

        response = PaginatedResponse(
            self._package.source,
            "queryEvents",
            {"query": query, "limit": limit},
            order=order,
        )
        await response.fetch()
        return response


class SuiPackage:
    """A Move package on chain, located by id or by the modules it contains."""

    def __init__(
        self,
        source: RemoteDataSource,
        storage: ObjectStorage,
        id: str | None = None,
        modules: Iterable[str] | str | None = None,
    ) -> None:
        self.source = source
        self.storage = storage
        self._id = normalize_sui_address(id) if id else None
        self._expected_modules = _module_names(modules)
        self._is_published = False
        self._published_version: int | None = None
        self._modules: dict[str, SuiPackageModule] = {}

    def __repr__(self) -> str:
        return f"<SuiPackage {self._id} v{self._published_version}>"

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def address(self) -> str | None:
        return self._id

    @property
    def version(self) -> int | None:
        return self._published_version

    @property
    def is_published(self) -> bool:
        return self._is_published

    @property
    def modules(self) -> dict[str, SuiPackageModule]:
        return self._modules

    def attach_module(self, name: str) -> bool:
        if name in self._modules:
            return False
        self._modules[name] = SuiPackageModule(self, name)
        return True

    async def check_on_chain(self, owner: str | None = None) -> bool:
        """Load version and module list; locate the package first if needed.

        Raises:
            ValueError: when there is no id and it cannot be found by modules.
        """
        if self._is_published:
            return True

        if not self._id and self._expected_modules and owner:
            self._id = await self.find_by_expected_modules(owner)
        if not self._id:
            raise ValueError("No package id to check on chain")

        result = await self.source.get_object(self._id, _PACKAGE_OPTIONS)
        data = result.get("data") or {}
        if data.get("version"):
            self._published_version = int(data["version"])
            self._is_published = True

        disassembled = (data.get("content") or {}).get("disassembled") or {}
        for name in disassembled:
            self.attach_module(name)

        logger.info(
            "Package %s on chain version %s with modules %s",
            self._id,
            self._published_version,
            list(self._modules),
        )
        return self._is_published

    async def is_on_chain(self, owner: str | None = None) -> bool:
        try:
            await self.check_on_chain(owner)
        except Exception as e:
            logger.error("Error checking package on chain: %s", e)
        return bool(self._is_published and self._id)

    async def get_module(self, name: str) -> SuiPackageModule | None:
        await self.check_on_chain()
        return self._modules.get(name)

    async def fetch_events(self, module_name: str, **params: Any) -> PaginatedResponse:
        module = await self.get_module(module_name)
        if module is None:
            raise KeyError(f"Module '{module_name}' not found in package {self._id}")
        return await module.fetch_events(**params)

    async def find_by_expected_modules(
        self, owner: str, modules: Iterable[str] | str | None = None
    ) -> str | None:
        """Most recent package version owned via UpgradeCap with all modules.

        UpgradeCaps point at the latest version of each package the owner can
        upgrade; those packages are then loaded to check their module lists.
        """
        expected = _module_names(modules) or self._expected_modules
        logger.debug("Looking for a package with modules %s", expected)

        package_ids: list[str] = []

        def collect(cap: SuiObject) -> None:
            package_id = cap.fields.get("package")
            if package_id and package_id not in package_ids:
                package_ids.append(package_id)

        caps = PaginatedResponse(
            self.source,
            "getOwnedObjects",
            {
                "owner": owner,
                "filter": {"StructType": UPGRADE_CAP_TYPE},
                "limit": 50,
            },
            storage=self.storage,
        )
        await caps.for_each(collect)

        best_id: str | None = None
        best_version = -1
        matching = 0
        for start in range(0, len(package_ids), self.storage.batch_size):
            batch = package_ids[start : start + self.storage.batch_size]
            for entry in await self.source.multi_get_objects(batch, _PACKAGE_OPTIONS):
                data = entry.get("data") or {}
                disassembled = (data.get("content") or {}).get("disassembled") or {}
                if not data.get("objectId") or not all(
                    name in disassembled for name in expected
                ):
                    continue
                matching += 1
                version = int(data.get("version", 0))
                if version > best_version:
                    best_version = version
                    best_id = data["objectId"]

        logger.debug("Found %d packages with needed modules", matching)
        if best_id:
            logger.info("Most recent matching package is %s version %d", best_id, best_version)
            return normalize_sui_address(best_id)
        return None
