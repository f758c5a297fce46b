"""Storage registry: one ObjectStorage per endpoint key."""
from __future__ import annotations

import logging
from typing import Any

from .storage import ObjectStorage

logger = logging.getLogger(__name__)


class StorageRegistry:
    """Hands out a single shared ObjectStorage per endpoint key.

    Owned by the application (usually via SuiMaster) rather than living in
    module state. Entries are never evicted; there is one key per network a
    process talks to.
    """

    def __init__(self) -> None:
        self._instances: dict[str, ObjectStorage] = {}

    def __contains__(self, endpoint_key: str) -> bool:
        return endpoint_key in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def keys(self) -> list[str]:
        return list(self._instances.keys())

    def instance_for(self, endpoint_key: str, **params: Any) -> ObjectStorage:
        """Return the storage for ``endpoint_key``, creating it on first use.

        ``params`` are passed to the ObjectStorage constructor and are ignored
        once the storage exists.
        """
        storage = self._instances.get(endpoint_key)
        if storage is None:
            params.setdefault("name", endpoint_key)
            storage = ObjectStorage(**params)
            self._instances[endpoint_key] = storage
            logger.info("Created object storage for %s", endpoint_key)
        return storage
