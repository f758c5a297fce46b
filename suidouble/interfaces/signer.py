"""Signer protocol: opaque key holder able to execute transactions."""
from typing import Any, Protocol


class Signer(Protocol):
    address: str

    async def sign_and_execute_transaction(
        self, transaction: Any, options: dict[str, bool]
    ) -> dict[str, Any]: ...
