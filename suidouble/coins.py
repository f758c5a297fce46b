"""Coin types, metadata and balances."""
from __future__ import annotations

import logging
from typing import Any

from .interfaces.chain import RemoteDataSource
from .paginated import PaginatedResponse

logger = logging.getLogger(__name__)

SUI_COIN_TYPE = "0x2::sui::SUI"
_PADDED_SUI_COIN_TYPE = (
    "0x0000000000000000000000000000000000000000000000000000000000000002::sui::SUI"
)

# Well-known bridged coins, coin type → symbol, per network.
SAFE_LIST: dict[str, dict[str, str]] = {
    "sui:mainnet": {
        "0xa198f3be41cda8c07b3bf3fee02263526e535d682499806979a111e88a5a8d0f::coin::COIN": "CELO",
        "0x027792d9fed7f9844eb4839566001bb6f6cb4804f66aa2da6fe1ee242d896881::coin::COIN": "WBTC",
        "0x5d4b302506645c37ff133b98c4b50a5ae14841659738d6d733d59d0d217a93bf::coin::COIN": "USDCeth",
        "0xe32d3ebafa42e6011b87ef1087bbc6053b499bf6f095807b9013aff5a6ecd7bb::coin::COIN": "USDCarb",
        "0x909cba62ce96d54de25bec9502de5ca7b4f28901747bbf96b76c2e63ec5f1cba::coin::COIN": "USDCbnb",
        "0xcf72ec52c0f8ddead746252481fb44ff6e8485a39b803825bde6b00d77cdb0bb::coin::COIN": "USDCpol",
        "0xb231fcda8bbddb31f2ef02e6161444aec64a514e2c89279584ac9806ce9cf037::coin::COIN": "USDCsol",
        "0xc060006111016b8a020ad5b33834984a437aaa7d3c74c18e09a95d48aceab08c::coin::COIN": "USDT",
        "0x1e8b532cca6569cab9f9b9ebc73f8c13885012ade714729aa3b450e0339ac766::coin::COIN": "WAVAX",
        "0xb848cce11ef3a8f62eccea6eb5b35a12c4c2b1ee1af7755d02d7bd6218e8226f::coin::COIN": "WBNB",
        "0xaf8cd5edc19c4512f4259f0bee101a40d41ebed738ade5874359610ef8eeced5::coin::COIN": "WETH",
        "0x6081300950a4f1e2081580e919c210436a1bed49080502834950d31ee55a2396::coin::COIN": "WFTM",
        "0x66f87084e49c38f76502d17f87d17f943f183bb94117561eb573e075fdc5ff75::coin::COIN": "WGLMR",
        "0xdbe380b13a6d0f5cdedd58de8f04625263f113b3f9db32b3e1983f49e2841676::coin::COIN": "WMATIC",
        "0xb7844e289a8410e50fb3ca48d69eb9cf29e27d223ef90353fe1bd8e27ff8f3f8::coin::COIN": "WSOL",
        SUI_COIN_TYPE: "SUI",
    },
}


class SuiCoin:
    """One coin type on one chain."""

    def __init__(self, coin_type: str, coins: "SuiCoins") -> None:
        self._coin_type = coin_type
        self._coins = coins
        self._metadata: dict[str, Any] | None = None
        self.exists: bool | None = None

    def __repr__(self) -> str:
        return f"<SuiCoin {self.coin_type}>"

    @property
    def coin_type(self) -> str:
        if self._coin_type.startswith("0x"):
            return self._coin_type
        return "0x" + self._coin_type

    @property
    def metadata(self) -> dict[str, Any] | None:
        return self._metadata

    @property
    def decimals(self) -> int | None:
        if self._metadata:
            return self._metadata.get("decimals")
        return None

    @property
    def name(self) -> str | None:
        if self._metadata:
            return self._metadata.get("name")
        return None

    @property
    def is_safe(self) -> bool:
        return self.coin_type in self._coins.safe_list

    @property
    def symbol(self) -> str | None:
        if self.coin_type in self._coins.safe_list:
            return self._coins.safe_list[self.coin_type]
        if self._metadata:
            return self._metadata.get("symbol")
        return None

    def is_sui(self) -> bool:
        return self.coin_type == SUI_COIN_TYPE

    async def get_metadata(self) -> dict[str, Any] | None:
        """Fetch and cache coin metadata; None when the node has none."""
        if self._metadata is not None:
            return self._metadata

        try:
            result = await self._coins.source.get_coin_metadata(self.coin_type)
        except Exception as e:
            logger.error("Error fetching metadata for %s: %s", self.coin_type, e)
            result = None

        if not result:
            self.exists = False
        else:
            self.exists = True
            self._metadata = result
        return self._metadata

    def _coins_cursor(self, owner: str) -> PaginatedResponse:
        return PaginatedResponse(
            self._coins.source,
            "getCoins",
            {"owner": owner, "coinType": self.coin_type, "limit": 50},
        )

    async def _list_coins(self, owner: str) -> list[dict[str, Any]]:
        coins: list[dict[str, Any]] = []
        await self._coins_cursor(owner).for_each(coins.append)
        return coins

    async def get_balance(self, owner: str) -> int:
        """Total balance of this coin type held by ``owner``, in base units."""
        coins = await self._list_coins(owner)
        return sum(int(coin.get("balance", 0)) for coin in coins)

    async def coin_objects_enough_for_amount(
        self, owner: str, amount: int, add_empty_coins: bool = False
    ) -> list[str] | None:
        """Ids of the owner's coin objects, biggest first, covering ``amount``.

        Returns None when the owner's total balance is below ``amount``.
        """
        expected = int(amount)
        coins = await self._list_coins(owner)
        coins.sort(key=lambda coin: int(coin.get("balance", 0)), reverse=True)

        coin_ids: list[str] = []
        total = 0
        for coin in coins:
            balance = int(coin.get("balance", 0))
            if total <= expected:
                coin_ids.append(coin["coinObjectId"])
                total += balance
            elif add_empty_coins and balance == 0:
                coin_ids.append(coin["coinObjectId"])

        if total >= expected:
            return coin_ids
        return None


class SuiCoins:
    """Registry of SuiCoin instances for one chain, keyed by normalized type."""

    def __init__(self, source: RemoteDataSource, connected_chain: str | None = None) -> None:
        self.source = source
        self.connected_chain = connected_chain
        self._coins: dict[str, SuiCoin] = {}

    @property
    def coins(self) -> dict[str, SuiCoin]:
        return self._coins

    @property
    def safe_list(self) -> dict[str, str]:
        return SAFE_LIST.get(self.connected_chain or "", {})

    def normalize_coin_type(self, coin_type: str) -> str:
        """Expand shorthand coin types.

        Examples:
            "sui" → "0x2::sui::SUI"
            "USDT" (mainnet) → "0xc060...::coin::COIN"
            "0xabc" → "0xabc::coin::COIN"
        """
        if "::" not in coin_type:
            if coin_type.lower() == "sui":
                return SUI_COIN_TYPE
            for full_type, symbol in self.safe_list.items():
                if symbol == coin_type:
                    return full_type
            if not coin_type.startswith("0x"):
                coin_type = "0x" + coin_type
            return coin_type + "::coin::COIN"

        if not coin_type.startswith("0x"):
            coin_type = "0x" + coin_type
        if coin_type == _PADDED_SUI_COIN_TYPE:
            return SUI_COIN_TYPE
        return coin_type

    def get(self, coin_type: str) -> SuiCoin:
        normalized = self.normalize_coin_type(coin_type)
        coin = self._coins.get(normalized)
        if coin is None:
            coin = SuiCoin(normalized, self)
            self._coins[normalized] = coin
        return coin

    async def init(self) -> None:
        """Register every safe-listed coin and load its metadata."""
        for coin_type in self.safe_list:
            await self.get(coin_type).get_metadata()
