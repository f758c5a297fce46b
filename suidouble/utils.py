"""Identity normalization and small helpers shared across the package."""
from __future__ import annotations

import re
from typing import Any

from .errors import InvalidIdentity

SUI_ADDRESS_LENGTH = 32  # bytes

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")

_CHAIN_ALIASES = {
    "main": "mainnet",
    "mainnet": "mainnet",
    "test": "testnet",
    "testnet": "testnet",
    "dev": "devnet",
    "devnet": "devnet",
    "local": "localnet",
    "localnet": "localnet",
}


def normalize_sui_address(value: Any) -> str:
    """Return the canonical form of a Sui address or object id.

    Lower-cases the hex digits, left-pads them with zeros to 32 bytes and
    prepends ``0x``. Syntactic variants of one id map to the same string:

        "0X02", "2" and "0x0002" → "0x000...0002"

    Raises:
        InvalidIdentity: if the value is not a string of at most 64 hex digits.
    """
    if not isinstance(value, str):
        raise InvalidIdentity(value, "not a string")

    hex_part = value.strip()
    if hex_part[:2] in ("0x", "0X"):
        hex_part = hex_part[2:]

    if not hex_part:
        raise InvalidIdentity(value, "empty")
    if not _HEX_RE.match(hex_part):
        raise InvalidIdentity(value, "not hexadecimal")
    if len(hex_part) > SUI_ADDRESS_LENGTH * 2:
        raise InvalidIdentity(value, f"longer than {SUI_ADDRESS_LENGTH} bytes")

    return "0x" + hex_part.lower().rjust(SUI_ADDRESS_LENGTH * 2, "0")


def is_valid_sui_address(value: Any) -> bool:
    try:
        normalize_sui_address(value)
    except InvalidIdentity:
        return False
    return True


def ids_equal(first: Any, second: Any) -> bool:
    """Compare two ids after normalization; invalid ids never match."""
    try:
        return normalize_sui_address(first) == normalize_sui_address(second)
    except InvalidIdentity:
        return False


def type_name(type_tag: str | None) -> str | None:
    """Extract the bare struct name from a Move type tag.

    Examples:
        "0x2::coin::Coin<0x2::sui::SUI>" → "Coin"
        "0xabc::chat::ChatShop" → "ChatShop"
    """
    if not type_tag:
        return None
    return str(type_tag).split("<")[0].split("::")[-1]


def endpoint_key(chain_or_url: str) -> str:
    """Map a chain alias or full-node URL to the key storages are shared by.

    Known networks collapse to ``sui:<network>`` so that every connection to
    the same chain shares one object storage; any other URL keeps its host
    part as the key.
    """
    value = (chain_or_url or "").strip()
    alias = _CHAIN_ALIASES.get(value.lower())
    if alias:
        return f"sui:{alias}"

    lowered = value.lower()
    for network in ("devnet", "testnet", "mainnet"):
        if network in lowered:
            return f"sui:{network}"
    if "127.0.0.1" in lowered or "localhost" in lowered:
        return "sui:localnet"

    if "//" in value:
        return value.split("//", 1)[1]
    return value
