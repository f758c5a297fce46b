"""Sui client library with shared object storage and paginated queries."""
from .callbacks import CallbackRegistry
from .chains.sui import SuiClient
from .coins import SuiCoin, SuiCoins
from .config import AppConfig, default_config, load_config
from .errors import IdentityMismatch, InvalidIdentity, RemoteUnavailable, SuiDoubleError
from .events import SuiEvent
from .master import SuiMaster
from .models import ObjectPayload, Page, RefreshReport
from .objects import ObjectChanges, SuiObject
from .packages import SuiPackage, SuiPackageModule
from .paginated import CursorState, PaginatedResponse
from .registry import StorageRegistry
from .storage import ObjectStorage, RetryPolicy
from .transactions import SuiTransaction
from .utils import endpoint_key, normalize_sui_address

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "CallbackRegistry",
    "CursorState",
    "IdentityMismatch",
    "InvalidIdentity",
    "ObjectChanges",
    "ObjectPayload",
    "ObjectStorage",
    "Page",
    "PaginatedResponse",
    "RefreshReport",
    "RemoteUnavailable",
    "RetryPolicy",
    "StorageRegistry",
    "SuiClient",
    "SuiCoin",
    "SuiCoins",
    "SuiDoubleError",
    "SuiEvent",
    "SuiMaster",
    "SuiObject",
    "SuiPackage",
    "SuiPackageModule",
    "SuiTransaction",
    "default_config",
    "endpoint_key",
    "load_config",
    "normalize_sui_address",
]
