"""Forward-only walker over paginated node queries."""
from __future__ import annotations

import enum
import inspect
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable

from .events import SuiEvent
from .interfaces.chain import RemoteDataSource
from .models import ObjectPayload
from .objects import SuiObject
from .transactions import SuiTransaction

if TYPE_CHECKING:
    from .storage import ObjectStorage

logger = logging.getLogger(__name__)

ORDERS = ("ascending", "descending")

_OBJECT_METHODS = frozenset({"getOwnedObjects"})


class CursorState(enum.Enum):
    FRESH = "fresh"
    HAS_MORE = "has_more"
    EXHAUSTED = "exhausted"


class PaginatedResponse:
    """Cursor over one paginated query method.

    Rows are converted to SuiEvent / SuiTransaction / SuiObject based on the
    method; object rows are registered in ``storage`` when one is attached.
    A cursor is meant for a single walk and must not be shared between
    concurrent walks.
    """

    def __init__(
        self,
        source: RemoteDataSource,
        method: str,
        params: dict[str, Any] | None = None,
        order: str | None = None,
        storage: "ObjectStorage | None" = None,
    ) -> None:
        order = order or "descending"  # newest first
        if order not in ORDERS:
            raise ValueError(f"Unknown order '{order}', expected one of {ORDERS}")

        self._source = source
        self._method = method
        self._params = dict(params or {})
        self._order = order
        self._storage = storage

        self._state = CursorState.FRESH
        self._has_next_page = True
        self._next_cursor: Any = None
        self._data: list[Any] = []

    @property
    def method(self) -> str:
        return self._method

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    @property
    def order(self) -> str:
        return self._order

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def has_next_page(self) -> bool:
        return self._has_next_page

    @property
    def next_cursor(self) -> Any:
        return self._next_cursor

    @property
    def data(self) -> list[Any]:
        return self._data

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    def _to_object(self, row: dict[str, Any]) -> SuiObject:
        payload = ObjectPayload.from_rpc(row)
        if self._storage is not None:
            tracked = self._storage.by_id(payload.object_id)
            if tracked is not None:
                tracked.absorb(payload)
                return tracked

        obj = SuiObject(payload=payload)
        if self._storage is not None:
            return self._storage.push(obj) or obj
        return obj

    def _convert(self, row: Any) -> Any:
        if self._method == "queryEvents":
            return SuiEvent(row)
        if self._method == "queryTransactionBlocks":
            return SuiTransaction(row)
        if self._method in _OBJECT_METHODS:
            return self._to_object(row)
        return row

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    async def fetch(self, cursor: Any = None) -> list[Any]:
        """Fetch the page starting at ``cursor`` and make it the current page.

        Errors from the data source propagate; cursor state is left as it
        was before the call. Once the cursor is EXHAUSTED it stays so: the
        page is still returned, but ``has_next_page`` remains False even if
        the node reports more.
        """
        params = dict(self._params)
        if cursor is not None:
            params["cursor"] = cursor
        params["order"] = self._order

        page = await self._source.query_page(self._method, params)
        data = [self._convert(row) for row in page.rows]

        if (
            page.has_next_page
            and page.next_cursor is not None
            and self._state is not CursorState.EXHAUSTED
        ):
            self._state = CursorState.HAS_MORE
            self._has_next_page = True
            self._next_cursor = page.next_cursor
        else:
            self._state = CursorState.EXHAUSTED
            self._has_next_page = False
            self._next_cursor = None

        logger.debug(
            "%s: got %d items. Has next page: %s",
            self._method,
            len(data),
            self._has_next_page,
        )
        self._data = data
        return self._data

    async def next_page(self) -> list[Any] | bool:
        """Fetch the following page, or return False once exhausted."""
        if not self._has_next_page:
            return False
        return await self.fetch(self._next_cursor)

    async def for_each(
        self,
        callback: Callable[[Any], Awaitable[Any] | Any],
        max_count: int | None = None,
    ) -> int:
        """Apply ``callback`` to every row, page after page, in order.

        Async callbacks are awaited before the next row is visited. Stops
        after ``max_count`` rows without requesting further pages.

        Returns:
            Number of rows visited.
        """
        if max_count is not None and max_count <= 0:
            return 0
        if self._state is CursorState.FRESH:
            await self.fetch()

        visited = 0
        while True:
            for row in list(self._data):
                result = callback(row)
                if inspect.isawaitable(result):
                    await result
                visited += 1
                if max_count is not None and visited >= max_count:
                    return visited

            if not self._has_next_page:
                return visited
            await self.next_page()

    async def __aiter__(self) -> AsyncIterator[Any]:
        if self._state is CursorState.FRESH:
            await self.fetch()
        while True:
            for row in list(self._data):
                yield row
            if not self._has_next_page:
                return
            await self.next_page()
