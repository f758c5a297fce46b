"""Read-only wrapper over one emitted Move event."""
from __future__ import annotations

from typing import Any

from .utils import type_name


class SuiEvent:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    def __repr__(self) -> str:
        return f"<SuiEvent {self.type_name}>"

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    @property
    def type(self) -> str | None:
        return self._data.get("type")

    @property
    def type_name(self) -> str | None:
        """Event struct name, e.g. "ChatShopCreated"."""
        return type_name(self.type)

    @property
    def parsed_json(self) -> dict[str, Any] | None:
        return self._data.get("parsedJson") or None

    @property
    def sender(self) -> str | None:
        return self._data.get("sender")

    @property
    def event_id(self) -> dict[str, Any] | None:
        return self._data.get("id")

    @property
    def timestamp_ms(self) -> int | None:
        value = self._data.get("timestampMs")
        if value is None or value == "":
            return None
        return int(value)
