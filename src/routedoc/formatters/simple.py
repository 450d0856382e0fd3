"""JSON-ready output: each resource mapped to its entry dictionaries."""

from __future__ import annotations

from typing import Any

from routedoc.formatters.base import AbstractFormatter
from routedoc.models import Entry


class SimpleFormatter(AbstractFormatter):
    """Returns plain data instead of rendered text.

    Field maps are left nested and the per-status parsed responses are
    omitted from collections.
    """

    def format_one(self, entry: Entry) -> dict[str, Any]:
        return entry.to_dict()

    def format(self, entries: list[Entry]) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for entry in entries:
            data = entry.to_dict()
            data.pop("parsed_response_map", None)
            result.setdefault(entry.resource, []).append(data)
        return result

    def render_one(self, data: dict[str, Any]) -> dict[str, Any]:
        return data

    def render(self, collection: dict[str, dict[str, list[dict[str, Any]]]]) -> Any:
        return collection
