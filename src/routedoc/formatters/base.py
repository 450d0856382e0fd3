"""Shared formatter behaviour.

Formatters consume the entries produced by the extractor. The base class
flattens each entry with :meth:`~routedoc.models.Entry.to_dict`, compresses
nested fields into bracketed names (``user[group][name]``), drops fields
outside the requested API version, and groups the result by section and
resource before handing it to :meth:`AbstractFormatter.render`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from routedoc.datatypes import DataType
from routedoc.models import Entry
from routedoc.versions import in_version_range

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``formatters/templates/``)."""

OTHERS_SECTION = "_others"

_COMPRESSED_KEYS = (
    "readonly",
    "default",
    "description",
    "format",
    "since_version",
    "until_version",
    "actual_type",
    "sub_type",
    "parent_class",
    "field",
)


def create_jinja_env() -> Environment:
    """Jinja2 environment for the formatter templates.

    Autoescape is enabled for ``.html.j2`` templates and disabled for
    ``.md.j2`` ones.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(
            enabled_extensions=("html.j2",), disabled_extensions=("md.j2",)
        ),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class AbstractFormatter(ABC):
    """Base class for the documentation formatters.

    Args:
        version: Only fields whose ``since_version``/``until_version`` range
            includes this API version are kept. ``None`` keeps all fields.
    """

    def __init__(self, version: Optional[str] = None) -> None:
        self.version = version

    def set_version(self, version: Optional[str]) -> None:
        self.version = version

    def format_one(self, entry: Entry) -> Any:
        """Format a single entry."""
        return self.render_one(self.process_annotation(entry.to_dict()))

    def format(self, entries: list[Entry]) -> Any:
        """Format a complete, sorted entry list."""
        return self.render(self.process_collection(entries))

    @abstractmethod
    def render_one(self, data: dict[str, Any]) -> Any:
        """Render one processed entry dictionary."""

    @abstractmethod
    def render(self, collection: dict[str, dict[str, list[dict[str, Any]]]]) -> Any:
        """Render entries grouped as ``{section: {resource: [entry, ...]}}``."""

    def range_includes_version(
        self, since_version: Optional[str] = None, until_version: Optional[str] = None
    ) -> bool:
        return in_version_range(self.version or "", since_version, until_version)

    def compress_nested_parameters(
        self,
        data: dict[str, Any],
        parent_name: Optional[str] = None,
        ignore_nested_readonly: bool = False,
    ) -> dict[str, dict[str, Any]]:
        """Flatten nested fields into ``parent[child]`` names.

        Collections with a known item type get a ``[]`` suffix. With
        *ignore_nested_readonly*, the children of read-only fields are
        left out (they cannot be submitted).
        """
        params: dict[str, dict[str, Any]] = {}
        for name, info in data.items():
            if self.version and not self.range_includes_version(
                info.get("since_version"), info.get("until_version")
            ):
                continue

            new_name = self.new_name(name, info, parent_name)
            params[new_name] = {
                "data_type": info.get("data_type"),
                "required": info.get("required"),
                **{key: info.get(key) for key in _COMPRESSED_KEYS},
            }

            children = info.get("children")
            if children and (not info.get("readonly") or not ignore_nested_readonly):
                params.update(
                    self.compress_nested_parameters(children, new_name, ignore_nested_readonly)
                )

        return params

    def new_name(self, name: str, data: dict[str, Any], parent_name: Optional[str] = None) -> str:
        new_name = f"{parent_name}[{name}]" if parent_name else name
        if data.get("actual_type") == DataType.COLLECTION and data.get("sub_type") is not None:
            new_name += "[]"
        return new_name

    def process_annotation(self, data: dict[str, Any]) -> dict[str, Any]:
        """Compress the field maps of one entry dictionary and give it an ``id``."""
        if "parameters" in data:
            data["parameters"] = self.compress_nested_parameters(data["parameters"], None, True)
        if "response" in data:
            data["response"] = self.compress_nested_parameters(data["response"])
        if "parsed_response_map" in data:
            data["parsed_response_map"] = {
                code: {**parsed, "model": self.compress_nested_parameters(parsed["model"])}
                for code, parsed in data["parsed_response_map"].items()
            }

        method = (data.get("method") or "").lower()
        data["id"] = f"{method}-{(data.get('uri') or '').replace('/', '-')}"
        return data

    def process_collection(self, entries: list[Entry]) -> dict[str, dict[str, list[dict[str, Any]]]]:
        grouped: dict[str, dict[str, list[dict[str, Any]]]] = {}
        for entry in entries:
            section = entry.section or OTHERS_SECTION
            grouped.setdefault(section, {}).setdefault(entry.resource, []).append(
                self.process_annotation(entry.to_dict())
            )
        return dict(sorted(grouped.items()))
