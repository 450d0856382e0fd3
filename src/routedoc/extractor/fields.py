"""Field map merging, type reference normalisation and post-processing.

All functions here are pure: they return new dictionaries and never modify
their arguments. Field maps are the raw ``dict`` trees described in
:mod:`routedoc.parsers.base`.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from routedoc.annotation import resolve_type
from routedoc.datatypes import DataType, is_primitive
from routedoc.exceptions import MalformedDirectiveError
from routedoc.models import TypeReference, snake_case, type_identifier

COLLECTION_DIRECTIVE = re.compile(
    r"^array<([A-Za-z_][A-Za-z0-9_]*(?:[\\.][A-Za-z_][A-Za-z0-9_]*)*)>(?:\s+as\s+(.+))?$"
)

_ACCUMULATED_FLAGS = ("required", "readonly")


def merge_fields(existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Merge the field map *incoming* on top of *existing*.

    Rules, applied per top-level key of *incoming*:

    * a ``None`` value removes the key from the result;
    * a key missing from *existing* (or ``None`` there) is added verbatim;
    * otherwise the two descriptors are merged sub-key by sub-key:

      - nested mappings (``children``, ``format`` maps, ...) are merged
        recursively with these same rules;
      - ``None`` sub-values are ignored, except for ``default`` (below);
      - ``required`` and ``readonly`` are OR-ed;
      - ``requirement`` strings are concatenated with ``", "``;
      - ``default`` is replaced only by a non-null value, and set to
        ``None`` when it was absent;
      - every other sub-key is overwritten.

    Keys present in *existing* but not in *incoming* are left untouched.
    """
    merged = dict(existing)

    for name, value in incoming.items():
        if value is None:
            merged.pop(name, None)
            continue

        current = existing.get(name)
        if current is None:
            merged[name] = value
        elif isinstance(value, dict):
            merged[name] = _merge_descriptor(current, value)

    return merged


def _merge_descriptor(current: Any, incoming: dict[str, Any]) -> Any:
    if not isinstance(current, dict):
        return incoming

    result = dict(current)
    for key, value in incoming.items():
        if isinstance(value, dict):
            if isinstance(result.get(key), dict):
                result[key] = merge_fields(result[key], value)
            else:
                result[key] = value
        elif value is None:
            # A prior default survives a null; an absent one becomes null.
            if key == "default" and key not in result:
                result[key] = None
        elif key in _ACCUMULATED_FLAGS:
            result[key] = bool(result.get(key)) or bool(value)
        elif key == "requirement" and result.get(key) is not None:
            result[key] = f"{result[key]}, {value}"
        else:
            result[key] = value
    return result


def normalize_type_reference(raw: Any) -> TypeReference:
    """Turn a declared input/output reference into a :class:`TypeReference`.

    Accepts a dotted path, a class, a mapping with a ``class`` key, or an
    already normalised reference. Collection directives are expanded, so
    ``"array<app.models.User> as users"`` becomes a reference to
    ``app.models.User`` with ``collection=True`` and
    ``collection_name="users"``.

    An aliased collection is exposed under its alias, so ``name`` defaults
    to the alias.

    Raises:
        MalformedDirectiveError: If the class starts with ``array<`` but is
            not a valid directive.
    """
    if isinstance(raw, TypeReference):
        return raw

    raw = type_identifier(raw)
    if isinstance(raw, str):
        data: dict[str, Any] = {"class": raw}
    else:
        data = {snake_case(key): value for key, value in (raw or {}).items()}

    class_name = data.get("class") or ""
    match = COLLECTION_DIRECTIVE.match(class_name)
    if match:
        data["class"] = match.group(1)
        data["collection"] = True
        data["collection_name"] = match.group(2) or ""
        if match.group(2) and not data.get("name"):
            data["name"] = match.group(2)
    elif class_name.startswith("array<"):
        raise MalformedDirectiveError(
            f"Malformed collection directive: {class_name}. Proper format is: "
            "array<package.module.ClassName> or array<package.module.ClassName> as collectionName"
        )

    groups = data.get("groups")
    if isinstance(groups, str):
        data["groups"] = [group.strip() for group in groups.split(",")]

    return TypeReference.model_validate(data)


def set_parent_classes(fields: dict[str, Any]) -> dict[str, Any]:
    """Stamp ``parent_class`` and ``field`` on the children of class-carrying fields.

    A child that already has a ``parent_class`` keeps it.
    """
    result = {}
    for name, info in fields.items():
        if isinstance(info, dict) and info.get("children"):
            info = dict(info)
            children = info["children"]
            if info.get("class"):
                stamped = {}
                for key, child in children.items():
                    child = dict(child)
                    if child.get("parent_class") is None:
                        child["parent_class"] = info["class"]
                    child["field"] = key
                    stamped[key] = child
                children = stamped
            info["children"] = set_parent_classes(children)
        result[name] = info
    return result


def strip_classes(value: Any) -> Any:
    """Recursively drop the temporary ``class`` bookkeeping key."""
    if not isinstance(value, dict):
        return value
    return {key: strip_classes(item) for key, item in value.items() if key != "class"}


def generate_human_readable_types(fields: dict[str, Any]) -> dict[str, Any]:
    """Fill empty ``data_type`` labels from ``actual_type``/``sub_type``, recursively."""
    result = {}
    for name, info in fields.items():
        info = dict(info)
        if not info.get("data_type") and "sub_type" in info:
            info["data_type"] = human_readable_type(info.get("actual_type"), info["sub_type"])
        if info.get("children"):
            info["children"] = generate_human_readable_types(info["children"])
        result[name] = info
    return result


def human_readable_type(actual_type: Optional[str], sub_type: Optional[str]) -> Optional[str]:
    """Describe a type for humans: ``object (User)``, ``array of strings``, ...

    Class names are shortened to their last segment when the class can be
    imported.
    """
    if isinstance(sub_type, DataType):
        sub_type = sub_type.value

    if actual_type == DataType.MODEL:
        return f"object ({_short_name(sub_type)})"

    if actual_type == DataType.COLLECTION:
        if is_primitive(sub_type):
            return f"array of {sub_type}s"
        return f"array of objects ({_short_name(sub_type)})"

    return actual_type.value if isinstance(actual_type, DataType) else actual_type


def _short_name(sub_type: Optional[str]) -> Optional[str]:
    cls = resolve_type(sub_type) if sub_type else None
    if cls is not None:
        return cls.__name__
    return sub_type
