"""Shapes inferred from a sample serialisation.

Classes that know how to turn themselves into JSON-ready data through a
``json_serialize()`` method, and that can be built without arguments, are
instantiated once; the shape of the returned value becomes the documented
field map. Scalar sample values double as field defaults.
"""

from __future__ import annotations

import inspect
from typing import Any

from routedoc.annotation import resolve_type
from routedoc.datatypes import DataType
from routedoc.models import TypeReference, type_identifier
from routedoc.parsers.base import FieldMap, ShapeParser

SERIALIZE_METHOD = "json_serialize"

_SCALARS: tuple[tuple[type, DataType], ...] = (
    (bool, DataType.BOOLEAN),
    (int, DataType.INTEGER),
    (float, DataType.FLOAT),
    (str, DataType.STRING),
)


def _constructible_without_arguments(cls: type) -> bool:
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    return all(
        param.default is not inspect.Parameter.empty
        or param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for param in signature.parameters.values()
    )


def is_json_serializable(value: Any) -> bool:
    return callable(getattr(value, SERIALIZE_METHOD, None))


class JsonSerializableParser(ShapeParser):
    name = "json_serializable"

    def supports(self, ref: TypeReference) -> bool:
        cls = resolve_type(ref.class_)
        if cls is None or not is_json_serializable(cls):
            return False
        return _constructible_without_arguments(cls)

    def parse(self, ref: TypeReference) -> FieldMap:
        cls = resolve_type(ref.class_)
        if cls is None:
            return {}
        sample = cls()
        parsed = self.item_metadata(sample.json_serialize())

        if ref.name:
            return {ref.name: parsed}
        return parsed.get("children") or {}

    def item_metadata(self, item: Any) -> dict[str, Any]:
        """Describe one serialised value, recursing into mappings."""
        if is_json_serializable(item) and not isinstance(item, type):
            meta = self.item_metadata(item.json_serialize())
            meta["class"] = type_identifier(type(item))
            return meta

        actual_type = None
        for base, data_type in _SCALARS:
            if isinstance(item, base):
                actual_type = data_type
                break
        if isinstance(item, (list, tuple)):
            actual_type = DataType.COLLECTION
        elif isinstance(item, dict):
            actual_type = DataType.MODEL

        meta: dict[str, Any] = {
            "data_type": None if actual_type is None else actual_type.value,
            "actual_type": actual_type,
            "sub_type": None,
            "required": None,
            "description": None,
            "readonly": None,
            "default": item if actual_type is not None and not isinstance(item, (list, tuple, dict)) else None,
        }

        if actual_type == DataType.COLLECTION:
            meta["data_type"] = "array"
        elif actual_type == DataType.MODEL:
            meta["data_type"] = "object"
            meta["children"] = {str(key): self.item_metadata(value) for key, value in item.items()}

        return meta
