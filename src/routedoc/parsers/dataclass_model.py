"""Reflection based description of standard library dataclasses."""

from __future__ import annotations

import dataclasses
import typing
from typing import Any

from routedoc.annotation import resolve_type
from routedoc.models import TypeReference, type_identifier
from routedoc.parsers.base import (
    FieldMap,
    ShapeParser,
    describe_annotation,
    plain_default,
    scalar_data_type,
    wrap_named,
)


def dataclass_type(identifier: str) -> type | None:
    cls = resolve_type(identifier)
    if cls is not None and dataclasses.is_dataclass(cls):
        return cls
    return None


class DataclassParser(ShapeParser):
    """Describes dataclasses from their type hints and field metadata.

    A field is required when it has neither a default nor a default
    factory. ``field(metadata={"description": ...})`` documents a field.
    Frozen dataclasses yield read-only fields.
    """

    name = "dataclass"

    def supports(self, ref: TypeReference) -> bool:
        return dataclass_type(ref.class_) is not None

    def parse(self, ref: TypeReference) -> FieldMap:
        cls = dataclass_type(ref.class_)
        if cls is None:
            return {}
        return wrap_named(ref, self._parse_class(cls, frozenset({cls})))

    def _parse_class(self, cls: type, visited: frozenset[type]) -> FieldMap:
        hints = typing.get_type_hints(cls)
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        params: FieldMap = {}

        for field in dataclasses.fields(cls):
            info = describe_annotation(hints.get(field.name, Any))
            has_default = field.default is not dataclasses.MISSING
            has_factory = field.default_factory is not dataclasses.MISSING

            params[field.name] = {
                "data_type": scalar_data_type(info),
                "actual_type": info.actual_type,
                "sub_type": info.sub_type,
                "required": not (has_default or has_factory),
                "default": plain_default(field.default) if has_default else None,
                "description": field.metadata.get("description"),
                "readonly": frozen,
            }

            nested = info.nested
            if nested is None or not dataclasses.is_dataclass(nested):
                continue
            params[field.name]["class"] = type_identifier(nested)
            if nested not in visited:
                params[field.name]["children"] = self._parse_class(nested, visited | {nested})

        return params
