"""Serialisation metadata from pydantic models.

Describes the fields a pydantic :class:`~pydantic.BaseModel` exposes when
serialised: the output name (``serialization_alias``/``alias``), the field
type, description and default. Per-field documentation extras are read
from ``json_schema_extra``::

    class User(BaseModel):
        id: int = Field(frozen=True, description="Identifier")
        email: str = Field(json_schema_extra={"groups": ["admin"], "since_version": "1.2"})

``groups`` restricts a field to serialisation groups (fields without
groups belong to ``Default``), ``readonly`` marks a field read-only as does
``frozen``, and ``since_version``/``until_version`` bound the API versions
the field exists in.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel
from pydantic.fields import FieldInfo

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

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "Default"


def model_class(identifier: str) -> Optional[type[BaseModel]]:
    """Resolve *identifier* to a pydantic model class, or ``None``."""
    cls = resolve_type(identifier)
    if cls is not None and issubclass(cls, BaseModel):
        return cls
    return None


def field_extra(field_info: FieldInfo) -> dict[str, Any]:
    extra = field_info.json_schema_extra
    return extra if isinstance(extra, dict) else {}


def field_default(field_info: FieldInfo) -> Any:
    if field_info.is_required() or field_info.default_factory is not None:
        return None
    return plain_default(field_info.default)


def in_groups(field_info: FieldInfo, groups: list[str]) -> bool:
    """Whether a field is serialised for the requested *groups*."""
    if not groups:
        return True
    field_groups = field_extra(field_info).get("groups") or [DEFAULT_GROUP]
    return bool(set(groups) & set(field_groups))


def serialized_name(name: str, field_info: FieldInfo) -> str:
    return field_info.serialization_alias or field_info.alias or name


class PydanticModelParser(ShapeParser):
    """Describes pydantic models the way they are serialised."""

    name = "pydantic"

    def supports(self, ref: TypeReference) -> bool:
        return model_class(ref.class_) is not None

    def parse(self, ref: TypeReference) -> FieldMap:
        cls = model_class(ref.class_)
        if cls is None:
            return {}
        fields = self._parse_model(cls, frozenset({cls}), ref.groups)
        return wrap_named(ref, fields)

    def _parse_model(
        self, cls: type[BaseModel], visited: frozenset[type], groups: list[str]
    ) -> FieldMap:
        params: FieldMap = {}

        for attr, field_info in cls.model_fields.items():
            if not in_groups(field_info, groups):
                logger.debug("Skipping %s.%s: not in groups %s", cls.__name__, attr, groups)
                continue

            extra = field_extra(field_info)
            info = describe_annotation(field_info.annotation)
            name = serialized_name(attr, field_info)

            params[name] = {
                "data_type": scalar_data_type(info),
                "actual_type": info.actual_type,
                "sub_type": info.sub_type,
                "required": False,
                "default": field_default(field_info),
                "description": field_info.description,
                "readonly": bool(field_info.frozen or extra.get("readonly")),
                "since_version": extra.get("since_version"),
                "until_version": extra.get("until_version"),
            }

            nested = info.nested
            if nested is None or not issubclass(nested, BaseModel):
                continue

            params[name]["class"] = type_identifier(nested)
            if nested in visited:
                continue
            params[name]["children"] = self._parse_model(nested, visited | {nested}, groups)

        return params
