"""Validation metadata from pydantic field constraints.

Where :class:`~routedoc.parsers.pydantic_model.PydanticModelParser`
describes what a model looks like on the wire, this parser describes what
it accepts: which fields are required, and a human readable ``format``
summarising their constraints::

    name: str = Field(min_length=1, max_length=5)   # {length: {min: 1, max: 5}}
    age: int = Field(ge=1, le=10)                   # {range: {>=1, <=10}}
    code: str = Field(pattern=r"^[A-Z]+$")          # {match: ^[A-Z]+$}
    kind: Literal["a", "b"]                         # [a|b]
    tags: list[Literal["x", "y"]]                   # {choice of [x|y]}
    born: date                                      # {Date YYYY-MM-DD}

Validation groups are read from ``json_schema_extra={"groups": [...]}``;
fields outside the requested groups are ignored.
"""

from __future__ import annotations

import datetime
import ipaddress
from typing import Any, Optional

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from routedoc.datatypes import DataType
from routedoc.extractor.fields import merge_fields
from routedoc.models import TypeReference, type_identifier
from routedoc.parsers.base import (
    FieldMap,
    PostShapeParser,
    describe_annotation,
    scalar_data_type,
    unwrap_optional,
    wrap_named,
)
from routedoc.parsers.pydantic_model import field_default, in_groups, model_class, serialized_name

_EMAIL_TYPES = frozenset({"EmailStr", "NameEmail"})
_URL_TYPES = frozenset(
    {"AnyUrl", "AnyHttpUrl", "HttpUrl", "FileUrl", "FtpUrl", "WebsocketUrl", "AnyWebsocketUrl", "Url"}
)
_IP_TYPES = (ipaddress.IPv4Address, ipaddress.IPv6Address)


def constraint_formats(field_info: FieldInfo) -> list[str]:
    """Format strings for the length, range and pattern constraints of a field."""
    bounds: dict[str, Any] = {}
    for item in field_info.metadata:
        for attr in ("min_length", "max_length", "ge", "gt", "le", "lt", "pattern"):
            value = getattr(item, attr, None)
            if value is not None:
                bounds[attr] = value

    formats: list[str] = []

    length = []
    if "min_length" in bounds:
        length.append(f"min: {bounds['min_length']}")
    if "max_length" in bounds:
        length.append(f"max: {bounds['max_length']}")
    if length:
        formats.append("{length: {" + ", ".join(length) + "}}")

    limits = []
    if "ge" in bounds:
        limits.append(f">={bounds['ge']}")
    if "gt" in bounds:
        limits.append(f">{bounds['gt']}")
    if "le" in bounds:
        limits.append(f"<={bounds['le']}")
    if "lt" in bounds:
        limits.append(f"<{bounds['lt']}")
    if limits:
        formats.append("{range: {" + ", ".join(limits) + "}}")

    if "pattern" in bounds:
        pattern = bounds["pattern"]
        formats.append("{match: " + getattr(pattern, "pattern", str(pattern)) + "}")

    return formats


def type_format(annotation: Any) -> tuple[Optional[str], Optional[DataType]]:
    """Format string and overriding actual type implied by a field's type."""
    annotation = unwrap_optional(annotation)
    if not isinstance(annotation, type):
        return None, None

    name = annotation.__name__
    if name in _EMAIL_TYPES:
        return "{email address}", None
    if name in _URL_TYPES:
        return "{url}", None
    if issubclass(annotation, _IP_TYPES) or name == "IPvAnyAddress":
        return "{ip address}", None
    if issubclass(annotation, datetime.datetime):
        return "{DateTime YYYY-MM-DD HH:MM:SS}", DataType.DATETIME
    if issubclass(annotation, datetime.date):
        return "{Date YYYY-MM-DD}", DataType.DATE
    if issubclass(annotation, datetime.time):
        return "{Time HH:MM:SS}", DataType.TIME
    return None, None


def choice_format(choices: list[str]) -> str:
    return "[" + "|".join(sorted(choices)) + "]"


class ConstraintParser(PostShapeParser):
    """Describes the validation rules of pydantic models."""

    name = "constraints"

    def supports(self, ref: TypeReference) -> bool:
        return model_class(ref.class_) is not None

    def parse(self, ref: TypeReference) -> FieldMap:
        cls = model_class(ref.class_)
        if cls is None:
            return {}
        fields = self._parse_model(cls, frozenset({cls}), ref.groups)
        return wrap_named(ref, fields)

    def post_parse(self, ref: TypeReference, fields: FieldMap) -> FieldMap:
        """Pull constraints into nested model fields derived by other parsers.

        The referenced class starts the recursion path unless *fields* wraps
        it under ``ref.name``; a class already on the path is left alone.
        """
        cls = model_class(ref.class_)
        path: frozenset[type] = frozenset()
        if cls is not None and not ref.name:
            path = frozenset({cls})
        return self._post_parse(fields, path, ref.groups)

    def _post_parse(self, fields: FieldMap, path: frozenset[type], groups: list[str]) -> FieldMap:
        result: FieldMap = {}
        for name, data in fields.items():
            class_name = data.get("class")
            if not class_name or not data.get("children"):
                continue

            cls = model_class(class_name)
            if cls is None or cls in path:
                continue

            children = data["children"]
            branch = path | {cls}
            children = merge_fields(children, self._post_parse(children, branch, groups))
            children = merge_fields(children, self._parse_model(cls, branch, groups))
            result[name] = {"children": children}
        return result

    def _parse_model(
        self, cls: type[BaseModel], visited: frozenset[type], groups: list[str]
    ) -> FieldMap:
        params: FieldMap = {}

        for attr, field_info in cls.model_fields.items():
            if not in_groups(field_info, groups):
                continue

            info = describe_annotation(field_info.annotation)
            formats = constraint_formats(field_info)
            actual_type = info.actual_type
            sub_type = info.sub_type

            hint, override = type_format(field_info.annotation)
            if hint:
                formats.append(hint)
            if override:
                actual_type = override

            if info.choices and actual_type == DataType.ENUM:
                formats.append(choice_format(info.choices))
            elif info.choices and actual_type == DataType.COLLECTION:
                formats.append("{choice of " + choice_format(info.choices) + "}")

            vparams: dict[str, Any] = {
                "default": field_default(field_info),
                "data_type": scalar_data_type(info._replace(actual_type=actual_type)),
                "actual_type": actual_type,
                "sub_type": sub_type,
                "readonly": None,
                "required": True if field_info.is_required() else None,
            }
            if formats:
                vparams["format"] = ", ".join(dict.fromkeys(formats))

            nested = info.nested
            if nested is not None and issubclass(nested, BaseModel):
                vparams["class"] = type_identifier(nested)
                if nested not in visited:
                    vparams["children"] = self._parse_model(nested, visited | {nested}, groups)

            params[serialized_name(attr, field_info)] = vparams

        return params
