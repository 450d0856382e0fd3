"""Shape parser protocol and shared type introspection.

A shape parser turns a normalised :class:`~routedoc.models.TypeReference`
into a *field map*: an ordered ``dict`` of field name to a descriptor
dictionary using the snake_case keys of
:class:`~routedoc.models.FieldDescriptor` (``data_type``, ``actual_type``,
``sub_type``, ``required``, ``children``, ...). Parsers also set the
temporary ``class`` key on fields that describe a nested type; the
extractor uses it for parent bookkeeping and strips it afterwards.

Several parsers may support the same reference. Their maps are folded
together with :func:`~routedoc.extractor.fields.merge_fields` in
registration order, after which every supporting
:class:`PostShapeParser` gets to refine the merged result.

Parsers that recurse into nested types thread a ``visited`` set of the
classes on the current recursion path (``visited | {cls}`` for each
branch), so a type that refers back to one of its ancestors is described
without its children instead of recursing forever.
"""

from __future__ import annotations

import collections.abc
import datetime
import decimal
import enum
import ipaddress
import pathlib
import types
import uuid
from abc import ABC, abstractmethod
from typing import Annotated, Any, Literal, NamedTuple, Optional, Union, get_args, get_origin

from routedoc.datatypes import DataType
from routedoc.models import TypeReference, type_identifier

FieldMap = dict[str, dict[str, Any]]

_SCALARS: tuple[tuple[type, DataType], ...] = (
    (bool, DataType.BOOLEAN),
    (int, DataType.INTEGER),
    (float, DataType.FLOAT),
    (decimal.Decimal, DataType.FLOAT),
    (str, DataType.STRING),
    (bytes, DataType.FILE),
    (datetime.datetime, DataType.DATETIME),
    (datetime.date, DataType.DATE),
    (datetime.time, DataType.TIME),
)

_STRING_LIKE: tuple[type, ...] = (
    uuid.UUID,
    pathlib.PurePath,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)

# pydantic's network and secret types, matched by name so that optional
# extras (email-validator) are never imported.
_STRING_LIKE_NAMES = frozenset(
    {
        "AnyUrl",
        "AnyHttpUrl",
        "HttpUrl",
        "FileUrl",
        "FtpUrl",
        "WebsocketUrl",
        "AnyWebsocketUrl",
        "Url",
        "EmailStr",
        "NameEmail",
        "IPvAnyAddress",
        "IPvAnyInterface",
        "IPvAnyNetwork",
        "SecretStr",
    }
)

_SEQUENCE_ORIGINS = (list, set, frozenset, tuple)


class ShapeParser(ABC):
    """Derives field metadata from a type reference."""

    name: str = ""
    """Identifier used by :attr:`TypeReference.parsers` whitelists."""

    @abstractmethod
    def supports(self, ref: TypeReference) -> bool:
        """Return ``True`` if this parser can describe *ref*."""

    @abstractmethod
    def parse(self, ref: TypeReference) -> FieldMap:
        """Return the field map for *ref*."""

    def matches(self, names: list[str]) -> bool:
        """Whether this parser is selected by a ``parsers`` whitelist."""
        return self.name in names or type(self).__name__ in names


class PostShapeParser(ShapeParser):
    """A parser that also refines the merged output of all supporting parsers."""

    @abstractmethod
    def post_parse(self, ref: TypeReference, fields: FieldMap) -> FieldMap:
        """Return a field map to merge on top of *fields*."""


class TypeInfo(NamedTuple):
    """What a Python annotation means in :class:`DataType` terms."""

    actual_type: DataType
    sub_type: Optional[str] = None
    nested: Optional[type] = None
    choices: Optional[list[str]] = None


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``Annotated[...]`` and ``Optional[...]`` wrappers."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return unwrap_optional(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return unwrap_optional(args[0])
    return annotation


def describe_annotation(annotation: Any) -> TypeInfo:
    """Map a type annotation to a :class:`TypeInfo`.

    Any class that is neither a scalar, an enum nor a known string-like
    type is treated as a nested model; callers decide whether they can
    recurse into it.
    """
    annotation = unwrap_optional(annotation)
    origin = get_origin(annotation)

    if origin is Literal:
        return TypeInfo(DataType.ENUM, choices=[str(v) for v in get_args(annotation)])

    if origin in _SEQUENCE_ORIGINS or (
        isinstance(origin, type)
        and issubclass(origin, collections.abc.Sequence)
        and not issubclass(origin, str)
    ):
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        if not args:
            return TypeInfo(DataType.COLLECTION)
        item = describe_annotation(args[0])
        if item.actual_type == DataType.MODEL:
            return TypeInfo(DataType.COLLECTION, item.sub_type, item.nested)
        if item.actual_type == DataType.ENUM:
            return TypeInfo(DataType.COLLECTION, DataType.ENUM.value, choices=item.choices)
        if item.actual_type == DataType.COLLECTION:
            return TypeInfo(DataType.COLLECTION)
        return TypeInfo(DataType.COLLECTION, item.actual_type.value)

    if origin is not None:
        if isinstance(origin, type) and issubclass(origin, collections.abc.Mapping):
            return TypeInfo(DataType.MODEL)
        return TypeInfo(DataType.STRING)

    if annotation is Any or not isinstance(annotation, type):
        return TypeInfo(DataType.STRING)

    if issubclass(annotation, enum.Enum):
        return TypeInfo(DataType.ENUM, choices=[str(member.value) for member in annotation])
    for base, data_type in _SCALARS:
        if issubclass(annotation, base):
            return TypeInfo(data_type)
    if issubclass(annotation, _STRING_LIKE) or annotation.__name__ in _STRING_LIKE_NAMES:
        return TypeInfo(DataType.STRING)
    if annotation in _SEQUENCE_ORIGINS:
        return TypeInfo(DataType.COLLECTION)
    if issubclass(annotation, collections.abc.Mapping) or annotation is object:
        return TypeInfo(DataType.MODEL)

    return TypeInfo(DataType.MODEL, type_identifier(annotation), annotation)


def scalar_data_type(info: TypeInfo) -> Optional[str]:
    """The ``data_type`` label for a non-nested field, ``None`` otherwise.

    Nested and collection labels are filled in later by
    :func:`~routedoc.extractor.fields.generate_human_readable_types`.
    """
    if info.actual_type == DataType.MODEL:
        return "object" if info.sub_type is None else None
    if info.actual_type == DataType.COLLECTION:
        return "array" if info.sub_type is None else None
    return info.actual_type.value


def plain_default(value: Any) -> Any:
    """Normalise a field default for documentation; empty containers become ``None``."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset, dict)) and not value:
        return None
    return value


def wrap_named(ref: TypeReference, fields: FieldMap) -> FieldMap:
    """Nest *fields* under ``ref.name`` when the reference asks for it.

    Used for references such as ``{"class": "app.User", "name": "user"}``
    and aliased collections, whose shape is exposed as a single field
    instead of a flat map.
    """
    if not ref.name:
        return fields

    return {
        ref.name: {
            "data_type": None,
            "actual_type": DataType.COLLECTION if ref.collection else DataType.MODEL,
            "sub_type": ref.class_,
            "class": ref.class_,
            "required": None,
            "readonly": None,
            "default": None,
            "children": fields,
        }
    }
