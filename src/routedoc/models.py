"""Canonical Pydantic models shared across all routedoc modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- loaded from ``routedoc.json``/``routedoc.yaml``:
    :class:`CacheConfig`, :class:`SwaggerConfig`, :class:`HtmlConfig`,
    :class:`AuthenticationConfig` and :class:`RoutedocConfig`.

**Documentation models** -- produced by the extractor and consumed by the
formatters:
    :class:`ApiDoc` (the declaration attached to a handler),
    :class:`Route`, :class:`TypeReference`, :class:`FieldDescriptor`,
    :class:`ParsedResponse` and :class:`Entry`.

Shape parsers and the field merger work on plain nested dictionaries
(*field maps*) keyed by snake_case descriptor names (``data_type``,
``actual_type``, ``sub_type``, ...). Only once an entry is finalised are the
maps converted into immutable :class:`FieldDescriptor` trees.
"""

from __future__ import annotations

import enum
import re
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from routedoc.datatypes import DataType
from routedoc.exceptions import InvalidDeclarationError

DEFAULT_VIEW = "default"
"""View name that also matches declarations without an explicit ``views`` list."""

DEFAULT_TAG_COLOR = "#d9534f"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(key: str) -> str:
    """Convert a camelCase key (``dataType``) to snake_case (``data_type``)."""
    return _CAMEL_BOUNDARY_RE.sub("_", key).lower()


def type_identifier(value: Any) -> Any:
    """Return the dotted import path of a class, or *value* unchanged.

    Declarations may name their input and output types with class objects;
    the extractor and the cache only ever deal with string identifiers.
    """
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, dict) and isinstance(value.get("class"), type):
        return {**value, "class": type_identifier(value["class"])}
    return value


# --- Configuration ---


class CacheConfig(BaseModel):
    """Extraction cache settings."""

    enabled: bool = Field(default=True, description="Cache extraction results per view")
    directory: Optional[str] = Field(
        default=None, description="Cache directory (defaults to the XDG cache dir)"
    )
    debug: bool = Field(
        default=False,
        description="Re-check source fingerprints on every read instead of trusting stored entries",
    )


class SwaggerConfig(BaseModel):
    """Settings for the Swagger 1.2 formatter."""

    api_base_path: str = "/api"
    swagger_version: str = "1.2"
    api_version: str = "0.1"
    info: dict[str, Any] = Field(
        default_factory=lambda: {"title": "API documentation", "description": ""}
    )


class HtmlConfig(BaseModel):
    """Settings for the HTML sandbox formatter."""

    api_name: str = "API documentation"
    enable_sandbox: bool = True
    endpoint: Optional[str] = None
    request_format_method: str = "format_param"
    request_formats: dict[str, str] = Field(
        default_factory=lambda: {
            "json": "application/json",
            "xml": "application/xml",
        }
    )
    default_request_format: str = "json"
    accept_type: Optional[str] = None
    body_formats: list[str] = Field(default_factory=lambda: ["form", "json"])
    default_body_format: str = "form"
    default_sections_opened: bool = True


class AuthenticationConfig(BaseModel):
    """How the documented API expects its API key to be delivered."""

    delivery: str = Field(default="http", description="http, query or header")
    name: Optional[str] = None


class RoutedocConfig(BaseModel):
    """Effective configuration, resolved by :func:`~routedoc.config.resolve_config`."""

    exclude_sections: list[str] = Field(default_factory=list)
    default_view: str = DEFAULT_VIEW
    naming_strategy: str = Field(
        default="dot_notation", description="Swagger model ids: dot_notation or last_segment_only"
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    swagger: SwaggerConfig = Field(default_factory=SwaggerConfig)
    html: HtmlConfig = Field(default_factory=HtmlConfig)
    authentication: Optional[AuthenticationConfig] = None


# --- Type references and field descriptors ---


class TypeReference(BaseModel):
    """A normalised input/output type reference handed to shape parsers.

    Produced by :func:`~routedoc.extractor.fields.normalize_type_reference`
    from whatever a declaration names (a dotted path, a class, a
    ``array<...>`` directive or a mapping with ``class``/``groups``/...).
    Unknown keys are kept so that parser-specific options can travel along.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    class_: str = Field(default="", alias="class")
    groups: list[str] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)
    collection: bool = False
    collection_name: Optional[str] = None
    name: Optional[str] = None
    parsers: Optional[list[str]] = None
    form_errors: bool = False
    param_type: Optional[str] = None


class FieldDescriptor(BaseModel):
    """Finalised description of a single parameter or response property.

    ``required`` and ``readonly`` are tri-state: ``None`` means the parsers
    had no opinion. Keys contributed by parsers beyond the declared fields
    are preserved as extras. JSON dumps use camelCase aliases.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    data_type: Optional[str] = None
    actual_type: Optional[str] = None
    sub_type: Optional[str] = None
    required: Optional[bool] = None
    readonly: Optional[bool] = None
    default: Any = None
    description: Optional[str] = None
    format: Any = None
    requirement: Optional[str] = None
    since_version: Optional[str] = None
    until_version: Optional[str] = None
    parent_class: Optional[str] = None
    field: Optional[str] = None
    children: Optional[dict[str, FieldDescriptor]] = None

    @field_validator("actual_type", "sub_type", mode="before")
    @classmethod
    def _plain_enum_value(cls, value: Any) -> Any:
        if isinstance(value, enum.Enum):
            return value.value
        return value

    @model_validator(mode="after")
    def _children_need_nested_type(self) -> FieldDescriptor:
        if self.children and self.actual_type not in (
            DataType.MODEL.value,
            DataType.COLLECTION.value,
        ):
            raise ValueError(
                f"Field with children must be a model or collection, got {self.actual_type!r}"
            )
        return self


def to_descriptors(fields: dict[str, Any]) -> dict[str, FieldDescriptor]:
    """Convert a raw field map into :class:`FieldDescriptor` instances."""
    return {name: FieldDescriptor.model_validate(info) for name, info in fields.items()}


def dump_descriptors(fields: dict[str, FieldDescriptor]) -> dict[str, Any]:
    """Convert descriptors back into a raw field map containing only the keys that were set."""
    return {name: desc.model_dump(exclude_unset=True) for name, desc in fields.items()}


# --- Declarations ---


class ApiDoc(BaseModel):
    """Documentation declaration attached to one route handler.

    Instances are normally created with :meth:`from_dict` (which the
    :func:`~routedoc.annotation.api_doc` decorator and the manifest loader
    call) so that list-shaped items are validated and indexed by name.
    Both snake_case and camelCase keys are accepted.

    Example::

        ApiDoc.from_dict({
            "resource": True,
            "description": "List users",
            "filters": [{"name": "page", "data_type": "integer"}],
            "output": "myapp.models.User",
            "status_codes": {200: "Returned when successful"},
        })
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    resource: Union[bool, str] = False
    description: Optional[str] = None
    documentation: Optional[str] = None
    deprecated: bool = False
    link: Optional[str] = None
    section: Optional[str] = None
    views: list[str] = Field(default_factory=list)
    tags: dict[str, str] = Field(default_factory=dict)
    input: Optional[Union[str, dict[str, Any]]] = None
    inputs: Optional[list[Union[str, dict[str, Any]]]] = None
    output: Optional[Union[str, dict[str, Any]]] = None
    filters: dict[str, dict[str, Any]] = Field(default_factory=dict)
    parameters: dict[str, dict[str, Any]] = Field(default_factory=dict)
    headers: dict[str, dict[str, Any]] = Field(default_factory=dict)
    requirements: dict[str, dict[str, Any]] = Field(default_factory=dict)
    status_codes: dict[int, list[str]] = Field(default_factory=dict)
    response_map: dict[int, Union[str, dict[str, Any]]] = Field(default_factory=dict)
    https: bool = False
    authentication: bool = False
    authentication_roles: list[str] = Field(default_factory=list)
    cache: Optional[int] = None
    resource_description: Optional[str] = None

    @field_validator("input", "output", mode="before")
    @classmethod
    def _class_to_identifier(cls, value: Any) -> Any:
        return type_identifier(value)

    @field_validator("inputs", mode="before")
    @classmethod
    def _classes_to_identifiers(cls, value: Any) -> Any:
        if value is None:
            return None
        return [type_identifier(item) for item in value]

    @field_validator("response_map", mode="before")
    @classmethod
    def _map_classes_to_identifiers(cls, value: Any) -> Any:
        return {code: type_identifier(ref) for code, ref in (value or {}).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiDoc:
        """Build a declaration from a loosely shaped mapping.

        Raises:
            InvalidDeclarationError: If a ``filters``, ``requirements``,
                ``parameters`` or ``headers`` item lacks a ``name`` key, or
                a parameter lacks its ``data_type``.
        """
        data = {snake_case(key): value for key, value in data.items()}

        for key, label in (
            ("filters", "filter"),
            ("requirements", "requirement"),
            ("parameters", "parameter"),
            ("headers", "header"),
        ):
            if data.get(key) is not None:
                data[key] = _index_by_name(data[key], label)

        for name, parameter in data.get("parameters", {}).items():
            if "data_type" not in parameter:
                raise InvalidDeclarationError(
                    f'"{name}" parameter element has to contain a "dataType" attribute'
                )

        views = data.get("views")
        if isinstance(views, str):
            data["views"] = [views]

        if "tags" in data:
            data["tags"] = _normalize_tags(data["tags"])

        if "status_codes" in data:
            data["status_codes"] = {
                code: list(desc) if isinstance(desc, (list, tuple)) else [desc]
                for code, desc in data["status_codes"].items()
            }

        response_map = data.get("response_map") or {}
        for code, ref in response_map.items():
            if str(code) == "200":
                data["output"] = ref

        if not data.get("resource"):
            data["resource"] = False

        return cls.model_validate(data)

    @property
    def is_resource(self) -> bool:
        return bool(self.resource)

    @property
    def resource_name(self) -> Optional[str]:
        """The explicit resource name, or ``None`` for ``resource=True``."""
        if isinstance(self.resource, str) and self.resource:
            return self.resource
        return None


def _index_by_name(items: Any, label: str) -> dict[str, dict[str, Any]]:
    if isinstance(items, dict):
        return {
            name: {snake_case(k): v for k, v in item.items()} for name, item in items.items()
        }

    indexed: dict[str, dict[str, Any]] = {}
    for item in items:
        if not isinstance(item, dict) or "name" not in item:
            raise InvalidDeclarationError(
                f'A "{label}" element has to contain a "name" attribute'
            )
        item = {snake_case(k): v for k, v in item.items()}
        name = item.pop("name")
        indexed[name] = item
    return indexed


def _normalize_tags(tags: Any) -> dict[str, str]:
    if isinstance(tags, str):
        return {tags: DEFAULT_TAG_COLOR}
    if isinstance(tags, dict):
        return {str(tag): color for tag, color in tags.items()}
    return {str(tag): DEFAULT_TAG_COLOR for tag in tags}


# --- Routes ---


class Route(BaseModel):
    """A route record: HTTP methods, a path pattern and an opaque handler.

    ``handler`` is either a callable or an import string
    (``package.module:function`` or ``package.module:Class.method``).
    Callables are serialised as import strings so that cached entries can
    be read back without the original objects.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: Optional[str] = None
    path: str
    methods: list[str] = Field(default_factory=list)
    host: Optional[str] = None
    defaults: dict[str, Any] = Field(default_factory=dict)
    requirements: dict[str, str] = Field(default_factory=dict)
    handler: Any = None

    @field_validator("methods", mode="before")
    @classmethod
    def _upper_methods(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split("|")
        return [str(method).upper() for method in value or []]

    @field_serializer("handler")
    def _serialize_handler(self, handler: Any) -> Optional[str]:
        if handler is None or isinstance(handler, str):
            return handler
        return f"{handler.__module__}:{handler.__qualname__}"

    def path_variables(self) -> list[str]:
        """Names of the ``{placeholder}`` variables in the path."""
        return _PLACEHOLDER_RE.findall(self.path)

    def variables(self) -> list[str]:
        """Names of the placeholder variables in the host and the path."""
        host_vars = _PLACEHOLDER_RE.findall(self.host or "")
        return host_vars + [v for v in self.path_variables() if v not in host_vars]

    def resolved_host(self) -> Optional[str]:
        """The host pattern with placeholders replaced by string route defaults."""
        if not self.host:
            return None
        host = self.host
        for key, value in self.defaults.items():
            if isinstance(value, str):
                host = host.replace("{" + key + "}", value)
        return host


# --- Extraction results ---


class ParsedResponse(BaseModel):
    """Field tree derived for one documented status code."""

    type: TypeReference
    model: dict[str, FieldDescriptor] = Field(default_factory=dict)


class Entry(BaseModel):
    """One documented route: the enriched declaration plus its derived shapes.

    Created by :meth:`~routedoc.extractor.ApiDocExtractor.extract_data`
    and never mutated afterwards (resource assignment produces a copy).
    """

    model_config = ConfigDict(frozen=True)

    annotation: ApiDoc
    route: Route
    resource: str = "others"
    method: str = "ANY"
    uri: str = ""
    host: Optional[str] = None
    parameters: dict[str, FieldDescriptor] = Field(default_factory=dict)
    response: dict[str, FieldDescriptor] = Field(default_factory=dict)
    parsed_response_map: dict[int, ParsedResponse] = Field(default_factory=dict)

    @property
    def section(self) -> Optional[str]:
        return self.annotation.section

    def to_dict(self) -> dict[str, Any]:
        """Flatten the entry into the dictionary shape formatters consume.

        Empty optional values are left out; the boolean flags are always
        present.
        """
        doc = self.annotation
        data: dict[str, Any] = {"method": self.method, "uri": self.uri}

        optional: dict[str, Any] = {
            "host": self.host,
            "description": doc.description,
            "link": doc.link,
            "documentation": doc.documentation,
            "filters": doc.filters,
            "parameters": dump_descriptors(self.parameters),
            "headers": doc.headers,
            "requirements": doc.requirements,
            "views": doc.views,
            "response": dump_descriptors(self.response),
            "parsed_response_map": {
                code: {
                    "type": parsed.type.model_dump(by_alias=True),
                    "model": dump_descriptors(parsed.model),
                }
                for code, parsed in self.parsed_response_map.items()
            },
            "status_codes": doc.status_codes,
            "section": doc.section,
            "cache": doc.cache,
            "tags": doc.tags,
            "resource_description": doc.resource_description,
        }
        for key, value in optional.items():
            if value:
                data[key] = value

        data["https"] = doc.https
        data["authentication"] = doc.authentication
        data["authentication_roles"] = doc.authentication_roles
        data["deprecated"] = doc.deprecated
        return data
