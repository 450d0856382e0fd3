"""Swagger 1.2 resource listings and API declarations.

The formatter returns plain dictionaries; callers serialise them to JSON.

Typical usage::

    formatter = SwaggerFormatter(base_path="/api")
    listing = formatter.format(entries)
    declaration = formatter.format(entries, "/users")
"""

from __future__ import annotations

import re
from typing import Any, Optional

from routedoc.datatypes import DataType
from routedoc.models import AuthenticationConfig, Entry
from routedoc.swagger.registry import FORMAT_MAP, TYPE_MAP, ModelRegistry, parse_choices


def normalize_resource_path(path: str) -> str:
    """Slugify a URL path, dropping ``{placeholder}`` segments.

    Example:
        >>> normalize_resource_path("/users/{id}/posts")
        'users-posts'
    """
    path = re.sub(r"\{.*?\}", "", path)
    path = re.sub(r"[^0-9a-zA-Z]", "-", path).strip("-")
    return re.sub(r"-+", "-", path)


class SwaggerFormatter:
    """Produces Swagger 1.2 documents from extracted entries.

    Without a resource, :meth:`format` returns the resource listing; with
    one it returns the API declaration of that resource, registering every
    referenced model in a :class:`~routedoc.swagger.ModelRegistry` that is
    cleared once the declaration is built.

    Args:
        naming_strategy: Model id strategy passed to the registry.
        base_path: Prefix stripped from resource and route paths.
        swagger_version: Value of ``swaggerVersion``.
        api_version: Value of ``apiVersion``.
        info: Value of ``info`` in the resource listing.
        authentication: Produces an ``apiKey`` authorization unless its
            delivery is ``http``.
    """

    def __init__(
        self,
        naming_strategy: str = "dot_notation",
        base_path: str = "/api",
        swagger_version: str = "1.2",
        api_version: str = "0.1",
        info: Optional[dict[str, Any]] = None,
        authentication: Optional[AuthenticationConfig] = None,
    ) -> None:
        self.registry = ModelRegistry(naming_strategy)
        self.base_path = base_path
        self.swagger_version = swagger_version
        self.api_version = api_version
        self.info = info or {}
        self.authentication = authentication

    def format(self, entries: list[Entry], resource: Optional[str] = None) -> dict[str, Any]:
        if resource is None:
            return self.produce_resource_listing(entries)
        return self.produce_api_declaration(entries, resource)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def produce_resource_listing(self, entries: list[Entry]) -> dict[str, Any]:
        apis = []
        for entry in entries:
            if not entry.annotation.is_resource:
                continue
            apis.append(
                {
                    "path": "/" + normalize_resource_path(self.strip_base_path(entry.resource)),
                    "description": entry.annotation.resource_description,
                }
            )

        return {
            "swaggerVersion": str(self.swagger_version),
            "apis": apis,
            "apiVersion": str(self.api_version),
            "info": self.info,
            "authorizations": self.get_authorizations(),
        }

    def produce_api_declaration(self, entries: list[Entry], resource: str) -> dict[str, Any]:
        api_bag: dict[str, list[dict[str, Any]]] = {}

        for entry in entries:
            item_resource = normalize_resource_path(self.strip_base_path(entry.resource))
            if "/" + item_resource != resource:
                continue

            route = entry.route
            path = self.strip_base_path(route.path)
            operations = api_bag.setdefault(path, [])
            data = entry.to_dict()

            parameters: list[dict[str, Any]] = []
            for variable in route.path_variables():
                parameter: dict[str, Any] = {
                    "paramType": "path",
                    "name": variable,
                    "type": "string",
                    "required": True,
                }
                if variable == "_format" and route.requirements.get("_format"):
                    parameter["enum"] = route.requirements["_format"].split("|")
                parameters.append(parameter)

            if "filters" in data:
                parameters.extend(self.derive_query_parameters(data["filters"]))
            if "parameters" in data:
                parameters.extend(
                    self.derive_parameters(data["parameters"], self._param_type(entry))
                )

            response_messages = self._response_messages(entry, data.get("status_codes", {}))
            response_type = response_messages.get(200, {}).get("responseModel")

            for method in route.methods:
                operation: dict[str, Any] = {
                    "method": method,
                    "summary": entry.annotation.description,
                    "nickname": self.generate_nickname(method, item_resource),
                    "parameters": parameters,
                    "responseMessages": list(response_messages.values()),
                }
                if response_type is not None:
                    operation["type"] = response_type
                operations.append(operation)

        declaration = {
            "swaggerVersion": str(self.swagger_version),
            "apiVersion": str(self.api_version),
            "basePath": self.base_path,
            "resourcePath": resource,
            "apis": [{"path": path, "operations": ops} for path, ops in api_bag.items()],
            "models": self.registry.get_models(),
            "produces": [],
            "consumes": [],
            "authorizations": self.get_authorizations(),
        }
        self.registry.clear()
        return declaration

    def get_authorizations(self) -> dict[str, Any]:
        auth = self.authentication
        if auth is None or auth.delivery == "http":
            return {}
        return {"apiKey": {"type": "apiKey", "passAs": auth.delivery, "keyname": auth.name}}

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def derive_query_parameters(self, filters: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
        """Filters become ``query`` parameters; unknown types default to ``string``."""
        parameters = []
        for name, prop in filters.items():
            data_type = prop.get("data_type") or "string"
            parameters.append(
                {
                    "paramType": "query",
                    "name": name,
                    "type": TYPE_MAP.get(str(data_type), "string"),
                    "description": prop.get("description"),
                }
            )
        return parameters

    def derive_parameters(
        self, fields: dict[str, dict[str, Any]], param_type: str = "form"
    ) -> list[dict[str, Any]]:
        """Build parameters from a field map, registering models where needed.

        Fields for which neither a type nor a model reference can be
        determined are left out.
        """
        parameters = []
        for name, prop in fields.items():
            actual_type = prop.get("actual_type") or DataType.STRING.value
            type_: Optional[str] = TYPE_MAP.get(actual_type)
            ref: Optional[str] = None
            enum: Optional[list[str]] = None
            items: Optional[dict[str, Any]] = None
            description = prop.get("description") or prop.get("data_type")

            if type_ is None:
                if actual_type == DataType.ENUM.value:
                    type_ = "string"
                    enum = parse_choices(prop.get("format"))
                elif actual_type == DataType.MODEL.value:
                    ref = self.registry.register(
                        prop.get("sub_type") or name, prop.get("children"), description
                    )
                elif actual_type == DataType.COLLECTION.value:
                    type_ = "array"
                    sub_type = prop.get("sub_type")
                    if sub_type is None:
                        items = {"type": "string"}
                    elif sub_type in TYPE_MAP:
                        items = {"type": TYPE_MAP[sub_type]}
                    else:
                        ref = self.registry.register(sub_type, prop.get("children"), description)
                        items = {"$ref": ref}

            if type_ is None and ref is None:
                continue

            parameter: dict[str, Any] = {"paramType": param_type, "name": name}
            if type_ is not None:
                parameter["type"] = type_
            if ref is not None:
                parameter["$ref"] = ref
                parameter["type"] = ref
            if actual_type in FORMAT_MAP:
                parameter["format"] = FORMAT_MAP[actual_type]
            if enum:
                parameter["enum"] = enum
            if prop.get("default") is not None:
                parameter["defaultValue"] = prop["default"]
            if items is not None:
                parameter["items"] = items
            if prop.get("description") is not None:
                parameter["description"] = prop["description"]
            parameters.append(parameter)

        return parameters

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def strip_base_path(self, path: str) -> str:
        if self.base_path == "/":
            return path
        return re.sub("^" + re.escape(self.base_path), "", path)

    def generate_nickname(self, method: str, resource: str) -> str:
        return f"{(method or '').lower()}_{normalize_resource_path(resource)}"

    def _param_type(self, entry: Entry) -> str:
        ref = entry.annotation.input
        if not isinstance(ref, dict):
            return "form"
        return ref.get("param_type") or ref.get("paramType") or "form"

    def _response_messages(
        self, entry: Entry, status_messages: dict[int, list[str]]
    ) -> dict[int, dict[str, Any]]:
        messages: dict[int, dict[str, Any]] = {}

        for code, parsed in entry.parsed_response_map.items():
            if code in status_messages:
                message = "; ".join(status_messages[code])
            else:
                message = f"See standard HTTP status code reason for {code}"

            ref = parsed.type
            class_name = ref.class_ + ".ErrorResponse" if ref.form_errors else ref.class_
            model = {name: desc.model_dump(exclude_unset=True) for name, desc in parsed.model.items()}

            if ref.collection:
                alias = ref.collection_name or ""
                if alias in model:
                    children = model[alias].get("children")
                else:
                    alias, children = "items", model
                model_id = self.registry.register(
                    f"{class_name}[{alias}]",
                    {
                        alias: {
                            "data_type": None,
                            "sub_type": class_name,
                            "actual_type": DataType.COLLECTION.value,
                            "required": True,
                            "readonly": True,
                            "description": None,
                            "default": None,
                            "children": children,
                        }
                    },
                    "",
                )
            else:
                model_id = self.registry.register(class_name, model, "")

            messages[code] = {"code": code, "message": message, "responseModel": model_id}

        for code, descriptions in status_messages.items():
            if code not in messages:
                messages[code] = {"code": code, "message": "; ".join(descriptions)}

        return messages
