"""Swagger 1.2 model registration.

:class:`ModelRegistry` turns field maps into Swagger ``models`` entries and
hands out the ids to reference them by. The first registration of an id
wins; later registrations of the same class return the existing id
without touching the stored model. Nested models and collections of
models are registered depth-first and referenced through ``$ref``.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional

from routedoc.datatypes import DataType
from routedoc.exceptions import ConfigError

TYPE_MAP: dict[str, str] = {
    DataType.INTEGER.value: "integer",
    DataType.FLOAT.value: "number",
    DataType.STRING.value: "string",
    DataType.BOOLEAN.value: "boolean",
    DataType.FILE.value: "string",
    DataType.DATE.value: "string",
    DataType.DATETIME.value: "string",
}

FORMAT_MAP: dict[str, str] = {
    DataType.INTEGER.value: "int32",
    DataType.FLOAT.value: "float",
    DataType.FILE.value: "byte",
    DataType.DATE.value: "date",
    DataType.DATETIME.value: "date-time",
}


def parse_choices(fmt: Any) -> Optional[list[str]]:
    """Choices encoded in a ``format``: a JSON object's keys, a JSON list, or ``[a|b]``."""
    if not isinstance(fmt, str) or not fmt:
        return None
    try:
        decoded = json.loads(fmt)
    except ValueError:
        decoded = None
    if isinstance(decoded, dict):
        return list(decoded)
    if isinstance(decoded, list):
        return [str(item) for item in decoded]
    stripped = fmt.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        return stripped[1:-1].split("|")
    return None


def name_dot_notation(class_name: str) -> str:
    """``package\\module\\Class`` or ``package.module.Class`` to ``package.module.Class``.

    ``[...]`` collection suffixes are preserved.
    """
    model_id = re.sub(r"[^A-Za-z0-9_\[\]]", ".", class_name)
    model_id = re.sub(r"\.+", ".", model_id)
    return re.sub(r"^\.", "", model_id)


def name_last_segment_only(class_name: str) -> str:
    """``package.module.Class`` to ``Class``."""
    prefix, bracket, suffix = class_name.partition("[")
    segment = re.split(r"[\\.]", prefix)[-1]
    return segment + bracket + suffix


NAMING_STRATEGIES: dict[str, Callable[[str], str]] = {
    "dot_notation": name_dot_notation,
    "last_segment_only": name_last_segment_only,
}


class ModelRegistry:
    """Collects the Swagger models referenced by one API declaration.

    Args:
        naming_strategy: ``dot_notation`` or ``last_segment_only``.

    Raises:
        ConfigError: If *naming_strategy* is unknown.
    """

    def __init__(self, naming_strategy: str = "dot_notation") -> None:
        if naming_strategy not in NAMING_STRATEGIES:
            raise ConfigError(
                f"Invalid naming strategy. Choose from: {json.dumps(list(NAMING_STRATEGIES))}"
            )
        self._name = NAMING_STRATEGIES[naming_strategy]
        self._models: dict[str, dict[str, Any]] = {}
        self._classes: dict[str, list[str]] = {}

    def register(
        self,
        class_name: str,
        parameters: Optional[dict[str, Any]] = None,
        description: Optional[str] = "",
    ) -> str:
        """Register a model and return its id.

        Args:
            class_name: Class identifier the id is derived from.
            parameters: The model's field map. Without it only the id is
                returned and no model is stored.
            description: Model description.
        """
        self._classes.setdefault(class_name, [])
        model_id = self._name(class_name)

        if model_id in self._models:
            return model_id

        self._classes[class_name].append(model_id)

        if parameters is None:
            return model_id

        model: dict[str, Any] = {"id": model_id, "description": description}
        properties: dict[str, Any] = {}
        required: list[str] = []

        for name, prop in parameters.items():
            actual_type = prop.get("actual_type")
            if actual_type == DataType.MODEL and prop.get("sub_type"):
                properties[name] = {"$ref": self._register_nested(prop)}
                continue

            properties[name] = self._property(prop)
            if prop.get("required"):
                required.append(name)

        model["properties"] = properties
        model["required"] = required
        self._models[model_id] = model
        return model_id

    def get_models(self) -> dict[str, dict[str, Any]]:
        return dict(self._models)

    def clear(self) -> None:
        self._models = {}
        self._classes = {}

    def _register_nested(self, prop: dict[str, Any]) -> str:
        return self.register(
            prop["sub_type"],
            prop.get("children"),
            prop.get("description") or prop.get("data_type"),
        )

    def _property(self, prop: dict[str, Any]) -> dict[str, Any]:
        actual_type = prop.get("actual_type")
        sub_type = prop.get("sub_type")
        type_: Optional[str] = TYPE_MAP.get(actual_type) if actual_type else None
        enum: Optional[list[str]] = None
        items: Optional[dict[str, Any]] = None

        if type_ is None:
            if actual_type == DataType.ENUM:
                type_ = "string"
                enum = parse_choices(prop.get("format"))
            elif actual_type == DataType.COLLECTION:
                type_ = "array"
                if sub_type is None:
                    items = {"type": "string"}
                elif sub_type in TYPE_MAP:
                    items = {"type": TYPE_MAP[sub_type]}
                elif sub_type == DataType.ENUM:
                    items = {"type": "string"}
                else:
                    items = {"$ref": self._register_nested(prop)}
            elif actual_type == DataType.MODEL:
                type_ = "object"

        result: dict[str, Any] = {
            "type": type_,
            "description": str(prop["description"]) if prop.get("description") else prop.get("data_type"),
        }
        if actual_type in FORMAT_MAP:
            result["format"] = FORMAT_MAP[actual_type]
        if enum is not None:
            result["enum"] = enum
        if items is not None:
            result["items"] = items
        return result
