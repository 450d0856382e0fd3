"""Validation error responses.

A type reference flagged with ``form_errors=True`` documents the error
payload returned when the referenced input fails validation rather than
the input itself::

    response_map={400: {"class": "app.models.UserInput", "form_errors": True}}

The parser contributes nothing during the parse phase. Once the other
parsers have described the input, :meth:`ErrorShapeParser.post_parse`
replaces every field with a ``status_code``/``message``/``errors``
envelope whose ``errors`` tree mirrors the input fields.
"""

from __future__ import annotations

from typing import Any

from routedoc.datatypes import DataType
from routedoc.models import TypeReference
from routedoc.parsers.base import FieldMap, PostShapeParser


class ErrorShapeParser(PostShapeParser):
    name = "form_errors"

    def supports(self, ref: TypeReference) -> bool:
        return ref.form_errors is True

    def parse(self, ref: TypeReference) -> FieldMap:
        return {}

    def post_parse(self, ref: TypeReference, fields: FieldMap) -> FieldMap:
        params: dict[str, Any] = {name: None for name in fields}

        params["status_code"] = {
            "data_type": "integer",
            "actual_type": DataType.INTEGER,
            "sub_type": None,
            "required": False,
            "description": "The status code",
            "readonly": True,
            "default": 400,
        }
        params["message"] = {
            "data_type": "string",
            "actual_type": DataType.STRING,
            "sub_type": None,
            "required": False,
            "description": "The error message",
            "default": "Validation failed.",
        }
        params["errors"] = {
            "data_type": "errors",
            "actual_type": DataType.MODEL,
            "sub_type": f"{ref.class_}.FormErrors",
            "required": False,
            "description": "Errors",
            "readonly": True,
            "children": self._field_errors(fields, []),
        }
        return params

    def _field_errors(self, fields: FieldMap, path: list[str]) -> FieldMap:
        errors: FieldMap = {}
        for name, field in fields.items():
            entry: dict[str, Any] = {
                "data_type": "parameter errors",
                "actual_type": DataType.MODEL,
                "sub_type": "FieldErrors",
                "required": False,
                "description": "Errors on the parameter",
                "readonly": True,
                "children": {
                    "errors": {
                        "data_type": "array of errors",
                        "actual_type": DataType.COLLECTION,
                        "sub_type": "string",
                        "required": False,
                        "description": "",
                        "readonly": True,
                    }
                },
            }

            if field.get("actual_type") == DataType.MODEL:
                branch = [*path, name]
                entry["sub_type"] = f"{field.get('sub_type')}.FieldErrors[{'.'.join(branch)}]"
                entry["children"] = self._field_errors(field.get("children") or {}, branch)

            errors[name] = entry
        return errors
