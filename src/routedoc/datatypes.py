"""The fixed vocabulary of ``actual_type`` values carried by field descriptors.

Shape parsers translate whatever type system they read (pydantic
annotations, dataclass hints, sample JSON values) into one of these members.
Formatters and the Swagger model registry only ever switch on this
enumeration.
"""

from __future__ import annotations

import enum


class DataType(str, enum.Enum):
    """Normalised data type of a documented field."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    FILE = "file"
    ENUM = "choice"
    COLLECTION = "collection"
    MODEL = "model"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"


_PRIMITIVES = frozenset(
    {
        DataType.INTEGER,
        DataType.FLOAT,
        DataType.STRING,
        DataType.BOOLEAN,
        DataType.FILE,
        DataType.DATE,
        DataType.DATETIME,
        DataType.TIME,
        DataType.ENUM,
    }
)


def is_primitive(type_name: object) -> bool:
    """Return ``True`` if *type_name* names a primitive (non-nested) data type.

    Comparison is case-insensitive and accepts both :class:`DataType`
    members and plain strings. ``None`` is never primitive.
    """
    if type_name is None:
        return False
    value = type_name.value if isinstance(type_name, DataType) else str(type_name)
    return value.lower() in {member.value for member in _PRIMITIVES}
