"""Shape parsers -- derive field metadata from declared input/output types.

Each parser understands one way of describing a type:

* :mod:`~routedoc.parsers.pydantic_model` -- serialisation shape of pydantic
  models (names, types, descriptions, groups, versions).
* :mod:`~routedoc.parsers.constraints` -- validation rules of pydantic
  models (required fields, length/range/pattern/choice formats).
* :mod:`~routedoc.parsers.dataclass_model` -- standard library dataclasses.
* :mod:`~routedoc.parsers.json_serializable` -- shapes inferred from a
  sample ``json_serialize()`` value.
* :mod:`~routedoc.parsers.error_shape` -- validation error envelopes for
  references flagged ``form_errors``.

Typical usage::

    from routedoc.extractor import ApiDocExtractor
    from routedoc.parsers import default_parsers

    extractor = ApiDocExtractor(routes, parsers=default_parsers())
"""

from routedoc.parsers.base import PostShapeParser, ShapeParser
from routedoc.parsers.constraints import ConstraintParser
from routedoc.parsers.dataclass_model import DataclassParser
from routedoc.parsers.error_shape import ErrorShapeParser
from routedoc.parsers.json_serializable import JsonSerializableParser
from routedoc.parsers.pydantic_model import PydanticModelParser


def default_parsers() -> list[ShapeParser]:
    """The built-in parsers in their registration order."""
    return [
        PydanticModelParser(),
        ConstraintParser(),
        DataclassParser(),
        JsonSerializableParser(),
        ErrorShapeParser(),
    ]


__all__ = [
    "ShapeParser",
    "PostShapeParser",
    "PydanticModelParser",
    "ConstraintParser",
    "DataclassParser",
    "JsonSerializableParser",
    "ErrorShapeParser",
    "default_parsers",
]
