"""Documentation extraction -- from routes and declarations to entries.

Sub-modules:

* :mod:`~routedoc.extractor.extractor` -- :class:`ApiDocExtractor`, the
  pipeline orchestrator (filtering, parsing, resource grouping, sorting).
* :mod:`~routedoc.extractor.fields` -- field map merging, type reference
  normalisation and post-processing.
* :mod:`~routedoc.extractor.handlers` -- declaration enrichment from
  docstrings and route requirements.
* :mod:`~routedoc.extractor.caching` -- per-view result caching with
  :mod:`diskcache`.
"""

from routedoc.extractor.caching import CachingApiDocExtractor
from routedoc.extractor.extractor import AnnotationProvider, ApiDocExtractor
from routedoc.extractor.fields import merge_fields, normalize_type_reference
from routedoc.extractor.handlers import AnnotationHandler, DocstringHandler

__all__ = [
    "ApiDocExtractor",
    "CachingApiDocExtractor",
    "AnnotationProvider",
    "AnnotationHandler",
    "DocstringHandler",
    "merge_fields",
    "normalize_type_reference",
]
