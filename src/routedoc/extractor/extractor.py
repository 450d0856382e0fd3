"""Route walking, shape parsing and resource grouping.

:class:`ApiDocExtractor` is the orchestrator of the documentation pipeline.
For every route it resolves the handler and its declaration, filters by
section and view, runs the enrichment handlers and the shape parsers over
the declared input/output types, and finally assigns resources and sorts
the resulting :class:`~routedoc.models.Entry` list deterministically.

Example::

    from routedoc.extractor import ApiDocExtractor, DocstringHandler
    from routedoc.parsers import default_parsers

    extractor = ApiDocExtractor(
        routes,
        parsers=default_parsers(),
        handlers=[DocstringHandler()],
    )
    for entry in extractor.all():
        print(entry.resource, entry.method, entry.uri)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Optional

from routedoc.annotation import get_declaration, resolve_handler
from routedoc.extractor.fields import (
    generate_human_readable_types,
    merge_fields,
    normalize_type_reference,
    set_parent_classes,
    strip_classes,
)
from routedoc.extractor.handlers import AnnotationHandler
from routedoc.models import (
    DEFAULT_VIEW,
    ApiDoc,
    Entry,
    ParsedResponse,
    Route,
    TypeReference,
    to_descriptors,
)
from routedoc.parsers.base import FieldMap, PostShapeParser, ShapeParser
from routedoc.versions import compare_versions

logger = logging.getLogger(__name__)

METHOD_ORDER = ("GET", "POST", "PUT", "DELETE")

OTHERS_RESOURCE = "others"


class AnnotationProvider(ABC):
    """Supplies extra ``(declaration, route)`` pairs that are always documented."""

    @abstractmethod
    def get_annotations(self) -> Iterable[tuple[ApiDoc, Route]]:
        """Return the declarations to add, each with the route it documents."""


def _method_rank(methods: list[str]) -> int:
    if len(methods) == 1 and methods[0] in METHOD_ORDER:
        return METHOD_ORDER.index(methods[0])
    return len(METHOD_ORDER)


def _sort_key(entry: Entry) -> tuple[str, str, int, str]:
    methods = entry.route.methods
    return (entry.resource, entry.route.path, _method_rank(methods), "|".join(methods))


class ApiDocExtractor:
    """Extracts documented entries from a set of routes.

    Args:
        routes: The route table.
        parsers: Shape parsers, in registration order.
        handlers: Declaration enrichment handlers, run in order.
        exclude_sections: Sections whose declarations are never documented.
        annotation_providers: Sources of additional declarations which bypass
            the section and view filters.
        declarations: Fallback declarations by route name, used for handlers
            that do not carry one themselves.
    """

    def __init__(
        self,
        routes: Iterable[Route] = (),
        parsers: Iterable[ShapeParser] = (),
        handlers: Iterable[AnnotationHandler] = (),
        exclude_sections: Iterable[str] = (),
        annotation_providers: Iterable[AnnotationProvider] = (),
        declarations: Optional[Mapping[str, ApiDoc]] = None,
    ) -> None:
        self._routes = list(routes)
        self._parsers = list(parsers)
        self._handlers = list(handlers)
        self._exclude_sections = set(exclude_sections)
        self._providers = list(annotation_providers)
        self._declarations = dict(declarations or {})

    # ------------------------------------------------------------------
    # Route access
    # ------------------------------------------------------------------

    def get_routes(self) -> list[Route]:
        return list(self._routes)

    def add_parser(self, parser: ShapeParser) -> None:
        """Register an additional shape parser after the existing ones."""
        self._parsers.append(parser)

    def declaration_for(self, route: Route, handler: Any) -> Optional[ApiDoc]:
        """The declaration documenting *route*: the handler's own, else the fallback by route name."""
        declaration = get_declaration(handler)
        if declaration is None and route.name:
            declaration = self._declarations.get(route.name)
        return declaration

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def all(self, view: str = DEFAULT_VIEW) -> list[Entry]:
        """Extract every documented entry of the route table for *view*."""
        return self.extract_annotations(self.get_routes(), view)

    def all_for_version(self, api_version: Optional[str], view: str = DEFAULT_VIEW) -> list[Entry]:
        """Like :meth:`all`, minus routes pinned to another ``_version`` default."""
        entries = []
        for entry in self.all(view):
            version = entry.route.defaults.get("_version")
            if version and compare_versions(api_version, str(version)) != 0:
                continue
            entries.append(entry)
        return entries

    def extract_annotations(self, routes: Iterable[Route], view: str = DEFAULT_VIEW) -> list[Entry]:
        """Document *routes* for *view*, grouped into resources and sorted.

        Raises:
            TypeError: If an element of *routes* is not a :class:`Route`.
            MalformedDirectiveError: If a declaration uses an invalid
                ``array<...>`` collection directive.
        """
        entries: list[Entry] = []
        resources: list[str] = []

        for route in routes:
            if not isinstance(route, Route):
                raise TypeError(
                    f'All elements of routes must be instances of Route. "{type(route).__name__}" given'
                )

            handler = resolve_handler(route.handler)
            if handler is None:
                logger.debug("Skipping route '%s': handler %r not found", route.path, route.handler)
                continue

            annotation = self.declaration_for(route, handler)
            if annotation is None:
                continue
            if annotation.section in self._exclude_sections:
                logger.debug("Skipping route '%s': section '%s' excluded", route.path, annotation.section)
                continue
            if not (view in annotation.views or (not annotation.views and view == DEFAULT_VIEW)):
                continue

            if annotation.is_resource:
                resources.append(annotation.resource_name or route.path.replace(".{_format}", ""))

            entries.append(self.extract_data(annotation, route, handler))

        for provider in self._providers:
            for annotation, route in provider.get_annotations():
                entries.append(self.extract_data(annotation, route, resolve_handler(route.handler)))

        resources.sort(reverse=True)
        grouped = []
        for entry in entries:
            path = entry.route.path or ""
            resource = next(
                (
                    candidate
                    for candidate in resources
                    if path.startswith(candidate) or candidate == entry.annotation.resource
                ),
                OTHERS_RESOURCE,
            )
            grouped.append(entry.model_copy(update={"resource": resource}))

        return sorted(grouped, key=_sort_key)

    def get(self, handler: Any, route_name: str) -> Optional[Entry]:
        """Document a single route by handler and route name."""
        callable_ = resolve_handler(handler)
        if callable_ is None:
            return None

        route = next((r for r in self._routes if r.name == route_name), None)
        if route is None:
            return None

        annotation = self.declaration_for(route, callable_)
        if annotation is None:
            return None
        return self.extract_data(annotation, route, callable_)

    def extract_data(
        self, annotation: ApiDoc, route: Route, handler: Optional[Callable[..., Any]]
    ) -> Entry:
        """Build the :class:`Entry` for one declared route."""
        for enrichment in self._handlers:
            annotation = enrichment.handle(annotation, route, handler)

        method = "|".join(route.methods) if route.methods else "ANY"

        inputs: list[Any] = []
        if annotation.inputs is not None:
            inputs = list(annotation.inputs)
        elif annotation.input is not None:
            inputs = [annotation.input]

        parameters: FieldMap = annotation.parameters
        if inputs:
            derived: FieldMap = {}
            for raw in inputs:
                derived = self._parse_reference(normalize_type_reference(raw), derived)

            derived = set_parent_classes(derived)
            derived = strip_classes(derived)
            derived = generate_human_readable_types(derived)

            if method == "PATCH":
                derived = {name: {**info, "required": False} for name, info in derived.items()}

            parameters = merge_fields(derived, annotation.parameters)

        response: FieldMap = {}
        parsed_response_map: dict[int, ParsedResponse] = {}

        if annotation.output is not None:
            ref = normalize_type_reference(annotation.output)
            response = self._parse_reference(ref, {})
            response = generate_human_readable_types(strip_classes(response))
            parsed_response_map[200] = ParsedResponse(type=ref, model=to_descriptors(response))

        for code, raw in annotation.response_map.items():
            if code == 200 and 200 in parsed_response_map:
                continue

            ref = normalize_type_reference(raw)
            fields = self._parse_reference(ref, {})
            fields = set_parent_classes(fields)
            fields = generate_human_readable_types(strip_classes(fields))
            parsed_response_map[code] = ParsedResponse(type=ref, model=to_descriptors(fields))

        return Entry(
            annotation=annotation,
            route=route,
            method=method,
            uri=route.path,
            host=route.resolved_host(),
            parameters=to_descriptors(parameters),
            response=to_descriptors(response),
            parsed_response_map=parsed_response_map,
        )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _select_parsers(self, ref: TypeReference) -> list[ShapeParser]:
        if ref.parsers is None:
            return list(self._parsers)
        return [parser for parser in self._parsers if parser.matches(ref.parsers)]

    def _parse_reference(self, ref: TypeReference, fields: FieldMap) -> FieldMap:
        supported = [parser for parser in self._select_parsers(ref) if parser.supports(ref)]
        if not supported:
            logger.debug("No parser supports '%s'", ref.class_)

        for parser in supported:
            fields = merge_fields(fields, parser.parse(ref))

        for parser in supported:
            if isinstance(parser, PostShapeParser):
                fields = merge_fields(fields, parser.post_parse(ref, fields))

        return fields
