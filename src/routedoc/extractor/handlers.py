"""Declaration enrichment from handler metadata.

Handlers run before shape parsing and return an enriched copy of a route's
declaration. :class:`DocstringHandler` is the built-in one: it reads the
handler's docstring (Google style) and the route's requirements::

    @api_doc(resource=True)
    def get_user(request, user_id):
        \"\"\"Fetch a single *user*.

        Args:
            user_id (int): The user identifier.

        See: https://example.com/docs/users
        \"\"\"

yields the description ``Fetch a single user.``, a ``user_id`` requirement
typed ``int`` and documented, and the ``link``.
"""

from __future__ import annotations

import inspect
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from routedoc.models import ApiDoc, Route

_MARKUP_RE = re.compile(r"[_`*]+")
_WHITESPACE_RE = re.compile(r"\s+")
_SECTION_RE = re.compile(r"^(Args|Arguments|Parameters):\s*$")
_ARG_RE = re.compile(r"^(\w+)\s*(?:\(([^)]*)\))?\s*:\s*(.*)$")
_LINK_RE = re.compile(r"^(?:See|Link):\s*(\S.*)$", re.IGNORECASE)
_DEPRECATED_RE = re.compile(r"^(?:\.\.\s*)?deprecated\b", re.IGNORECASE)

IGNORED_REQUIREMENTS = frozenset({"_method", "_scheme"})


class AnnotationHandler(ABC):
    """Enriches a declaration before its shapes are parsed."""

    @abstractmethod
    def handle(
        self, annotation: ApiDoc, route: Route, handler: Optional[Callable[..., Any]]
    ) -> ApiDoc:
        """Return an enriched copy of *annotation*."""


def parse_docstring_args(doc: str) -> dict[str, tuple[str, str]]:
    """Map argument names to ``(type, description)`` from an ``Args:`` section."""
    args: dict[str, tuple[str, str]] = {}
    in_section = False
    section_indent = 0

    for line in doc.splitlines():
        stripped = line.strip()
        indent = len(line) - len(line.lstrip())

        if _SECTION_RE.match(stripped):
            in_section = True
            section_indent = indent
            continue
        if not in_section:
            continue
        if not stripped:
            continue
        if indent <= section_indent:
            in_section = False
            continue

        match = _ARG_RE.match(stripped)
        if match:
            name, type_name, description = match.groups()
            args[name] = (type_name or "", description.strip())

    return args


class DocstringHandler(AnnotationHandler):
    """Fills description, documentation, requirements, link and deprecation from docstrings."""

    def handle(
        self, annotation: ApiDoc, route: Route, handler: Optional[Callable[..., Any]]
    ) -> ApiDoc:
        doc = (inspect.getdoc(handler) if handler is not None else None) or ""
        update: dict[str, Any] = {}

        if doc:
            update["documentation"] = doc

        if annotation.description is None:
            first = doc.split("\n")[0].strip() if doc else ""
            first = _WHITESPACE_RE.sub(" ", first)
            first = _MARKUP_RE.sub("", first)
            if not first.startswith("@"):
                update["description"] = first

        declared = annotation.requirements
        requirements = {name: dict(value) for name, value in declared.items()}
        for name, value in route.requirements.items():
            if name not in requirements and name not in IGNORED_REQUIREMENTS:
                requirements[name] = {"requirement": value, "data_type": "", "description": ""}

        for line in doc.splitlines():
            stripped = line.strip()
            if _DEPRECATED_RE.match(stripped):
                update["deprecated"] = True
            link = _LINK_RE.match(stripped)
            if link:
                update["link"] = link.group(1).strip()

        documented = parse_docstring_args(doc)
        for var in route.variables():
            if var in documented:
                type_name, description = documented[var]
                entry = requirements.setdefault(var, {})
                if declared.get(var, {}).get("data_type") is None:
                    entry["data_type"] = type_name
                if declared.get(var, {}).get("description") is None:
                    entry["description"] = description
                if entry.get("requirement") is None:
                    entry["requirement"] = ""
            elif var not in requirements:
                requirements[var] = {"requirement": "", "data_type": "", "description": ""}

        update["requirements"] = requirements
        return annotation.model_copy(update=update)
