"""Documentation formatters.

Sub-modules:
    base     -- :class:`AbstractFormatter`: version filtering, nested
                parameter compression and section/resource grouping.
    simple   -- :class:`SimpleFormatter`, JSON-ready dictionaries.
    markdown -- :class:`MarkdownFormatter`, Jinja2 Markdown templates.
    html     -- :class:`HtmlFormatter`, Jinja2 HTML page with sandbox forms.
    swagger  -- :class:`SwaggerFormatter`, Swagger 1.2 documents.
"""

from routedoc.formatters.base import AbstractFormatter
from routedoc.formatters.html import HtmlFormatter
from routedoc.formatters.markdown import MarkdownFormatter
from routedoc.formatters.simple import SimpleFormatter
from routedoc.formatters.swagger import SwaggerFormatter, normalize_resource_path

DUMP_FORMATS = ("markdown", "json", "html")
"""Formats accepted by ``routedoc dump``, the first being the default."""

__all__ = [
    "AbstractFormatter",
    "DUMP_FORMATS",
    "HtmlFormatter",
    "MarkdownFormatter",
    "SimpleFormatter",
    "SwaggerFormatter",
    "normalize_resource_path",
]
