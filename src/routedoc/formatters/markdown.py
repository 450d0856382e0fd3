"""Markdown output rendered from Jinja2 templates."""

from __future__ import annotations

from typing import Any

from routedoc.formatters.base import AbstractFormatter, create_jinja_env


class MarkdownFormatter(AbstractFormatter):
    """Renders ``resources.md.j2`` for collections and ``resource.md.j2`` for single entries."""

    def __init__(self, version: str | None = None) -> None:
        super().__init__(version)
        self._env = create_jinja_env()

    def render_one(self, data: dict[str, Any]) -> str:
        return self._env.get_template("resource.md.j2").render(data=data)

    def render(self, collection: dict[str, dict[str, list[dict[str, Any]]]]) -> str:
        return self._env.get_template("resources.md.j2").render(resources=collection)
