"""Standalone HTML page with an optional request sandbox per route."""

from __future__ import annotations

import datetime
from typing import Any, Optional

from routedoc.formatters.base import AbstractFormatter, create_jinja_env
from routedoc.models import AuthenticationConfig, HtmlConfig


class HtmlFormatter(AbstractFormatter):
    """Renders the documentation into a single HTML document.

    Every page receives the display settings from :class:`HtmlConfig` as
    template globals, so the sandbox forms can be switched off or pointed
    at another endpoint without touching the templates.

    Args:
        config: Display and sandbox settings.
        authentication: How sandbox requests carry credentials.
        version: API version filter, see :class:`AbstractFormatter`.
    """

    def __init__(
        self,
        config: Optional[HtmlConfig] = None,
        authentication: Optional[AuthenticationConfig] = None,
        version: Optional[str] = None,
    ) -> None:
        super().__init__(version)
        self.config = config or HtmlConfig()
        self.authentication = authentication
        self._env = create_jinja_env()

    def render_one(self, data: dict[str, Any]) -> str:
        return self._env.get_template("single.html.j2").render(data=data, **self.global_vars())

    def render(self, collection: dict[str, dict[str, list[dict[str, Any]]]]) -> str:
        return self._env.get_template("resources.html.j2").render(
            resources=collection, **self.global_vars()
        )

    def global_vars(self) -> dict[str, Any]:
        config = self.config
        return {
            "api_name": config.api_name,
            "authentication": self.authentication,
            "endpoint": config.endpoint,
            "enable_sandbox": config.enable_sandbox,
            "request_format_method": config.request_format_method,
            "accept_type": config.accept_type,
            "body_formats": config.body_formats,
            "default_body_format": config.default_body_format,
            "request_formats": config.request_formats,
            "default_request_format": config.default_request_format,
            "date": datetime.datetime.now().strftime("%Y-%m-%d %H:%M"),
            "default_sections_opened": config.default_sections_opened,
        }
