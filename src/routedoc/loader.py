"""Load route manifests from a URL, local file, or stdin.

A manifest describes the routes of an application and, optionally,
documentation declarations for handlers that carry none::

    routes:
      - name: get_user
        path: /api/users/{id}
        methods: [GET]
        handler: myapp.controllers:get_user
        requirements: {id: "\\d+"}
    annotations:
      get_user:
        resource: true
        description: Fetch a user
        output: myapp.models.User

The two public functions are:

* :func:`load_manifest` -- Load and parse a manifest from any supported source.
* :func:`load_routes` -- Validate a parsed manifest into :class:`~routedoc.models.Route`
  records and per-route :class:`~routedoc.models.ApiDoc` declarations.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from routedoc.exceptions import ManifestError
from routedoc.models import ApiDoc, Route


def load_manifest(source: str) -> dict[str, Any]:
    """Load a route manifest from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed manifest as a dictionary.

    Raises:
        ManifestError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def load_routes(manifest: dict[str, Any]) -> tuple[list[Route], dict[str, ApiDoc]]:
    """Build routes and fallback declarations from a parsed manifest.

    Args:
        manifest: The dictionary returned by :func:`load_manifest`.

    Returns:
        A ``(routes, declarations)`` tuple; *declarations* maps route
        names to the declarations listed under ``annotations``.

    Raises:
        ManifestError: If ``routes`` is missing or a route is invalid.
        InvalidDeclarationError: If a declaration is rejected.
    """
    raw_routes = manifest.get("routes")
    if not isinstance(raw_routes, list):
        raise ManifestError("Manifest must contain a 'routes' list")

    routes: list[Route] = []
    for index, raw in enumerate(raw_routes):
        if not isinstance(raw, dict):
            raise ManifestError(f"Route #{index} must be a mapping")
        try:
            routes.append(Route.model_validate(raw))
        except ValidationError as exc:
            label = raw.get("name") or f"#{index}"
            raise ManifestError(f"Invalid route {label}: {exc}") from exc

    raw_annotations = manifest.get("annotations") or {}
    if not isinstance(raw_annotations, dict):
        raise ManifestError("Manifest 'annotations' must be a mapping of route names")

    declarations = {
        str(name): ApiDoc.from_dict(data or {}) for name, data in raw_annotations.items()
    }
    return routes, declarations


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ManifestError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise ManifestError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a manifest over HTTP(S); the content type hints the format."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ManifestError(
            f"HTTP {exc.response.status_code} fetching manifest from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ManifestError(f"Failed to fetch manifest from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Failed to read manifest {path}: {exc}") from exc

    if not content.strip():
        raise ManifestError(f"Manifest file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless *hint* is ``yaml``; a ``json`` hint
    disables the YAML fallback.

    Raises:
        ManifestError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ManifestError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ManifestError(
                    f"Manifest must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse manifest as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise ManifestError(msg) from exc

    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise ManifestError(f"Manifest must be a JSON/YAML object (got {got})")
    return result
