"""Dump commands -- render documentation for a route manifest.

Provides ``routedoc dump`` (Markdown, JSON or HTML for a view) and
``routedoc swagger-dump`` (Swagger 1.2 resource listing and API
declarations). Both load the manifest, build an extractor from the
resolved configuration, and write the result to stdout or the file given
with the global ``-o`` option.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Optional

import typer

from routedoc.config import get_cache_dir
from routedoc.exceptions import InvalidUsageError, RoutedocError
from routedoc.extractor import ApiDocExtractor, CachingApiDocExtractor, DocstringHandler
from routedoc.formatters import (
    DUMP_FORMATS,
    HtmlFormatter,
    MarkdownFormatter,
    SimpleFormatter,
    SwaggerFormatter,
)
from routedoc.loader import load_manifest, load_routes
from routedoc.models import RoutedocConfig
from routedoc.output import debug, error, info, print_data, success
from routedoc.parsers import default_parsers


def _get_config(ctx: typer.Context) -> RoutedocConfig:
    obj = ctx.find_root().obj or {}
    return obj.get("config") or RoutedocConfig()


def build_extractor(config: RoutedocConfig, source: str) -> ApiDocExtractor:
    """Create the extractor for the manifest at *source*.

    Local manifests are cached per view unless caching is disabled; the
    manifest itself is tracked so that editing it invalidates the cache
    in debug mode.
    """
    routes, declarations = load_routes(load_manifest(source))
    debug(f"Loaded {len(routes)} routes from {source}")

    options: dict[str, Any] = {
        "parsers": default_parsers(),
        "handlers": [DocstringHandler()],
        "exclude_sections": config.exclude_sections,
        "declarations": declarations,
    }

    manifest_path = Path(source)
    if not config.cache.enabled or source == "-" or not manifest_path.is_file():
        return ApiDocExtractor(routes, **options)

    cache_dir = Path(config.cache.directory) if config.cache.directory else get_cache_dir()
    digest = hashlib.sha256(str(manifest_path.resolve()).encode()).hexdigest()[:16]
    debug(f"Using extraction cache in {cache_dir}")
    return CachingApiDocExtractor(
        routes,
        cache_dir=cache_dir,
        cache_key=f"routedoc-{digest}",
        debug=config.cache.debug,
        resources=[manifest_path],
        **options,
    )


def _close(extractor: ApiDocExtractor) -> None:
    if isinstance(extractor, CachingApiDocExtractor):
        extractor.close()


def dump_command(
    ctx: typer.Context,
    manifest: str = typer.Argument(..., help="Route manifest: file path, URL, or '-' for stdin."),
    format: str = typer.Option(
        DUMP_FORMATS[0], "--format", help=f"Output format: {', '.join(DUMP_FORMATS)}."
    ),
    view: Optional[str] = typer.Option(None, "--view", help="Documentation view to dump."),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="Only document fields and routes of this API version."
    ),
    no_sandbox: bool = typer.Option(
        False, "--no-sandbox", help="Leave the request sandbox out of HTML output."
    ),
) -> None:
    """Dump API documentation in various formats.

    Example::

        routedoc dump routes.yaml
        routedoc dump routes.yaml --format html --no-sandbox -o api.html
        routedoc dump routes.yaml --format json --view premium --api-version 2.0
    """
    config = _get_config(ctx)
    try:
        if format not in DUMP_FORMATS:
            raise InvalidUsageError(f'Format "{format}" not supported.')

        if format == "json":
            formatter = SimpleFormatter()
        elif format == "markdown":
            formatter = MarkdownFormatter()
        else:
            html = config.html
            if no_sandbox:
                html = html.model_copy(update={"enable_sandbox": False})
            formatter = HtmlFormatter(html, config.authentication)

        formatter.set_version(api_version)

        extractor = build_extractor(config, manifest)
        try:
            view = view or config.default_view
            if api_version:
                entries = extractor.all_for_version(api_version, view)
            else:
                entries = extractor.all(view)
        finally:
            _close(extractor)

        result = formatter.format(entries)
    except RoutedocError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if format == "json":
        print_data(json.dumps(result, default=str))
    else:
        print_data(result)


def swagger_dump_command(
    ctx: typer.Context,
    manifest: str = typer.Argument(..., help="Route manifest: file path, URL, or '-' for stdin."),
    destination: Optional[str] = typer.Argument(
        None, help="Directory to dump JSON files in (file path with --resource/--list-resources)."
    ),
    resource: Optional[str] = typer.Option(
        None, "--resource", "-r", help="A specific resource API declaration to dump."
    ),
    list_resources: bool = typer.Option(
        False, "--list-resources", "-l", help="Dump the resource listing only."
    ),
    pretty: bool = typer.Option(False, "--pretty", "-p", help="Dump as prettified JSON."),
) -> None:
    """Dump Swagger 1.2 API definitions.

    Without ``--resource`` or ``--list-resources`` the resource listing and
    every API declaration are dumped: into ``api-docs.json`` and
    ``<resource>.json`` files when DESTINATION is given, otherwise as one
    JSON document on stdout.

    Example::

        routedoc swagger-dump routes.yaml --list-resources --pretty
        routedoc swagger-dump routes.yaml --resource users
        routedoc swagger-dump routes.yaml build/swagger
    """
    config = _get_config(ctx)
    try:
        if list_resources and resource:
            raise InvalidUsageError(
                "Cannot selectively dump a resource with the --list-resources flag."
            )

        swagger = config.swagger
        formatter = SwaggerFormatter(
            naming_strategy=config.naming_strategy,
            base_path=swagger.api_base_path,
            swagger_version=swagger.swagger_version,
            api_version=swagger.api_version,
            info=swagger.info,
            authentication=config.authentication,
        )

        extractor = build_extractor(config, manifest)
        try:
            entries = extractor.all(config.default_view)
        finally:
            _close(extractor)

        indent = 4 if pretty else None

        if list_resources:
            _dump(formatter.format(entries), destination, indent)
            return

        if resource:
            name = resource.lstrip("/")
            declaration = formatter.format(entries, "/" + name)
            if not declaration["apis"]:
                raise InvalidUsageError(f'Resource "{name}" does not exist.')
            _dump(declaration, destination, indent)
            return

        listing = formatter.format(entries)
        names = [api["path"][1:] for api in listing["apis"]]
        declarations = {name: formatter.format(entries, "/" + name) for name in names}

        if destination is None:
            _dump({"resourceListing": listing, "apiDeclarations": declarations}, None, indent)
            return

        directory = Path(destination)
        directory.mkdir(parents=True, exist_ok=True)
        _dump(listing, str(directory / "api-docs.json"), indent)
        for name, declaration in declarations.items():
            _dump(declaration, str(directory / f"{name}.json"), indent)
    except RoutedocError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _dump(data: dict[str, Any], destination: Optional[str], indent: Optional[int]) -> None:
    content = json.dumps(data, indent=indent, default=str)
    if destination is None:
        print_data(content)
        return

    path = Path(destination)
    info(f"Dumping to {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + "\n", encoding="utf-8")
    except OSError as exc:
        error(f"Could not write {path}: {exc}")
        raise typer.Exit(code=1) from None
    success(f"Wrote {path}")
