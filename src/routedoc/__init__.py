"""routedoc -- Generate API documentation from route and handler metadata.

This package walks the routes of a web application, reads the documentation
declarations attached to their handlers with :func:`~routedoc.annotation.api_doc`,
derives field-level shapes for declared input and output types through a
chain of pluggable shape parsers, and renders the normalised result as
Markdown, HTML, JSON or Swagger 1.2.

Typical workflow::

    routedoc dump routes.yaml --format markdown
    routedoc swagger-dump routes.yaml --resource /users

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    annotation: The ``@api_doc`` decorator and handler resolution.
    extractor: Route walking, shape parsing, merging and caching.
    parsers: Shape parsers for pydantic models, dataclasses and more.
    formatters: Markdown, HTML, JSON and Swagger renderers.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "0.3.0"
