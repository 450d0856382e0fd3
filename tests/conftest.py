"""Shared test fixtures for routedoc.

Provides the sample application's route table, a ready-to-use extractor,
isolated config environments, output state management and a CLI runner.
The sample application lives in ``tests/sample_app`` and is importable
because ``tests`` is on the pytest ``pythonpath``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from routedoc.extractor import ApiDocExtractor, DocstringHandler
from routedoc.loader import load_manifest, load_routes
from routedoc.models import ApiDoc, Entry, Route
from routedoc.output import reset_output
from routedoc.parsers import default_parsers


SAMPLE_APP_DIR = Path(__file__).parent / "sample_app"
ROUTES_MANIFEST = SAMPLE_APP_DIR / "routes.yaml"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager keeps a reference to sys.stderr from its creation
    time; CliRunner swaps the streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Sample application
# ---------------------------------------------------------------------------


@pytest.fixture
def manifest_path() -> Path:
    return ROUTES_MANIFEST


@pytest.fixture
def route_table() -> tuple[list[Route], dict[str, ApiDoc]]:
    """Routes and fallback declarations of the sample application."""
    return load_routes(load_manifest(str(ROUTES_MANIFEST)))


@pytest.fixture
def extractor(route_table: tuple[list[Route], dict[str, ApiDoc]]) -> ApiDocExtractor:
    routes, declarations = route_table
    return ApiDocExtractor(
        routes,
        parsers=default_parsers(),
        handlers=[DocstringHandler()],
        declarations=declarations,
    )


@pytest.fixture
def entries(extractor: ApiDocExtractor) -> list[Entry]:
    """All entries of the default view."""
    return extractor.all()


@pytest.fixture
def entry_for(entries: list[Entry]):
    """Look up an entry of the default view by method and URI."""

    def _find(method: str, uri: str) -> Entry:
        for entry in entries:
            if entry.method == method and entry.uri == uri:
                return entry
        raise AssertionError(f"No entry for {method} {uri}")

    return _find


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG cache and data directories into tmp_path, clears the
    ROUTEDOC_* environment variables and changes the working directory to
    tmp_path.
    """
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("routedoc.config._is_xdg_platform", lambda: True)

    for var in ["ROUTEDOC_CONFIG", "ROUTEDOC_VIEW", "ROUTEDOC_CACHE_DIR", "NO_COLOR"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
