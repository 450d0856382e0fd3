"""Tests for routedoc.extractor.caching.CachingApiDocExtractor."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import diskcache
import pytest

from routedoc.extractor import ApiDocExtractor, CachingApiDocExtractor, DocstringHandler
from routedoc.parsers import default_parsers


@pytest.fixture
def extraction_calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Record the views actually extracted (cache misses)."""
    calls: list[str] = []
    original = ApiDocExtractor.extract_annotations

    def spy(self, routes, view="default"):
        calls.append(view)
        return original(self, routes, view)

    monkeypatch.setattr(ApiDocExtractor, "extract_annotations", spy)
    return calls


@pytest.fixture
def make_extractor(route_table, tmp_path: Path):
    routes, declarations = route_table
    created: list[CachingApiDocExtractor] = []

    def _make(routes=routes, **kwargs) -> CachingApiDocExtractor:
        kwargs.setdefault("cache_dir", tmp_path / "cache")
        extractor = CachingApiDocExtractor(
            routes,
            parsers=default_parsers(),
            handlers=[DocstringHandler()],
            declarations=declarations,
            **kwargs,
        )
        created.append(extractor)
        return extractor

    yield _make

    for extractor in created:
        extractor.close()


class TestCachedViews:
    def test_second_read_is_served_from_cache(self, make_extractor, extraction_calls) -> None:
        extractor = make_extractor()
        first = extractor.all()
        second = extractor.all()

        assert extraction_calls == ["default"]
        assert [entry.to_dict() for entry in second] == [entry.to_dict() for entry in first]

    def test_cached_entries_keep_their_resource(self, make_extractor) -> None:
        make_extractor().all()
        cached = make_extractor().all()
        assert [entry.resource for entry in cached] == ["/api/users"] * 4 + ["others"] * 2

    def test_views_cached_separately(self, make_extractor, extraction_calls) -> None:
        extractor = make_extractor()
        extractor.all()
        premium = extractor.all("premium")

        assert extraction_calls == ["default", "premium"]
        assert [entry.uri for entry in premium] == ["/api/customers"]

    def test_stored_entries_trusted_outside_debug(self, make_extractor) -> None:
        make_extractor().all()
        # A new extractor with no routes still gets the stored view.
        assert len(make_extractor(routes=[]).all()) == 6

    def test_cache_key_isolates_route_tables(self, make_extractor) -> None:
        make_extractor(cache_key="one").all()
        assert make_extractor(routes=[], cache_key="two").all() == []

    def test_clear(self, make_extractor, extraction_calls) -> None:
        extractor = make_extractor()
        extractor.all()
        extractor.clear()
        extractor.all()
        assert extraction_calls == ["default", "default"]

    def test_view_key(self, make_extractor) -> None:
        assert make_extractor().view_key("default") == "routedoc.default"
        assert make_extractor(cache_key="app").view_key("premium") == "app.premium"


class TestDebugMode:
    def test_changed_resource_invalidates(self, make_extractor, extraction_calls, tmp_path: Path) -> None:
        manifest = tmp_path / "routes.yaml"
        manifest.write_text("routes: []\n")
        extractor = make_extractor(debug=True, resources=[manifest])

        extractor.all()
        extractor.all()
        assert extraction_calls == ["default"]

        manifest.write_text("routes: []\n# changed\n")
        extractor.all()
        assert extraction_calls == ["default", "default"]

    def test_changed_resource_ignored_outside_debug(
        self, make_extractor, extraction_calls, tmp_path: Path
    ) -> None:
        manifest = tmp_path / "routes.yaml"
        manifest.write_text("routes: []\n")
        extractor = make_extractor(resources=[manifest])

        extractor.all()
        manifest.write_text("routes: []\n# changed\n")
        extractor.all()
        assert extraction_calls == ["default"]


class TestFingerprint:
    def test_stable(self, make_extractor) -> None:
        extractor = make_extractor()
        assert extractor.fingerprint() == extractor.fingerprint()

    def test_tracks_resources(self, make_extractor, tmp_path: Path) -> None:
        resource = tmp_path / "routes.yaml"
        resource.write_text("a")
        extractor = make_extractor(resources=[resource])
        before = extractor.fingerprint()

        resource.write_text("abc")
        assert extractor.fingerprint() != before

    def test_missing_resource_allowed(self, make_extractor, tmp_path: Path) -> None:
        extractor = make_extractor(resources=[tmp_path / "missing.yaml"])
        assert len(extractor.fingerprint()) == 64


class TestWriteFailure:
    def test_fresh_entries_returned_and_warning_logged(
        self, make_extractor, extraction_calls, monkeypatch: pytest.MonkeyPatch, caplog
    ) -> None:
        def fail(self, key, value, *args, **kwargs):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(diskcache.Cache, "set", fail)
        extractor = make_extractor()

        with caplog.at_level(logging.WARNING, logger="routedoc.extractor.caching"):
            entries = extractor.all()

        assert len(entries) == 6
        assert "Could not write extraction cache" in caplog.text
        assert "database is locked" in caplog.text

        # Nothing was stored, so the next read extracts again.
        extractor.all()
        assert extraction_calls == ["default", "default"]
