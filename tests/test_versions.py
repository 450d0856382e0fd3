"""Tests for routedoc.versions."""

from __future__ import annotations

import pytest

from routedoc.versions import compare_versions, in_version_range


class TestCompareVersions:
    @pytest.mark.parametrize(
        "left, right, expected",
        [
            ("1.0", "1.0", 0),
            ("1.0", "2.0", -1),
            ("2.0", "1.9", 1),
            ("1.10", "1.9", 1),
            ("1.0", "1.0.0", -1),
            ("1.0.1", "1.0.0", 1),
            ("1.0-alpha", "1.0-beta", -1),
            ("1.0-beta", "1.0-rc1", -1),
            ("1.0-rc1", "1.0", -1),
            ("1.0-dev", "1.0-alpha", -1),
            ("1.0-pl1", "1.0", 1),
            ("1.0-RC1", "1.0-rc1", 0),
        ],
    )
    def test_ordering(self, left: str, right: str, expected: int) -> None:
        assert compare_versions(left, right) == expected

    def test_missing_versions(self) -> None:
        assert compare_versions(None, None) == 0
        assert compare_versions(None, "1.0") == -1
        assert compare_versions("1.0", "") == 1


class TestInVersionRange:
    def test_open_range(self) -> None:
        assert in_version_range("1.0")
        assert in_version_range("")

    def test_since(self) -> None:
        assert in_version_range("1.2", since="1.2")
        assert in_version_range("1.5", since="1.2")
        assert not in_version_range("1.1", since="1.2")

    def test_until(self) -> None:
        assert in_version_range("2.0", until="2.0")
        assert not in_version_range("2.1", until="2.0")

    def test_both_bounds(self) -> None:
        assert in_version_range("1.5", since="1.0", until="2.0")
        assert not in_version_range("2.5", since="1.0", until="2.0")
