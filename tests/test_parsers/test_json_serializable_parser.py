"""Tests for routedoc.parsers.json_serializable.JsonSerializableParser."""

from __future__ import annotations

from routedoc.datatypes import DataType
from routedoc.extractor.fields import normalize_type_reference
from routedoc.parsers import JsonSerializableParser

from sample_app.models import Stats


def parse(reference) -> dict:
    return JsonSerializableParser().parse(normalize_type_reference(reference))


class TestSupports:
    def test_constructible_serializable_classes(self) -> None:
        parser = JsonSerializableParser()
        assert parser.supports(normalize_type_reference("sample_app.models.Stats"))

    def test_constructor_arguments_required(self) -> None:
        parser = JsonSerializableParser()
        assert not parser.supports(normalize_type_reference("sample_app.models.Point"))

    def test_plain_classes(self) -> None:
        parser = JsonSerializableParser()
        assert not parser.supports(normalize_type_reference("sample_app.models.User"))
        assert not parser.supports(normalize_type_reference("missing.Thing"))


class TestParse:
    def test_scalar_samples(self) -> None:
        fields = parse("sample_app.models.Stats")
        assert fields["visits"]["actual_type"] == DataType.INTEGER
        assert fields["visits"]["default"] == 10
        assert fields["ratio"]["data_type"] == "float"
        assert fields["label"]["default"] == "daily"

    def test_booleans_are_not_integers(self) -> None:
        active = parse("sample_app.models.Stats")["active"]
        assert active["actual_type"] == DataType.BOOLEAN
        assert active["default"] is True

    def test_lists_and_mappings(self) -> None:
        fields = parse("sample_app.models.Stats")
        assert fields["history"]["data_type"] == "array"
        assert fields["history"]["default"] is None
        assert fields["meta"]["data_type"] == "object"
        assert fields["meta"]["children"]["source"]["default"] == "web"

    def test_named_reference(self) -> None:
        fields = parse({"class": "sample_app.models.Stats", "name": "stats"})
        assert list(fields) == ["stats"]
        assert fields["stats"]["actual_type"] == DataType.MODEL
        assert "visits" in fields["stats"]["children"]

    def test_nested_serializable_records_class(self) -> None:
        meta = JsonSerializableParser().item_metadata(Stats(period="weekly"))
        assert meta["class"] == "sample_app.models.Stats"
        assert meta["children"]["label"]["default"] == "weekly"

    def test_unknown_value_type(self) -> None:
        meta = JsonSerializableParser().item_metadata(None)
        assert meta["actual_type"] is None
        assert meta["data_type"] is None
