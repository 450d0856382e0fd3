"""Tests for type reference normalisation and the collection directive."""

from __future__ import annotations

import pytest

from routedoc.exceptions import InvalidInputError, MalformedDirectiveError
from routedoc.exit_codes import EXIT_INVALID_INPUT
from routedoc.extractor.fields import (
    generate_human_readable_types,
    human_readable_type,
    normalize_type_reference,
    set_parent_classes,
    strip_classes,
)
from routedoc.models import TypeReference

from sample_app.models import User


class TestNormalizeTypeReference:
    def test_bare_string(self) -> None:
        ref = normalize_type_reference("app.models.User")
        assert ref.class_ == "app.models.User"
        assert ref.collection is False
        assert ref.groups == []

    def test_class_object(self) -> None:
        assert normalize_type_reference(User).class_ == "sample_app.models.User"

    def test_mapping_with_class_object(self) -> None:
        ref = normalize_type_reference({"class": User, "name": "user"})
        assert ref.class_ == "sample_app.models.User"
        assert ref.name == "user"

    def test_camel_case_keys(self) -> None:
        ref = normalize_type_reference({"class": "app.User", "formErrors": True, "paramType": "body"})
        assert ref.form_errors is True
        assert ref.param_type == "body"

    def test_groups_split_and_trimmed(self) -> None:
        ref = normalize_type_reference({"class": "app.User", "groups": "list, detail"})
        assert ref.groups == ["list", "detail"]

    def test_extra_options_preserved(self) -> None:
        ref = normalize_type_reference({"class": "app.User", "options": {"a": 1}, "custom": "x"})
        assert ref.options == {"a": 1}
        assert ref.model_extra == {"custom": "x"}

    def test_normalised_reference_passes_through(self) -> None:
        ref = TypeReference.model_validate({"class": "app.User"})
        assert normalize_type_reference(ref) is ref


class TestCollectionDirective:
    def test_without_alias(self) -> None:
        ref = normalize_type_reference("array<app.models.User>")
        assert ref.class_ == "app.models.User"
        assert ref.collection is True
        assert ref.collection_name == ""
        assert ref.name is None

    def test_with_alias(self) -> None:
        ref = normalize_type_reference("array<app.models.User> as users")
        assert ref.class_ == "app.models.User"
        assert ref.collection is True
        assert ref.collection_name == "users"
        assert ref.name == "users"

    def test_backslash_separated_identifier(self) -> None:
        ref = normalize_type_reference("array<App\\Model\\User>")
        assert ref.class_ == "App\\Model\\User"

    def test_explicit_name_wins_over_alias(self) -> None:
        ref = normalize_type_reference({"class": "array<app.User> as users", "name": "people"})
        assert ref.collection_name == "users"
        assert ref.name == "people"

    @pytest.mark.parametrize(
        "directive",
        [
            "array<>",
            "array<app.models.User",
            "array<1User>",
            "array<app..User>",
            "array<app.User> users",
            "array<app User>",
        ],
    )
    def test_malformed_directive_raises(self, directive: str) -> None:
        with pytest.raises(MalformedDirectiveError, match="Malformed collection directive"):
            normalize_type_reference(directive)

    def test_malformed_directive_is_invalid_input(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            normalize_type_reference("array<>")
        assert exc_info.value.exit_code == EXIT_INVALID_INPUT
        assert isinstance(exc_info.value, ValueError)


class TestPostProcessing:
    def test_parent_classes_stamped_on_children(self) -> None:
        fields = {
            "group": {
                "class": "app.Group",
                "children": {"name": {"data_type": "string"}},
            }
        }
        child = set_parent_classes(fields)["group"]["children"]["name"]
        assert child["parent_class"] == "app.Group"
        assert child["field"] == "name"

    def test_first_parent_class_wins(self) -> None:
        fields = {
            "group": {
                "class": "app.Group",
                "children": {"name": {"parent_class": "app.Other"}},
            }
        }
        child = set_parent_classes(fields)["group"]["children"]["name"]
        assert child["parent_class"] == "app.Other"
        assert child["field"] == "name"

    def test_children_without_class_are_not_stamped(self) -> None:
        fields = {"meta": {"children": {"source": {"data_type": "string"}}}}
        assert "parent_class" not in set_parent_classes(fields)["meta"]["children"]["source"]

    def test_strip_classes_is_recursive(self) -> None:
        fields = {"a": {"class": "x", "children": {"b": {"class": "y", "data_type": "string"}}}}
        assert strip_classes(fields) == {"a": {"children": {"b": {"data_type": "string"}}}}

    def test_human_readable_types(self) -> None:
        fields = {
            "group": {"data_type": None, "actual_type": "model", "sub_type": "sample_app.models.Group"},
            "tags": {"data_type": None, "actual_type": "collection", "sub_type": "string"},
            "users": {"data_type": None, "actual_type": "collection", "sub_type": "sample_app.models.User"},
            "name": {"data_type": "string", "actual_type": "string", "sub_type": None},
        }
        result = generate_human_readable_types(fields)
        assert result["group"]["data_type"] == "object (Group)"
        assert result["tags"]["data_type"] == "array of strings"
        assert result["users"]["data_type"] == "array of objects (User)"
        assert result["name"]["data_type"] == "string"

    def test_unresolvable_class_keeps_identifier(self) -> None:
        assert human_readable_type("model", "missing.module.Thing") == "object (missing.module.Thing)"

    def test_without_sub_type_key_label_is_left_alone(self) -> None:
        result = generate_human_readable_types({"a": {"data_type": "", "actual_type": "string"}})
        assert result["a"]["data_type"] == ""
