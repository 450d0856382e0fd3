"""Tests for routedoc.models and routedoc.datatypes."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from routedoc.datatypes import DataType, is_primitive
from routedoc.exceptions import InvalidDeclarationError
from routedoc.models import (
    DEFAULT_TAG_COLOR,
    ApiDoc,
    Entry,
    FieldDescriptor,
    RoutedocConfig,
    Route,
    snake_case,
    type_identifier,
)

from sample_app.controllers import list_users
from sample_app.models import User


# ---------------------------------------------------------------------------
# ApiDoc
# ---------------------------------------------------------------------------


class TestApiDocFromDict:
    def test_defaults(self) -> None:
        doc = ApiDoc.from_dict({})
        assert doc.resource is False
        assert doc.is_resource is False
        assert doc.views == []
        assert doc.filters == {}
        assert doc.deprecated is False

    def test_items_indexed_by_name(self) -> None:
        doc = ApiDoc.from_dict(
            {
                "filters": [{"name": "page", "dataType": "integer", "description": "Page"}],
                "requirements": [{"name": "id", "requirement": "\\d+"}],
                "headers": [{"name": "X-Token", "required": True}],
            }
        )
        assert doc.filters == {"page": {"data_type": "integer", "description": "Page"}}
        assert doc.requirements == {"id": {"requirement": "\\d+"}}
        assert doc.headers == {"X-Token": {"required": True}}

    def test_item_without_name_rejected(self) -> None:
        with pytest.raises(InvalidDeclarationError, match='A "filter" element has to contain a "name"'):
            ApiDoc.from_dict({"filters": [{"data_type": "integer"}]})

    def test_parameter_without_type_rejected(self) -> None:
        with pytest.raises(InvalidDeclarationError, match='"draft" parameter element has to contain'):
            ApiDoc.from_dict({"parameters": [{"name": "draft"}]})

    def test_camel_case_keys(self) -> None:
        doc = ApiDoc.from_dict(
            {
                "statusCodes": {404: "Not found"},
                "resourceDescription": "Users",
                "authenticationRoles": ["ROLE_ADMIN"],
            }
        )
        assert doc.status_codes == {404: ["Not found"]}
        assert doc.resource_description == "Users"
        assert doc.authentication_roles == ["ROLE_ADMIN"]

    def test_single_view_and_tag(self) -> None:
        doc = ApiDoc.from_dict({"views": "premium", "tags": "beta"})
        assert doc.views == ["premium"]
        assert doc.tags == {"beta": DEFAULT_TAG_COLOR}

    def test_tag_list_and_colors(self) -> None:
        assert ApiDoc.from_dict({"tags": ["a", "b"]}).tags == {
            "a": DEFAULT_TAG_COLOR,
            "b": DEFAULT_TAG_COLOR,
        }
        assert ApiDoc.from_dict({"tags": {"stable": "#00ff00"}}).tags == {"stable": "#00ff00"}

    def test_status_code_lists_kept(self) -> None:
        doc = ApiDoc.from_dict({"status_codes": {400: ["Invalid", "Duplicate"], 200: "OK"}})
        assert doc.status_codes == {400: ["Invalid", "Duplicate"], 200: ["OK"]}

    def test_response_map_200_becomes_output(self) -> None:
        doc = ApiDoc.from_dict({"response_map": {200: "app.User", 404: "app.Error"}})
        assert doc.output == "app.User"
        assert doc.response_map == {200: "app.User", 404: "app.Error"}

    def test_named_resource(self) -> None:
        named = ApiDoc.from_dict({"resource": "users"})
        assert named.is_resource
        assert named.resource_name == "users"
        assert ApiDoc.from_dict({"resource": True}).resource_name is None

    def test_class_output(self) -> None:
        assert ApiDoc.from_dict({"output": User}).output == "sample_app.models.User"

    def test_frozen(self) -> None:
        doc = ApiDoc.from_dict({})
        with pytest.raises(ValidationError):
            doc.description = "changed"


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------


class TestRoute:
    def test_methods_normalised(self) -> None:
        assert Route(path="/", methods="get|post").methods == ["GET", "POST"]
        assert Route(path="/", methods=["put"]).methods == ["PUT"]
        assert Route(path="/").methods == []

    def test_variables(self) -> None:
        route = Route(path="/users/{id}/posts/{slug}", host="{tenant}.example.com")
        assert route.path_variables() == ["id", "slug"]
        assert route.variables() == ["tenant", "id", "slug"]

    def test_resolved_host(self) -> None:
        route = Route(path="/", host="{tenant}.example.{tld}", defaults={"tenant": "acme", "tld": 3})
        assert route.resolved_host() == "acme.example.{tld}"
        assert Route(path="/").resolved_host() is None

    def test_handler_serialised_as_import_string(self) -> None:
        assert Route(path="/", handler=list_users).model_dump()["handler"] == (
            "sample_app.controllers:list_users"
        )
        assert Route(path="/", handler="a.b:c").model_dump()["handler"] == "a.b:c"


# ---------------------------------------------------------------------------
# FieldDescriptor and Entry
# ---------------------------------------------------------------------------


class TestFieldDescriptor:
    def test_enum_values_stored_plain(self) -> None:
        desc = FieldDescriptor(actual_type=DataType.COLLECTION, sub_type=DataType.STRING)
        assert desc.actual_type == "collection"
        assert desc.sub_type == "string"

    def test_children_require_nested_type(self) -> None:
        with pytest.raises(ValidationError, match="must be a model or collection"):
            FieldDescriptor.model_validate(
                {"actual_type": "string", "children": {"a": {"data_type": "string"}}}
            )

    def test_nested_children(self) -> None:
        desc = FieldDescriptor.model_validate(
            {"actual_type": "model", "children": {"a": {"data_type": "string"}}}
        )
        assert desc.children["a"].data_type == "string"

    def test_camel_case_dump_and_extras(self) -> None:
        desc = FieldDescriptor.model_validate(
            {"data_type": "string", "since_version": "1.0", "custom": 1}
        )
        assert desc.model_dump(by_alias=True, exclude_unset=True) == {
            "dataType": "string",
            "sinceVersion": "1.0",
            "custom": 1,
        }


class TestEntry:
    def test_to_dict_omits_empty_values(self) -> None:
        entry = Entry(
            annotation=ApiDoc.from_dict({"description": "Ping"}),
            route=Route(path="/ping", methods=["GET"]),
            method="GET",
            uri="/ping",
        )
        assert entry.to_dict() == {
            "method": "GET",
            "uri": "/ping",
            "description": "Ping",
            "https": False,
            "authentication": False,
            "authentication_roles": [],
            "deprecated": False,
        }

    def test_to_dict_nested_fields(self, entry_for) -> None:
        data = entry_for("POST", "/api/users").to_dict()
        assert data["parameters"]["group"]["children"]["name"]["data_type"] == "string"
        assert data["status_codes"] == {201: ["Created"], 400: ["Invalid input", "Duplicate"]}
        assert data["parsed_response_map"][400]["type"]["class"] == "sample_app.models.User"
        assert data["section"] == "Users"

    def test_frozen(self, entry_for) -> None:
        with pytest.raises(ValidationError):
            entry_for("GET", "/api/ping").resource = "elsewhere"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize(
        "key, expected",
        [("dataType", "data_type"), ("statusCodes", "status_codes"), ("name", "name")],
    )
    def test_snake_case(self, key: str, expected: str) -> None:
        assert snake_case(key) == expected

    def test_type_identifier(self) -> None:
        assert type_identifier(User) == "sample_app.models.User"
        assert type_identifier("app.User") == "app.User"
        assert type_identifier({"class": User}) == {"class": "sample_app.models.User"}

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("string", True),
            ("INTEGER", True),
            (DataType.ENUM, True),
            ("datetime", True),
            ("model", False),
            (DataType.COLLECTION, False),
            ("object (User)", False),
            (None, False),
        ],
    )
    def test_is_primitive(self, value, expected: bool) -> None:
        assert is_primitive(value) is expected

    def test_config_defaults(self) -> None:
        config = RoutedocConfig()
        assert config.default_view == "default"
        assert config.naming_strategy == "dot_notation"
        assert config.cache.enabled is True
        assert config.swagger.api_base_path == "/api"
        assert config.html.enable_sandbox is True
        assert config.authentication is None
