"""Tests for the Markdown, HTML and JSON formatters and their shared base."""

from __future__ import annotations

import pytest

from routedoc.formatters import HtmlFormatter, MarkdownFormatter, SimpleFormatter
from routedoc.models import ApiDoc, AuthenticationConfig, Entry, HtmlConfig, Route

NESTED = {
    "user": {
        "data_type": "object (User)",
        "actual_type": "model",
        "sub_type": "app.User",
        "children": {
            "name": {"data_type": "string", "actual_type": "string", "required": True},
            "tags": {
                "data_type": "array of strings",
                "actual_type": "collection",
                "sub_type": "string",
            },
        },
    },
    "owner": {
        "data_type": "object (Owner)",
        "actual_type": "model",
        "readonly": True,
        "children": {"id": {"data_type": "integer", "actual_type": "integer"}},
    },
    "nickname": {"data_type": "string", "actual_type": "string", "since_version": "1.2"},
}


def _entry(**declaration) -> Entry:
    return Entry(
        annotation=ApiDoc.from_dict(declaration),
        route=Route(path="/things", methods=["GET"]),
        method="GET",
        uri="/things",
    )


class TestCompression:
    def test_bracketed_names(self) -> None:
        params = SimpleFormatter().compress_nested_parameters(NESTED)
        assert list(params) == [
            "user",
            "user[name]",
            "user[tags][]",
            "owner",
            "owner[id]",
            "nickname",
        ]
        assert params["user[name]"]["required"] is True
        assert params["user[tags][]"]["sub_type"] == "string"

    def test_readonly_children_dropped_on_request(self) -> None:
        params = SimpleFormatter().compress_nested_parameters(NESTED, ignore_nested_readonly=True)
        assert "owner" in params
        assert "owner[id]" not in params

    def test_parent_name_prefix(self) -> None:
        params = SimpleFormatter().compress_nested_parameters(
            {"name": {"data_type": "string"}}, "user"
        )
        assert list(params) == ["user[name]"]

    def test_version_filter(self) -> None:
        formatter = SimpleFormatter(version="1.0")
        assert "nickname" not in formatter.compress_nested_parameters(NESTED)

        formatter.set_version("1.2")
        assert "nickname" in formatter.compress_nested_parameters(NESTED)

    def test_process_annotation_id(self) -> None:
        data = SimpleFormatter().process_annotation({"method": "GET", "uri": "/api/users"})
        assert data["id"] == "get--api-users"


class TestGrouping:
    def test_sections_then_resources(self, entries) -> None:
        collection = SimpleFormatter().process_collection(entries)
        assert list(collection) == ["Internal", "Users", "_others"]
        assert list(collection["Users"]) == ["/api/users"]
        assert len(collection["Users"]["/api/users"]) == 4
        assert [data["uri"] for data in collection["_others"]["others"]] == ["/api/stats"]

    def test_parameters_compressed(self, entries) -> None:
        collection = SimpleFormatter().process_collection(entries)
        post = collection["Users"]["/api/users"][1]
        assert "group[name]" in post["parameters"]
        assert "tags[]" in post["parameters"]


class TestSimpleFormatter:
    def test_grouped_by_resource(self, entries) -> None:
        result = SimpleFormatter().format(entries)
        assert list(result) == ["/api/users", "others"]
        assert [data["method"] for data in result["/api/users"]] == ["GET", "POST", "GET", "PATCH"]

    def test_fields_stay_nested(self, entries) -> None:
        post = SimpleFormatter().format(entries)["/api/users"][1]
        assert "parsed_response_map" not in post
        assert "name" in post["parameters"]["group"]["children"]

    def test_single_entry(self, entry_for) -> None:
        data = SimpleFormatter().format_one(entry_for("GET", "/api/users"))
        assert data["description"] == "List users"
        assert "parsed_response_map" in data


class TestMarkdownFormatter:
    @pytest.fixture
    def markdown(self, entries) -> str:
        return MarkdownFormatter().format(entries)

    def test_headings(self, markdown: str) -> None:
        assert "# Users #" in markdown
        assert "## /api/users ##" in markdown
        assert "### `GET` /api/users ###" in markdown
        assert "# _others #" not in markdown

    def test_entry_details(self, markdown: str) -> None:
        assert "_List users_" in markdown
        assert "### This method is deprecated ###" in markdown
        assert "**user_id**" in markdown
        assert "  - Requirement: \\d+" in markdown
        assert "  - 400: Invalid input; Duplicate" in markdown

    def test_compressed_parameters(self, markdown: str) -> None:
        assert "group[name]:" in markdown
        assert "  * format: {length: {min: 1, max: 5}}" in markdown
        assert "users[]:" in markdown

    def test_version_filter(self, entries) -> None:
        assert "nickname:" in MarkdownFormatter().format(entries)
        assert "nickname:" not in MarkdownFormatter(version="1.0").format(entries)

    def test_single_entry_unescaped(self) -> None:
        markdown = MarkdownFormatter().format_one(_entry(description="<b>bold</b>"))
        assert markdown.startswith("### `GET` /things ###")
        assert "_<b>bold</b>_" in markdown


class TestHtmlFormatter:
    def test_page(self, entries) -> None:
        html = HtmlFormatter(HtmlConfig(api_name="Sample API")).format(entries)
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Sample API</title>" in html
        assert "<h2>Users</h2>" in html
        assert "<h2>_others</h2>" not in html
        assert 'id="get--api-users"' in html

    def test_sandbox_enabled_by_default(self, entries) -> None:
        html = HtmlFormatter().format(entries)
        assert '<form class="sandbox" method="POST" action="/api/users">' in html
        assert '<select name="_format">' in html

    def test_sandbox_disabled(self, entries) -> None:
        html = HtmlFormatter(HtmlConfig(enable_sandbox=False)).format(entries)
        assert '<form class="sandbox"' not in html

    def test_sandbox_endpoint_and_auth(self) -> None:
        formatter = HtmlFormatter(
            HtmlConfig(endpoint="https://api.example.com", request_format_method="accept_header"),
            AuthenticationConfig(delivery="query", name="api_key"),
        )
        html = formatter.format_one(_entry())
        assert 'action="https://api.example.com/things"' in html
        assert 'name="api_key"' in html
        assert '<select name="_format">' not in html

    def test_readonly_parameters_not_editable(self, entry_for) -> None:
        html = HtmlFormatter().format_one(entry_for("POST", "/api/users"))
        assert '<input type="text" name="name">' in html
        assert '<input type="text" name="id">' not in html

    def test_autoescape(self) -> None:
        html = HtmlFormatter().format_one(_entry(description="<b>bold</b>"))
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert "<b>bold</b>" not in html

    def test_sections_collapsed(self, entries) -> None:
        html = HtmlFormatter(HtmlConfig(default_sections_opened=False)).format(entries)
        assert " open>" not in html
