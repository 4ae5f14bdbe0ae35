"""Tests for request URL composition and validation."""

import pytest

from moni.exceptions import UrlParseError
from moni.remote.url_validator import (
    build_request_url,
    path_segment,
    resource_name_path,
)


class TestBuildRequestUrl:
    def test_url_without_params_unchanged(self):
        url = "https://discoveryengine.googleapis.com/v1/projects/p/operations/op1"
        assert build_request_url(url) == url

    def test_params_appended_in_order(self):
        url = build_request_url(
            "https://discoveryengine.googleapis.com/v1beta/parent/dataStores",
            {"dataStoreId": "ds1", "createAdvancedSiteSearch": False},
        )
        assert url == (
            "https://discoveryengine.googleapis.com/v1beta/parent/dataStores"
            "?dataStoreId=ds1&createAdvancedSiteSearch=false"
        )

    def test_existing_query_kept_before_new_params(self):
        url = build_request_url("https://host.example/path?a=1", [("b", 2)])
        assert url == "https://host.example/path?a=1&b=2"

    def test_none_values_skipped(self):
        url = build_request_url(
            "https://host.example/chunks", {"pageSize": 10, "pageToken": None}
        )
        assert url == "https://host.example/chunks?pageSize=10"

    def test_values_are_percent_encoded(self):
        url = build_request_url("https://host.example/x", {"filter": "a b&c"})
        assert url == "https://host.example/x?filter=a+b%26c"

    def test_colon_method_suffix_preserved(self):
        url = "https://host.example/v1/projects/p/locations/l:setUpDataConnector"
        assert build_request_url(url) == url

    @pytest.mark.parametrize(
        "bad_url, reason",
        [
            ("", "empty"),
            ("https://host.example/a path", "whitespace"),
            ("file:///etc/passwd", "scheme"),
            ("host.example/path", "scheme"),
            ("http://", "host"),
        ],
    )
    def test_invalid_urls_rejected(self, bad_url, reason):
        with pytest.raises(UrlParseError) as exc_info:
            build_request_url(bad_url)
        assert reason in exc_info.value.reason
        assert exc_info.value.url == bad_url


class TestPathHelpers:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("ds1", "ds1"),
            ("default_collection", "default_collection"),
            ("gemini-1.5-flash-002", "gemini-1.5-flash-002"),
            ("a/b", "a%2Fb"),
            ("ds1?x=1#frag", "ds1%3Fx%3D1%23frag"),
            ("with space", "with%20space"),
        ],
    )
    def test_path_segment(self, value, expected):
        assert path_segment(value) == expected

    def test_resource_name_keeps_separators(self):
        assert (
            resource_name_path("/projects/p/operations/op-1/")
            == "projects/p/operations/op-1"
        )

    def test_resource_name_escapes_query_and_fragment(self):
        assert resource_name_path("projects/p/operations/op?a#b") == (
            "projects/p/operations/op%3Fa%23b"
        )
