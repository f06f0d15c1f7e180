"""Tests for URL validation and resolution helpers."""

import pytest

from fact_scraper.utils.url_tools import (
    get_domain,
    host_matches,
    is_same_origin,
    is_valid_url,
    normalize_url,
    resolve_url,
)


class TestIsValidUrl:
    @pytest.mark.parametrize("value", [
        "https://example.com",
        "http://example.com/path?q=1#frag",
        "https://sub.example.co.uk:8443/x",
        "ftp://files.example.com/pub",
        "  https://example.com/  ",
    ])
    def test_accepts_absolute_urls(self, value):
        assert is_valid_url(value)

    @pytest.mark.parametrize("value", [
        None,
        42,
        "",
        "   ",
        "example.com",
        "/relative/path",
        "https://",
        "https://exa mple.com",
        "http://example.com:notaport/",
        "mailto:someone@example.com",
    ])
    def test_rejects_everything_else(self, value):
        assert not is_valid_url(value)


class TestResolveUrl:
    def test_root_relative_reference(self):
        assert resolve_url("/about", "https://example.com/x") == "https://example.com/about"

    def test_document_relative_reference(self):
        assert resolve_url("team.html", "https://example.com/company/") == "https://example.com/company/team.html"

    def test_protocol_relative_reference(self):
        assert resolve_url("//cdn.example.net/a.png", "https://example.com/") == "https://cdn.example.net/a.png"

    @pytest.mark.parametrize("ref", [
        None,
        "",
        "   ",
        "mailto:a@b.com",
        "javascript:void(0)",
        "data:image/png;base64,AAAA",
        "tel:+15551234",
    ])
    def test_non_web_or_empty_references_are_dropped(self, ref):
        assert resolve_url(ref, "https://example.com/") is None

    def test_malformed_port_is_dropped(self):
        assert resolve_url("http://example.com:99999999/", "https://example.com/") is None

    def test_whitespace_inside_reference_is_removed(self):
        assert resolve_url("/ab\nout", "https://example.com/") == "https://example.com/about"

    def test_result_is_normalized(self):
        assert resolve_url("HTTPS://Example.COM:443", "https://example.com/") == "https://example.com/"


class TestNormalizeUrl:
    def test_lowercases_scheme_and_host_and_drops_default_port(self):
        assert normalize_url("HTTP://WWW.Example.com:80/Path") == "http://www.example.com/Path"

    def test_keeps_non_default_port_query_and_fragment(self):
        assert normalize_url("https://example.com:8443/a?b=1#c") == "https://example.com:8443/a?b=1#c"


class TestOrigins:
    def test_same_origin_ignores_explicit_default_port(self):
        assert is_same_origin("https://example.com:443/a", "https://example.com/b")

    def test_scheme_change_is_a_different_origin(self):
        assert not is_same_origin("http://example.com/", "https://example.com/")

    def test_subdomain_is_a_different_origin(self):
        assert not is_same_origin("https://blog.example.com/", "https://example.com/")

    def test_get_domain_strips_www(self):
        assert get_domain("https://www.ibba.org/find-a-business-broker/") == "ibba.org"
        assert get_domain("not a url") == "unknown_domain"

    def test_host_matches_exact_and_subdomains(self):
        assert host_matches("https://www.ibba.org/x", ["ibba.org"])
        assert host_matches("https://ibba.org/", ["IBBA.org"])
        assert not host_matches("https://notibba.org/", ["ibba.org"])
        assert not host_matches("https://example.com/", [])
