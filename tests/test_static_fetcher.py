"""Tests for the plain HTTP retrieval path."""

import pytest

from fact_scraper.content_extractor import extract_links
from fact_scraper.errors import RetrievalError
from fact_scraper.static_fetcher import fetch_static, try_fetch_static
from fact_scraper.utils.persistent_settings import DESKTOP_USER_AGENT

from fakes import FakeHTTP, FakeResponse, connection_error


class TestFetchStatic:
    def test_successful_fetch_is_parsed(self):
        http = FakeHTTP(FakeResponse(200, '<a href="/about">About</a>'))
        page = fetch_static("https://example.com/x", http=http)

        assert page.url == "https://example.com/x"
        assert page.status_code == 200
        assert extract_links(page.document, page.url) == ["https://example.com/about"]

    def test_sends_desktop_user_agent_and_timeout(self):
        http = FakeHTTP(FakeResponse(200, "<p>hi</p>"))
        fetch_static("https://example.com/", timeout=12.5, http=http)

        url, kwargs = http.calls[0]
        assert url == "https://example.com/"
        assert kwargs["headers"]["User-Agent"] == DESKTOP_USER_AGENT
        assert kwargs["timeout"] == 12.5
        assert kwargs["allow_redirects"] is True

    def test_final_url_after_redirect_is_the_base(self):
        http = FakeHTTP(FakeResponse(200, '<a href="page">p</a>', url="https://example.com/moved/"))
        page = fetch_static("https://example.com/old", http=http)

        assert page.url == "https://example.com/moved/"
        assert extract_links(page.document, page.url) == ["https://example.com/moved/page"]

    @pytest.mark.parametrize("status", [301, 403, 404, 500, 503])
    def test_non_2xx_status_raises(self, status):
        http = FakeHTTP(FakeResponse(status, "error page"))
        with pytest.raises(RetrievalError) as exc_info:
            fetch_static("https://example.com/", http=http)
        assert exc_info.value.status_code == status

    @pytest.mark.parametrize("body", ["<!-- maintenance -->", "<?xml version='1.0'?>"])
    def test_body_without_elements_raises(self, body):
        http = FakeHTTP(FakeResponse(200, body))
        with pytest.raises(RetrievalError) as exc_info:
            fetch_static("https://example.com/", http=http)
        assert exc_info.value.status_code == 200

    def test_transport_error_raises(self):
        http = FakeHTTP(error=connection_error())
        with pytest.raises(RetrievalError) as exc_info:
            fetch_static("https://example.com/", http=http)
        assert exc_info.value.status_code is None


class TestTryFetchStatic:
    def test_failure_is_returned_not_raised(self):
        result = try_fetch_static("https://example.com/", http=FakeHTTP(FakeResponse(500, "")))

        assert not result.ok
        assert result.page is None
        assert isinstance(result.error, RetrievalError)

    def test_success_carries_the_page(self):
        result = try_fetch_static("https://example.com/", http=FakeHTTP(FakeResponse(200, "<p>ok</p>")))

        assert result.ok
        assert result.error is None
        assert result.page.status_code == 200
