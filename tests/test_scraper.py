"""Tests for choosing between the static and browser retrieval paths."""

import json

import pytest
from playwright.async_api import Error as PlaywrightError

from fact_scraper.errors import InputError, NavigationError
from fact_scraper.scraper import PageScraper

from fakes import FakeHTTP, FakeResponse, connection_error, session_factory

PAGE_URL = "https://example.com/x"

STATIC_HTML = '<a href="/about">About</a><a href="https://other.com/y">Other</a>'
RENDERED_HTML = '<a href="/rendered">Rendered</a><p>Write to team@example.com</p>'


def failing_session_factory():
    def factory(settings):
        raise AssertionError("the browser should not be started")
    return factory


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "not a url", "/relative", "ftp://example.com/file", None])
    async def test_invalid_urls_raise_input_error(self, settings, url):
        scraper = PageScraper(settings, http=FakeHTTP(FakeResponse(200, "")), session_factory=failing_session_factory())
        with pytest.raises(InputError):
            await scraper.scrape(url)


class TestStaticPath:
    @pytest.mark.asyncio
    async def test_static_success_skips_the_browser(self, settings):
        http = FakeHTTP(FakeResponse(200, STATIC_HTML))
        scraper = PageScraper(settings, http=http, session_factory=failing_session_factory())
        result = await scraper.scrape(PAGE_URL)

        assert result.original_url == PAGE_URL
        assert result.links == ["https://example.com/about", "https://other.com/y"]
        assert result.stats.internal_links == 1
        assert result.stats.external_links == 1
        assert result.brokers is None

    @pytest.mark.asyncio
    async def test_result_is_json_serializable(self, settings):
        scraper = PageScraper(settings, http=FakeHTTP(FakeResponse(200, STATIC_HTML)))
        data = json.loads((await scraper.scrape(PAGE_URL)).to_json())

        assert data["originalUrl"] == PAGE_URL
        assert data["timestamp"].endswith("Z")
        assert "brokers" not in data


class TestDynamicFallback:
    @pytest.mark.asyncio
    async def test_http_500_falls_back_to_the_browser(self, settings):
        sessions = []
        scraper = PageScraper(
            settings,
            http=FakeHTTP(FakeResponse(500, "Internal Server Error")),
            session_factory=session_factory({PAGE_URL: {"html": RENDERED_HTML}}, sessions),
        )
        result = await scraper.scrape(PAGE_URL)

        assert result.links == ["https://example.com/rendered"]
        assert result.emails == ["team@example.com"]
        assert len(sessions) == 1
        assert sessions[0].closed

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["<!-- maintenance -->", "<?xml version='1.0'?>"])
    async def test_unparseable_200_falls_back_to_the_browser(self, settings, body):
        sessions = []
        scraper = PageScraper(
            settings,
            http=FakeHTTP(FakeResponse(200, body)),
            session_factory=session_factory({PAGE_URL: {"html": RENDERED_HTML}}, sessions),
        )
        result = await scraper.scrape(PAGE_URL)

        assert result.links == ["https://example.com/rendered"]
        assert len(sessions) == 1

    @pytest.mark.asyncio
    async def test_rendered_page_without_elements_gives_empty_result(self, settings):
        scraper = PageScraper(
            settings,
            http=FakeHTTP(FakeResponse(500, "")),
            session_factory=session_factory({PAGE_URL: {"html": "<!-- maintenance -->"}}),
        )
        result = await scraper.scrape(PAGE_URL)

        assert (result.links, result.images, result.emails) == ([], [], [])
        assert result.stats.total_links == 0

    @pytest.mark.asyncio
    async def test_transport_error_falls_back_to_the_browser(self, settings):
        scraper = PageScraper(
            settings,
            http=FakeHTTP(error=connection_error()),
            session_factory=session_factory({PAGE_URL: {"html": RENDERED_HTML}}),
        )
        result = await scraper.scrape(PAGE_URL)
        assert result.links == ["https://example.com/rendered"]

    @pytest.mark.asyncio
    async def test_dynamic_only_domain_never_fetches_statically(self, settings):
        http = FakeHTTP(FakeResponse(200, STATIC_HTML))
        settings = settings.with_overrides(dynamic_only_domains=["example.com"])
        scraper = PageScraper(settings, http=http, session_factory=session_factory({PAGE_URL: {"html": RENDERED_HTML}}))

        result = await scraper.scrape(PAGE_URL)
        assert http.calls == []
        assert result.links == ["https://example.com/rendered"]

    @pytest.mark.asyncio
    async def test_browser_cookies_are_saved_after_the_visit(self, settings):
        cookie = {"name": "sid", "value": "1", "domain": "example.com", "path": "/"}
        scraper = PageScraper(
            settings,
            http=FakeHTTP(FakeResponse(503, "")),
            session_factory=session_factory({PAGE_URL: {"html": RENDERED_HTML}}, cookies=[cookie]),
        )
        await scraper.scrape(PAGE_URL)

        with open(settings.cookie_file, encoding="utf-8") as f:
            assert json.load(f) == [cookie]

    @pytest.mark.asyncio
    async def test_navigation_failure_propagates_and_closes_the_session(self, settings):
        sessions = []
        scraper = PageScraper(
            settings,
            http=FakeHTTP(FakeResponse(404, "")),
            session_factory=session_factory({PAGE_URL: PlaywrightError("net::ERR_TIMED_OUT")}, sessions),
        )
        with pytest.raises(NavigationError):
            await scraper.scrape(PAGE_URL)
        assert sessions[0].closed


def test_scrape_sync_runs_without_a_loop(settings):
    scraper = PageScraper(settings, http=FakeHTTP(FakeResponse(200, STATIC_HTML)))
    assert scraper.scrape_sync(PAGE_URL).stats.total_links == 2
