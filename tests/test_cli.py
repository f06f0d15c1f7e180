"""Tests for the command-line entry point."""

import json

import pytest

import web_scraper_cli
from fact_scraper.errors import NavigationError
from fact_scraper.models import ExtractionResult, ExtractionStats
from fact_scraper.scraper import PageScraper


def canned_result(url):
    return ExtractionResult(
        original_url=url,
        timestamp="2025-03-01T12:00:00.000Z",
        stats=ExtractionStats(total_links=1, internal_links=1),
        links=[url],
    )


def files_under(path):
    return [p for p in path.rglob("*") if p.is_file()]


@pytest.mark.asyncio
async def test_invalid_url_exits_with_input_error(tmp_path, capsys):
    code = await web_scraper_cli.main(["not a url", "--output-dir", str(tmp_path)])

    assert code == web_scraper_cli.EXIT_INPUT_ERROR
    assert "Invalid input" in capsys.readouterr().err
    assert files_under(tmp_path) == []


@pytest.mark.asyncio
async def test_failed_scrape_writes_no_file(tmp_path, monkeypatch, capsys):
    async def fail(self, url):
        raise NavigationError("listing anchor never appeared", debug_path=tmp_path / "debug.html")

    monkeypatch.setattr(PageScraper, "scrape", fail)
    output_dir = tmp_path / "output"
    code = await web_scraper_cli.main(["https://example.com/", "--output-dir", str(output_dir)])

    assert code == web_scraper_cli.EXIT_FAILURE
    assert not output_dir.exists()
    assert "debug.html" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_successful_scrape_is_saved(tmp_path, monkeypatch, capsys):
    async def succeed(self, url):
        return canned_result(url)

    monkeypatch.setattr(PageScraper, "scrape", succeed)
    code = await web_scraper_cli.main(["https://example.com/", "--output-dir", str(tmp_path)])

    assert code == web_scraper_cli.EXIT_OK
    saved = files_under(tmp_path / "sites")
    assert len(saved) == 1
    assert saved[0].name.startswith("example.com-")
    assert json.loads(saved[0].read_text(encoding="utf-8"))["originalUrl"] == "https://example.com/"
    assert "Scraping Complete" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_json_output_without_saving(tmp_path, monkeypatch, capsys):
    async def succeed(self, url):
        return canned_result(url)

    monkeypatch.setattr(PageScraper, "scrape", succeed)
    code = await web_scraper_cli.main(["https://example.com/", "--output-dir", str(tmp_path), "--no-save", "--json-output"])

    assert code == web_scraper_cli.EXIT_OK
    assert files_under(tmp_path) == []
    assert json.loads(capsys.readouterr().out)["links"] == ["https://example.com/"]


@pytest.mark.asyncio
async def test_flags_override_settings(tmp_path, monkeypatch):
    seen = {}

    async def capture(self, url):
        seen["settings"] = self.settings
        return canned_result(url)

    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"stealth_level": "basic", "headless": False}), encoding="utf-8")
    monkeypatch.setattr(PageScraper, "scrape", capture)

    await web_scraper_cli.main([
        "https://www.ibba.org/find-a-business-broker/",
        "--settings", str(settings_file),
        "--headless",
        "--location", "Denver, CO",
        "--cookie-file", str(tmp_path / "jar.json"),
        "--no-save",
    ])

    settings = seen["settings"]
    assert settings.stealth_level == "basic"
    assert settings.headless is True
    assert settings.directory.location == "Denver, CO"
    assert settings.cookie_file == str(tmp_path / "jar.json")


@pytest.mark.asyncio
async def test_malformed_settings_file_is_an_input_error(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{oops", encoding="utf-8")

    code = await web_scraper_cli.main(["https://example.com/", "--settings", str(settings_file)])
    assert code == web_scraper_cli.EXIT_INPUT_ERROR
