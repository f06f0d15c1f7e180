"""
Shared fixtures for the fact scraper tests.

Nothing here touches the network or starts a browser: Playwright and
requests are replaced by the fakes in tests/fakes.py.
"""

import pytest

from fact_scraper.utils.persistent_settings import DirectorySettings, ScraperSettings

DIRECTORY_URL = "https://brokers.test/find/"


@pytest.fixture
def settings(tmp_path):
    """Settings with every wait shrunk to zero and all files under tmp_path."""
    return ScraperSettings(
        headless=True,
        cookie_file=str(tmp_path / "cookies.json"),
        debug_dir=str(tmp_path / "debug"),
        output_dir=str(tmp_path / "output"),
        element_timeout_ms=50,
        challenge_timeout_ms=0,
        challenge_grace_ms=0,
        human_delay_ms=(0, 0),
        human_max_scroll_steps=10,
        dynamic_only_domains=["brokers.test"],
        directory=DirectorySettings(
            domains=["brokers.test"],
            listing_url=DIRECTORY_URL,
            api_url="https://brokers.test/api/brokers",
            settle_ms=0,
            max_load_more=20,
        ),
    )
