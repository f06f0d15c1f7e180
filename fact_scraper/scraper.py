"""
Page Scraper

Description: Chooses between a static fetch and a browser session, then extracts facts from the result
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.

Dual License:
1. Non-Commercial Use: This software is licensed under the terms of the
   Creative Commons Attribution-NonCommercial 4.0 International License.
   To view a copy of this license, visit http://creativecommons.org/licenses/by-nc/4.0/

2. Commercial Use: For commercial use, a separate license is required.
   Please contact Eric Hiss at eric@historic.camera or eric@rollei.us for licensing options.

Dependencies:
This code depends on several third-party libraries, each with its own license.
See CREDITS.md for a comprehensive list of dependencies and their licenses.

Third-party code:
- Uses Playwright (Apache 2.0): https://github.com/microsoft/playwright
- Uses Requests (Apache 2.0): https://github.com/psf/requests
- Uses Scrapling (BSD-3-Clause): https://github.com/D4Vinci/Scrapling
"""

import asyncio
import functools
import logging
from typing import Optional
from urllib.parse import urlsplit

from .content_extractor import build_result
from .errors import InputError
from .models import ExtractionResult, RetrievedPage
from .session_manager import BrowserSession
from .site_handlers import get_handler_for_url
from .static_fetcher import try_fetch_static
from .utils.persistent_settings import ScraperSettings
from .utils.url_tools import WEB_SCHEMES, host_matches, is_valid_url

logger = logging.getLogger(__name__)


class PageScraper:
    """
    Scrapes one URL at a time.

    A plain HTTP fetch is tried first; any failure of that fetch, or a host
    listed in ``dynamic_only_domains``, sends the URL through a browser
    session driven by the matching site handler. Both paths end in the same
    extraction step.
    """

    def __init__(self, settings: Optional[ScraperSettings] = None, http=None, session_factory=BrowserSession):
        self.settings = settings or ScraperSettings()
        self.http = http
        self.session_factory = session_factory

    def validate(self, url) -> str:
        if not is_valid_url(url):
            raise InputError(f"Not a valid absolute URL: {url!r}")
        url = url.strip()
        if urlsplit(url).scheme.lower() not in WEB_SCHEMES:
            raise InputError(f"Only http and https URLs can be scraped: {url!r}")
        return url

    async def scrape(self, url) -> ExtractionResult:
        """
        Retrieve a page and extract its links, images and emails.

        Args:
            url (str): Absolute http(s) URL

        Returns:
            ExtractionResult

        Raises:
            InputError: If the URL is not an absolute http(s) URL
            NavigationError: If the browser session cannot reach the content
        """
        url = self.validate(url)
        logger.info(f"Scraping {url}")

        if host_matches(url, self.settings.dynamic_only_domains):
            logger.info(f"{url} is on a dynamic-only domain, skipping the static fetch")
            page = await self.retrieve_dynamic(url)
        else:
            fetch = await self.retrieve_static(url)
            if fetch.ok:
                page = fetch.page
            else:
                logger.info(f"Falling back to a browser session for {url}")
                page = await self.retrieve_dynamic(url)

        return build_result(url, page)

    async def retrieve_static(self, url):
        loop = asyncio.get_running_loop()
        fetch = functools.partial(
            try_fetch_static,
            url,
            timeout=self.settings.request_timeout,
            user_agent=self.settings.user_agent,
            http=self.http,
        )
        return await loop.run_in_executor(None, fetch)

    async def retrieve_dynamic(self, url) -> RetrievedPage:
        handler = get_handler_for_url(url, self.settings)
        async with self.session_factory(self.settings) as session:
            return await handler.scrape(session)

    def scrape_sync(self, url) -> ExtractionResult:
        """Blocking wrapper around scrape() for callers without an event loop."""
        return asyncio.run(self.scrape(url))


async def scrape(url, settings: Optional[ScraperSettings] = None) -> ExtractionResult:
    """Scrape one URL with a throwaway PageScraper."""
    return await PageScraper(settings).scrape(url)
