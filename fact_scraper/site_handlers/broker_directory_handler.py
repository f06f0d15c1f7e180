"""
Broker Directory Handler

Description: Paginated "load more" crawl of a business-broker directory with per-profile drill-down
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
- Uses Scrapling (BSD-3-Clause): https://github.com/D4Vinci/Scrapling
"""

"""
Two ways of reading the directory:

crawl  Expand the listing by clicking "load more" until the control goes
       away, then visit every profile page one at a time.
api    Once the session has cleared any challenge, ask the site's own JSON
       feed for the whole broker list from inside the page.
"""

import asyncio
import logging
from typing import Dict, List
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError

from ..content_extractor import EMAIL_PATTERN, emails_from_mailto
from ..errors import LoadMoreLimitError, NavigationError, ProfileExtractionError
from ..models import BrokerRecord, RetrievedPage
from ..utils.url_tools import host_matches, resolve_url
from .base_handler import BaseSiteHandler

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

FETCH_JSON_JS = """
async (url) => {
    const response = await fetch(url, { credentials: 'include' });
    if (!response.ok) {
        return { ok: false, status: response.status, data: null };
    }
    return { ok: true, status: response.status, data: await response.json() };
}
"""


def _clean_text(value) -> str:
    return " ".join(str(value or "").split())


def broker_from_feed(item: Dict, fallback_url: str) -> BrokerRecord:
    """Map one entry of the directory's JSON feed to a BrokerRecord."""
    name = _clean_text(f"{item.get('first_name') or ''} {item.get('last_name') or ''}")
    place = ", ".join(part for part in (_clean_text(item.get("city")), _clean_text(item.get("state"))) if part)
    return BrokerRecord(
        url=item.get("url") or item.get("link") or fallback_url,
        firm=_clean_text(item.get("company")) or NOT_AVAILABLE,
        contact=name or NOT_AVAILABLE,
        email=_clean_text(item.get("email")) or NOT_AVAILABLE,
        phone=_clean_text(item.get("phone")) or NOT_AVAILABLE,
        location=place or NOT_AVAILABLE,
    )


class BrokerDirectoryHandler(BaseSiteHandler):
    """Handler for the broker directory domains listed in the settings."""

    @classmethod
    def can_handle(cls, url, settings):
        return host_matches(url, settings.directory.domains)

    def __init__(self, url, settings):
        super().__init__(url, settings)
        self.directory = settings.directory

    async def scrape(self, session) -> RetrievedPage:
        page = session.page
        await session.load_cookies(page)
        await session.navigate(page, self.start_url())
        await session.await_challenge(page)

        if self.directory.mode == "api":
            listing = await self.snapshot(page)
            listing.brokers = await self.fetch_feed(page)
        else:
            listing = await self.crawl(session, page)

        await session.save_cookies(page)
        logger.info(f"Directory scrape of {self.domain} produced {len(listing.brokers)} broker records")
        return listing

    def start_url(self) -> str:
        """
        Page the session opens first.

        In crawl mode a URL on the directory domain that is not the listing
        itself (the home page, a profile) starts at the configured listing.
        The listing path with its own query string is kept as given.
        """
        listing_url = self.directory.listing_url
        if self.directory.mode == "api" or not listing_url:
            return self.url
        if urlparse(self.url).path.rstrip("/") == urlparse(listing_url).path.rstrip("/"):
            return self.url
        logger.info(f"{self.url} is not the broker listing, starting at {listing_url}")
        return listing_url

    # --- crawl mode ---

    async def crawl(self, session, page) -> RetrievedPage:
        """Expand the listing, then drill into every profile it references."""
        await session.require_element(page, self.directory.anchor_selector, "listing anchor")
        await session.simulate_human(page)
        await self.apply_location_filter(page)

        try:
            await self.expand_listing(page)
        except LoadMoreLimitError as e:
            logger.warning(f"{e}. Continuing with the content already loaded")

        listing = await self.snapshot(page)
        profile_urls = self.collect_profile_urls(listing.document, listing.url)
        logger.info(f"Found {len(profile_urls)} broker profiles")
        listing.brokers = await self.drill_down(session, profile_urls)
        return listing

    async def _settle(self, page):
        await asyncio.sleep(self.directory.settle_ms / 1000.0)
        try:
            await page.wait_for_load_state("networkidle", timeout=3000)
        except PlaywrightError:
            pass  # Continue if timeout

    async def apply_location_filter(self, page) -> bool:
        """Fill in and submit the location filter. Skipped when no location is configured."""
        location = self.directory.location.strip()
        if not location:
            return False

        field = await page.query_selector(self.directory.location_selector)
        if field is None:
            logger.warning(f"Location field {self.directory.location_selector} not found, listing stays unfiltered")
            return False

        await page.fill(self.directory.location_selector, location)
        submit = None
        if self.directory.submit_selector:
            submit = await page.query_selector(self.directory.submit_selector)
        if submit is not None:
            await submit.click()
        else:
            await page.press(self.directory.location_selector, "Enter")

        logger.info(f"Filtered listing by location '{location}'")
        await self._settle(page)
        return True

    async def _is_actionable(self, element) -> bool:
        if element is None:
            return False
        try:
            if not await element.is_visible() or not await element.is_enabled():
                return False
            box = await element.bounding_box()
        except PlaywrightError:
            return False
        return bool(box) and box["width"] > 0 and box["height"] > 0

    async def expand_listing(self, page) -> int:
        """
        Click "load more" until it is gone, hidden, disabled or zero-sized.

        Returns:
            int: Number of clicks performed

        Raises:
            LoadMoreLimitError: If the control is still active once
                ``max_load_more`` clicks have been made (0 means no limit)
        """
        limit = self.directory.max_load_more
        clicks = 0
        while True:
            button = await page.query_selector(self.directory.load_more_selector)
            if not await self._is_actionable(button):
                break
            if limit and clicks >= limit:
                raise LoadMoreLimitError(f"'Load more' still active after {clicks} clicks", clicks=clicks)
            try:
                await button.click()
            except PlaywrightError as e:
                logger.warning(f"Clicking 'load more' failed, treating the listing as complete: {e}")
                break
            clicks += 1
            logger.debug(f"Clicked 'load more' ({clicks})")
            await self._settle(page)

        logger.info(f"Listing expanded with {clicks} 'load more' clicks")
        return clicks

    def collect_profile_urls(self, document, base_url) -> List[str]:
        """Absolute profile URLs in listing order, without repeats."""
        urls = {}
        for anchor in document.css(self.directory.profile_link_selector):
            resolved = resolve_url(anchor.attrib.get("href"), base_url)
            if resolved:
                urls.setdefault(resolved, None)
        return list(urls)

    async def drill_down(self, session, profile_urls) -> List[BrokerRecord]:
        """Visit profiles strictly one after another; failed ones are skipped."""
        brokers = []
        total = len(profile_urls)
        for index, url in enumerate(profile_urls, 1):
            if index > 1 and self.directory.profile_delay_ms:
                await asyncio.sleep(self.directory.profile_delay_ms / 1000.0)
            try:
                record = await self.extract_profile(session, url)
            except ProfileExtractionError as e:
                logger.warning(f"[{index}/{total}] Skipping profile {e.profile_url}: {e}")
                continue
            brokers.append(record)
            logger.info(f"[{index}/{total}] {record.contact} ({record.firm})")
        return brokers

    async def extract_profile(self, session, url) -> BrokerRecord:
        """
        Read firm, contact and email from one profile page.

        The page is always closed before returning.

        Raises:
            ProfileExtractionError: If the profile could not be loaded or read
        """
        page = None
        try:
            page = await session.new_page()
            await session.navigate(page, url)
            return BrokerRecord(
                url=url,
                firm=await self._read_text(page, self.directory.firm_selector),
                contact=await self._read_text(page, self.directory.contact_selector),
                email=await self._read_email(page),
            )
        except (NavigationError, PlaywrightError) as e:
            raise ProfileExtractionError(f"Could not read profile {url}: {e}", profile_url=url) from e
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError as e:
                    logger.debug(f"Error closing profile page {url}: {e}")

    async def _read_text(self, page, selector) -> str:
        element = await page.query_selector(selector)
        if element is None:
            return NOT_AVAILABLE
        return _clean_text(await element.inner_text()) or NOT_AVAILABLE

    async def _read_email(self, page) -> str:
        element = await page.query_selector(self.directory.email_selector)
        if element is None:
            return NOT_AVAILABLE
        addresses = emails_from_mailto(await element.get_attribute("href"))
        if addresses:
            return addresses[0]
        match = EMAIL_PATTERN.search(await element.inner_text() or "")
        return match.group(0) if match else NOT_AVAILABLE

    # --- api mode ---

    async def fetch_feed(self, page) -> List[BrokerRecord]:
        """
        Fetch the directory's JSON feed through the page's own session.

        Raises:
            NavigationError: If the feed cannot be fetched or is not a list
        """
        api_url = self.directory.api_url
        logger.info(f"Fetching broker feed {api_url} from inside the page")
        try:
            payload = await page.evaluate(FETCH_JSON_JS, api_url)
        except PlaywrightError as e:
            raise NavigationError(f"In-page fetch of {api_url} failed: {e}") from e

        if not payload or not payload.get("ok"):
            status = payload.get("status") if payload else None
            raise NavigationError(f"Broker feed {api_url} answered with HTTP {status}")

        data = payload.get("data")
        if not isinstance(data, list):
            raise NavigationError(f"Broker feed {api_url} did not return a list")

        brokers = [broker_from_feed(item, api_url) for item in data if isinstance(item, dict)]
        logger.info(f"Broker feed returned {len(brokers)} records")
        return brokers
