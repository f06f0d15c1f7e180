"""
Generic Website Handler

Description: Default dynamic retrieval for any page without a dedicated handler
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
"""

import asyncio
import logging

from playwright.async_api import Error as PlaywrightError

from .base_handler import BaseSiteHandler

logger = logging.getLogger(__name__)

# Common cookie accept button selectors
COOKIE_CONSENT_SELECTORS = [
    "button:has-text('Accept All')",
    "button:has-text('Accept')",
    "button:has-text('Allow All')",
    "button:has-text('I Agree')",
    ".cookie-accept",
    ".accept-cookies",
    ".cookie-consent button",
    "[id*='cookie'] button",
    "[class*='cookie'] button",
    "[id*='consent'] button",
    "[id*='gdpr'] button",
]


async def dismiss_cookie_consent(page) -> bool:
    """Click the first visible cookie consent button, if any."""
    for selector in COOKIE_CONSENT_SELECTORS:
        try:
            button = await page.query_selector(selector)
            if button and await button.is_visible():
                logger.info(f"Found cookie consent button: {selector}")
                await button.click()
                await asyncio.sleep(0.5)
                return True
        except PlaywrightError as e:
            logger.debug(f"Cookie consent selector {selector} failed: {e}")
    return False


class GenericWebsiteHandler(BaseSiteHandler):
    """
    Loads the page the way a visitor would: restored cookies, challenge
    pause, pointer movement and scrolling so lazy content renders.
    """

    @classmethod
    def can_handle(cls, url, settings):
        # Fallback handler, picked explicitly by get_handler_for_url
        return True

    async def scrape(self, session):
        page = session.page
        await session.load_cookies(page)
        await session.navigate(page, self.url)
        await session.await_challenge(page)
        await dismiss_cookie_consent(page)
        await session.simulate_human(page)
        await session.save_cookies(page)
        return await self.snapshot(page)
