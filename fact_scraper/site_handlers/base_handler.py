"""
Base Handler

Description: Base handler class for site-specific dynamic retrieval
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
"""

"""
Base class for the handlers that drive a browser session
"""
import logging
from urllib.parse import urlparse

from ..content_extractor import parse_document_or_empty
from ..models import RetrievedPage

logger = logging.getLogger(__name__)


class BaseSiteHandler:
    """
    Base class that all site-specific handlers should inherit from.

    A handler receives an open BrowserSession and turns it into the final
    document of the dynamic path. Site handlers allow customized logic for
    websites with unique structures or requirements.
    """

    @classmethod
    def can_handle(cls, url, settings):
        """
        Determine if this handler can process the given URL.

        Args:
            url (str): The URL to check
            settings (ScraperSettings): Active settings

        Returns:
            bool: True if this handler can process the URL, False otherwise
        """
        return False

    def __init__(self, url, settings):
        """
        Initialize the handler.

        Args:
            url (str): The URL to scrape
            settings (ScraperSettings): Active settings
        """
        self.url = url
        self.settings = settings
        self.domain = self._extract_domain(url)

    def _extract_domain(self, url):
        """Extract domain from URL"""
        domain = urlparse(url).netloc
        # Remove www. prefix if present
        if domain.startswith('www.'):
            domain = domain[4:]
        return domain or "unknown_domain"

    async def scrape(self, session) -> RetrievedPage:
        """
        Drive the session to the final document.

        Args:
            session (BrowserSession): A launched session owned by the caller

        Returns:
            RetrievedPage
        """
        raise NotImplementedError(f"{self.__class__.__name__} does not implement scrape()")

    async def snapshot(self, page, brokers=None) -> RetrievedPage:
        """Parse the page's current markup into a RetrievedPage."""
        html = await page.content()
        final_url = page.url or self.url
        logger.debug(f"{self.__class__.__name__}: captured {len(html)} characters from {final_url}")
        return RetrievedPage(url=final_url, document=parse_document_or_empty(html, final_url), brokers=brokers)
