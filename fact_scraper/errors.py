"""
Errors

Description: Exception taxonomy shared by the retrieval and extraction layers
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for every error raised by fact_scraper."""


class InputError(ScraperError):
    """The caller supplied a URL that cannot be scraped."""


class RetrievalError(ScraperError):
    """
    The static HTTP fetch failed.

    Covers non-2xx responses, transport failures (DNS, timeouts, resets)
    and bodies that could not be parsed. The scraper recovers from it by
    switching to a browser session.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NavigationError(ScraperError):
    """
    A browser session could not reach the content it needed.

    When the page markup was captured before failing, ``debug_path`` points
    at the saved file.
    """

    def __init__(self, message: str, debug_path=None):
        super().__init__(message)
        self.debug_path = debug_path


class LoadMoreLimitError(NavigationError):
    """The "load more" control was still active after the configured number of clicks."""

    def __init__(self, message: str, clicks: int):
        super().__init__(message)
        self.clicks = clicks


class ProfileExtractionError(ScraperError):
    """A single directory profile page could not be scraped."""

    def __init__(self, message: str, profile_url: str):
        super().__init__(message)
        self.profile_url = profile_url


class WaitTimeoutError(ScraperError):
    """A polled condition never became true within its timeout."""

    def __init__(self, message: str, timeout_ms: float):
        super().__init__(message)
        self.timeout_ms = timeout_ms
