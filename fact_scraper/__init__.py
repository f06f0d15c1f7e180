"""
Fact Scraper

Description: Adaptive page retrieval (plain HTTP or a stealth browser session) with link, image, email and broker directory extraction
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

from .errors import (
    InputError,
    LoadMoreLimitError,
    NavigationError,
    ProfileExtractionError,
    RetrievalError,
    ScraperError,
    WaitTimeoutError,
)
from .models import BrokerRecord, ExtractionResult, ExtractionStats, ImageInfo
from .scraper import PageScraper, scrape
from .session_manager import BrowserSession
from .utils.persistent_settings import DirectorySettings, ScraperSettings, load_settings

__version__ = "1.0.0"

__all__ = [
    'BrokerRecord',
    'BrowserSession',
    'DirectorySettings',
    'ExtractionResult',
    'ExtractionStats',
    'ImageInfo',
    'InputError',
    'LoadMoreLimitError',
    'NavigationError',
    'PageScraper',
    'ProfileExtractionError',
    'RetrievalError',
    'ScraperError',
    'ScraperSettings',
    'WaitTimeoutError',
    'load_settings',
    'scrape',
]
