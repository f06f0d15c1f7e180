"""
Utils Package

Utility modules for fact_scraper: settings, URL helpers, waits and output.
"""

from .persistent_settings import (
    DirectorySettings,
    ScraperSettings,
    load_settings,
    save_settings,
)
from .url_tools import (
    get_domain,
    host_matches,
    is_same_origin,
    is_valid_url,
    normalize_url,
    resolve_url,
)
from .waiting import wait_until

__all__ = [
    'DirectorySettings',
    'ScraperSettings',
    'load_settings',
    'save_settings',
    'get_domain',
    'host_matches',
    'is_same_origin',
    'is_valid_url',
    'normalize_url',
    'resolve_url',
    'wait_until',
]
