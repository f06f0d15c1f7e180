"""
Site handlers package for the fact scraper
"""

import logging

from .base_handler import BaseSiteHandler
from .broker_directory_handler import BrokerDirectoryHandler
from .generic_handler import GenericWebsiteHandler

logger = logging.getLogger(__name__)

# Checked in order; GenericWebsiteHandler is the fallback and is not listed
SITE_HANDLERS = [
    BrokerDirectoryHandler,
]


def get_handler_for_url(url, settings):
    """Get the appropriate handler for the given URL"""
    for handler_class in SITE_HANDLERS:
        if handler_class.can_handle(url, settings):
            logger.info(f"Selected handler: {handler_class.__name__}")
            return handler_class(url, settings)

    logger.info("No specific handler found, using GenericWebsiteHandler")
    return GenericWebsiteHandler(url, settings)


__all__ = [
    'BaseSiteHandler',
    'BrokerDirectoryHandler',
    'GenericWebsiteHandler',
    'SITE_HANDLERS',
    'get_handler_for_url',
]
