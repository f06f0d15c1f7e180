"""
Static Fetcher

Description: Plain HTTP retrieval of a page without executing its scripts
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
- Uses Requests (Apache 2.0): https://github.com/psf/requests
"""

import logging

import requests
from lxml import etree

from .content_extractor import parse_document
from .errors import RetrievalError
from .models import FetchResult, RetrievedPage
from .utils.persistent_settings import DESKTOP_USER_AGENT

logger = logging.getLogger(__name__)


def fetch_static(url: str, timeout: float = 30.0, user_agent: str = DESKTOP_USER_AGENT, http=None) -> RetrievedPage:
    """
    Fetch a page with a single GET request and parse the body.

    Args:
        url: Absolute URL to fetch
        timeout: Seconds before the request is abandoned
        user_agent: Sent as the User-Agent header
        http: Object with a requests-compatible ``get`` (a Session, or the
            requests module itself when None)

    Returns:
        RetrievedPage whose url is the final response URL after redirects

    Raises:
        RetrievalError: On transport failure, a non-2xx status or an
            unparseable body
    """
    http = http or requests
    headers = {
        'User-Agent': user_agent,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.9',
    }

    logger.info(f"Fetching {url} over plain HTTP")
    try:
        response = http.get(url, headers=headers, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        raise RetrievalError(f"Request to {url} failed: {e}") from e

    status_code = response.status_code
    if not 200 <= status_code < 300:
        raise RetrievalError(f"{url} answered with HTTP {status_code}", status_code=status_code)

    final_url = response.url or url
    try:
        document = parse_document(response.text, final_url)
    except (ValueError, TypeError, etree.LxmlError) as e:
        raise RetrievalError(f"Could not parse the body of {final_url}: {e}", status_code=status_code) from e

    logger.debug(f"Static fetch of {url} succeeded with HTTP {status_code} ({final_url})")
    return RetrievedPage(url=final_url, document=document, status_code=status_code)


def try_fetch_static(url: str, timeout: float = 30.0, user_agent: str = DESKTOP_USER_AGENT, http=None) -> FetchResult:
    """Same as fetch_static, with the failure returned as a FetchResult instead of raised."""
    try:
        return FetchResult.success(fetch_static(url, timeout=timeout, user_agent=user_agent, http=http))
    except RetrievalError as e:
        logger.warning(f"Static retrieval failed: {e}")
        return FetchResult.failure(e)
