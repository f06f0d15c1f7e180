"""
Url Tools

Description: URL validation, resolution and origin helpers used before and during extraction
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

import logging
import re
from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}
WEB_SCHEMES = ("http", "https")

# Browsers silently drop these from href values before resolving them
_STRIPPED_REF_CHARS = re.compile(r"[\t\n\r]")


def is_valid_url(value) -> bool:
    """
    Check whether a value is a well-formed absolute URL.

    Args:
        value: Anything; non-strings are simply rejected

    Returns:
        bool: True if the value has both a scheme and a host
    """
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not candidate:
        return False
    try:
        parsed = urlsplit(candidate)
        # Accessing .port validates it and raises ValueError when malformed
        parsed.port
    except ValueError:
        return False
    if not parsed.scheme or not parsed.netloc or not parsed.hostname:
        return False
    return not any(ch.isspace() for ch in parsed.netloc)


def normalize_url(url: str) -> str:
    """
    Canonical form of an absolute URL.

    Lowercases scheme and host, drops a default port and turns an empty
    path into "/". Query and fragment are kept as they are.
    """
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if parsed.username is not None:
        userinfo = parsed.username
        if parsed.password is not None:
            userinfo = f"{userinfo}:{parsed.password}"
        netloc = f"{userinfo}@{host}"

    port = parsed.port
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc = f"{netloc}:{port}"

    path = parsed.path or "/"
    return urlunsplit((scheme, netloc, path, parsed.query, parsed.fragment))


def resolve_url(ref, base_url: str) -> Optional[str]:
    """
    Resolve an href/src value against a base URL.

    Returns:
        The normalized absolute http(s) URL, or None when the reference is
        empty, malformed or points at a non-web scheme (mailto:, javascript:,
        data:, ...).
    """
    if ref is None:
        return None
    ref = _STRIPPED_REF_CHARS.sub("", str(ref)).strip()
    if not ref:
        return None
    try:
        absolute = urljoin(base_url, ref)
        parsed = urlsplit(absolute)
        parsed.port
    except ValueError:
        logger.debug(f"Dropping unresolvable reference {ref!r}")
        return None
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.hostname:
        return None
    return normalize_url(absolute)


def url_origin(url: str) -> Tuple[str, str, Optional[int]]:
    """(scheme, host, port) with the scheme's default port filled in."""
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    try:
        port = parsed.port
    except ValueError:
        port = None
    if port is None:
        port = DEFAULT_PORTS.get(scheme)
    return scheme, (parsed.hostname or ""), port


def is_same_origin(url: str, base_url: str) -> bool:
    return url_origin(url) == url_origin(base_url)


def get_domain(url: str) -> str:
    """Host of a URL without a leading "www.", or "unknown_domain"."""
    try:
        domain = (urlsplit(url).hostname or "").lower()
    except ValueError:
        domain = ""
    if domain.startswith("www."):
        domain = domain[4:]
    return domain or "unknown_domain"


def host_matches(url: str, domains: Iterable[str]) -> bool:
    """True if the URL's host is one of ``domains`` or a subdomain of one."""
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return False
    if not host:
        return False
    for domain in domains:
        domain = domain.lower().strip().lstrip(".")
        if domain and (host == domain or host.endswith("." + domain)):
            return True
    return False
