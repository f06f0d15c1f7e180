"""
Content Extractor

Description: Extracts links, image descriptors and email addresses from a parsed page
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
- Uses Scrapling (BSD-3-Clause): https://github.com/D4Vinci/Scrapling
"""

"""
Every function here is a pure function of a parsed document and its base URL,
so the static fetch and the browser session share one extraction path and
re-running an extraction over the same document always gives the same output.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote

from scrapling.parser import Adaptor

from .models import ExtractionResult, ExtractionStats, ImageInfo, RetrievedPage, UNKNOWN_DIMENSION, utc_timestamp
from .utils.url_tools import is_same_origin, resolve_url

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_FULL_EMAIL = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_MAILTO_PREFIX = re.compile(r"^\s*mailto:", re.IGNORECASE)

EMPTY_DOCUMENT = "<html><body></body></html>"

# Text nodes, tails included, outside of script/style/noscript
VISIBLE_TEXT_XPATH = "//text()[not(ancestor::script) and not(ancestor::style) and not(ancestor::noscript)]"
RELATIVE_TEXT_XPATH = ".//text()[not(ancestor::script) and not(ancestor::style) and not(ancestor::noscript)]"

BLOCK_TAGS = (
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
)

# Elements with child markup but no block-level descendants; their text renders as one run
INLINE_RUN_XPATH = "//*[*][not(self::script or self::style or self::noscript)][not(descendant::*[{}])]".format(
    " or ".join(f"self::{tag}" for tag in BLOCK_TAGS)
)


def parse_document(html: Optional[str], url: str) -> Adaptor:
    """
    Parse markup into a Scrapling Adaptor usable by the extract_* functions.

    Args:
        html: Page markup; None or blank is treated as an empty page
        url: The page's own URL, stored on the Adaptor

    Returns:
        Adaptor

    Raises:
        ValueError: The markup holds no element at all (a lone comment or
            XML declaration, for example)
    """
    if not html or not html.strip():
        html = EMPTY_DOCUMENT
    document = Adaptor(text=html, url=url)
    if document._root is None:
        raise ValueError(f"No root element in markup from {url}")
    return document


def parse_document_or_empty(html: Optional[str], url: str) -> Adaptor:
    """Like parse_document, but markup without a root element gives an empty page."""
    try:
        return parse_document(html, url)
    except ValueError as e:
        logger.warning(f"{e}, using an empty document")
        return parse_document(EMPTY_DOCUMENT, url)


def _attr(element, name: str) -> Optional[str]:
    value = element.attrib.get(name)
    if value is None:
        return None
    return str(value)


def extract_links(document: Adaptor, base_url: str) -> List[str]:
    """
    Collect every anchor target as an absolute http(s) URL.

    Returns:
        list: Unique URLs sorted ascending
    """
    links = set()
    for anchor in document.css("a[href]"):
        resolved = resolve_url(_attr(anchor, "href"), base_url)
        if resolved:
            links.add(resolved)
    return sorted(links)


def _dimension(element, name: str) -> str:
    value = (_attr(element, name) or "").strip()
    return value or UNKNOWN_DIMENSION


def extract_images(document: Adaptor, base_url: str) -> List[ImageInfo]:
    """
    Collect image references with their descriptive attributes.

    When the same image appears more than once, the first occurrence in
    document order supplies alt, title, width and height.
    """
    images: Dict[str, ImageInfo] = {}
    for img in document.css("img[src]"):
        resolved = resolve_url(_attr(img, "src"), base_url)
        if not resolved or resolved in images:
            continue
        images[resolved] = ImageInfo(
            url=resolved,
            alt=(_attr(img, "alt") or "").strip(),
            title=(_attr(img, "title") or "").strip(),
            width=_dimension(img, "width"),
            height=_dimension(img, "height"),
        )
    return [images[url] for url in sorted(images)]


def emails_from_mailto(href: Optional[str]) -> List[str]:
    """
    Addresses carried by a mailto: reference.

    The scheme and any ?subject=... query are dropped, percent escapes are
    decoded and comma separated recipients are split. Anything that does not
    look like an address is discarded.
    """
    if not href or not _MAILTO_PREFIX.match(href):
        return []
    target = _MAILTO_PREFIX.sub("", href, count=1).split("?", 1)[0]
    addresses = []
    for candidate in unquote(target).split(","):
        candidate = candidate.strip()
        if _FULL_EMAIL.match(candidate):
            addresses.append(candidate)
    return addresses


def extract_emails(document: Adaptor) -> List[str]:
    """
    Union of mailto: addresses and addresses written in the visible text.

    Text is scanned twice: node by node, and again with each inline run
    (``jane<b>@</b>acme.com``) joined the way a browser renders it.

    Returns:
        list: Unique lowercased addresses sorted ascending
    """
    found = []
    for anchor in document.css("a[href]"):
        found.extend(emails_from_mailto(_attr(anchor, "href")))

    visible_text = " ".join(str(text) for text in document.xpath(VISIBLE_TEXT_XPATH))
    found.extend(EMAIL_PATTERN.findall(visible_text))
    for run in document.xpath(INLINE_RUN_XPATH):
        run_text = "".join(str(text) for text in run.xpath(RELATIVE_TEXT_XPATH))
        found.extend(EMAIL_PATTERN.findall(run_text))

    return sorted({normalize_email(address) for address in found})


def normalize_email(address: str) -> str:
    return address.strip().lower()


def is_internal_link(link: str, base_url: str) -> bool:
    """A link is internal when it shares scheme, host and port with the base URL."""
    return is_same_origin(link, base_url)


def compute_stats(links: Iterable[str], images: Iterable[ImageInfo], emails: Iterable[str], base_url: str) -> ExtractionStats:
    links = list(links)
    internal = sum(1 for link in links if is_internal_link(link, base_url))
    return ExtractionStats(
        total_links=len(links),
        total_images=len(list(images)),
        total_emails=len(list(emails)),
        internal_links=internal,
        external_links=len(links) - internal,
    )


def build_result(original_url: str, page: RetrievedPage, timestamp: Optional[str] = None) -> ExtractionResult:
    """
    Run every extraction over a retrieved page and aggregate the output.

    Args:
        original_url: The URL the caller asked for
        page: Final document of whichever retrieval path succeeded
        timestamp: Capture instant, defaults to now

    Returns:
        ExtractionResult with freshly computed stats
    """
    links = extract_links(page.document, page.url)
    images = extract_images(page.document, page.url)
    emails = extract_emails(page.document)
    stats = compute_stats(links, images, emails, page.url)
    logger.info(
        f"Extracted {stats.total_links} links ({stats.internal_links} internal), "
        f"{stats.total_images} images and {stats.total_emails} emails from {page.url}"
    )
    return ExtractionResult(
        original_url=original_url,
        timestamp=timestamp or utc_timestamp(),
        stats=stats,
        links=links,
        images=images,
        emails=emails,
        brokers=list(page.brokers) if page.brokers is not None else None,
    )
