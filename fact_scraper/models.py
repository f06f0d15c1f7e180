"""
Models

Description: Result records produced by the fact scraper
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

UNKNOWN_DIMENSION = "unknown"


@dataclass(frozen=True)
class ImageInfo:
    url: str
    alt: str = ""
    title: str = ""
    width: str = UNKNOWN_DIMENSION
    height: str = UNKNOWN_DIMENSION

    def to_dict(self) -> Dict[str, str]:
        return {
            "url": self.url,
            "alt": self.alt,
            "title": self.title,
            "width": self.width,
            "height": self.height,
        }


@dataclass
class BrokerRecord:
    """One broker profile visited during a directory crawl."""

    url: str
    firm: str = "N/A"
    contact: str = "N/A"
    email: str = "N/A"
    # Only filled by the directory's JSON feed
    phone: Optional[str] = None
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {
            "url": self.url,
            "firm": self.firm,
            "contact": self.contact,
            "email": self.email,
        }
        if self.phone is not None:
            data["phone"] = self.phone
        if self.location is not None:
            data["location"] = self.location
        return data


@dataclass(frozen=True)
class ExtractionStats:
    total_links: int = 0
    total_images: int = 0
    total_emails: int = 0
    internal_links: int = 0
    external_links: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalLinks": self.total_links,
            "totalImages": self.total_images,
            "totalEmails": self.total_emails,
            "internalLinks": self.internal_links,
            "externalLinks": self.external_links,
        }


@dataclass
class ExtractionResult:
    """
    Normalized output of one scrape.

    ``brokers`` stays None for ordinary pages; the directory crawl always
    sets it to a list, even when no profile could be read.
    """

    original_url: str
    timestamp: str
    stats: ExtractionStats
    links: List[str] = field(default_factory=list)
    images: List[ImageInfo] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)
    brokers: Optional[List[BrokerRecord]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "originalUrl": self.original_url,
            "timestamp": self.timestamp,
            "stats": self.stats.to_dict(),
            "links": list(self.links),
            "images": [image.to_dict() for image in self.images],
            "emails": list(self.emails),
        }
        if self.brokers is not None:
            data["brokers"] = [broker.to_dict() for broker in self.brokers]
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


@dataclass
class RetrievedPage:
    """The final document of a retrieval path together with its base URL."""

    url: str
    document: Any
    status_code: Optional[int] = None
    brokers: Optional[List[BrokerRecord]] = None


@dataclass
class FetchResult:
    """Outcome of a static fetch, carried as a value instead of an exception."""

    ok: bool
    page: Optional[RetrievedPage] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, page: RetrievedPage) -> "FetchResult":
        return cls(ok=True, page=page)

    @classmethod
    def failure(cls, error: Exception) -> "FetchResult":
        return cls(ok=False, error=error)


def utc_timestamp() -> str:
    """Current instant as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
