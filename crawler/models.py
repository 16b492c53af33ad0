"""
Channel Crawler - Data Model

Queue tasks and the stored channel profile.

Queue wire format (both queues): fields joined by ";".
  search: term;category
  pages:  url;category;term

";" never appears inside a field: term and category have it replaced by a
space before enqueue, URLs carry it percent-encoded.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from crawler.errors import MalformedTaskError

DELIMITER = ";"

UINT64_MAX = 2 ** 64 - 1


def sanitize_field(value: str) -> str:
    """Make a free-text value safe to embed in a queue entry."""
    return (value or "").replace(DELIMITER, " ")


def _sanitize_url(url: str) -> str:
    return (url or "").replace(DELIMITER, "%3B")


def _split(raw: str, expected: int, queue: str) -> List[str]:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    parts = raw.split(DELIMITER)
    if len(parts) != expected:
        raise MalformedTaskError(
            f"{queue} entry must have {expected} fields, got {len(parts)}: {raw!r}"
        )
    return parts


@dataclass(frozen=True)
class SearchTask:
    """Request to discover channels for one term/category pair."""
    term: str
    category: str

    def encode(self) -> str:
        return DELIMITER.join([sanitize_field(self.term), sanitize_field(self.category)])

    @classmethod
    def decode(cls, raw: str) -> "SearchTask":
        term, category = _split(raw, 2, "search")
        return cls(term=term, category=category)


@dataclass(frozen=True)
class PageTask:
    """Request to ingest one candidate channel URL."""
    url: str
    category: str
    term: str

    def encode(self) -> str:
        return DELIMITER.join([
            _sanitize_url(self.url),
            sanitize_field(self.category),
            sanitize_field(self.term),
        ])

    @classmethod
    def decode(cls, raw: str) -> "PageTask":
        url, category, term = _split(raw, 3, "pages")
        return cls(url=url, category=category, term=term)


@dataclass
class ChannelProfile:
    # --- Identity ---
    url: str
    category: str

    # --- Scraped metadata ---
    name: str = ""
    subscriber_count: int = 0
    description: str = ""
    image_url: str = ""

    # --- Provenance ---
    term: str = ""
    discovered_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def identity(self) -> tuple:
        return (self.url, self.category)

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document layout (field names of the `channels` collection)."""
        return {
            "name": self.name,
            "url": self.url,
            # BSON integers are signed 64-bit
            "subscribers": min(self.subscriber_count, 2 ** 63 - 1),
            "description": self.description,
            "image": self.image_url,
            "created": self.discovered_at,
            "term": self.term,
            "category": self.category,
        }

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> "ChannelProfile":
        created = doc.get("created")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        if created is None:
            created = datetime.now(timezone.utc)
        return ChannelProfile(
            url=doc["url"],
            category=doc["category"],
            name=doc.get("name", ""),
            subscriber_count=int(doc.get("subscribers", 0)),
            description=doc.get("description", ""),
            image_url=doc.get("image", ""),
            term=doc.get("term", ""),
            discovered_at=created,
        )
