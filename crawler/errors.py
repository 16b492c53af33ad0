"""
Error types raised at the adapter boundaries.

Workers only see these; the requests / redis / pymongo exceptions are wrapped
where the adapters talk to the libraries.
"""


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class FetchError(CrawlerError):
    """The scrape source could not be reached or the page could not be parsed."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}" if reason else f"Failed to fetch {url}")


class QueueError(CrawlerError):
    """Work queue push/pop failed."""


class StoreError(CrawlerError):
    """Transient profile store failure (anything except a duplicate key)."""


class MalformedTaskError(CrawlerError, ValueError):
    """A queue entry does not have the expected field layout."""
