"""
YouTube channel search & about-page scraping

Source-specific knowledge used by both workers:
- channel search URL for a term and page number
- candidate channel links on a search result page
- profile fields on a channel's /about page
- subscriber count normalization
"""

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlencode, urljoin

from crawler.config import ABOUT_SUFFIX, SEARCH_PATH, SELECTORS, SOURCE_ORIGIN
from crawler.fetcher import Document, query_all, query_first, query_first_attr
from crawler.models import UINT64_MAX

logger = logging.getLogger(__name__)

# Non-breaking space, regular space, thousands separator
_COUNT_NOISE = ("\u00a0", " ", ",")


def build_search_url(term: str, page: int, origin: str = SOURCE_ORIGIN) -> str:
    query = urlencode({"q": term, "page": str(page)})
    return f"{origin}{SEARCH_PATH}?{query}"


def resolve_candidate(href: str, origin: str = SOURCE_ORIGIN) -> str:
    """Absolute channel URL for a (usually root-relative) search result link."""
    return urljoin(origin + "/", href)


def about_url(channel_url: str) -> str:
    return channel_url.rstrip("/") + ABOUT_SUFFIX


def extract_candidates(doc: Document, selectors: Optional[Dict[str, str]] = None) -> List[str]:
    """Raw href values of every channel link on a search result page."""
    selectors = selectors or SELECTORS
    links = []
    for node in query_all(doc, selectors["candidate_link"]):
        href = node.get("href")
        if href:
            links.append(href)
    return links


def normalize_subscribers(text: Optional[str]) -> str:
    """
    Strip separators from subscriber text.

    Examples:
        '12,345'    -> '12345'
        '1 234 567' -> '1234567'
        ''          -> '0'
    """
    t = (text or "").strip()
    for noise in _COUNT_NOISE:
        t = t.replace(noise, "")
    return t or "0"


def parse_subscriber_count(text: Optional[str]) -> Tuple[int, bool]:
    """
    Parse normalized subscriber text as an unsigned 64-bit integer.

    Returns (count, ok). When ok is False the count is best-effort:
    0 for non-numeric text, UINT64_MAX for values beyond the 64-bit range.
    """
    normalized = normalize_subscribers(text)
    if not normalized.isdigit() or not normalized.isascii():
        return 0, False
    value = int(normalized)
    if value > UINT64_MAX:
        return UINT64_MAX, False
    return value, True


def parse_about_page(doc: Document, selectors: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Raw profile fields from a channel /about page (missing fields are '')."""
    selectors = selectors or SELECTORS
    return {
        "subscribers": query_first(doc, selectors["subscribers"]) or "",
        "description": (query_first(doc, selectors["description"]) or "").strip(),
        "name": (query_first(doc, selectors["name"]) or "").strip(),
        "image": query_first_attr(doc, selectors["thumbnail"], "href") or "",
    }
