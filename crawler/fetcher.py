"""
Document Fetcher & Selector Query

fetch(url) -> parsed HTML document (BeautifulSoup) or FetchError.
query_first / query_first_attr / query_all run CSS selectors against it.
"""

import logging
import threading
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup, Tag

from crawler.config import DEFAULT_HEADERS, FETCH_TIMEOUT_SECONDS
from crawler.errors import FetchError

logger = logging.getLogger(__name__)

Document = BeautifulSoup


class DocumentFetcher:
    """
    HTTP GET + HTML parse. The network timeout lives here.

    Each thread gets its own requests.Session unless one is passed in.
    """

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = float(timeout)
        self.headers = headers or dict(DEFAULT_HEADERS)
        self._shared_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def fetch(self, url: str) -> Document:
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

        try:
            return BeautifulSoup(response.text, "html.parser")
        except Exception as e:
            raise FetchError(url, f"parse error: {e}") from e

    def close(self) -> None:
        if self._shared_session is not None:
            self._shared_session.close()
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()


def query_first(doc: Document, selector: str) -> Optional[str]:
    """Text of the first element matching selector, or None."""
    node = doc.select_one(selector)
    if node is None:
        return None
    return node.get_text()


def query_first_attr(doc: Document, selector: str, attr: str) -> Optional[str]:
    """Attribute value of the first element matching selector, or None."""
    node = doc.select_one(selector)
    if node is None:
        return None
    value = node.get(attr)
    if isinstance(value, list):
        # class-like attributes come back as lists
        value = " ".join(value)
    return value


def query_all(doc: Document, selector: str) -> List[Tag]:
    return doc.select(selector)
