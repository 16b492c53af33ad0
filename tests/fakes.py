"""
In-memory doubles for the queue, store and fetcher contracts, plus HTML
builders for search result and /about pages.
"""

import threading
from collections import defaultdict, deque
from typing import Callable, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from crawler.errors import FetchError, QueueError, StoreError
from crawler.models import ChannelProfile
from crawler.store import InsertOutcome, ProfileStore
from crawler.work_queue import WorkQueue


class InMemoryWorkQueue(WorkQueue):
    """FIFO lists with a blocking pop, like Redis BLPOP."""

    def __init__(self):
        self._queues: Dict[str, deque] = defaultdict(deque)
        self._cond = threading.Condition()
        self.fail_push = False
        self.fail_pop = False

    def push(self, name: str, value: str) -> None:
        if self.fail_push:
            raise QueueError(f"push to {name} refused")
        with self._cond:
            self._queues[name].append(value)
            self._cond.notify_all()

    def blocking_pop(self, name: str, timeout) -> Optional[str]:
        if self.fail_pop:
            raise QueueError(f"pop from {name} refused")
        with self._cond:
            self._cond.wait_for(lambda: len(self._queues[name]) > 0, timeout=timeout)
            if self._queues[name]:
                return self._queues[name].popleft()
            return None

    def length(self, name: str) -> int:
        with self._cond:
            return len(self._queues[name])

    def items(self, name: str) -> List[str]:
        with self._cond:
            return list(self._queues[name])


class InMemoryProfileStore(ProfileStore):
    """Dict keyed by (url, category) standing in for the unique index."""

    def __init__(self):
        self.profiles: Dict[tuple, ChannelProfile] = {}
        self._lock = threading.Lock()
        self.index_created = False
        self.find_failures = 0
        self.insert_failures = 0
        self.insert_calls = 0
        # Simulates another worker inserting between our check and our insert
        self.hide_from_find = False

    def ensure_unique_index(self) -> None:
        self.index_created = True

    def find_one(self, url: str, category: str) -> Optional[ChannelProfile]:
        with self._lock:
            if self.find_failures > 0:
                self.find_failures -= 1
                raise StoreError("find failed")
            if self.hide_from_find:
                return None
            return self.profiles.get((url, category))

    def insert(self, profile: ChannelProfile) -> InsertOutcome:
        with self._lock:
            self.insert_calls += 1
            if self.insert_failures > 0:
                self.insert_failures -= 1
                raise StoreError("write failed")
            if profile.identity in self.profiles:
                return InsertOutcome.DUPLICATE
            self.profiles[profile.identity] = profile
            return InsertOutcome.INSERTED

    def export(self, category: Optional[str] = None) -> List[ChannelProfile]:
        with self._lock:
            return [
                p for p in self.profiles.values()
                if category is None or p.category == category
            ]


PageSource = Union[str, Exception, Callable[[], str]]


class FakeFetcher:
    """Serves canned HTML per URL; unknown URLs fail like a 404."""

    def __init__(self, pages: Optional[Dict[str, PageSource]] = None):
        self.pages: Dict[str, PageSource] = dict(pages or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()
        self.closed = False

    def fetch(self, url: str) -> BeautifulSoup:
        with self._lock:
            self.calls.append(url)
        source = self.pages.get(url)
        if source is None:
            raise FetchError(url, "404 Not Found")
        if isinstance(source, Exception):
            raise source
        if callable(source):
            source = source()
        return BeautifulSoup(source, "html.parser")

    def close(self) -> None:
        self.closed = True


# ==================== HTML BUILDERS ====================

def search_page_html(hrefs: List[str]) -> str:
    items = "".join(
        f'<div class="qualified-channel-title-wrapper">'
        f'<a class="yt-uix-sessionlink" href="{href}">{href}</a></div>'
        for href in hrefs
    )
    return f"<html><body><div id='results'>{items}</div></body></html>"


def about_page_html(
    subscribers: Optional[str] = "1,234",
    name: str = "Some Channel",
    description: str = "About this channel",
    image: str = "https://yt3.example.com/photo.jpg",
) -> str:
    subs = f'<span class="subscribed">{subscribers}</span>' if subscribers is not None else ""
    return f"""
    <html>
      <head><link itemprop="thumbnailUrl" href="{image}"></head>
      <body>
        <a class="branded-page-header-title-link" href="/user/x">{name}</a>
        {subs}
        <div class="about-description"><pre>{description}</pre></div>
      </body>
    </html>
    """
