"""
Search Expansion Worker

Consumes `search` (term;category), walks the channel search result pages for
the term and pushes every candidate channel onto `pages` (url;category;term).

Pagination:
- pages 1..34
- an empty page before page 33 jumps straight to page 33
- a failed fetch skips that page only
"""

import logging
from dataclasses import dataclass
from typing import Optional

from crawler.config import CrawlerConfig
from crawler.consumers.base import BaseConsumer
from crawler.errors import FetchError, QueueError
from crawler.fetcher import DocumentFetcher
from crawler.models import PageTask, SearchTask
from crawler.sources.youtube import build_search_url, extract_candidates, resolve_candidate
from crawler.work_queue import WorkQueue

logger = logging.getLogger(__name__)


@dataclass
class ExpansionResult:
    pages_fetched: int = 0
    pages_failed: int = 0
    candidates: int = 0
    push_failures: int = 0


class SearchExpansionWorker(BaseConsumer):
    """Turns one SearchTask into PageTasks."""

    def __init__(
        self,
        queue: WorkQueue,
        fetcher: DocumentFetcher,
        config: Optional[CrawlerConfig] = None,
    ):
        super().__init__(queue, config)
        self.fetcher = fetcher
        self.stats.update({"pages_fetched": 0, "pages_failed": 0, "candidates_pushed": 0})

    def get_worker_name(self) -> str:
        return "search"

    def get_queue_name(self) -> str:
        return self.config.search_queue

    def decode(self, raw: str) -> SearchTask:
        return SearchTask.decode(raw)

    def dispatch(self, task: SearchTask) -> None:
        result = self.expand(task)
        self._incr("messages_processed")
        logger.info(
            f"Expanded '{task.term}' [{task.category}]: "
            f"{result.candidates} candidates from {result.pages_fetched} pages "
            f"({result.pages_failed} failed)"
        )

    def expand(self, task: SearchTask) -> ExpansionResult:
        result = ExpansionResult()
        page = 1
        while page <= self.config.max_search_pages:
            url = build_search_url(task.term, page)
            try:
                doc = self.fetcher.fetch(url)
            except FetchError as e:
                result.pages_failed += 1
                self._incr("pages_failed")
                self._log_error(f"Search page {page} for '{task.term}' skipped: {e}", logging.WARNING)
                page += 1
                continue

            result.pages_fetched += 1
            self._incr("pages_fetched")
            hrefs = extract_candidates(doc, self.config.selectors)

            if not hrefs and page < self.config.skip_ahead_page:
                logger.debug(f"No candidates on page {page} for '{task.term}', jumping to page {self.config.skip_ahead_page}")
                page = self.config.skip_ahead_page
                continue

            for href in hrefs:
                page_task = PageTask(
                    url=resolve_candidate(href),
                    category=task.category,
                    term=task.term,
                )
                try:
                    self.queue.push(self.config.pages_queue, page_task.encode())
                except QueueError as e:
                    result.push_failures += 1
                    self._log_error(f"Could not enqueue {page_task.url}: {e}")
                    continue
                result.candidates += 1
                self._incr("candidates_pushed")

            page += 1

        return result
