"""
Profile Ingestion Worker

Consumes `pages` (url;category;term). For each candidate channel:

    exists? -> fetch /about -> extract -> normalize subscribers -> threshold -> insert

Tasks run on a bounded thread pool. When every slot is busy the pop loop
waits for one to free up instead of pulling more work off the queue.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, Optional

from crawler.config import CrawlerConfig
from crawler.consumers.base import BaseConsumer, Outcome, TaskResult
from crawler.errors import FetchError, QueueError, StoreError
from crawler.fetcher import DocumentFetcher
from crawler.models import ChannelProfile, PageTask
from crawler.retry import RetryPolicy, retrying
from crawler.sources.youtube import about_url, parse_about_page, parse_subscriber_count
from crawler.store import InsertOutcome, ProfileStore
from crawler.work_queue import WorkQueue

logger = logging.getLogger(__name__)


class ProfileIngestionWorker(BaseConsumer):
    """Fetches, filters and stores one channel profile per PageTask."""

    def __init__(
        self,
        queue: WorkQueue,
        store: ProfileStore,
        fetcher: DocumentFetcher,
        config: Optional[CrawlerConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        super().__init__(queue, config)
        self.store = store
        self.fetcher = fetcher
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=self.config.store_retry_attempts,
            wait_min=self.config.store_retry_wait_min,
            wait_max=self.config.store_retry_wait_max,
        )
        self._stage = retrying(self.retry_policy)(self._ingest_once)

        self.max_workers = max(1, self.config.ingest_max_workers)
        self._slots = threading.BoundedSemaphore(self.max_workers)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        for outcome in Outcome:
            self.stats[outcome.value] = 0
        self.stats["requeued"] = 0

    def get_worker_name(self) -> str:
        return "pages"

    def get_queue_name(self) -> str:
        return self.config.pages_queue

    def decode(self, raw: str) -> PageTask:
        return PageTask.decode(raw)

    # ==================== POOL ====================

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="ingest",
                )
            return self._executor

    def dispatch(self, task: PageTask) -> Future:
        """Hand a task to the pool, blocking while all slots are taken."""
        self._slots.acquire()
        try:
            future = self._get_executor().submit(self.handle, task)
        except RuntimeError:
            self._slots.release()
            raise
        future.add_done_callback(lambda _f: self._slots.release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting tasks and drain the ones in flight."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    # ==================== TASK ====================

    def handle(self, task: PageTask) -> TaskResult:
        """Run the ingestion stage and requeue the task if the store stayed down."""
        try:
            result = self.ingest(task)
        except Exception as e:
            self._incr("errors")
            logger.exception(f"Unexpected error ingesting {task.url}: {e}")
            raise

        self._incr(result.outcome.value)
        self._incr("messages_processed")

        if result.retryable:
            self._requeue(task, result)
        elif result.outcome is Outcome.INSERTED:
            logger.info(f"Stored {task.url} [{task.category}] (term '{task.term}')")
        else:
            logger.debug(f"{task.url} [{task.category}]: {result.outcome.value}")
        return result

    def ingest(self, task: PageTask) -> TaskResult:
        """Ingest one PageTask, retrying store failures with backoff."""
        # Parsed profile survives store retries within one ingest call
        parsed: Dict[str, ChannelProfile] = {}
        return self._stage(task, parsed)

    def _ingest_once(self, task: PageTask, parsed: Dict[str, ChannelProfile]) -> TaskResult:
        try:
            if self.store.find_one(task.url, task.category) is not None:
                return TaskResult(Outcome.DUPLICATE)
        except StoreError as e:
            logger.warning(f"Existence check failed for {task.url}: {e}")
            return TaskResult(Outcome.STORE_ERROR, error=e)

        profile = parsed.get("profile")
        if profile is None:
            try:
                doc = self.fetcher.fetch(about_url(task.url))
            except FetchError as e:
                self._log_error(f"Abandoning {task.url}: {e}", logging.WARNING)
                return TaskResult(Outcome.FETCH_FAILED, error=e)

            fields = parse_about_page(doc, self.config.selectors)
            subscribers, ok = parse_subscriber_count(fields["subscribers"])
            if not ok:
                logger.warning(
                    f"Unparseable subscriber count {fields['subscribers']!r} for {task.url}, using {subscribers}"
                )

            if subscribers < self.config.min_subscribers:
                return TaskResult(Outcome.BELOW_THRESHOLD)

            profile = ChannelProfile(
                url=task.url,
                category=task.category,
                name=fields["name"],
                subscriber_count=subscribers,
                description=fields["description"],
                image_url=fields["image"],
                term=task.term,
                discovered_at=datetime.now(timezone.utc),
            )
            parsed["profile"] = profile

        try:
            outcome = self.store.insert(profile)
        except StoreError as e:
            logger.warning(f"Insert failed for {task.url}: {e}")
            return TaskResult(Outcome.STORE_ERROR, error=e)

        if outcome is InsertOutcome.DUPLICATE:
            return TaskResult(Outcome.DUPLICATE_RACE)
        return TaskResult(Outcome.INSERTED)

    def _requeue(self, task: PageTask, result: TaskResult) -> None:
        try:
            self.queue.push(self.config.pages_queue, task.encode())
        except QueueError as e:
            self._log_error(
                f"Store retries exhausted for {task.url} and requeue failed, task lost: {e}",
                logging.CRITICAL,
            )
            return
        self._incr("requeued")
        self._log_error(
            f"Store retries exhausted for {task.url} ({result.error}); task requeued",
            logging.CRITICAL,
        )
