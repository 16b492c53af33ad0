"""
Base Consumer - Abstract class for queue consumers

Provides:
- Blocking-pop loop with a bounded wait so shutdown is noticed promptly
- Task decoding with malformed entries dropped
- Per-worker stats
- Error handling and logging (error lines also go to data/logs/<worker>_errors.log)

Queue errors never end the loop; the consumer logs, backs off and polls again.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from crawler.config import LOG_DIR, QUEUE_ERROR_BACKOFF_SECONDS, CrawlerConfig
from crawler.errors import MalformedTaskError, QueueError
from crawler.work_queue import WorkQueue

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    DUPLICATE_RACE = "duplicate_race"
    BELOW_THRESHOLD = "below_threshold"
    FETCH_FAILED = "fetch_failed"
    STORE_ERROR = "store_error"


@dataclass
class TaskResult:
    """Typed result of one ingestion stage run."""
    outcome: Outcome
    error: Optional[Exception] = None

    @property
    def retryable(self) -> bool:
        return self.outcome is Outcome.STORE_ERROR


class BaseConsumer(ABC):
    """
    Base class for the pipeline's queue consumers

    Usage:
        class MyConsumer(BaseConsumer):
            def get_worker_name(self) -> str:
                return "search"

            def get_queue_name(self) -> str:
                return self.config.search_queue

            def decode(self, raw: str):
                return SearchTask.decode(raw)

            def dispatch(self, task) -> None:
                self.expand(task)
    """

    def __init__(self, queue: WorkQueue, config: Optional[CrawlerConfig] = None):
        self.queue = queue
        self.config = config or CrawlerConfig()
        self._stats_lock = threading.Lock()
        self.stats: Dict[str, int] = {
            "messages_received": 0,
            "messages_processed": 0,
            "malformed": 0,
            "queue_errors": 0,
            "errors": 0,
        }

    # ==================== ABSTRACT METHODS ====================

    @abstractmethod
    def get_worker_name(self) -> str:
        """Short worker name used in logs ('search' or 'pages')"""

    @abstractmethod
    def get_queue_name(self) -> str:
        """Queue this consumer pops from"""

    @abstractmethod
    def decode(self, raw: str) -> Any:
        """Turn a raw queue entry into a task; raise MalformedTaskError if it can't"""

    @abstractmethod
    def dispatch(self, task: Any) -> None:
        """Process (or schedule processing of) one decoded task"""

    # ==================== LOOP ====================

    def poll_once(self) -> bool:
        """
        Pop and dispatch at most one entry.

        Returns True if an entry was popped (even if it turned out malformed).
        """
        try:
            raw = self.queue.blocking_pop(self.get_queue_name(), self.config.pop_timeout)
        except QueueError as e:
            self._incr("queue_errors")
            self._log_error(f"Error reading from {self.get_queue_name()} queue: {e}")
            time.sleep(QUEUE_ERROR_BACKOFF_SECONDS)
            return False

        if raw is None:
            return False

        self._incr("messages_received")
        try:
            task = self.decode(raw)
        except MalformedTaskError as e:
            self._incr("malformed")
            self._log_error(f"Dropping malformed entry: {e}")
            return True

        self.dispatch(task)
        return True

    def run(self, stop_event: threading.Event) -> None:
        """Main consume loop; returns once stop_event is set."""
        logger.info(f"{self.__class__.__name__} consuming '{self.get_queue_name()}'")
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                # A bug in one task must not kill the consumer thread
                self._incr("errors")
                logger.exception(f"Loop error in {self.get_worker_name()} consumer: {e}")
        logger.info(f"{self.__class__.__name__} stopped. Stats: {self.stats}")

    # ==================== HELPERS ====================

    def _incr(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self.stats[key] = self.stats.get(key, 0) + amount

    def _log_error(self, msg: str, level: int = logging.ERROR) -> None:
        """Log error and append it to the worker's error file"""
        logger.log(level, msg)
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            log_file = LOG_DIR / f"{self.get_worker_name()}_errors.log"
            ts = time.strftime("%Y-%m-%d %H:%M:%S")
            with log_file.open("a", encoding="utf-8") as f:
                f.write(f"[{ts}] {logging.getLevelName(level)} {msg}\n")
        except OSError as e:
            logger.warning(f"Could not write error log: {e}")
