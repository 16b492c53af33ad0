"""
Work Queue
==========

Durable FIFO queues backed by Redis lists.

    push          -> RPUSH <name> <value>
    blocking_pop  -> BLPOP <name> <timeout>
    length        -> LLEN <name>

Entries stay in Redis until popped, so a worker restart never loses pending
work. Consumers pop atomically, which is the only mutual exclusion the
pipeline needs between concurrent workers.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis

from crawler.config import CrawlerConfig
from crawler.errors import QueueError

logger = logging.getLogger(__name__)


class WorkQueue(ABC):
    """Contract shared by the Redis adapter and in-memory test doubles."""

    @abstractmethod
    def push(self, name: str, value: str) -> None:
        """Append value to the tail of queue `name`."""

    @abstractmethod
    def blocking_pop(self, name: str, timeout: int) -> Optional[str]:
        """
        Pop the head of queue `name`, waiting up to `timeout` seconds.

        Returns None on timeout. Raises QueueError if the backend fails.
        """

    @abstractmethod
    def length(self, name: str) -> int:
        """Number of pending entries in queue `name`."""

    def close(self) -> None:
        pass


class RedisWorkQueue(WorkQueue):
    """Redis list queue (sync redis-py)."""

    def __init__(self, config: Optional[CrawlerConfig] = None, client: Optional[redis.Redis] = None):
        self.config = config or CrawlerConfig()
        self._client = client

    def _get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            # socket_timeout must outlast the BLPOP wait or every idle poll errors out
            self._client = redis.Redis.from_url(
                self.config.redis_dsn,
                decode_responses=True,
                socket_timeout=self.config.pop_timeout + 5,
                socket_connect_timeout=5.0,
            )
        return self._client

    def ping(self) -> bool:
        """Check Redis connection."""
        try:
            return bool(self._get_client().ping())
        except redis.RedisError:
            return False

    def push(self, name: str, value: str) -> None:
        try:
            self._get_client().rpush(name, value)
        except redis.RedisError as e:
            raise QueueError(f"Push to {name} failed: {e}") from e

    def blocking_pop(self, name: str, timeout: int) -> Optional[str]:
        try:
            result = self._get_client().blpop([name], timeout=timeout)
        except redis.RedisError as e:
            raise QueueError(f"Pop from {name} failed: {e}") from e
        if result is None:
            return None
        _key, value = result
        return value

    def length(self, name: str) -> int:
        try:
            return int(self._get_client().llen(name))
        except redis.RedisError as e:
            raise QueueError(f"Length of {name} failed: {e}") from e

    def close(self) -> None:
        """Close connection."""
        if self._client:
            self._client.close()
            self._client = None
