"""Shared fixtures."""

import pytest

from crawler.config import CrawlerConfig
from crawler.retry import RetryPolicy
from tests.fakes import FakeFetcher, InMemoryProfileStore, InMemoryWorkQueue


@pytest.fixture(autouse=True)
def _error_logs_in_tmp(tmp_path, monkeypatch):
    """Keep worker error files out of the repo's data/ directory."""
    monkeypatch.setattr("crawler.consumers.base.LOG_DIR", tmp_path / "logs")


@pytest.fixture
def config():
    return CrawlerConfig(
        redis_url="redis://localhost:6379/0",
        pop_timeout=0.05,
        ingest_max_workers=4,
        store_retry_attempts=3,
        store_retry_wait_min=0,
        store_retry_wait_max=0,
    )


@pytest.fixture
def queue():
    return InMemoryWorkQueue()


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def retry_policy():
    return RetryPolicy.no_wait(max_attempts=3)
