"""
Channel Crawler - Shared Configuration

Settings shared by the search expansion worker, the profile ingestion worker
and the HTTP control surface. Everything is read from environment variables
so the same code runs locally and in a container.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import quote

# ===================== PATHS =====================

BASE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = BASE_DIR / "data"

# Logs
LOG_DIR = Path(os.environ.get("CRAWLER_LOG_DIR", DATA_DIR / "logs"))


# ===================== REDIS (WORK QUEUES) =====================

# REDISTOGO_URL is what the hosted deployment exports
REDIS_URL = os.environ.get("REDIS_URL") or os.environ.get("REDISTOGO_URL")
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None

QUEUE_KEYS = {
    "search": os.environ.get("SEARCH_QUEUE_KEY", "search"),
    "pages": os.environ.get("PAGES_QUEUE_KEY", "pages"),
}

# Blocking pop wait; loops wake up at least this often to check for shutdown
POP_TIMEOUT_SECONDS = int(os.environ.get("POP_TIMEOUT_SECONDS", "10"))


# ===================== MONGODB (PROFILE STORE) =====================

MONGODB_URI = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.environ.get("MONGODB_DB", "crawler")
MONGODB_COLLECTION = os.environ.get("MONGODB_COLLECTION", "channels")


# ===================== SCRAPE SOURCE =====================

SOURCE_ORIGIN = "https://www.youtube.com"
SEARCH_PATH = "/channels"
ABOUT_SUFFIX = "/about"

# Pagination bounds for one search term. Empty result pages tend to cluster at
# the tail, so an empty page before SKIP_AHEAD_PAGE jumps straight to it.
MAX_SEARCH_PAGES = 34
SKIP_AHEAD_PAGE = 33

SELECTORS = {
    "candidate_link": ".qualified-channel-title-wrapper .yt-uix-sessionlink",
    "subscribers": ".subscribed",
    "description": ".about-description pre",
    "name": ".branded-page-header-title-link",
    "thumbnail": "link[itemprop='thumbnailUrl']",
}

FETCH_TIMEOUT_SECONDS = float(os.environ.get("FETCH_TIMEOUT_SECONDS", "15"))

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


# ===================== PIPELINE SETTINGS =====================

MIN_SUBSCRIBERS = int(os.environ.get("MIN_SUBSCRIBERS", "1000"))
INGEST_MAX_WORKERS = int(os.environ.get("INGEST_MAX_WORKERS", "8"))

# Store retries before a page task goes back onto the queue
STORE_RETRY_ATTEMPTS = int(os.environ.get("STORE_RETRY_ATTEMPTS", "3"))
STORE_RETRY_WAIT_MIN = float(os.environ.get("STORE_RETRY_WAIT_MIN", "0.5"))
STORE_RETRY_WAIT_MAX = float(os.environ.get("STORE_RETRY_WAIT_MAX", "10"))

# Pause after a queue error before polling again
QUEUE_ERROR_BACKOFF_SECONDS = 1.0

DEFAULT_CATEGORY = "none"

# HTTP control surface
PORT = int(os.environ.get("PORT", "3000"))


@dataclass
class CrawlerConfig:
    """Runtime configuration handed to the coordinator and workers."""

    redis_url: Optional[str] = REDIS_URL
    redis_host: str = REDIS_HOST
    redis_port: int = REDIS_PORT
    redis_db: int = REDIS_DB
    redis_password: Optional[str] = REDIS_PASSWORD

    mongodb_uri: str = MONGODB_URI
    mongodb_db: str = MONGODB_DB
    mongodb_collection: str = MONGODB_COLLECTION

    search_queue: str = QUEUE_KEYS["search"]
    pages_queue: str = QUEUE_KEYS["pages"]
    pop_timeout: int = POP_TIMEOUT_SECONDS

    max_search_pages: int = MAX_SEARCH_PAGES
    skip_ahead_page: int = SKIP_AHEAD_PAGE
    min_subscribers: int = MIN_SUBSCRIBERS
    ingest_max_workers: int = INGEST_MAX_WORKERS
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS

    store_retry_attempts: int = STORE_RETRY_ATTEMPTS
    store_retry_wait_min: float = STORE_RETRY_WAIT_MIN
    store_retry_wait_max: float = STORE_RETRY_WAIT_MAX

    selectors: dict = field(default_factory=lambda: dict(SELECTORS))

    @property
    def redis_dsn(self) -> str:
        """Get Redis URL for connection."""
        if self.redis_url:
            return self.redis_url
        if self.redis_password:
            password = quote(self.redis_password, safe="")
            return f"redis://:{password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @classmethod
    def for_docker(cls) -> "CrawlerConfig":
        """Configuration for the docker-compose network."""
        return cls(
            redis_url=None,
            redis_host="redis",
            mongodb_uri="mongodb://mongo:27017",
        )


# ===================== LOGGING =====================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for entrypoints (CLI, API server)."""
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
