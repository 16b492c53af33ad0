"""
Channel Crawler

Structure:
----------
crawler/
├── config.py           # Shared config (Redis, MongoDB, selectors, thresholds)
├── models.py           # SearchTask / PageTask / ChannelProfile
├── work_queue.py       # Redis list queues
├── store.py            # MongoDB profile store
├── fetcher.py          # requests + BeautifulSoup
├── retry.py            # tenacity retry decorator
├── export.py           # Spreadsheet export (pandas)
├── coordinator.py      # Wires everything up, CLI entrypoint
├── consumers/          # Queue consumers (run in parallel)
│   ├── base.py
│   ├── search_expander.py
│   └── profile_ingester.py
└── sources/
    └── youtube.py      # Search pagination, /about parsing

Pipeline:
---------
┌─────────────────────────────────────────────────────────────────┐
│  Producer: HTTP /search or `python -m crawler.coordinator enqueue` │
│  → search                                                       │
├─────────────────────────────────────────────────────────────────┤
│  Thread 1: SEARCH EXPANSION                                     │
│  search → pages                                                 │
├─────────────────────────────────────────────────────────────────┤
│  Thread 2: PROFILE INGESTION (bounded pool)                     │
│  pages → MongoDB channels                                       │
└─────────────────────────────────────────────────────────────────┘
"""

from crawler.config import QUEUE_KEYS, MIN_SUBSCRIBERS, CrawlerConfig, setup_logging

__all__ = [
    "QUEUE_KEYS",
    "MIN_SUBSCRIBERS",
    "CrawlerConfig",
    "setup_logging",
]
