"""
Channel Crawler - Queue Consumers

Two consumers run side by side, one thread each:
- SearchExpansionWorker: search -> pages (one search term at a time)
- ProfileIngestionWorker: pages -> channels collection (bounded thread pool)
"""

from crawler.consumers.base import BaseConsumer, Outcome, TaskResult
from crawler.consumers.profile_ingester import ProfileIngestionWorker
from crawler.consumers.search_expander import ExpansionResult, SearchExpansionWorker

__all__ = [
    "BaseConsumer",
    "Outcome",
    "TaskResult",
    "ExpansionResult",
    "SearchExpansionWorker",
    "ProfileIngestionWorker",
]
