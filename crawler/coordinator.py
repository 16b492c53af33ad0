"""
Pipeline Coordinator

Creates the queue, store and fetcher handles once, injects them into both
consumers and runs each consumer loop on its own thread.

Usage:
    python -m crawler.coordinator run
    python -m crawler.coordinator enqueue golang rust --category tech
    python -m crawler.coordinator status
    python -m crawler.coordinator export --category tech --out channels.xlsx
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from crawler.config import DEFAULT_CATEGORY, CrawlerConfig, setup_logging
from crawler.consumers.profile_ingester import ProfileIngestionWorker
from crawler.consumers.search_expander import SearchExpansionWorker
from crawler.errors import CrawlerError
from crawler.export import write_xlsx
from crawler.fetcher import DocumentFetcher
from crawler.models import ChannelProfile, SearchTask
from crawler.retry import RetryPolicy
from crawler.store import MongoProfileStore, ProfileStore
from crawler.work_queue import RedisWorkQueue, WorkQueue

logger = logging.getLogger(__name__)


class PipelineCoordinator:
    """Owns the worker threads and the shared handles."""

    def __init__(
        self,
        queue: WorkQueue,
        store: ProfileStore,
        fetcher: Optional[DocumentFetcher] = None,
        config: Optional[CrawlerConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.config = config or CrawlerConfig()
        self.queue = queue
        self.store = store
        self.fetcher = fetcher or DocumentFetcher(timeout=self.config.fetch_timeout)

        self.search_worker = SearchExpansionWorker(self.queue, self.fetcher, self.config)
        self.ingest_worker = ProfileIngestionWorker(
            self.queue, self.store, self.fetcher, self.config, retry_policy=retry_policy
        )

        self.stop_event = threading.Event()
        self._threads: List[threading.Thread] = []

    # ==================== COLLABORATOR API ====================

    def enqueue_search(self, term: str, category: str = DEFAULT_CATEGORY) -> SearchTask:
        """Push one sanitized SearchTask onto the search queue."""
        task = SearchTask(term=term.strip(), category=(category or DEFAULT_CATEGORY).strip())
        self.queue.push(self.config.search_queue, task.encode())
        logger.info(f"Queued search '{task.term}' [{task.category}]")
        return task

    def pending_search_count(self) -> int:
        return self.queue.length(self.config.search_queue)

    def export_profiles(self, category: Optional[str] = None) -> List[ChannelProfile]:
        return self.store.export(category)

    # ==================== LIFECYCLE ====================

    def start(self) -> None:
        """Ensure the unique index, then start both consumer threads."""
        # Startup failure here is fatal
        self.store.ensure_unique_index()
        self.stop_event.clear()
        self._threads = [
            threading.Thread(
                target=self.search_worker.run,
                args=(self.stop_event,),
                name="search-expander",
                daemon=True,
            ),
            threading.Thread(
                target=self.ingest_worker.run,
                args=(self.stop_event,),
                name="profile-ingester",
                daemon=True,
            ),
        ]
        for t in self._threads:
            t.start()
        logger.info("Pipeline started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal both loops to stop, then drain in-flight ingestion tasks."""
        self.stop_event.set()
        for t in self._threads:
            t.join(timeout)
        self.ingest_worker.shutdown(wait=True)
        self._threads = []
        logger.info(
            f"Pipeline stopped. search={self.search_worker.stats} pages={self.ingest_worker.stats}"
        )

    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop_event.set()

    def run_forever(self) -> None:
        """Run until SIGINT/SIGTERM. Must be called from the main thread."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)
        self.start()
        while not self.stop_event.wait(1.0):
            pass
        self.stop()

    def close(self) -> None:
        self.fetcher.close()
        self.queue.close()
        self.store.close()


def build_coordinator(config: Optional[CrawlerConfig] = None) -> PipelineCoordinator:
    config = config or CrawlerConfig()
    return PipelineCoordinator(
        queue=RedisWorkQueue(config),
        store=MongoProfileStore(config),
        fetcher=DocumentFetcher(timeout=config.fetch_timeout),
        config=config,
    )


# ===================== CLI =====================

def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Channel Crawler - search expansion and profile ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--docker", action="store_true", help="Use docker-compose hostnames")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("run", help="Run both workers until interrupted")

    enqueue_parser = subparsers.add_parser("enqueue", help="Queue search terms")
    enqueue_parser.add_argument("terms", nargs="+")
    enqueue_parser.add_argument("--category", default=DEFAULT_CATEGORY)

    subparsers.add_parser("status", help="Show pending search count")

    export_parser = subparsers.add_parser("export", help="Export stored channels as xlsx")
    export_parser.add_argument("--category", default=None)
    export_parser.add_argument("--out", default="channels.xlsx")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return 1

    config = CrawlerConfig.for_docker() if args.docker else CrawlerConfig()
    coordinator = build_coordinator(config)

    try:
        if args.command == "run":
            coordinator.run_forever()

        elif args.command == "enqueue":
            for term in args.terms:
                coordinator.enqueue_search(term, args.category)

        elif args.command == "status":
            pending = coordinator.pending_search_count()
            print("Done" if pending == 0 else f"Pending {pending}")

        elif args.command == "export":
            profiles = coordinator.export_profiles(args.category)
            write_xlsx(profiles, args.out)

    except CrawlerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        coordinator.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
