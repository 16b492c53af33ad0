"""
Profile Store
=============

MongoDB collection of ChannelProfile documents.

Identity is (url, category); a unique compound index created at startup is
the only guard against two concurrent ingestions storing the same channel.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from crawler.config import CrawlerConfig
from crawler.errors import StoreError
from crawler.models import ChannelProfile

logger = logging.getLogger(__name__)


class InsertOutcome(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"


class ProfileStore(ABC):
    """Contract shared by the MongoDB adapter and in-memory test doubles."""

    @abstractmethod
    def ensure_unique_index(self) -> None:
        """Create the unique (url, category) index. Called once at startup."""

    @abstractmethod
    def find_one(self, url: str, category: str) -> Optional[ChannelProfile]:
        """Return the stored profile or None. Raises StoreError on failure."""

    @abstractmethod
    def insert(self, profile: ChannelProfile) -> InsertOutcome:
        """Insert if absent. Raises StoreError for anything but a duplicate key."""

    @abstractmethod
    def export(self, category: Optional[str] = None) -> List[ChannelProfile]:
        """All stored profiles, optionally limited to one category."""

    def close(self) -> None:
        pass


class MongoProfileStore(ProfileStore):

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        client: Optional[MongoClient] = None,
        collection: Optional[Collection] = None,
    ):
        self.config = config or CrawlerConfig()
        self._client = client
        self._collection = collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            if self._client is None:
                logger.info("Connecting to MongoDB")
                self._client = MongoClient(self.config.mongodb_uri, serverSelectionTimeoutMS=5000)
            db = self._client.get_default_database(default=self.config.mongodb_db)
            self._collection = db[self.config.mongodb_collection]
        return self._collection

    def ping(self) -> bool:
        try:
            self.collection.database.command("ping")
            return True
        except PyMongoError:
            return False

    def ensure_unique_index(self) -> None:
        try:
            self.collection.create_index(
                [("url", ASCENDING), ("category", ASCENDING)],
                unique=True,
                background=True,
                sparse=True,
            )
        except PyMongoError as e:
            raise StoreError(f"Ensure index failed: {e}") from e
        logger.info(f"Unique index on {self.collection.name}(url, category) ready")

    def find_one(self, url: str, category: str) -> Optional[ChannelProfile]:
        try:
            doc = self.collection.find_one({"url": url, "category": category})
        except PyMongoError as e:
            raise StoreError(f"Existence check failed for {url}: {e}") from e
        return ChannelProfile.from_document(doc) if doc else None

    def insert(self, profile: ChannelProfile) -> InsertOutcome:
        try:
            self.collection.insert_one(profile.to_document())
        except DuplicateKeyError:
            return InsertOutcome.DUPLICATE
        except PyMongoError as e:
            raise StoreError(f"Database write failed for {profile.url}: {e}") from e
        return InsertOutcome.INSERTED

    def export(self, category: Optional[str] = None) -> List[ChannelProfile]:
        query = {"category": category} if category else {}
        try:
            docs = list(self.collection.find(query))
        except PyMongoError as e:
            raise StoreError(f"Export failed: {e}") from e
        return [ChannelProfile.from_document(d) for d in docs]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._collection = None
