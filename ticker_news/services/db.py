"""
Database service for the news cache.

This module provides the CacheStore class which interfaces with Google
Firestore to keep enriched articles per (ticker, url) and to serve recent
results without re-scraping the feed.
"""

import hashlib
import datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore  # type: ignore
from google.cloud.firestore_v1.base_query import FieldFilter  # type: ignore

from ticker_news.models import EnrichedArticle

logger = logging.getLogger(__name__)

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


def _to_datetime(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class CacheStore:
    """Caches enriched articles in Google Firestore."""

    def __init__(
        self,
        project_id: Optional[str],
        collection: str = "news_articles",
        client: Any = None,
    ):
        self.db = client
        self.collection = None

        if self.db is None:
            if not project_id:
                logger.warning("GCP_PROJECT_ID not set. News cache disabled.")
                return
            try:
                self.db = firestore.Client(project=project_id)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning("Firestore connection failed: %s", e)
                self.db = None
                return

        self.collection = self.db.collection(collection)
        logger.info("Using Firestore collection %s for the news cache.", collection)

    @property
    def enabled(self) -> bool:
        return self.db is not None

    def get_id(self, ticker: str, url: str) -> str:
        """Creates a deterministic document id for a (ticker, url) pair."""
        key = f"{ticker.upper()}|{url}"
        return hashlib.md5(key.encode("utf-8")).hexdigest()

    def get_fresh(
        self, ticker: str, max_age: datetime.timedelta
    ) -> List[Dict[str, Any]]:
        """
        Returns cached rows for a ticker scraped within ``max_age``.

        Rows are ordered by publish time, newest first. Any store error is
        logged and reported as an empty result.
        """
        if not self.db:
            return []

        cutoff = datetime.datetime.now(datetime.timezone.utc) - max_age
        try:
            query = self.collection.where(
                filter=FieldFilter("ticker", "==", ticker.upper())
            ).where(filter=FieldFilter("scraped_at", ">=", cutoff))
            rows = []
            for snap in query.stream():
                row = snap.to_dict() or {}
                row["id"] = snap.id
                rows.append(row)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Cache read failed for %s: %s", ticker, e)
            return []

        # Firestore only orders by the inequality field first, so sort here.
        rows.sort(
            key=lambda r: (
                r.get("published_at") is not None,
                r.get("published_at") or _EPOCH,
            ),
            reverse=True,
        )
        return rows

    def _to_document(
        self, ticker: str, article: EnrichedArticle, now: datetime.datetime
    ) -> Dict[str, Any]:
        return {
            "ticker": ticker.upper(),
            "headline": article["headline"],
            "source": article["source"],
            "url": article["url"],
            "summary": article["summary"],
            "sentiment": article["sentiment"],
            "published_at": _to_datetime(article.get("published_at")) or now,
            "scraped_at": now,
            "created_at": now,
        }

    def _create_each(self, docs: Dict[str, Dict[str, Any]]) -> int:
        """Creates documents one by one, skipping ids that already exist."""
        created = 0
        for doc_id, data in docs.items():
            try:
                self.collection.document(doc_id).create(data)
                created += 1
            except gcp_exceptions.Conflict:
                logger.debug("Cache entry %s already exists.", doc_id)
        return created

    def save(self, ticker: str, articles: Sequence[EnrichedArticle]) -> int:
        """
        Stores articles that are not cached yet and returns how many were new.

        Existing (ticker, url) entries are never overwritten. Errors are
        logged, not raised.
        """
        if not self.db or not articles:
            return 0

        now = datetime.datetime.now(datetime.timezone.utc)
        docs: Dict[str, Dict[str, Any]] = {}
        for article in articles:
            doc_id = self.get_id(ticker, article["url"])
            docs.setdefault(doc_id, self._to_document(ticker, article, now))

        try:
            refs = [self.collection.document(doc_id) for doc_id in docs]
            for snap in self.db.get_all(refs):
                if snap.exists:
                    docs.pop(snap.id, None)

            if not docs:
                logger.info("All %d articles for %s already cached.", len(articles), ticker)
                return 0

            batch = self.db.batch()
            for doc_id, data in docs.items():
                batch.create(self.collection.document(doc_id), data)
            try:
                batch.commit()
                created = len(docs)
            except gcp_exceptions.Conflict:
                # Another request stored some of these first.
                created = self._create_each(docs)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Cache write failed for %s: %s", ticker, e)
            return 0

        logger.info("Cached %d new articles for %s.", created, ticker)
        return created
