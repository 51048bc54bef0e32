"""
News retrieval workflow.

NewsService answers a ticker lookup: it serves recent cached results when
available, otherwise scrapes the news feed, enriches every article with a
sentiment label and a generated summary, stores the results and returns
them in the client-facing shape.
"""

import concurrent.futures
import datetime
import logging
from typing import Any, Dict, List, Optional

from ticker_news.formatting import format_timestamp
from ticker_news.models import Article, EnrichedArticle, NewsItem, NewsResponse
from ticker_news.parsers.base import FeedParser
from ticker_news.parsers.fallback import get_fallback_news
from ticker_news.services.db import CacheStore
from ticker_news.services.llm import LLMService, keyword_sentiment

logger = logging.getLogger(__name__)


class TickerValidationError(ValueError):
    """Raised when a request does not name a ticker."""


def normalize_ticker(ticker: Any) -> str:
    """Validates a ticker and returns it uppercased."""
    if not isinstance(ticker, str) or not ticker.strip():
        raise TickerValidationError("Ticker is required")
    return ticker.strip().upper()


class NewsService:
    """Coordinates the feed parser, the LLM service and the cache."""

    def __init__(
        self,
        parser: FeedParser,
        llm: LLMService,
        cache: CacheStore,
        freshness: datetime.timedelta = datetime.timedelta(minutes=5),
        max_articles: int = 10,
        max_workers: Optional[int] = None,
    ):
        self.parser = parser
        self.llm = llm
        self.cache = cache
        self.freshness = freshness
        self.max_articles = max_articles
        # Two AI calls per article at most
        self.max_workers = max_workers or max(2 * max_articles, 1)

    def get_news(self, ticker: Any) -> NewsResponse:
        """Returns enriched news for a ticker, from the cache when fresh."""
        symbol = normalize_ticker(ticker)
        logger.info("Fetching news for ticker: %s", symbol)

        cached_rows = self.cache.get_fresh(symbol, self.freshness)
        if cached_rows:
            now = datetime.datetime.now(datetime.timezone.utc)
            logger.info("Returning %d cached articles for %s.", len(cached_rows), symbol)
            return {
                "news": [self._from_row(row, now) for row in cached_rows],
                "cached": True,
            }

        articles = self._scrape(symbol)
        enriched = self.enrich(symbol, articles)
        self.cache.save(symbol, enriched)

        now = datetime.datetime.now(datetime.timezone.utc)
        return {
            "news": [
                self._to_item(f"{symbol}-{idx}", article, article.get("published_at"), now)
                for idx, article in enumerate(enriched)
            ],
            "cached": False,
        }

    def _scrape(self, ticker: str) -> List[Article]:
        """Fetches feed articles, using placeholders when there are none."""
        try:
            articles = self.parser.fetch(ticker)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Scraping error for %s: %s", ticker, e)
            articles = []

        if not articles:
            logger.warning("No articles parsed for %s, using fallback.", ticker)
            return get_fallback_news(ticker)
        return articles[: self.max_articles]

    def enrich(self, ticker: str, articles: List[Article]) -> List[EnrichedArticle]:
        """
        Adds sentiment and a generated summary to every article.

        All calls run concurrently on a bounded thread pool; output keeps the
        input order.
        """
        if not articles:
            return []

        enriched: List[EnrichedArticle] = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            jobs = [
                (
                    article,
                    executor.submit(
                        self.llm.analyze_sentiment, article["headline"], article["summary"]
                    ),
                    executor.submit(self.llm.generate_summary, article["headline"], ticker),
                )
                for article in articles
            ]

            for article, sentiment_future, summary_future in jobs:
                try:
                    sentiment = sentiment_future.result()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.error("Sentiment task failed for %s: %s", article["url"], exc)
                    sentiment = keyword_sentiment(f"{article['headline']} {article['summary']}")
                try:
                    summary = summary_future.result()
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    logger.error("Summary task failed for %s: %s", article["url"], exc)
                    summary = f"Latest news about {ticker}: {article['headline']}"

                item: EnrichedArticle = {
                    "headline": article["headline"],
                    "source": article["source"],
                    "url": article["url"],
                    "summary": summary,
                    "published_at": article.get("published_at"),
                    "sentiment": sentiment,
                }
                enriched.append(item)
        return enriched

    @staticmethod
    def _to_item(
        item_id: str,
        article: Dict[str, Any],
        timestamp: Any,
        now: datetime.datetime,
    ) -> NewsItem:
        return {
            "id": item_id,
            "headline": article.get("headline", ""),
            "source": article.get("source", ""),
            "timestamp": format_timestamp(timestamp, now),
            "summary": article.get("summary", ""),
            "sentiment": article.get("sentiment", "neutral"),
            "url": article.get("url", ""),
        }

    def _from_row(self, row: Dict[str, Any], now: datetime.datetime) -> NewsItem:
        timestamp = row.get("published_at") or row.get("created_at")
        return self._to_item(str(row.get("id", "")), row, timestamp, now)
