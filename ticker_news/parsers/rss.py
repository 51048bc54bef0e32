"""
Google News RSS parser implementation.

This module provides the GoogleNewsParser class for fetching the Google News
search feed for a ticker and turning it into Article records.
"""

import logging
from typing import List, Optional, Union
from urllib.parse import quote_plus

import requests
import feedparser  # type: ignore

from ticker_news.models import Article
from ticker_news.parsers.base import FeedParser
from ticker_news.parsers.extract import (
    clean_text,
    resolve_link,
    resolve_published_at,
    resolve_source,
    resolve_summary,
)

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "https://news.google.com/rss/search"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
MAX_FEED_ITEMS = 20


def build_query(ticker: str) -> str:
    """Search query matching stock and share coverage of a ticker."""
    return f"{ticker} stock OR {ticker} shares"


def build_feed_url(ticker: str, base_url: str = DEFAULT_FEED_URL) -> str:
    """Returns the Google News search feed URL for a ticker."""
    return f"{base_url}?q={quote_plus(build_query(ticker))}&hl=en-US&gl=US&ceid=US:en"


class GoogleNewsParser(FeedParser):
    """Fetches and parses the Google News search feed."""

    def __init__(
        self,
        feed_url: str = DEFAULT_FEED_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 10,
    ):
        self.feed_url = feed_url
        self.user_agent = user_agent
        self.timeout = timeout

    def _parse_entry(self, entry) -> Optional[Article]:
        """Converts one feed entry into an Article, or None if unusable."""
        headline = clean_text(entry.get("title"))
        description = entry.get("summary") or entry.get("description")
        # feedparser copies a permalink <guid> into link when <link> is absent
        item_link = None if entry.get("guidislink") else entry.get("link")
        link = resolve_link(description, item_link)

        if not headline or not link:
            return None

        published_at = resolve_published_at(entry.get("published_parsed"))
        if published_at is None:
            published_at = resolve_published_at(entry.get("published"))

        return {
            "headline": headline,
            "source": resolve_source(description),
            "url": link,
            "summary": resolve_summary(description, headline),
            "published_at": published_at,
        }

    def parse(self, content: Union[str, bytes]) -> List[Article]:
        """Parses raw feed content. Returns an empty list on any failure."""
        articles: List[Article] = []
        try:
            feed = feedparser.parse(content)
            for entry in feed.entries[:MAX_FEED_ITEMS]:
                article = self._parse_entry(entry)
                if article is not None:
                    articles.append(article)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Error parsing news feed: %s", e)
            return []
        return articles

    def fetch(self, ticker: str) -> List[Article]:
        """Fetches and parses the news feed for a ticker."""
        url = build_feed_url(ticker, self.feed_url)
        try:
            # Google News rejects some non-browser agents
            resp = requests.get(
                url, timeout=self.timeout, headers={"User-Agent": self.user_agent}
            )
            resp.raise_for_status()
        except requests.RequestException as req_err:
            logger.error("Network error fetching news for %s: %s", ticker, req_err)
            return []

        articles = self.parse(resp.content)
        logger.info("Parsed %d articles for %s.", len(articles), ticker)
        return articles
