"""
Data models for the Ticker News service.
"""

from typing import List, Literal, Optional, TypedDict


Sentiment = Literal["bullish", "bearish", "neutral"]

SENTIMENTS = ("bullish", "bearish", "neutral")


class Article(TypedDict):
    """Type definition for a parsed feed article."""

    headline: str
    source: str
    url: str
    summary: str
    published_at: Optional[str]  # ISO-8601, None when the feed date is unusable


class EnrichedArticle(Article):
    """Article with sentiment and a generated summary."""

    sentiment: Sentiment


class NewsItem(TypedDict):
    """Client-facing news record."""

    id: str
    headline: str
    source: str
    timestamp: str
    summary: str
    sentiment: str
    url: str


class NewsResponse(TypedDict):
    """Body returned by the news endpoint."""

    news: List[NewsItem]
    cached: bool
