"""
Base classes and interfaces for feed parsers.

This module defines the contract that all news feed parsers must follow.
"""

from typing import Protocol, List
from ticker_news.models import Article


class FeedParser(Protocol):
    """
    Protocol for feed parsers.

    Classes implementing this protocol should be able to fetch news for a
    ticker and parse it into a list of Article objects, returning an empty
    list when nothing usable was found.
    """

    def fetch(self, ticker: str) -> List[Article]:
        """Fetches and parses news for a ticker."""
