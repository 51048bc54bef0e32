"""
Configuration loading for the Ticker News service.

Settings come from ``config.json`` next to this module, overridden by
environment variables for secrets and deployment-specific values.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, TypedDict

logger = logging.getLogger(__name__)


class Settings(TypedDict):
    """Resolved service settings."""

    feed_url: str
    user_agent: str
    feed_timeout: float
    max_articles: int
    freshness_minutes: float
    model: str
    llm_timeout_ms: int
    collection: str
    gemini_api_key: Optional[str]
    gcp_project_id: Optional[str]


DEFAULTS: Dict[str, Any] = {
    "feed_url": "https://news.google.com/rss/search",
    "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "feed_timeout": 10,
    "max_articles": 10,
    "freshness_minutes": 5,
    "model": "gemini-2.5-flash",
    "llm_timeout_ms": 30000,
    "collection": "news_articles",
}


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    # Build absolute path relative to this module
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using defaults.", config_path)
        return {}


def load_settings(config_filename: str = "config.json") -> Settings:
    """Merges defaults, the JSON config file and environment variables."""
    values = dict(DEFAULTS)
    values.update(load_config(config_filename))

    freshness = os.environ.get("NEWS_FRESHNESS_MINUTES")
    if freshness:
        try:
            values["freshness_minutes"] = float(freshness)
        except ValueError:
            logger.warning("Ignoring invalid NEWS_FRESHNESS_MINUTES=%r.", freshness)

    return Settings(
        feed_url=str(values["feed_url"]),
        user_agent=str(values["user_agent"]),
        feed_timeout=float(values["feed_timeout"]),
        max_articles=int(values["max_articles"]),
        freshness_minutes=float(values["freshness_minutes"]),
        model=str(values["model"]),
        llm_timeout_ms=int(values["llm_timeout_ms"]),
        collection=str(values["collection"]),
        gemini_api_key=os.environ.get("GEMINI_KEY"),
        gcp_project_id=os.environ.get("GCP_PROJECT_ID"),
    )
