"""
Text extraction helpers for loosely structured feed content.

Google News descriptions are small HTML fragments such as
``<a href="...">Headline</a>&nbsp;&nbsp;<font>Publisher</font>``. The helpers
below pull links, publisher names and readable excerpts out of them with
plain pattern matching.
"""

import html
import re
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional, Union

DEFAULT_SOURCE = "Financial News"
MIN_SUMMARY_LENGTH = 30
MAX_SUMMARY_LENGTH = 200

_TAG_RE = re.compile(r"</?[^>]+(>|$)")
_HREF_RE = re.compile(r"""href=["']([^"']+)["']""")
_URL_RE = re.compile(r"""https?://[^\s<>"]+""")
_ANCHOR_RE = re.compile(r"<a[^>]*>([^<]+)</a>", re.IGNORECASE)
_ATTRIBUTION_RE = re.compile(r"^[^-]+-\s*")
_AGGREGATOR_MARKERS = ("news.google.com", "rss/articles")


def strip_tags(text: Optional[str]) -> str:
    """Removes HTML tags and non-breaking spaces from a string."""
    if not text:
        return ""
    cleaned = _TAG_RE.sub("", text)
    return cleaned.replace("&nbsp;", " ").replace("\xa0", " ").strip()


def decode_entities(text: Optional[str]) -> str:
    """Decodes HTML entities (``&amp;``, ``&#39;`` ...)."""
    if not text:
        return ""
    return html.unescape(text)


def clean_text(text: Optional[str]) -> str:
    """Strips tags, decodes entities and collapses whitespace."""
    return " ".join(decode_entities(strip_tags(text)).split())


def is_aggregator_url(url: str) -> bool:
    """True for links pointing back at the news aggregator's redirector."""
    return any(marker in url for marker in _AGGREGATOR_MARKERS)


def find_href(fragment: str) -> Optional[str]:
    """Returns the first href attribute value in an HTML fragment."""
    match = _HREF_RE.search(fragment)
    return match.group(1) if match else None


def find_urls(text: str) -> List[str]:
    """Returns every bare http(s) URL in the text."""
    return _URL_RE.findall(text)


def resolve_link(description: Optional[str], item_link: Optional[str]) -> Optional[str]:
    """
    Picks the best article URL for a feed item.

    Publisher links inside the description win over the item's own link,
    which is usually an aggregator redirect.
    """
    if description:
        decoded = decode_entities(description)

        href = find_href(decoded)
        if href and not is_aggregator_url(href):
            return href

        for url in find_urls(decoded):
            if not is_aggregator_url(url):
                return url

    if item_link and item_link.strip():
        return item_link.strip()
    return None


def resolve_source(description: Optional[str]) -> str:
    """Finds the publisher name in a description fragment."""
    if not description:
        return DEFAULT_SOURCE

    anchor = _ANCHOR_RE.search(description)
    if anchor and anchor.group(1).strip():
        return decode_entities(anchor.group(1).strip())

    parts = strip_tags(description).split(" - ", 1)
    if len(parts) > 1 and parts[0].strip():
        return decode_entities(parts[0].strip())
    return DEFAULT_SOURCE


def truncate(text: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    """Truncates text to ``limit`` characters including a trailing ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def resolve_summary(description: Optional[str], headline: str) -> str:
    """Builds a short readable excerpt, falling back to the headline."""
    if not description:
        return truncate(headline)

    text = decode_entities(strip_tags(description))
    text = _ATTRIBUTION_RE.sub("", text, count=1)
    text = _URL_RE.sub("", text)
    text = " ".join(text.split())

    if len(text) < MIN_SUMMARY_LENGTH:
        text = headline
    return truncate(text)


def resolve_published_at(
    raw: Union[str, time.struct_time, None]
) -> Optional[str]:
    """Converts a feed date (RFC 822, ISO-8601 or struct_time) to ISO-8601 UTC."""
    if raw is None or raw == "":
        return None

    try:
        if isinstance(raw, time.struct_time):
            dt = datetime(*raw[:6], tzinfo=timezone.utc)
        else:
            value = raw.strip()
            try:
                dt = parsedate_to_datetime(value)
            except (TypeError, ValueError):
                dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError, OverflowError):
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()
