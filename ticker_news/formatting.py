"""
Human-readable relative timestamps for news items.
"""

import datetime
from typing import Optional, Union

TimestampLike = Union[str, datetime.datetime, None]


def _parse(value: TimestampLike) -> Optional[datetime.datetime]:
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_timestamp(
    value: TimestampLike, now: Optional[datetime.datetime] = None
) -> str:
    """
    Formats a timestamp relative to ``now``.

    Missing or unreadable values read as "Just now". Anything older than a
    week is shown as an M/D/YYYY date.
    """
    date = _parse(value)
    if date is None:
        return "Just now"

    now = now or datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)

    elapsed = max(int((now - date).total_seconds()), 0)
    minutes = elapsed // 60
    hours = elapsed // 3600
    days = elapsed // 86400

    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    date = date.astimezone(datetime.timezone.utc)
    return f"{date.month}/{date.day}/{date.year}"
