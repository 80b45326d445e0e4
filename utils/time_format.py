"""
Time Format
Human-friendly relative timestamps.
"""

from datetime import datetime, timezone
from typing import Optional


def time_ago(when: datetime, now: Optional[datetime] = None) -> str:
    """Relative time such as ``3 hours ago``; dates older than a week are printed as-is."""
    if now is None:
        now = datetime.now(timezone.utc) if when.tzinfo else datetime.now()

    minutes = int((now - when).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return when.strftime("%Y-%m-%d")
