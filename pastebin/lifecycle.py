"""
Paste availability rules.

Everything here is pure: the current time is always passed in as `now`
(milliseconds since epoch), never read from a clock.
"""
from typing import Optional

from pastebin.models import PasteRecord


def expires_at(created_at: int, ttl_seconds: Optional[int]) -> Optional[int]:
    """Expiry instant in milliseconds, or None when the paste has no TTL."""
    if ttl_seconds is None:
        return None
    return created_at + ttl_seconds * 1000


def is_expired_by_time(created_at: int, ttl_seconds: Optional[int], now: int) -> bool:
    """True once `now` reaches the expiry instant (the boundary itself is expired)."""
    deadline = expires_at(created_at, ttl_seconds)
    return deadline is not None and now >= deadline


def is_exhausted_by_views(views_count: int, max_views: Optional[int]) -> bool:
    """True once every allowed view has been consumed."""
    return max_views is not None and views_count >= max_views


def remaining_views(views_count: int, max_views: Optional[int]) -> Optional[int]:
    """Views left before exhaustion, or None for an unlimited paste."""
    if max_views is None:
        return None
    return max(0, max_views - views_count)


def is_available(record: PasteRecord, now: int) -> bool:
    """A paste is available while it is neither expired nor exhausted."""
    if is_expired_by_time(record.created_at, record.ttl_seconds, now):
        return False
    return not is_exhausted_by_views(record.views_count, record.max_views)
