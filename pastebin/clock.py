"""
Time source for paste lifecycle checks.

All timestamps are integer milliseconds since the Unix epoch (UTC).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pastebin.config import settings
from pastebin.errors import ValidationError

logger = logging.getLogger(__name__)

TEST_NOW_HEADER = "x-test-now-ms"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def resolve_now_ms(x_test_now_ms: Optional[str] = None) -> Optional[int]:
    """
    Get the test clock override, respecting TEST_MODE.

    Args:
        x_test_now_ms: Test timestamp header (milliseconds since epoch)

    Returns:
        The override in milliseconds, or None when the real clock applies

    Raises:
        ValidationError: If TEST_MODE is on and the header is not an integer
    """
    if not settings.TEST_MODE or x_test_now_ms is None:
        return None

    try:
        return int(x_test_now_ms)
    except (ValueError, TypeError):
        logger.warning(f"Invalid {TEST_NOW_HEADER} header: {x_test_now_ms!r}")
        raise ValidationError(TEST_NOW_HEADER, f"Invalid {TEST_NOW_HEADER} header")


def format_timestamp(timestamp_ms: int) -> str:
    """
    Render a millisecond timestamp as ISO 8601, e.g. 2024-01-01T00:00:00.000Z.

    Raises:
        ValueError: If the instant falls outside years 1-9999
    """
    try:
        moment = EPOCH + timedelta(milliseconds=timestamp_ms)
    except OverflowError as e:
        raise ValueError(f"Timestamp {timestamp_ms} is out of range") from e
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
