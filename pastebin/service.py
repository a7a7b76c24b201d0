"""
Paste lifecycle orchestration: create, consuming fetch, and status checks.
"""
import logging
from typing import Callable, Optional

from pastebin import lifecycle
from pastebin.clock import format_timestamp, now_ms
from pastebin.config import settings
from pastebin.database import PasteStore, get_store
from pastebin.errors import NotFound, StoreError, ValidationError
from pastebin.ids import generate_paste_id
from pastebin.models import PasteMetadata, PasteRecord, PasteResponse, PasteView

logger = logging.getLogger(__name__)

# Fresh ids to try when the store reports an id collision
ID_ATTEMPTS = 5


def _validate_limit(field: str, value) -> None:
    if value is None:
        return
    # bool is an int subclass; True is not a valid TTL
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(field, f"{field} must be an integer >= 1")


def _format_expiry(created_at: int, ttl_seconds: Optional[int]) -> Optional[str]:
    deadline = lifecycle.expires_at(created_at, ttl_seconds)
    return format_timestamp(deadline) if deadline is not None else None


class PasteService:
    """Runs pastes through their lifecycle against a record store."""

    def __init__(
        self,
        store: PasteStore,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = generate_paste_id,
        base_url: str = settings.APP_DOMAIN,
        atomic_views: bool = settings.ATOMIC_VIEWS,
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.base_url = base_url.rstrip("/")
        self.atomic_views = atomic_views

    def create_paste(
        self,
        content: str,
        ttl_seconds: Optional[int] = None,
        max_views: Optional[int] = None,
        now: Optional[int] = None,
    ) -> PasteResponse:
        """
        Create a new paste.

        Args:
            content: Text content, must contain a non-whitespace character
            ttl_seconds: Optional time-to-live in seconds (>= 1)
            max_views: Optional maximum view count (>= 1)
            now: Creation time in ms; the service clock when omitted

        Returns:
            Paste ID and shareable URL

        Raises:
            ValidationError: If an argument is out of range
            StoreError: If the store fails or no free id could be found
        """
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("content", "content is required and must be a non-empty string")
        _validate_limit("ttl_seconds", ttl_seconds)
        _validate_limit("max_views", max_views)

        created_at = self.clock() if now is None else now
        try:
            _format_expiry(created_at, ttl_seconds)
        except ValueError:
            raise ValidationError("ttl_seconds", "ttl_seconds puts the expiry beyond the year 9999")

        for _ in range(ID_ATTEMPTS):
            record = PasteRecord(
                id=self.id_factory(),
                content=content,
                created_at=created_at,
                ttl_seconds=ttl_seconds,
                max_views=max_views,
                views_count=0,
            )
            if self.store.insert(record):
                logger.info(f"Paste {record.id} saved successfully")
                return PasteResponse(id=record.id, url=f"{self.base_url}/p/{record.id}")
            logger.warning(f"Paste id collision on {record.id}, retrying")

        raise StoreError(f"Failed to allocate a unique paste id after {ID_ATTEMPTS} attempts")

    def _snapshot(self, paste_id: str) -> PasteRecord:
        record = self.store.get_by_id(paste_id)
        if record is None:
            logger.warning(f"Paste {paste_id} not found")
            raise NotFound(paste_id)
        return record

    def _expiry(self, record: PasteRecord) -> Optional[str]:
        try:
            return _format_expiry(record.created_at, record.ttl_seconds)
        except ValueError as e:
            logger.error(f"Paste {record.id} has an unrepresentable expiry: {e}")
            raise StoreError(f"Malformed record for paste {record.id}") from e

    def consume_view(self, paste_id: str, now: Optional[int] = None) -> PasteView:
        """
        Fetch a paste, spending one view of its budget.

        Availability is judged on the snapshot read first; the returned
        remaining_views already accounts for this view.

        Raises:
            NotFound: If the paste is absent, expired, or out of views
            StoreError: If the store fails or the record is malformed
        """
        now = self.clock() if now is None else now
        record = self._snapshot(paste_id)

        if not lifecycle.is_available(record, now):
            logger.warning(f"Paste {paste_id} is expired or out of views")
            raise NotFound(paste_id)

        # Everything that can fail runs before the view is spent
        expires_at = self._expiry(record)

        if self.atomic_views:
            views_count = self.store.increment_views(paste_id, record.max_views)
            if views_count is None:
                # Another reader spent the last view between our read and increment
                logger.warning(f"Paste {paste_id} view limit reached concurrently")
                raise NotFound(paste_id)
        else:
            views_count = record.views_count + 1
            self.store.update_views_count(paste_id, views_count)

        logger.info(f"View count incremented for paste {paste_id}")
        return PasteView(
            content=record.content,
            remaining_views=lifecycle.remaining_views(views_count, record.max_views),
            expires_at=expires_at,
        )

    def inspect_metadata(self, paste_id: str, now: Optional[int] = None) -> PasteMetadata:
        """Report a paste's status without consuming a view."""
        now = self.clock() if now is None else now
        record = self._snapshot(paste_id)
        return PasteMetadata(
            remaining_views=lifecycle.remaining_views(record.views_count, record.max_views),
            expires_at=self._expiry(record),
            is_available=lifecycle.is_available(record, now),
        )


def get_paste_service() -> PasteService:
    """FastAPI dependency: a service bound to the process-wide store."""
    return PasteService(get_store())
