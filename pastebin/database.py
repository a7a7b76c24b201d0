"""
Record store layer for pastes: Redis backend with in-memory fallback for development.
Handles paste insert, lookup, view counting, and health checks.
"""
import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional, Dict, Any
from redis import Redis
from redis.exceptions import RedisError

from pastebin.config import settings
from pastebin.errors import StoreError
from pastebin.models import PasteRecord

logger = logging.getLogger(__name__)

# Returns 0 if the key already exists, otherwise writes every field and returns 1.
INSERT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV))
return 1
"""

# ARGV[1] is the view budget, or "" when unlimited. Returns the new count, or -1.
INCREMENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
local max_views = tonumber(ARGV[1])
if max_views then
    local views = tonumber(redis.call('HGET', KEYS[1], 'views_count') or '0')
    if views >= max_views then
        return -1
    end
end
return redis.call('HINCRBY', KEYS[1], 'views_count', 1)
"""

# Plain write of the count, skipped when the paste does not exist.
SET_VIEWS_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return 0
end
redis.call('HSET', KEYS[1], 'views_count', ARGV[1])
return 1
"""


class PasteStore(ABC):
    """CRUD contract the paste service needs from a record store.

    Every method raises StoreError when the backing store fails.
    """

    using_fallback = False

    @abstractmethod
    def insert(self, record: PasteRecord) -> bool:
        """
        Persist a new paste.

        Returns:
            True if stored, False if a paste with the same id already exists
        """

    @abstractmethod
    def get_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        """Fetch a paste snapshot, or None if there is no such id."""

    @abstractmethod
    def update_views_count(self, paste_id: str, new_count: int) -> None:
        """Overwrite the view count of an existing paste."""

    @abstractmethod
    def increment_views(self, paste_id: str, max_views: Optional[int]) -> Optional[int]:
        """
        Atomically add one view, but only while the count is below max_views.

        Args:
            paste_id: Unique paste identifier
            max_views: View budget, or None for unlimited

        Returns:
            The new view count, or None if the paste is missing or exhausted
        """

    @abstractmethod
    def ping(self) -> bool:
        """Round-trip to the store."""

    def is_healthy(self) -> bool:
        """Check if the store connection is alive."""
        try:
            return self.ping()
        except StoreError as e:
            logger.error(f"Health check failed: {e}")
        return False


class InMemoryStore(PasteStore):
    """Simple in-memory store for development/testing (when Redis unavailable)."""

    def __init__(self):
        self.store: Dict[str, PasteRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: PasteRecord) -> bool:
        with self._lock:
            if record.id in self.store:
                return False
            self.store[record.id] = record.model_copy()
            return True

    def get_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        with self._lock:
            record = self.store.get(paste_id)
            return record.model_copy() if record is not None else None

    def update_views_count(self, paste_id: str, new_count: int) -> None:
        with self._lock:
            if paste_id in self.store:
                self.store[paste_id].views_count = new_count

    def increment_views(self, paste_id: str, max_views: Optional[int]) -> Optional[int]:
        with self._lock:
            record = self.store.get(paste_id)
            if record is None:
                return None
            if max_views is not None and record.views_count >= max_views:
                return None
            record.views_count += 1
            return record.views_count

    def ping(self) -> bool:
        return True


class RedisStore(PasteStore):
    """Pastes kept as one Redis hash each, under `paste:<id>`."""

    def __init__(self, url: str, timeout: float = settings.STORE_TIMEOUT_SECONDS):
        # Socket timeouts bound every call; a timeout surfaces as StoreError.
        self.redis = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        self._insert = self.redis.register_script(INSERT_SCRIPT)
        self._increment = self.redis.register_script(INCREMENT_SCRIPT)
        self._set_views = self.redis.register_script(SET_VIEWS_SCRIPT)

    @staticmethod
    def _key(paste_id: str) -> str:
        return f"paste:{paste_id}"

    @staticmethod
    def _to_hash(record: PasteRecord) -> Dict[str, Any]:
        paste_data = {
            "content": record.content,
            "created_at": str(record.created_at),
            "views_count": str(record.views_count),
        }
        if record.ttl_seconds is not None:
            paste_data["ttl_seconds"] = str(record.ttl_seconds)
        if record.max_views is not None:
            paste_data["max_views"] = str(record.max_views)
        return paste_data

    @staticmethod
    def _from_hash(paste_id: str, paste_data: Dict[str, str]) -> PasteRecord:
        ttl_seconds = paste_data.get("ttl_seconds")
        max_views = paste_data.get("max_views")
        return PasteRecord(
            id=paste_id,
            content=paste_data["content"],
            created_at=int(paste_data["created_at"]),
            ttl_seconds=int(ttl_seconds) if ttl_seconds is not None else None,
            max_views=int(max_views) if max_views is not None else None,
            views_count=int(paste_data.get("views_count", 0)),
        )

    def insert(self, record: PasteRecord) -> bool:
        args = []
        for field, value in self._to_hash(record).items():
            args.extend([field, value])
        try:
            return bool(self._insert(keys=[self._key(record.id)], args=args))
        except RedisError as e:
            logger.error(f"Error saving paste {record.id}: {e}")
            raise StoreError(f"Failed to save paste {record.id}") from e

    def get_by_id(self, paste_id: str) -> Optional[PasteRecord]:
        try:
            paste_data = self.redis.hgetall(self._key(paste_id))
        except RedisError as e:
            logger.error(f"Error fetching paste {paste_id}: {e}")
            raise StoreError(f"Failed to fetch paste {paste_id}") from e

        if not paste_data:
            return None
        try:
            return self._from_hash(paste_id, paste_data)
        except (KeyError, ValueError) as e:
            logger.error(f"Paste {paste_id} has a malformed record: {e}")
            raise StoreError(f"Malformed record for paste {paste_id}") from e

    def update_views_count(self, paste_id: str, new_count: int) -> None:
        try:
            self._set_views(keys=[self._key(paste_id)], args=[new_count])
        except RedisError as e:
            logger.error(f"Error updating views for {paste_id}: {e}")
            raise StoreError(f"Failed to update views for paste {paste_id}") from e

    def increment_views(self, paste_id: str, max_views: Optional[int]) -> Optional[int]:
        budget = "" if max_views is None else str(max_views)
        try:
            new_count = int(self._increment(keys=[self._key(paste_id)], args=[budget]))
        except RedisError as e:
            logger.error(f"Error incrementing views for {paste_id}: {e}")
            raise StoreError(f"Failed to increment views for paste {paste_id}") from e
        return new_count if new_count >= 0 else None

    def ping(self) -> bool:
        try:
            return bool(self.redis.ping())
        except RedisError as e:
            raise StoreError(f"Redis ping failed: {e}") from e


def create_store() -> PasteStore:
    """Build the configured store, falling back to memory if Redis is unreachable."""
    if settings.STORE_BACKEND == "memory":
        logger.info("Using in-memory paste store (STORE_BACKEND=memory)")
        return InMemoryStore()

    try:
        logger.info(f"Attempting to connect to Redis: {settings.REDIS_URL[:30]}...")
        store = RedisStore(settings.REDIS_URL)
        store.ping()
        logger.info("Redis connected successfully")
        return store
    except (StoreError, ValueError) as e:
        # ValueError: REDIS_URL is malformed
        logger.error(f"Could not connect to Redis: {e}")
        logger.warning("Using in-memory fallback for development. Data will NOT persist across restarts.")
        fallback = InMemoryStore()
        fallback.using_fallback = True
        return fallback


@lru_cache
def get_store() -> PasteStore:
    """Process-wide store instance."""
    return create_store()
