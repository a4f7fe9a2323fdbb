"""
Temporary storage for import previews.
Holds analyzed reconciliation results in memory with TTL expiration,
so the reviewed change-set is exactly the one that gets applied.
Single-process only.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import structlog

from config import settings

logger = structlog.get_logger(__name__)

_cache: dict[str, tuple[datetime, Any]] = {}


def store_preview(data: Any, ttl_minutes: Optional[int] = None) -> str:
    """Store analyzed data, return preview_id."""
    ttl = ttl_minutes if ttl_minutes is not None else settings.preview_ttl_minutes
    preview_id = str(uuid.uuid4())
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=ttl)
    _cache[preview_id] = (expires_at, data)
    _cleanup_expired()
    logger.debug("preview_stored", preview_id=preview_id, ttl_minutes=ttl)
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[Any]:
    """Retrieve data by preview_id. Returns None if expired/not found."""
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    expires_at, data = entry
    if datetime.now(timezone.utc) > expires_at:
        del _cache[preview_id]
        logger.debug("preview_expired", preview_id=preview_id)
        return None
    return data


def delete_preview(preview_id: str) -> bool:
    """Remove preview after apply or discard. Returns True if it existed."""
    return _cache.pop(preview_id, None) is not None


def _cleanup_expired() -> None:
    """Remove all expired entries."""
    now = datetime.now(timezone.utc)
    expired = [k for k, (exp, _) in _cache.items() if now > exp]
    for k in expired:
        del _cache[k]
