"""
Doubt Limit Storage - Per-user daily question counters.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from .interface import StorageInterface

logger = logging.getLogger(__name__)


@dataclass
class LimitCheck:
    """Outcome of a rate-limit check."""
    allowed: bool
    count: int
    limit: int


class DoubtLimitStorage:
    """
    Counts doubts per user per UTC day.
    The counter resets the first time a user asks on a new day.
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.limits_dir = "doubts/limits"
        self._lock = asyncio.Lock()

    def _path(self, user_id: str) -> str:
        return f"{self.limits_dir}/{user_id}.json"

    async def _load(self, user_id: str) -> Optional[dict]:
        content = await self.storage.load(self._path(user_id))
        if content is None:
            return None
        try:
            return json.loads(content.decode('utf-8'))
        except ValueError:
            logger.warning(f"Corrupt limit record for user {user_id}, starting over")
            return None

    async def check_and_increment(
        self,
        user_id: str,
        daily_limit: int,
        today: Optional[date] = None
    ) -> LimitCheck:
        """
        Count one more doubt for the user unless the daily limit is reached.

        Args:
            user_id: User ID
            daily_limit: Maximum doubts per day
            today: Override for the current UTC date

        Returns:
            LimitCheck: ``allowed`` is False when the limit was already reached
        """
        today_str = (today or datetime.now(timezone.utc).date()).isoformat()

        async with self._lock:
            record = await self._load(user_id)

            if record is None or record.get("last_reset_date") != today_str:
                count = 1
            elif record.get("daily_count", 0) >= daily_limit:
                return LimitCheck(allowed=False, count=record["daily_count"], limit=daily_limit)
            else:
                count = record.get("daily_count", 0) + 1

            await self.storage.save(
                self._path(user_id),
                json.dumps({"daily_count": count, "last_reset_date": today_str})
            )

        return LimitCheck(allowed=True, count=count, limit=daily_limit)


# Global limit storage instance
_limit_storage: Optional[DoubtLimitStorage] = None


def init_limit_storage(storage: StorageInterface) -> DoubtLimitStorage:
    """Initialize the global limit storage instance."""
    global _limit_storage
    _limit_storage = DoubtLimitStorage(storage)
    return _limit_storage


def get_limit_storage() -> DoubtLimitStorage:
    """
    Get the global limit storage instance.

    Raises:
        RuntimeError: If the limit storage has not been initialized
    """
    if _limit_storage is None:
        raise RuntimeError("Limit storage not initialized. Call init_limit_storage() first.")
    return _limit_storage
