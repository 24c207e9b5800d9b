"""
Redis-backed leaderboard cache for QuizBoard

Every operation degrades to a no-op when Redis is unset or unreachable,
so the database stays the source of truth.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from quizboard.core.config import settings

logger = logging.getLogger(__name__)


def leaderboard_key(quiz_id: int) -> str:
    return f"leaderboard:{quiz_id}"


class LeaderboardCache:
    """Caches serialized leaderboard responses per quiz"""

    def __init__(self):
        self.redis_client: Optional[redis.Redis] = None
        self.is_connected = False

    async def connect(self):
        if not settings.REDIS_URL:
            logger.info("REDIS_URL not set. Leaderboards are served uncached.")
            return
        try:
            self.redis_client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
            await self.redis_client.ping()
            self.is_connected = True
            logger.info("Redis connected successfully")
        except (RedisError, OSError) as e:
            logger.warning(f"Redis connection failed: {e}. Leaderboards are served uncached.")
            self.is_connected = False

    async def disconnect(self):
        if self.redis_client:
            await self.redis_client.aclose()
            self.is_connected = False

    async def get_leaderboard(self, quiz_id: int) -> Optional[Any]:
        """Cached leaderboard payload, or None on a miss"""
        if not self.is_connected:
            return None
        try:
            raw = await self.redis_client.get(leaderboard_key(quiz_id))
        except RedisError as e:
            logger.error(f"Leaderboard cache read failed: {e}", extra={"quiz_id": quiz_id})
            return None
        return json.loads(raw) if raw else None

    async def set_leaderboard(self, quiz_id: int, payload: Any, ttl: Optional[int] = None) -> bool:
        if not self.is_connected:
            return False
        try:
            await self.redis_client.set(leaderboard_key(quiz_id), json.dumps(payload), ex=ttl or settings.CACHE_TTL)
            return True
        except RedisError as e:
            logger.error(f"Leaderboard cache write failed: {e}", extra={"quiz_id": quiz_id})
            return False

    async def invalidate_leaderboard(self, quiz_id: int) -> bool:
        """Drop the cached leaderboard after its scores change"""
        if not self.is_connected:
            return False
        try:
            await self.redis_client.delete(leaderboard_key(quiz_id))
            return True
        except RedisError as e:
            logger.error(f"Leaderboard cache invalidation failed: {e}", extra={"quiz_id": quiz_id})
            return False


# Global cache instance
cache = LeaderboardCache()
