from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from backend.config import get_settings
from backend.realtime.errors import DependencyUnavailable

logger = logging.getLogger(__name__)

DENYLIST_KEY = "blacklist:{token}"  # raw token - set on logout, expires with the token


class TokenDenylist:
    """Revoked session tokens, kept in Redis until they would have expired anyway."""

    def __init__(self, client: Any | None = None):
        if client is None:
            settings = get_settings()
            client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                password=settings.redis_password,
                decode_responses=True,
            )
        self.client = client

    async def contains(self, token: str) -> bool:
        try:
            return bool(await self.client.exists(DENYLIST_KEY.format(token=token)))
        except RedisError as exc:
            raise DependencyUnavailable("Token denylist unavailable") from exc

    async def revoke(self, token: str, ttl_seconds: int) -> None:
        try:
            await self.client.set(DENYLIST_KEY.format(token=token), "1", ex=max(1, ttl_seconds))
        except RedisError as exc:
            raise DependencyUnavailable("Token denylist unavailable") from exc
        logger.info("Token revoked for %s seconds", ttl_seconds)
