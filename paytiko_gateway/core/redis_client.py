import json
from typing import Any, Dict, Optional
import redis.asyncio as redis
from redis.asyncio import ConnectionPool
import logging

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Redis client for forwarding gateway events onto list queues.
    """

    def __init__(self, url: str, max_connections: int = 50):
        self.pool = ConnectionPool.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True
        )
        self.client: Optional[redis.Redis] = None

    async def connect(self):
        """Initialize Redis connection."""
        try:
            self.client = redis.Redis(connection_pool=self.pool)
            await self.client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self):
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Redis connection closed")

    async def ping(self) -> bool:
        if not self.client:
            await self.connect()
        return await self.client.ping()

    async def queue_message(self, queue_name: str, message: Dict[str, Any]):
        """Add message to queue."""
        try:
            if not self.client:
                await self.connect()
            await self.client.lpush(queue_name, json.dumps(message, default=str))
            logger.debug(f"Message queued to {queue_name}")
        except Exception as e:
            logger.error(f"Failed to queue message to {queue_name}: {e}")
            raise
