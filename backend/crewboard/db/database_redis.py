import json
import logging
import redis.asyncio as redis
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Connection Pool (Reusable)
pool = redis.ConnectionPool.from_url(REDIS_URL, decode_responses=True)

def chat_channel(room_id: str) -> str:
    return f"chat:{room_id}"

class RedisManager:
    @staticmethod
    def get_client() -> redis.Redis:
        """
        Returns an async Redis client from the global connection pool.
        """
        return redis.Redis(connection_pool=pool)

    @staticmethod
    async def publish_chat_update(room_id: str, payload: dict) -> int:
        """
        Publishes a change notification for a chat room.
        Returns the number of subscribers that received it.
        """
        client = RedisManager.get_client()
        receivers = await client.publish(chat_channel(room_id), json.dumps(payload, default=str))
        logger.debug(f"[Redis] chat:{room_id} update delivered to {receivers} subscriber(s)")
        return receivers

    @staticmethod
    async def close():
        await pool.disconnect()
