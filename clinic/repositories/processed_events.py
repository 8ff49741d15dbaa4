"""
Repository for tracking processed deliveries, used when consumer deduplication is on
"""

from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from clinic.core.logger import logger


class ProcessedEventRepository:
    """Repository for managing processed events"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("event_id", ASCENDING), ("queue", ASCENDING)], unique=True, name="event_queue_unique"
        )
        # 30 days TTL
        await self.collection.create_index([("processed_at", ASCENDING)], expireAfterSeconds=2592000, name="ttl_idx")
        logger.info("Processed events indexes created")

    async def is_processed(self, event_id: str, queue: str) -> bool:
        result = await self.collection.find_one({"event_id": event_id, "queue": queue})
        return result is not None

    async def mark_processed(self, event_id: str, queue: str) -> bool:
        """
        Mark an event as processed

        Returns:
            True if newly marked, False if it was already recorded
        """
        try:
            await self.collection.insert_one({
                "event_id": event_id,
                "queue": queue,
                "processed_at": datetime.now(timezone.utc),
            })
            return True
        except DuplicateKeyError:
            logger.warning(f"Event {event_id} already processed on {queue} (duplicate key)")
            return False
