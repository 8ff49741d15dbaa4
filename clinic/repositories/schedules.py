"""
Schedule repository for the schedules service projection
"""

import uuid
from datetime import datetime, timezone
from typing import List

from motor.motor_asyncio import AsyncIOMotorCollection

from clinic.events.schedule_event import ScheduleEvent
from clinic.schemas.schedule import ScheduleRecord


class ScheduleRepository:
    """Local copy of every schedule event this service consumed"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def create_from_event(self, event: ScheduleEvent) -> ScheduleRecord:
        """Map event fields onto the local schema; each call stores a new record"""
        record = ScheduleRecord(
            id=str(uuid.uuid4()),
            name=event.name,
            phone=event.phone,
            address=event.address,
            email=event.email,
            received_at=datetime.now(timezone.utc),
        )
        doc = record.model_dump()
        doc["_id"] = doc.pop("id")
        await self.collection.insert_one(doc)
        return record

    async def list_all(self) -> List[ScheduleRecord]:
        docs = await self.collection.find({}).to_list(length=None)
        return [ScheduleRecord(id=doc.pop("_id"), **doc) for doc in docs]

    async def count_by_email(self, email: str) -> int:
        return await self.collection.count_documents({"email": email})
