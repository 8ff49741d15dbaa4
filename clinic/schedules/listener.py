"""
Schedules service listener: keeps a local projection of every schedule event
"""

from typing import Optional

from clinic.core.logger import logger
from clinic.events.schedule_event import ScheduleEvent
from clinic.messaging.consumer import ScheduleEventListener
from clinic.messaging.topology import SCHEDULES_QUEUE
from clinic.repositories.processed_events import ProcessedEventRepository
from clinic.repositories.schedules import ScheduleRepository


class SchedulesProjectionListener(ScheduleEventListener):
    queue_name = SCHEDULES_QUEUE

    def __init__(self, repository: ScheduleRepository, processed_events: Optional[ProcessedEventRepository] = None):
        super().__init__(processed_events)
        self.repository = repository

    async def on_message(self, event: ScheduleEvent) -> None:
        # a failing insert propagates so the broker redelivers
        record = await self.repository.create_from_event(event)
        logger.info(
            "Schedule stored",
            metadata={"event": "schedule_stored", "scheduleId": record.id, "email": record.email},
        )
