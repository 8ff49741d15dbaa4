"""
Doctor-side listener: observes every patient schedule broadcast
"""

from clinic.core.logger import logger
from clinic.events.schedule_event import ScheduleEvent
from clinic.messaging.consumer import ScheduleEventListener
from clinic.messaging.topology import DOCTOR_QUEUE


class DoctorScheduleListener(ScheduleEventListener):
    queue_name = DOCTOR_QUEUE

    async def on_message(self, event: ScheduleEvent) -> None:
        logger.info("Patient scheduled", metadata={"event": "patient_scheduled", **event.model_dump()})
