"""
Schedule creation: persist the patient record, then broadcast the event
"""

from clinic.core.errors import EventPublishError
from clinic.core.logger import logger
from clinic.events.schedule_event import ScheduleEvent
from clinic.messaging.publisher import ScheduleEventPublisher
from clinic.repositories.patients import PatientRepository
from clinic.schemas.patient import ScheduleRequest


class ScheduleService:
    """Service layer for patient scheduling"""

    def __init__(self, patients: PatientRepository, publisher: ScheduleEventPublisher):
        self.patients = patients
        self.publisher = publisher

    async def create_schedule(self, data: ScheduleRequest) -> ScheduleEvent:
        """
        Store the patient record and broadcast it.

        The local write and the broadcast are not transactional: if the broker
        refuses the event the record stays committed and the failure is only
        logged. Consumers are never awaited.
        """
        patient = await self.patients.create(data)
        event = data.to_event()

        try:
            await self.publisher.publish_schedule_created(event)
        except EventPublishError as e:
            logger.warning(
                "Schedule saved but the event was not broadcast",
                metadata={"event": "schedule_publish_failed", "patientId": patient.id, "error": str(e)},
            )

        return event
