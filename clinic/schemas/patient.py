"""
Patient and schedule schemas
"""

from pydantic import BaseModel, EmailStr, Field

from clinic.events.schedule_event import ScheduleEvent


class ScheduleRequest(BaseModel):
    """Body of POST /patient-service/schedules"""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    email: EmailStr

    def to_event(self) -> ScheduleEvent:
        return ScheduleEvent(name=self.name, phone=self.phone, address=self.address, email=str(self.email))


class PatientResponse(BaseModel):
    id: str
    name: str
    phone: str
    address: str
    email: str
