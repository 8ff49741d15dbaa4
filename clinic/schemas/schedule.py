"""
Schedule projection kept by the schedules service
"""

from datetime import datetime

from pydantic import BaseModel


class ScheduleRecord(BaseModel):
    id: str
    name: str
    phone: str
    address: str
    email: str
    received_at: datetime
