"""
Repositories over the per-service MongoDB database
"""

from .accounts import AccountRepository
from .patients import PatientRepository
from .schedules import ScheduleRepository
from .processed_events import ProcessedEventRepository

__all__ = [
    "AccountRepository",
    "PatientRepository",
    "ScheduleRepository",
    "ProcessedEventRepository",
]
