from .auth import RegisterRequest, LoginRequest, TokenResponse
from .doctor import DoctorCreate, DoctorResponse
from .patient import ScheduleRequest, PatientResponse
from .schedule import ScheduleRecord

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "DoctorCreate",
    "DoctorResponse",
    "ScheduleRequest",
    "PatientResponse",
    "ScheduleRecord",
]
