"""
Doctor schemas
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class DoctorCreate(BaseModel):
    """Doctor profile created by an administrator"""
    name: str = Field(..., min_length=1)
    specialty: Optional[str] = None
    crm: Optional[str] = Field(default=None, description="Medical council registration number")
    clinic: Optional[str] = None
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Optional[str] = None


class DoctorResponse(BaseModel):
    id: str
    name: Optional[str] = None
    specialty: Optional[str] = None
    crm: Optional[str] = None
    clinic: Optional[str] = None
    email: str
    role: str
