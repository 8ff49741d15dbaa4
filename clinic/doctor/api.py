"""
Doctor API endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, status

from clinic.core.errors import ErrorResponse, ErrorResponseModel
from clinic.core.logger import logger
from clinic.dependencies import get_accounts
from clinic.repositories.accounts import AccountRepository
from clinic.schemas.doctor import DoctorCreate, DoctorResponse
from clinic.security.dependencies import require_authenticated, require_role
from clinic.security.passwords import hash_password
from clinic.security.principal import Principal, Role

router = APIRouter()

PROFILE_FIELDS = ("name", "specialty", "crm", "clinic")


def _to_response(doc: dict) -> DoctorResponse:
    return DoctorResponse(
        id=doc["_id"],
        email=doc["email"],
        role=doc.get("role", Role.USER.value),
        **{field: doc.get(field) for field in PROFILE_FIELDS},
    )


@router.get(
    "",
    response_model=List[DoctorResponse],
    responses={404: {"model": ErrorResponseModel}},
)
async def list_doctors(
    principal: Principal = Depends(require_authenticated),
    accounts: AccountRepository = Depends(get_accounts),
):
    """List registered doctors; 404 when there are none"""
    doctors = await accounts.list_all()
    if not doctors:
        raise ErrorResponse("Doctor not found", status_code=status.HTTP_404_NOT_FOUND)
    return [_to_response(doc) for doc in doctors]


@router.get(
    "/{doctor_id}",
    response_model=DoctorResponse,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_doctor(
    doctor_id: str,
    principal: Principal = Depends(require_authenticated),
    accounts: AccountRepository = Depends(get_accounts),
):
    doc = await accounts.find_by_id(doctor_id)
    if doc is None:
        raise ErrorResponse("Doctor not found", status_code=status.HTTP_404_NOT_FOUND)
    return _to_response(doc)


@router.post(
    "",
    response_model=DoctorResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponseModel}},
)
async def create_doctor(
    data: DoctorCreate,
    admin: Principal = Depends(require_role("ADMIN")),
    accounts: AccountRepository = Depends(get_accounts),
):
    """Create a doctor with a full profile (administrators only)"""
    doc = await accounts.create(
        str(data.email),
        hash_password(data.password),
        Role.parse(data.role),
        **{field: getattr(data, field) for field in PROFILE_FIELDS},
    )
    logger.info("Doctor created", metadata={"doctorId": doc["_id"], "createdBy": admin.id})
    return _to_response(doc)
