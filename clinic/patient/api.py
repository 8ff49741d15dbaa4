"""
Patient API endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from clinic.core.errors import ErrorResponse, ErrorResponseModel
from clinic.core.logger import logger
from clinic.dependencies import get_patients, get_publisher
from clinic.events.schedule_event import ScheduleEvent
from clinic.messaging.publisher import ScheduleEventPublisher
from clinic.patient.service import ScheduleService
from clinic.repositories.patients import PatientRepository
from clinic.schemas.patient import PatientResponse, ScheduleRequest
from clinic.security.dependencies import require_authenticated
from clinic.security.principal import Principal

router = APIRouter()


def get_schedule_service(
    patients: PatientRepository = Depends(get_patients),
    publisher: ScheduleEventPublisher = Depends(get_publisher),
) -> ScheduleService:
    return ScheduleService(patients, publisher)


@router.post("/schedules", response_model=ScheduleEvent)
async def create_schedule(
    data: ScheduleRequest,
    principal: Principal = Depends(require_authenticated),
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Save the patient and broadcast a schedule event to the doctor and schedules services.
    The response does not wait for either consumer.
    """
    return await service.create_schedule(data)


@router.get("", response_model=List[PatientResponse])
async def list_patients(
    principal: Principal = Depends(require_authenticated),
    patients: PatientRepository = Depends(get_patients),
):
    return await patients.list_all()


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_patient(
    patient_id: str,
    principal: Principal = Depends(require_authenticated),
    patients: PatientRepository = Depends(get_patients),
):
    patient = await patients.get_by_id(patient_id)
    if patient is None:
        raise ErrorResponse("Patient not found", status_code=status.HTTP_404_NOT_FOUND)
    return patient


@router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponseModel}},
)
async def delete_patient(
    patient_id: str,
    principal: Principal = Depends(require_authenticated),
    patients: PatientRepository = Depends(get_patients),
):
    if not await patients.delete(patient_id):
        raise ErrorResponse("Patient not found", status_code=status.HTTP_404_NOT_FOUND)
    logger.info("Patient deleted", metadata={"patientId": patient_id, "deletedBy": principal.id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
