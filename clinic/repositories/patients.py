"""
Patient repository for the patient service
"""

import uuid
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from clinic.core.errors import ErrorResponse
from clinic.core.logger import logger
from clinic.schemas.patient import PatientResponse, ScheduleRequest


class PatientRepository:
    """Repository for patient records created by scheduling"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    def _doc_to_response(self, doc: dict) -> PatientResponse:
        return PatientResponse(
            id=doc["_id"],
            name=doc["name"],
            phone=doc["phone"],
            address=doc["address"],
            email=doc["email"],
        )

    async def create(self, data: ScheduleRequest) -> PatientResponse:
        doc = {
            "_id": str(uuid.uuid4()),
            "name": data.name,
            "phone": data.phone,
            "address": data.address,
            "email": str(data.email),
        }
        try:
            await self.collection.insert_one(doc)
        except PyMongoError as e:
            logger.error(f"MongoDB error creating patient: {e}")
            raise ErrorResponse("Database error during patient creation", status_code=503)
        return self._doc_to_response(doc)

    async def get_by_id(self, patient_id: str) -> Optional[PatientResponse]:
        doc = await self.collection.find_one({"_id": patient_id})
        return self._doc_to_response(doc) if doc else None

    async def list_all(self) -> List[PatientResponse]:
        docs = await self.collection.find({}).to_list(length=None)
        return [self._doc_to_response(doc) for doc in docs]

    async def delete(self, patient_id: str) -> bool:
        result = await self.collection.delete_one({"_id": patient_id})
        return result.deleted_count > 0
