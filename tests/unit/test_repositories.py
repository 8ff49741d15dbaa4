"""Unit tests for MongoDB repositories"""
import pytest

from clinic.core.errors import ErrorResponse
from clinic.repositories.accounts import AccountRepository
from clinic.repositories.patients import PatientRepository
from clinic.repositories.processed_events import ProcessedEventRepository
from clinic.schemas.patient import ScheduleRequest
from clinic.security.principal import Role


class TestAccountRepository:

    @pytest.mark.asyncio
    async def test_create_and_load_principal(self, make_database):
        accounts = AccountRepository(make_database()["accounts"])
        await accounts.ensure_indexes()

        doc = await accounts.create("doc@example.com", "hash", Role.ADMIN, name="Dr. Who")
        principal = await accounts.load_principal("doc@example.com")

        assert principal.id == doc["_id"]
        assert principal.role is Role.ADMIN
        assert (await accounts.find_by_id(doc["_id"]))["name"] == "Dr. Who"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, make_database):
        accounts = AccountRepository(make_database()["accounts"])
        await accounts.ensure_indexes()
        await accounts.create("doc@example.com", "hash", Role.USER)

        with pytest.raises(ErrorResponse) as exc_info:
            await accounts.create("doc@example.com", "hash", Role.USER)

        assert exc_info.value.status_code == 400
        assert len(await accounts.list_all()) == 1

    @pytest.mark.asyncio
    async def test_unknown_principal(self, make_database):
        accounts = AccountRepository(make_database()["accounts"])

        assert await accounts.load_principal("ghost@example.com") is None


class TestPatientRepository:

    @pytest.mark.asyncio
    async def test_create_get_delete(self, make_database):
        patients = PatientRepository(make_database()["patients"])
        request = ScheduleRequest(name="Jane Roe", phone="555-0100", address="1 Main St", email="jane@example.com")

        patient = await patients.create(request)

        assert await patients.get_by_id(patient.id) == patient
        assert await patients.list_all() == [patient]
        assert await patients.delete(patient.id) is True
        assert await patients.delete(patient.id) is False
        assert await patients.get_by_id(patient.id) is None


class TestProcessedEventRepository:

    @pytest.mark.asyncio
    async def test_mark_and_check(self, make_database):
        processed = ProcessedEventRepository(make_database()["processed_events"])

        assert not await processed.is_processed("m-1", "queue-a")
        assert await processed.mark_processed("m-1", "queue-a")
        assert await processed.is_processed("m-1", "queue-a")
        assert not await processed.is_processed("m-1", "queue-b")
