"""API tests for the patient service"""
import json

import pytest

from clinic.messaging.topology import SCHEDULES_CREATED_EXCHANGE
from clinic.patient.main import create_app

PASSWORD = "s3cret-pass"
SCHEDULE = {"name": "Jane Roe", "phone": "555-0100", "address": "1 Main St", "email": "jane@example.com"}


@pytest.fixture
def broker(make_broker):
    return make_broker()


@pytest.fixture
def patient_app(make_settings, broker, make_database):
    return create_app(make_settings("patient-service"), broker=broker, database=make_database())


async def login(client, email="jane@example.com"):
    await client.post("/patient-service/auth/register", json={"email": email, "password": PASSWORD})
    response = await client.post("/patient-service/auth/login", json={"email": email, "password": PASSWORD})
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestCreateSchedule:
    """Test POST /patient-service/schedules"""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, patient_app, serve, broker):
        async with serve(patient_app) as client:
            response = await client.post("/patient-service/schedules", json=SCHEDULE)

        assert response.status_code == 401
        assert broker.published == []

    @pytest.mark.asyncio
    async def test_schedule_is_saved_and_published(self, patient_app, serve, broker):
        async with serve(patient_app) as client:
            headers = await login(client)
            response = await client.post(
                "/patient-service/schedules", json=SCHEDULE, headers={**headers, "X-Correlation-ID": "corr-1"}
            )
            patients = await client.get("/patient-service", headers=headers)

        assert response.status_code == 200
        assert response.json() == SCHEDULE
        assert [p["email"] for p in patients.json()] == ["jane@example.com"]

        assert len(broker.published) == 1
        published = broker.published[0]
        assert published["exchange"] == SCHEDULES_CREATED_EXCHANGE
        assert published["routing_key"] == ""
        assert json.loads(published["body"]) == SCHEDULE

    @pytest.mark.asyncio
    async def test_publish_failure_still_returns_200(self, patient_app, serve, broker):
        async with serve(patient_app) as client:
            headers = await login(client)
            broker.fail_publish = True
            response = await client.post("/patient-service/schedules", json=SCHEDULE, headers=headers)
            patients = await client.get("/patient-service", headers=headers)

        assert response.status_code == 200
        assert response.json() == SCHEDULE
        assert len(patients.json()) == 1
        assert broker.published == []

    @pytest.mark.asyncio
    async def test_invalid_body(self, patient_app, serve):
        async with serve(patient_app) as client:
            headers = await login(client)
            response = await client.post("/patient-service/schedules", json={"name": "Jane"}, headers=headers)

        assert response.status_code == 422


class TestPatientEndpoints:

    @pytest.mark.asyncio
    async def test_get_and_delete_patient(self, patient_app, serve):
        async with serve(patient_app) as client:
            headers = await login(client)
            await client.post("/patient-service/schedules", json=SCHEDULE, headers=headers)
            patient_id = (await client.get("/patient-service", headers=headers)).json()[0]["id"]

            fetched = await client.get(f"/patient-service/{patient_id}", headers=headers)
            deleted = await client.delete(f"/patient-service/{patient_id}", headers=headers)
            deleted_again = await client.delete(f"/patient-service/{patient_id}", headers=headers)
            missing = await client.get(f"/patient-service/{patient_id}", headers=headers)

        assert fetched.json()["name"] == "Jane Roe"
        assert deleted.status_code == 204
        assert deleted_again.status_code == 404
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_listing_requires_authentication(self, patient_app, serve):
        async with serve(patient_app) as client:
            response = await client.get("/patient-service")

        assert response.status_code == 401
