"""Unit tests for the schedule event wire format"""
import json

import pytest
from pydantic import ValidationError

from clinic.core.errors import MessageDecodeError
from clinic.events.schedule_event import ScheduleEvent
from clinic.schemas.patient import ScheduleRequest


class TestScheduleEvent:

    def test_message_body_is_compact_json(self, sample_event):
        assert sample_event.to_message_body() == (
            b'{"name":"Jane Roe","phone":"555-0100","address":"1 Main St","email":"jane@example.com"}'
        )

    def test_decode_message_body(self, sample_event):
        body = json.dumps({"email": "jane@example.com", "name": "Jane Roe", "phone": "555-0100", "address": "1 Main St"})

        assert ScheduleEvent.from_message_body(body.encode()) == sample_event

    def test_unknown_fields_are_ignored(self, sample_event):
        payload = {**sample_event.model_dump(), "extra": "ignored"}

        assert ScheduleEvent.from_message_body(json.dumps(payload).encode()) == sample_event

    @pytest.mark.parametrize("body", [b"not json", b"{}", b'{"name":"x"}', b"[]"])
    def test_undecodable_payload(self, body):
        with pytest.raises(MessageDecodeError):
            ScheduleEvent.from_message_body(body)

    def test_event_is_immutable(self, sample_event):
        with pytest.raises(ValidationError):
            sample_event.name = "Someone Else"

    def test_schedule_request_to_event(self, sample_event):
        request = ScheduleRequest(name="Jane Roe", phone="555-0100", address="1 Main St", email="jane@example.com")

        assert request.to_event() == sample_event
