"""
Patient schedule event broadcast to every subscribed service
"""

import json

from pydantic import BaseModel, ConfigDict, ValidationError

from clinic.core.errors import MessageDecodeError


class ScheduleEvent(BaseModel):
    """Immutable patient-scheduled value; the email is its loose natural key"""

    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    address: str
    email: str

    def to_message_body(self) -> bytes:
        """Canonical JSON wire form: fixed field order, no extra whitespace"""
        return json.dumps(self.model_dump(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_message_body(cls, body: bytes) -> "ScheduleEvent":
        """Decode a broker message body; payloads that can never convert raise MessageDecodeError"""
        try:
            return cls.model_validate_json(body)
        except (ValidationError, ValueError) as e:
            raise MessageDecodeError(f"Invalid schedule event payload: {e}") from e
