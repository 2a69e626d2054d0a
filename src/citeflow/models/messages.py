"""Queue message and work payload models."""

from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError

from citeflow.core.exceptions import DecodeError


class QueueMessage(BaseModel):
    """A single delivery received from the work queue."""

    message_id: str = ""
    body: str
    receipt_handle: str

    model_config = {"frozen": True}


class WorkPayload(BaseModel):
    """Decoded message body pointing at a stored document."""

    storage_location: str = Field(alias="s3Location", min_length=1)
    user_id: str
    screen_id: str

    model_config = {"strict": True, "frozen": True}


def decode_payload(body: str) -> WorkPayload:
    """Validate a raw JSON message body into a WorkPayload.

    Raises:
        DecodeError: the body is not JSON, is not an object, or any of
            ``s3Location``, ``user_id`` and ``screen_id`` is missing or not a string.
    """
    try:
        return WorkPayload.model_validate_json(body)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "<body>" for err in exc.errors()})
        raise DecodeError(f"Invalid work payload ({', '.join(fields)}): {exc.error_count()} error(s)") from exc
