"""
Pydantic models for the Twilio voice webhook payloads.

Twilio posts form-encoded parameters with PascalCase names (CallSid, SpeechResult,
CallStatus, ...). These models validate those payloads and expose them with
snake_case attribute names to the handlers.
"""

import logging
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from call_assistant.config.constants import (
    CALL_STATUS_BUSY,
    CALL_STATUS_CANCELED,
    CALL_STATUS_COMPLETED,
    CALL_STATUS_FAILED,
    CALL_STATUS_IN_PROGRESS,
    CALL_STATUS_NO_ANSWER,
    CALL_STATUS_RINGING,
    LOGGER_NAME,
    TERMINAL_CALL_STATUSES,
)

logger = logging.getLogger(LOGGER_NAME)

KNOWN_CALL_STATUSES = {
    CALL_STATUS_RINGING,
    CALL_STATUS_IN_PROGRESS,
    CALL_STATUS_COMPLETED,
    CALL_STATUS_FAILED,
    CALL_STATUS_BUSY,
    CALL_STATUS_NO_ANSWER,
    CALL_STATUS_CANCELED,
    "queued",
    "initiated",
    "answered",
}


class BaseWebhookEvent(BaseModel):
    """Base model for all Twilio voice webhook events."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    call_id: str = Field(..., alias="CallSid", description="Twilio call identifier")

    @field_validator("call_id")
    def validate_call_id(cls, v):
        """Validate that the call id is not blank."""
        if not v.strip():
            raise ValueError("CallSid cannot be empty")
        return v.strip()


class CallStartEvent(BaseWebhookEvent):
    """Incoming call notification posted to the voice webhook."""

    from_number: Optional[str] = Field(None, alias="From", description="Caller number")
    to_number: Optional[str] = Field(None, alias="To", description="Called number")


class SpeechResultEvent(BaseWebhookEvent):
    """Speech recognition result posted by a Gather verb."""

    utterance: Optional[str] = Field(
        None, alias="SpeechResult", description="Recognised caller speech"
    )
    # Passed through as posted; the orchestrator parses it
    confidence: Optional[str] = Field(
        None, alias="Confidence", description="Recognition confidence between 0 and 1"
    )


class CallStatusEvent(BaseWebhookEvent):
    """Call progress notification posted to the status callback."""

    status: str = Field(..., alias="CallStatus", description="Current call status")
    duration_seconds: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("CallDuration", "Duration", "duration_seconds"),
        description="Call duration reported for completed calls",
    )

    @field_validator("status")
    def validate_status(cls, v):
        """Warn about statuses this service does not know."""
        v = v.strip().lower()
        if v not in KNOWN_CALL_STATUSES:
            logger.warning(f"Unknown call status received: {v}")
        return v

    @field_validator("duration_seconds", mode="before")
    def validate_duration(cls, v):
        """Treat blank durations as absent."""
        if v in ("", None):
            return None
        return v

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_CALL_STATUSES
