"""
Session state for a single phone call.

A Session holds everything the assistant knows about one call: the sliding window
of conversation turns, the context derived from analysing the conversation, and
the per-call response-time and error counters that feed the statistics endpoint.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from call_assistant.config.constants import DEFAULT_MAX_CONVERSATION_LENGTH


def utc_now() -> datetime:
    return datetime.now(UTC)


class TurnRole(str, Enum):
    """Speaker of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


class Mood(str, Enum):
    """Caller mood as classified by the conversation analysis."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Turn(BaseModel):
    """One utterance exchanged during the call."""

    role: TurnRole
    content: str
    timestamp: datetime = Field(default_factory=utc_now)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConversationContext(BaseModel):
    """Conversational metadata used to bias subsequent prompts."""

    subject_name: Optional[str] = None
    topic: Optional[str] = None
    mood: Mood = Mood.NEUTRAL
    intent: Optional[str] = None
    # Stored for later use; nothing ends a call because of it.
    should_end_call: bool = False


class SessionMetrics(BaseModel):
    """Per-call counters."""

    turn_count: int = 0
    average_response_time_ms: float = 0.0
    error_count: int = 0
    synthesis_failure_count: int = 0

    def record_response_time(self, response_time_ms: float) -> None:
        """Count a completed turn and fold its duration into the running mean."""
        self.turn_count += 1
        n = self.turn_count
        self.average_response_time_ms = (
            self.average_response_time_ms * (n - 1) + response_time_ms
        ) / n

    def record_error(self) -> None:
        self.error_count += 1

    def record_synthesis_failure(self) -> None:
        self.synthesis_failure_count += 1


class SessionSummary(BaseModel):
    """Read-only view of a session served by the statistics endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    call_id: str = Field(..., alias="callId")
    duration_seconds: int = Field(..., alias="durationSeconds")
    turn_count: int = Field(..., alias="turnCount")
    average_response_time_ms: float = Field(..., alias="averageResponseTimeMs")
    error_count: int = Field(..., alias="errorCount")
    last_activity: datetime = Field(..., alias="lastActivity")


class Session(BaseModel):
    """State of one active call."""

    id: str
    started_at: datetime = Field(default_factory=utc_now)
    last_activity_at: datetime = Field(default_factory=utc_now)
    history: List[Turn] = Field(default_factory=list)
    context: ConversationContext = Field(default_factory=ConversationContext)
    metrics: SessionMetrics = Field(default_factory=SessionMetrics)
    max_history: int = Field(DEFAULT_MAX_CONVERSATION_LENGTH, gt=0)

    def touch(self, now: Optional[datetime] = None) -> None:
        self.last_activity_at = now or utc_now()

    def add_turn(
        self,
        role: TurnRole,
        content: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Turn:
        """
        Append a turn to the history, evicting the oldest turns past max_history.

        Args:
            role: Who spoke
            content: What was said
            metadata: Free-form details such as recognition confidence or token usage

        Returns:
            The appended Turn
        """
        turn = Turn(role=role, content=content, metadata=metadata or {})
        self.history.append(turn)
        if len(self.history) > self.max_history:
            del self.history[: len(self.history) - self.max_history]
        self.touch()
        return turn

    def recent_turns(self, count: int) -> List[Turn]:
        """Return the most recent turns regardless of role, oldest first."""
        if count <= 0:
            return []
        return self.history[-count:]

    def update_context(self, updates: Dict[str, Any]) -> None:
        """Shallow merge: only the keys present in updates change."""
        for key, value in updates.items():
            if key in ConversationContext.model_fields:
                setattr(self.context, key, value)
        self.touch()

    def duration_seconds(self, now: Optional[datetime] = None) -> int:
        return round(((now or utc_now()) - self.started_at).total_seconds())

    def summary(self, now: Optional[datetime] = None) -> SessionSummary:
        return SessionSummary(
            call_id=self.id,
            duration_seconds=self.duration_seconds(now),
            turn_count=self.metrics.turn_count,
            average_response_time_ms=round(self.metrics.average_response_time_ms),
            error_count=self.metrics.error_count,
            last_activity=self.last_activity_at,
        )
