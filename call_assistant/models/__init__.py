"""
Models module for data structures and state management in the call assistant.

This module provides structured data models and state management classes for the
application, defining the session state kept per call, the directives exchanged
between the orchestrator and the telephony layer, and the Twilio webhook payloads.

Key components:
- session: Session, Turn, ConversationContext and SessionMetrics, the state of
  one call including the sliding window of conversation turns.
- session_store: SessionStore, the in-memory registry of active sessions with
  its background idle sweep.
- directives: ResponseDirective, the orchestrator's instruction to the telephony
  layer (reprompt, audio, text or error).
- webhook_schemas: Pydantic models validating the form payloads Twilio posts to
  the voice, speech and status webhooks.

Usage examples:
```python
from call_assistant.models.session_store import SessionStore
from call_assistant.models.session import TurnRole

store = SessionStore(max_history=10)
session = store.get_or_create("CA1234")
session.add_turn(TurnRole.USER, "Hello there", {"confidence": 0.92})

# Validate a Twilio speech webhook payload
from call_assistant.models.webhook_schemas import SpeechResultEvent

event = SpeechResultEvent(**{"CallSid": "CA1234", "SpeechResult": "Hi", "Confidence": "0.9"})
```
"""

from call_assistant.models.directives import DirectiveKind, ResponseDirective
from call_assistant.models.session import (
    ConversationContext,
    Mood,
    Session,
    SessionMetrics,
    SessionSummary,
    Turn,
    TurnRole,
)
from call_assistant.models.session_store import SessionStore
from call_assistant.models.webhook_schemas import (
    CallStartEvent,
    CallStatusEvent,
    SpeechResultEvent,
)
