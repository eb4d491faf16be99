"""
Response directives produced by the conversation orchestrator.

A directive is the orchestrator's abstract instruction to the telephony layer
describing how to answer the caller; the TwiML renderer turns it into markup.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class DirectiveKind(str, Enum):
    """How the telephony layer should respond."""
    REPROMPT = "reprompt"
    AUDIO = "audio"
    TEXT = "text"
    ERROR = "error"


class ResponseDirective(BaseModel):
    """Instruction for rendering the reply to one turn."""

    kind: DirectiveKind
    text: Optional[str] = None
    audio_url: Optional[str] = None

    @classmethod
    def reprompt(cls) -> "ResponseDirective":
        return cls(kind=DirectiveKind.REPROMPT)

    @classmethod
    def audio(cls, audio_url: str, text: Optional[str] = None) -> "ResponseDirective":
        return cls(kind=DirectiveKind.AUDIO, audio_url=audio_url, text=text)

    @classmethod
    def speak(cls, text: str) -> "ResponseDirective":
        return cls(kind=DirectiveKind.TEXT, text=text)

    @classmethod
    def error(cls, text: str) -> "ResponseDirective":
        return cls(kind=DirectiveKind.ERROR, text=text)
