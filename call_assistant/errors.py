"""
Exception types raised by the call assistant.

Downstream clients raise these, and the conversation orchestrator decides which
ones degrade to a fallback response and which one ends the call.
"""


class CallAssistantError(Exception):
    """Base class for all call assistant errors."""


class NoInputError(CallAssistantError):
    """The telephony layer reported no speech for a turn."""


class CompletionError(CallAssistantError):
    """The completion API failed, timed out or returned nothing usable."""


class AnalysisError(CallAssistantError):
    """The conversation analysis failed or could not be parsed."""


class SynthesisError(CallAssistantError):
    """Speech synthesis or publishing of the synthesised audio failed."""


class SessionNotFound(CallAssistantError):
    """No session exists for a call id."""


class ConfigurationError(CallAssistantError):
    """Required external credentials are missing."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required configuration: {', '.join(self.missing)}")
