"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for configuration values and making it easier to
maintain consistent naming throughout the codebase.
"""

# Logger name used throughout the application
LOGGER_NAME = "call_assistant"

# Session defaults
DEFAULT_MAX_CONVERSATION_LENGTH = 10
DEFAULT_SESSION_IDLE_SECONDS = 60 * 60
DEFAULT_SESSION_SWEEP_SECONDS = 30 * 60
ANALYSIS_WINDOW = 5

# Downstream request timeout in seconds
DEFAULT_RESPONSE_TIMEOUT = 30.0

# OpenAI defaults
OPENAI_CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_OPENAI_MODEL = "gpt-4"
DEFAULT_OPENAI_MAX_TOKENS = 150
DEFAULT_OPENAI_TEMPERATURE = 0.7
ANALYSIS_MAX_TOKENS = 150
ANALYSIS_TEMPERATURE = 0.3

# ElevenLabs defaults
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io"
DEFAULT_ELEVENLABS_MODEL = "eleven_flash_v2_5"
DEFAULT_ELEVENLABS_STABILITY = 0.5
DEFAULT_ELEVENLABS_SIMILARITY_BOOST = 0.8
DEFAULT_ELEVENLABS_STYLE = 0.0

# Audio file storage
DEFAULT_AUDIO_DIR = "temp/audio"
AUDIO_URL_PREFIX = "/audio"
AUDIO_MAX_AGE_HOURS = 2

# Webhook paths
WEBHOOK_VOICE_PATH = "/webhook/voice"
WEBHOOK_PROCESS_SPEECH_PATH = "/webhook/process-speech"
WEBHOOK_STATUS_PATH = "/webhook/status"

# Call status values reported by Twilio
CALL_STATUS_RINGING = "ringing"
CALL_STATUS_IN_PROGRESS = "in-progress"
CALL_STATUS_COMPLETED = "completed"
CALL_STATUS_FAILED = "failed"
CALL_STATUS_BUSY = "busy"
CALL_STATUS_NO_ANSWER = "no-answer"
CALL_STATUS_CANCELED = "canceled"
TERMINAL_CALL_STATUSES = frozenset(
    {
        CALL_STATUS_COMPLETED,
        CALL_STATUS_FAILED,
        CALL_STATUS_BUSY,
        CALL_STATUS_NO_ANSWER,
        CALL_STATUS_CANCELED,
    }
)

# Caller-facing phrases
DEFAULT_VOICE = "alice"
GATHER_TIMEOUT_SECONDS = 10
GREETING_TEXT = (
    "Hello! I'm your AI assistant. Please speak after the tone, and I'll respond to you."
)
GREETING_NO_INPUT_TEXT = "I didn't hear anything. Please try speaking again."
AUDIO_NO_INPUT_TEXT = (
    "I didn't hear anything. Please speak again or say goodbye if you'd like to end the call."
)
TEXT_NO_INPUT_TEXT = "Is there anything else I can help you with?"
REPROMPT_GOODBYE_TEXT = "I didn't hear a response. Thank you for calling!"
COMPLETION_APOLOGY_TEXT = (
    "I'm sorry, I'm having trouble processing that right now. "
    "Could you try asking in a different way?"
)
ERROR_APOLOGY_TEXT = "I'm sorry, I had trouble understanding. Could you try again?"
GENERIC_ERROR_TEXT = "I'm sorry, something went wrong. Please try again later."
