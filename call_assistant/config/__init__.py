"""
Configuration module for the call assistant application.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Defines application-wide constants used across modules, including
  webhook paths, call statuses, default model settings and fixed caller-facing phrases.
- settings: Loads the environment into a validated Settings object and checks that
  the credentials for Twilio, OpenAI and ElevenLabs are present.
- logging_config: Provides a consistent logging infrastructure with support for
  console and file-based logging with rotation capabilities.

Usage examples:
```python
# Import and use constants
from call_assistant.config.constants import LOGGER_NAME, TERMINAL_CALL_STATUSES

# Set up logging for your module
from call_assistant.config.logging_config import configure_logging
logger = configure_logging()
logger.info("Application started")

# Load settings from the environment
from call_assistant.config.settings import load_settings
settings = load_settings()
settings.validate_required()
```
"""

# Config module initialization
