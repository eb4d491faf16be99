"""
Handlers for the Twilio voice webhooks.

This module processes the three webhooks Twilio calls during a phone call: the
incoming-call webhook (answer with a greeting), the speech webhook (run a
conversation turn and answer with the reply), and the status callback (end the
session when the call is over). Handlers always return something Twilio can act
on; an invalid payload or an unexpected error produces an apology TwiML rather
than an HTTP error.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from call_assistant.bot.orchestrator import ConversationOrchestrator
from call_assistant.config.constants import ERROR_APOLOGY_TEXT, LOGGER_NAME
from call_assistant.models.session_store import SessionStore
from call_assistant.models.webhook_schemas import (
    CallStartEvent,
    CallStatusEvent,
    SpeechResultEvent,
)
from call_assistant.services.telephony import TwilioRenderer

logger = logging.getLogger(LOGGER_NAME)


async def handle_incoming_call(
    form: Dict[str, Any],
    session_store: SessionStore,
    renderer: TwilioRenderer,
) -> str:
    """
    Handle the incoming-call webhook.

    Creates the session for the call and greets the caller. The greeting is
    issued once per call; Twilio only posts this webhook again when the caller
    stays silent after the greeting.

    Args:
        form: Form parameters posted by Twilio (CallSid, From, To)
        session_store: Registry of active call sessions
        renderer: TwiML renderer

    Returns:
        Greeting TwiML, or an apology that hangs up if the payload is invalid
    """
    try:
        event = CallStartEvent(**form)
    except ValidationError as e:
        logger.error(f"Invalid incoming call webhook: {e}")
        return renderer.apologize_and_hang_up()

    logger.info(
        f"Call incoming: {event.call_id} from {event.from_number} to {event.to_number}"
    )
    session_store.get_or_create(event.call_id)
    return renderer.greeting()


async def handle_speech_result(
    form: Dict[str, Any],
    orchestrator: ConversationOrchestrator,
    renderer: TwilioRenderer,
) -> str:
    """
    Handle a speech recognition result posted by a Gather verb.

    Args:
        form: Form parameters posted by Twilio (CallSid, SpeechResult, Confidence)
        orchestrator: Conversation loop
        renderer: TwiML renderer

    Returns:
        TwiML answering the caller and listening for the next utterance
    """
    try:
        event = SpeechResultEvent(**form)
    except ValidationError as e:
        logger.error(f"Invalid speech webhook: {e}")
        return renderer.apologize_and_hang_up(ERROR_APOLOGY_TEXT)

    try:
        directive = await orchestrator.process_turn(
            event.call_id, event.utterance, event.confidence
        )
        return renderer.render(directive)
    except Exception as e:
        logger.error(
            f"Error processing speech for call {event.call_id}: {e}", exc_info=True
        )
        return renderer.apologize_and_hang_up(ERROR_APOLOGY_TEXT)


async def handle_call_status(
    form: Dict[str, Any],
    session_store: SessionStore,
) -> bool:
    """
    Handle the call status callback.

    Terminal statuses (completed, failed, busy, no-answer, canceled) end the
    session for the call.

    Args:
        form: Form parameters posted by Twilio (CallSid, CallStatus, CallDuration)
        session_store: Registry of active call sessions

    Returns:
        True if the payload was valid, False otherwise
    """
    try:
        event = CallStatusEvent(**form)
    except ValidationError as e:
        logger.error(f"Invalid call status webhook: {e}")
        return False

    logger.info(
        f"Call status_update: {event.call_id} status={event.status}"
        + (
            f" duration={event.duration_seconds}s"
            if event.duration_seconds is not None
            else ""
        )
    )

    if event.is_terminal:
        session_store.end(event.call_id)
    return True
