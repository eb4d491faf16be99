"""
Twilio integration: TwiML rendering and outbound calls.

TwilioRenderer maps the orchestrator's response directives onto TwiML call-flow
verbs (Say, Play, Gather, Redirect, Hangup). It never retries anything; retries
belong to the orchestrator's own fallback branches. TwilioCallClient wraps the
Twilio REST API for placing test calls.
"""

import asyncio
import logging
from typing import Optional

from twilio.rest import Client
from twilio.twiml.voice_response import Gather, VoiceResponse

from call_assistant.config.constants import (
    AUDIO_NO_INPUT_TEXT,
    DEFAULT_VOICE,
    ERROR_APOLOGY_TEXT,
    GATHER_TIMEOUT_SECONDS,
    GENERIC_ERROR_TEXT,
    GREETING_NO_INPUT_TEXT,
    GREETING_TEXT,
    LOGGER_NAME,
    REPROMPT_GOODBYE_TEXT,
    TEXT_NO_INPUT_TEXT,
)
from call_assistant.models.directives import DirectiveKind, ResponseDirective

logger = logging.getLogger(LOGGER_NAME)


class TwilioRenderer:
    """
    Renders response directives as TwiML documents.

    Args:
        speech_action_url: URL Twilio posts speech results to
        greeting_action_url: URL of the incoming-call webhook, used to restart
            the greeting when the caller says nothing
        voice: Twilio voice used for Say verbs
        gather_timeout: Seconds Twilio waits for the caller to start speaking
    """

    def __init__(
        self,
        speech_action_url: str,
        greeting_action_url: str,
        voice: str = DEFAULT_VOICE,
        gather_timeout: int = GATHER_TIMEOUT_SECONDS,
    ):
        self.speech_action_url = speech_action_url
        self.greeting_action_url = greeting_action_url
        self.voice = voice
        self.gather_timeout = gather_timeout

    def _gather(self) -> Gather:
        return Gather(
            input="speech",
            timeout=self.gather_timeout,
            speech_timeout="auto",
            action=self.speech_action_url,
            method="POST",
        )

    def greeting(self) -> str:
        """Greeting issued once when the call starts, followed by a listen."""
        response = VoiceResponse()
        response.say(GREETING_TEXT, voice=self.voice)
        response.append(self._gather())
        response.say(GREETING_NO_INPUT_TEXT, voice=self.voice)
        response.redirect(self.greeting_action_url, method="POST")
        return str(response)

    def render(self, directive: ResponseDirective) -> str:
        """
        Render a directive produced by the conversation orchestrator.

        Args:
            directive: What to say or play to the caller

        Returns:
            TwiML document as a string
        """
        if directive.kind == DirectiveKind.REPROMPT:
            return self.listen_again()
        if directive.kind == DirectiveKind.AUDIO:
            return self.play_audio(directive.audio_url)
        if directive.kind == DirectiveKind.TEXT:
            return self.speak_text(directive.text or "")
        return self.apologize_and_hang_up(directive.text or ERROR_APOLOGY_TEXT)

    def listen_again(self) -> str:
        response = VoiceResponse()
        response.append(self._gather())
        response.say(REPROMPT_GOODBYE_TEXT, voice=self.voice)
        response.hangup()
        return str(response)

    def play_audio(self, audio_url: str) -> str:
        response = VoiceResponse()
        response.play(audio_url)
        response.append(self._gather())
        response.say(AUDIO_NO_INPUT_TEXT, voice=self.voice)
        response.redirect(self.speech_action_url, method="POST")
        return str(response)

    def speak_text(self, text: str) -> str:
        response = VoiceResponse()
        response.say(text, voice=self.voice)
        response.append(self._gather())
        response.say(TEXT_NO_INPUT_TEXT, voice=self.voice)
        response.redirect(self.speech_action_url, method="POST")
        return str(response)

    def apologize_and_hang_up(self, text: str = GENERIC_ERROR_TEXT) -> str:
        return self.end_call(text)

    def end_call(self, message: Optional[str] = None) -> str:
        """Hang up, optionally saying something first."""
        response = VoiceResponse()
        if message:
            response.say(message, voice=self.voice)
        response.hangup()
        return str(response)


class TwilioCallClient:
    """Places outbound calls through the Twilio REST API."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        voice_webhook_url: str,
        status_callback_url: str,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.voice_webhook_url = voice_webhook_url
        self.status_callback_url = status_callback_url
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    async def make_call(self, to: str):
        """
        Call a phone number and connect it to the voice webhook.

        Returns:
            The Twilio call instance
        """
        call = await asyncio.to_thread(
            self.client.calls.create,
            to=to,
            from_=self.from_number,
            url=self.voice_webhook_url,
            method="POST",
            status_callback=self.status_callback_url,
            status_callback_event=["initiated", "ringing", "answered", "completed"],
            status_callback_method="POST",
        )
        logger.info(f"Outbound call initiated to {to} with SID: {call.sid}")
        return call
