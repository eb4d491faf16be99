"""
Turn-taking conversation loop.

The ConversationOrchestrator runs one turn of a call each time Twilio posts a
speech result. A turn moves through a fixed sequence of states:

    RECEIVED -> HISTORY_APPENDED -> COMPLETION_REQUESTED
      -> COMPLETION_OK | COMPLETION_FAILED -> ANALYSIS_REQUESTED
      -> CONTEXT_UPDATED -> SYNTHESIS_REQUESTED
      -> SYNTHESIS_OK | SYNTHESIS_FAILED -> RESPONSE_RENDERED

Failures of the downstream services never abort the call: a failed completion is
replaced by a fixed apology, a failed analysis by a default context, and a failed
synthesis by a plain-text directive that Twilio speaks with its own voice. Only an
unexpected exception produces the error directive, which hangs up.

Downstream requests run one after another because each depends on the previous
result. Each one is bounded by the request timeout; a timeout counts as a failure.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional

from call_assistant.bot.analyzer import AnalysisResult, ConversationAnalyzer
from call_assistant.bot.prompt_builder import PromptBuilder
from call_assistant.bot.text_normalizer import optimize_text_for_phone
from call_assistant.config.constants import (
    ANALYSIS_WINDOW,
    COMPLETION_APOLOGY_TEXT,
    DEFAULT_RESPONSE_TIMEOUT,
    ERROR_APOLOGY_TEXT,
    LOGGER_NAME,
)
from call_assistant.errors import (
    AnalysisError,
    CompletionError,
    NoInputError,
    SynthesisError,
)
from call_assistant.models.directives import ResponseDirective
from call_assistant.models.session import Session, TurnRole
from call_assistant.models.session_store import SessionStore
from call_assistant.services.audio_storage import AudioFileStore
from call_assistant.services.completion_client import CompletionClient, CompletionResult
from call_assistant.services.synthesis_client import SynthesisClient

logger = logging.getLogger(LOGGER_NAME)


class TurnState(str, Enum):
    """Stages of a single conversation turn."""
    RECEIVED = "received"
    HISTORY_APPENDED = "history_appended"
    COMPLETION_REQUESTED = "completion_requested"
    COMPLETION_OK = "completion_ok"
    COMPLETION_FAILED = "completion_failed"
    ANALYSIS_REQUESTED = "analysis_requested"
    CONTEXT_UPDATED = "context_updated"
    SYNTHESIS_REQUESTED = "synthesis_requested"
    SYNTHESIS_OK = "synthesis_ok"
    SYNTHESIS_FAILED = "synthesis_failed"
    RESPONSE_RENDERED = "response_rendered"


class ConversationOrchestrator:
    """
    Drives the per-turn pipeline for every call.

    All collaborators are injected so the loop can run against fakes in tests.

    Args:
        session_store: Registry of active call sessions
        completion_client: Generates replies
        synthesis_client: Voices replies
        audio_store: Exposes synthesised audio at a URL Twilio can fetch
        analyzer: Extracts conversational context; built on the completion
            client when omitted
        prompt_builder: Builds the completion request messages
        request_timeout: Upper bound in seconds for each downstream request
        analysis_window: Number of recent turns sent to the analyzer
    """

    def __init__(
        self,
        session_store: SessionStore,
        completion_client: CompletionClient,
        synthesis_client: SynthesisClient,
        audio_store: AudioFileStore,
        analyzer: Optional[ConversationAnalyzer] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        request_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        analysis_window: int = ANALYSIS_WINDOW,
    ):
        self.session_store = session_store
        self.completion_client = completion_client
        self.synthesis_client = synthesis_client
        self.audio_store = audio_store
        self.analyzer = analyzer or ConversationAnalyzer(completion_client)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.request_timeout = request_timeout
        self.analysis_window = analysis_window

    async def process_turn(
        self,
        session_id: str,
        utterance: Optional[str],
        confidence: Optional[float | str] = None,
    ) -> ResponseDirective:
        """
        Run one conversation turn for a call.

        Args:
            session_id: Call identifier
            utterance: Recognised caller speech; empty or None when nothing was heard
            confidence: Recognition confidence, 0 when missing or unparseable

        Returns:
            The directive telling the telephony layer how to answer
        """
        session = self.session_store.get_or_create(session_id)
        self._transition(session, TurnState.RECEIVED)

        try:
            utterance = _require_utterance(utterance)
        except NoInputError:
            logger.warning(f"No speech result received for call: {session_id}")
            return ResponseDirective.reprompt()

        start_time = time.perf_counter()
        try:
            directive = await self._run_turn(session, utterance, confidence)
        except Exception as e:
            session.metrics.record_error()
            logger.error(
                f"Error processing turn for call {session_id}: {e} "
                f"(errors={session.metrics.error_count})",
                exc_info=True,
            )
            return ResponseDirective.error(ERROR_APOLOGY_TEXT)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        session.metrics.record_response_time(elapsed_ms)
        logger.debug(
            f"Response time recorded for call {session_id}: {elapsed_ms:.0f}ms "
            f"(average {session.metrics.average_response_time_ms:.0f}ms)"
        )
        self._transition(session, TurnState.RESPONSE_RENDERED)
        return directive

    async def _run_turn(
        self, session: Session, utterance: str, confidence: Optional[float | str]
    ) -> ResponseDirective:
        session.add_turn(
            TurnRole.USER, utterance, {"confidence": _parse_confidence(confidence)}
        )
        logger.info(f"Speech received for call {session.id}: {utterance[:100]}")
        self._transition(session, TurnState.HISTORY_APPENDED)

        response_text = await self._generate_reply(session)

        analysis = await self._analyze(session)
        session.update_context(analysis.context_updates())
        self._transition(session, TurnState.CONTEXT_UPDATED)

        spoken_text = optimize_text_for_phone(response_text)
        return await self._synthesize(session, spoken_text)

    async def _generate_reply(self, session: Session) -> str:
        messages = self.prompt_builder.build_messages(session)
        self._transition(session, TurnState.COMPLETION_REQUESTED)
        try:
            result: CompletionResult = await asyncio.wait_for(
                self.completion_client.complete(messages), timeout=self.request_timeout
            )
        except (CompletionError, asyncio.TimeoutError) as e:
            session.metrics.record_error()
            logger.error(
                f"Completion failed for call {session.id}: {str(e) or 'timed out'} "
                f"(errors={session.metrics.error_count})"
            )
            self._transition(session, TurnState.COMPLETION_FAILED)
            return COMPLETION_APOLOGY_TEXT

        session.add_turn(
            TurnRole.ASSISTANT,
            result.text,
            {
                "tokens": result.total_tokens,
                "prompt_tokens": result.prompt_tokens,
                "completion_tokens": result.completion_tokens,
                "model": result.model,
                "processing_time_ms": round(result.duration_ms),
            },
        )
        self._transition(session, TurnState.COMPLETION_OK)
        return result.text

    async def _analyze(self, session: Session) -> AnalysisResult:
        self._transition(session, TurnState.ANALYSIS_REQUESTED)
        try:
            return await asyncio.wait_for(
                self.analyzer.analyze(session.recent_turns(self.analysis_window)),
                timeout=self.request_timeout,
            )
        except (AnalysisError, asyncio.TimeoutError) as e:
            logger.warning(
                f"Conversation analysis failed for call {session.id}, "
                f"using default context: {str(e) or 'timed out'}"
            )
            return AnalysisResult.default()

    async def _synthesize(self, session: Session, text: str) -> ResponseDirective:
        self._transition(session, TurnState.SYNTHESIS_REQUESTED)
        try:
            audio = await asyncio.wait_for(
                self.synthesis_client.synthesize(text), timeout=self.request_timeout
            )
            audio_url = await self.audio_store.save(
                session.id, session.metrics.turn_count + 1, audio
            )
        except (SynthesisError, asyncio.TimeoutError) as e:
            session.metrics.record_synthesis_failure()
            logger.error(
                f"Voice generation failed for call {session.id}, "
                f"falling back to Twilio TTS: {str(e) or 'timed out'}"
            )
            self._transition(session, TurnState.SYNTHESIS_FAILED)
            return ResponseDirective.speak(text)

        logger.info(f"Voice generated for call {session.id}: {audio_url}")
        self._transition(session, TurnState.SYNTHESIS_OK)
        return ResponseDirective.audio(audio_url, text)

    @staticmethod
    def _transition(session: Session, state: TurnState) -> None:
        logger.debug(f"Call {session.id}: {state.value}")


def _require_utterance(utterance: Optional[str]) -> str:
    if not utterance or not utterance.strip():
        raise NoInputError("No speech detected")
    return utterance.strip()


def _parse_confidence(confidence) -> float:
    try:
        return float(confidence)
    except (TypeError, ValueError):
        return 0.0
