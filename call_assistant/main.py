"""
FastAPI server for the Twilio voice webhooks of the call assistant.

This module initializes and configures the FastAPI application that Twilio calls
during a phone call. It wires the session store, the downstream clients and the
conversation orchestrator together, exposes the voice webhooks, serves the
synthesised audio files, and offers monitoring and diagnostic endpoints.

The session store's idle sweep runs for as long as the application does; it is
started and stopped by the application lifespan.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import dotenv
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from call_assistant.bot.orchestrator import ConversationOrchestrator
from call_assistant.config.constants import (
    AUDIO_URL_PREFIX,
    WEBHOOK_PROCESS_SPEECH_PATH,
    WEBHOOK_STATUS_PATH,
    WEBHOOK_VOICE_PATH,
)
from call_assistant.config.logging_config import configure_logging
from call_assistant.config.settings import load_settings
from call_assistant.errors import SessionNotFound
from call_assistant.handlers.voice_handlers import (
    handle_call_status,
    handle_incoming_call,
    handle_speech_result,
)
from call_assistant.models.session_store import SessionStore
from call_assistant.services.audio_storage import AudioFileStore
from call_assistant.services.completion_client import CompletionClient
from call_assistant.services.synthesis_client import SynthesisClient
from call_assistant.services.telephony import TwilioCallClient, TwilioRenderer

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

settings = load_settings()

# Configure logging
logger = configure_logging(settings.log_level)

session_store = SessionStore(
    max_history=settings.max_conversation_length,
    idle_threshold_seconds=settings.session_idle_seconds,
    sweep_interval_seconds=settings.session_sweep_seconds,
)
completion_client = CompletionClient(
    api_key=settings.openai_api_key,
    model=settings.openai_model,
    max_tokens=settings.openai_max_tokens,
    temperature=settings.openai_temperature,
    timeout=settings.response_timeout,
)
synthesis_client = SynthesisClient(
    api_key=settings.elevenlabs_api_key,
    voice_id=settings.elevenlabs_voice_id,
    model=settings.elevenlabs_model,
    stability=settings.elevenlabs_stability,
    similarity_boost=settings.elevenlabs_similarity_boost,
    style=settings.elevenlabs_style,
    use_speaker_boost=settings.elevenlabs_use_speaker_boost,
    timeout=settings.response_timeout,
)
audio_store = AudioFileStore(settings.audio_dir, settings.base_url)
orchestrator = ConversationOrchestrator(
    session_store=session_store,
    completion_client=completion_client,
    synthesis_client=synthesis_client,
    audio_store=audio_store,
    request_timeout=settings.response_timeout,
)
renderer = TwilioRenderer(
    speech_action_url=f"{settings.base_url}{WEBHOOK_PROCESS_SPEECH_PATH}",
    greeting_action_url=f"{settings.base_url}{WEBHOOK_VOICE_PATH}",
)
call_client = TwilioCallClient(
    account_sid=settings.twilio_account_sid,
    auth_token=settings.twilio_auth_token,
    from_number=settings.twilio_phone_number,
    voice_webhook_url=f"{settings.base_url}{WEBHOOK_VOICE_PATH}",
    status_callback_url=f"{settings.base_url}{WEBHOOK_STATUS_PATH}",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the session sweep on startup and stop it on shutdown."""
    audio_store.cleanup_old_files()
    await session_store.start()
    logger.info("Call assistant started")
    try:
        yield
    finally:
        await session_store.stop()
        logger.info("Call assistant stopped")


# Create FastAPI application
app = FastAPI(
    title="Call Assistant",
    description="Twilio voice calls answered with OpenAI and ElevenLabs",
    version="1.0.0",
    lifespan=lifespan,
)

app.mount(
    AUDIO_URL_PREFIX,
    StaticFiles(directory=settings.audio_dir, check_dir=False),
    name="audio",
)


def twiml_response(twiml: str) -> Response:
    return Response(content=twiml, media_type="application/xml")


@app.post(WEBHOOK_VOICE_PATH)
async def voice_webhook(request: Request):
    """Incoming call: create the session and greet the caller."""
    form = dict(await request.form())
    return twiml_response(await handle_incoming_call(form, session_store, renderer))


@app.post(WEBHOOK_PROCESS_SPEECH_PATH)
async def process_speech_webhook(request: Request):
    """Speech result: run one conversation turn and answer the caller."""
    form = dict(await request.form())
    return twiml_response(await handle_speech_result(form, orchestrator, renderer))


@app.post(WEBHOOK_STATUS_PATH)
async def status_webhook(request: Request):
    """Call status callback: end the session when the call is over."""
    form = dict(await request.form())
    if not await handle_call_status(form, session_store):
        return Response(status_code=400)
    return Response(status_code=200)


@app.get("/api/conversations")
async def conversation_stats():
    """Active session count and a summary of each session.

    Returns:
        dict: activeSessions count and per-session summaries
    """
    sessions = session_store.active_sessions()
    return {
        "activeSessions": len(sessions),
        "sessions": [summary.model_dump(by_alias=True) for summary in sessions],
    }


@app.get("/api/conversations/{call_id}")
async def conversation_detail(call_id: str):
    """Summary of a single active session."""
    try:
        session = session_store.require(call_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.summary().model_dump(by_alias=True)


class OutboundCallRequest(BaseModel):
    to: str


@app.post("/api/test-call")
async def make_test_call(body: OutboundCallRequest):
    """Place an outbound call to a phone number through Twilio."""
    try:
        call = await call_client.make_call(body.to)
    except Exception as e:
        logger.error(f"Error making test call to {body.to}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to make test call: {e}")
    return {
        "success": True,
        "callSid": call.sid,
        "to": call.to,
        "from": call.from_,
        "status": call.status,
    }


@app.get("/api/test-openai")
async def check_openai():
    """Verify the OpenAI credentials with a tiny completion."""
    return await completion_client.test_connection()


@app.get("/api/test-elevenlabs")
async def check_elevenlabs():
    """Verify the ElevenLabs credentials with a short synthesis."""
    return await synthesis_client.test_connection()


@app.get("/api/voices")
async def list_voices():
    """List the ElevenLabs voices available to the configured account."""
    return await synthesis_client.get_voices()


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information including which services are configured and
        how many calls are active.
    """
    return {
        "status": "healthy",
        "version": app.version,
        "active_sessions": len(session_store),
        "services": {
            "twilio": bool(settings.twilio_account_sid),
            "openai": bool(settings.openai_api_key),
            "elevenlabs": bool(settings.elevenlabs_api_key),
        },
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API.

    Returns:
        dict: Basic information about the API and its purpose.
    """
    return {
        "name": "Call Assistant",
        "description": "Twilio voice calls answered with OpenAI and ElevenLabs",
        "version": "1.0.0",
        "endpoints": {
            WEBHOOK_VOICE_PATH: "Twilio incoming call webhook",
            WEBHOOK_PROCESS_SPEECH_PATH: "Twilio speech result webhook",
            WEBHOOK_STATUS_PATH: "Twilio call status callback",
            "/api/conversations": "Active conversation statistics",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, http="h11")
