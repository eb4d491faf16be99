import logging
from unittest.mock import AsyncMock

import pytest

from call_assistant.bot.analyzer import AnalysisResult, ConversationAnalyzer
from call_assistant.bot.orchestrator import ConversationOrchestrator
from call_assistant.models.session_store import SessionStore
from call_assistant.services.audio_storage import AudioFileStore
from call_assistant.services.completion_client import CompletionClient, CompletionResult
from call_assistant.services.synthesis_client import SynthesisClient

AUDIO_URL = "http://testserver/audio/c1_1_1700000000000.mp3"


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def session_store():
    return SessionStore(max_history=10)


@pytest.fixture
def completion_client():
    client = AsyncMock(spec=CompletionClient)
    client.complete.return_value = CompletionResult(
        text="I'm doing well!",
        model="gpt-4-0613",
        prompt_tokens=40,
        completion_tokens=5,
        total_tokens=45,
        duration_ms=120.0,
    )
    return client


@pytest.fixture
def analyzer():
    mock = AsyncMock(spec=ConversationAnalyzer)
    mock.analyze.return_value = AnalysisResult(topic="greetings", mood="positive")
    return mock


@pytest.fixture
def synthesis_client():
    client = AsyncMock(spec=SynthesisClient)
    client.synthesize.return_value = b"ID3fake-mp3-bytes"
    return client


@pytest.fixture
def audio_store():
    store = AsyncMock(spec=AudioFileStore)
    store.save.return_value = AUDIO_URL
    return store


@pytest.fixture
def orchestrator(session_store, completion_client, synthesis_client, audio_store, analyzer):
    return ConversationOrchestrator(
        session_store=session_store,
        completion_client=completion_client,
        synthesis_client=synthesis_client,
        audio_store=audio_store,
        analyzer=analyzer,
        request_timeout=5.0,
    )
