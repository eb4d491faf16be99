"""
Unit tests for the conversation analyzer.

These tests verify that the analyzer sends the recent turns to the completion
client with the analysis instruction, and that it parses the model's JSON reply
into an AnalysisResult or reports an AnalysisError.
"""

import json
from unittest.mock import AsyncMock

import pytest

from call_assistant.bot.analyzer import ANALYSIS_PROMPT, AnalysisResult, ConversationAnalyzer
from call_assistant.errors import AnalysisError, CompletionError
from call_assistant.models.session import Mood, Turn, TurnRole
from call_assistant.services.completion_client import CompletionClient, CompletionResult


def completion_returning(text):
    client = AsyncMock(spec=CompletionClient)
    client.complete.return_value = CompletionResult(text=text, model="gpt-4")
    return client


@pytest.fixture
def turns():
    return [
        Turn(role=TurnRole.USER, content="Hi, my name is Maria."),
        Turn(role=TurnRole.ASSISTANT, content="Nice to meet you, Maria!"),
    ]


@pytest.mark.asyncio
async def test_analyze_sends_prompt_and_turns(turns):
    client = completion_returning(
        json.dumps({"subjectName": "Maria", "topic": "introductions", "mood": "positive"})
    )
    analyzer = ConversationAnalyzer(client)

    await analyzer.analyze(turns)

    client.complete.assert_awaited_once()
    messages = client.complete.call_args[0][0]
    assert messages[0] == {"role": "system", "content": ANALYSIS_PROMPT}
    assert messages[1:] == [
        {"role": "user", "content": "Hi, my name is Maria."},
        {"role": "assistant", "content": "Nice to meet you, Maria!"},
    ]
    assert client.complete.call_args.kwargs["temperature"] == 0.3
    assert client.complete.call_args.kwargs["max_tokens"] == 150


@pytest.mark.asyncio
async def test_analyze_parses_result(turns):
    client = completion_returning(
        json.dumps(
            {
                "subjectName": "Maria",
                "topic": "introductions",
                "mood": "positive",
                "intent": "small talk",
                "shouldEndCall": "false",
            }
        )
    )

    result = await ConversationAnalyzer(client).analyze(turns)

    assert result.subject_name == "Maria"
    assert result.topic == "introductions"
    assert result.mood == Mood.POSITIVE
    assert result.intent == "small talk"
    assert result.should_end_call is False


@pytest.mark.asyncio
async def test_analyze_wraps_completion_error(turns):
    client = AsyncMock(spec=CompletionClient)
    client.complete.side_effect = CompletionError("OpenAI API error: 500")

    with pytest.raises(AnalysisError):
        await ConversationAnalyzer(client).analyze(turns)


@pytest.mark.asyncio
async def test_analyze_invalid_json_raises(turns):
    client = completion_returning("The caller seems happy.")

    with pytest.raises(AnalysisError):
        await ConversationAnalyzer(client).analyze(turns)


def test_parse_accepts_code_fence():
    result = ConversationAnalyzer.parse('```json\n{"topic": "weather"}\n```')
    assert result.topic == "weather"


def test_parse_rejects_non_object():
    with pytest.raises(AnalysisError):
        ConversationAnalyzer.parse('["weather"]')


def test_parse_accepts_legacy_user_name_key():
    result = ConversationAnalyzer.parse('{"userName": "Sam"}')
    assert result.subject_name == "Sam"


def test_parse_normalizes_mood_and_nulls():
    result = ConversationAnalyzer.parse(
        '{"subjectName": "null", "topic": "", "mood": "Ecstatic"}'
    )
    assert result.subject_name is None
    assert result.topic is None
    assert result.mood == Mood.NEUTRAL


def test_context_updates_only_include_provided_fields():
    result = ConversationAnalyzer.parse('{"topic": "weather", "mood": "negative"}')

    assert result.context_updates() == {"topic": "weather", "mood": Mood.NEGATIVE}


def test_default_result():
    default = AnalysisResult.default()

    assert default.context_updates() == {
        "subject_name": None,
        "topic": "general",
        "mood": Mood.NEUTRAL,
        "intent": "conversation",
        "should_end_call": False,
    }


def test_parse_keeps_valid_fields_when_should_end_call_is_malformed():
    result = ConversationAnalyzer.parse(
        '{"subjectName": "Maria", "topic": "billing", "mood": "positive",'
        ' "intent": "help", "shouldEndCall": "not yet"}'
    )

    assert result.subject_name == "Maria"
    assert result.topic == "billing"
    assert result.mood == Mood.POSITIVE
    assert result.intent == "help"
    assert result.should_end_call is False


@pytest.mark.parametrize(
    "value, expected",
    [
        (True, True),
        ("true", True),
        ("Yes", True),
        (1, True),
        (False, False),
        ("false", False),
        (None, False),
        ({"a": 1}, False),
    ],
)
def test_parse_should_end_call_values(value, expected):
    result = ConversationAnalyzer.parse(json.dumps({"shouldEndCall": value}))
    assert result.should_end_call is expected


def test_parse_drops_non_string_fields():
    result = ConversationAnalyzer.parse(
        '{"subjectName": 42, "topic": ["weather"], "intent": {"kind": "help"}, "mood": "negative"}'
    )

    assert result.subject_name is None
    assert result.topic is None
    assert result.intent is None
    assert result.mood == Mood.NEGATIVE
