from datetime import UTC, datetime

import pytest

from call_assistant.bot.prompt_builder import BASE_PROMPT, PromptBuilder
from call_assistant.models.session import Session, TurnRole


@pytest.fixture
def session():
    return Session(
        id="CA-prompt",
        started_at=datetime(2024, 5, 1, 14, 5, 9, tzinfo=UTC),
    )


@pytest.fixture
def builder():
    return PromptBuilder()


def test_system_prompt_contains_preamble_and_call_details(builder, session):
    session.metrics.turn_count = 3

    prompt = builder.build_system_prompt(session)

    assert prompt.startswith(BASE_PROMPT)
    assert "over the phone" in prompt
    assert "1-3 sentences" in prompt
    assert "- Call started: 14:05:09 UTC" in prompt
    assert "- Messages exchanged: 3" in prompt
    assert "User's name" not in prompt
    assert "Current topic" not in prompt


def test_system_prompt_is_deterministic(builder, session):
    session.context.topic = "weather"
    assert builder.build_system_prompt(session) == builder.build_system_prompt(session)


def test_subject_name_added(builder, session):
    session.context.subject_name = "Maria"

    prompt = builder.build_system_prompt(session)

    assert prompt.endswith("\n- User's name: Maria")


def test_topic_added_when_no_name(builder, session):
    session.context.topic = "gardening"

    prompt = builder.build_system_prompt(session)

    assert prompt.endswith("\n- Current topic: gardening")


def test_subject_name_takes_precedence_over_topic(builder, session):
    session.context.subject_name = "Maria"
    session.context.topic = "gardening"

    prompt = builder.build_system_prompt(session)

    assert "- User's name: Maria" in prompt
    assert "Current topic" not in prompt


def test_build_messages_orders_history_oldest_first(builder, session):
    session.add_turn(TurnRole.USER, "Hello, how are you today?")
    session.add_turn(TurnRole.ASSISTANT, "I'm doing well!")
    session.add_turn(TurnRole.USER, "What can you help me with?")

    messages = builder.build_messages(session)

    assert messages[0]["role"] == "system"
    assert messages[0]["content"] == builder.build_system_prompt(session)
    assert messages[1:] == [
        {"role": "user", "content": "Hello, how are you today?"},
        {"role": "assistant", "content": "I'm doing well!"},
        {"role": "user", "content": "What can you help me with?"},
    ]


def test_build_messages_uses_sliding_window(builder):
    session = Session(id="CA-window", max_history=3)
    for i in range(6):
        session.add_turn(TurnRole.USER, f"message {i}")

    messages = builder.build_messages(session)

    assert len(messages) == 4
    assert [m["content"] for m in messages[1:]] == ["message 3", "message 4", "message 5"]


def test_custom_base_prompt(session):
    builder = PromptBuilder(base_prompt="You are a test assistant.")
    assert builder.build_system_prompt(session).startswith("You are a test assistant.\n\n")
