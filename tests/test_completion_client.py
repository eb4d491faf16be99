"""
Tests for the OpenAI chat completions client.

requests.post is patched so no network traffic is generated; the tests check
the request the client builds and how each kind of reply is handled.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from call_assistant.errors import CompletionError
from call_assistant.services.completion_client import CompletionClient

MESSAGES = [
    {"role": "system", "content": "You are a helpful assistant."},
    {"role": "user", "content": "Hello, how are you today?"},
]


def make_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    return response


def completion_body(content="I'm doing well!", model="gpt-4-0613"):
    return {
        "model": model,
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 40, "completion_tokens": 5, "total_tokens": 45},
    }


@pytest.fixture
def client():
    return CompletionClient(api_key="sk-test", model="gpt-4", max_tokens=150, timeout=5.0)


@pytest.mark.asyncio
class TestCompletionClient:

    async def test_complete_success(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=completion_body())

            result = await client.complete(MESSAGES)

        assert result.text == "I'm doing well!"
        assert result.model == "gpt-4-0613"
        assert result.prompt_tokens == 40
        assert result.completion_tokens == 5
        assert result.total_tokens == 45
        assert result.duration_ms >= 0

    async def test_complete_sends_expected_request(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=completion_body())

            await client.complete(MESSAGES)

        args, kwargs = mock_post.call_args
        assert args[0] == client.url
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["timeout"] == 5.0
        payload = kwargs["json"]
        assert payload["model"] == "gpt-4"
        assert payload["messages"] == MESSAGES
        assert payload["max_tokens"] == 150
        assert payload["temperature"] == 0.7
        assert payload["stream"] is False

    async def test_complete_overrides(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=completion_body())

            await client.complete(MESSAGES, max_tokens=20, temperature=0, model="gpt-4o")

        payload = mock_post.call_args.kwargs["json"]
        assert payload["max_tokens"] == 20
        assert payload["temperature"] == 0
        assert payload["model"] == "gpt-4o"

    async def test_reply_is_stripped(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(
                json_data=completion_body(content="  Sure thing!\n")
            )

            result = await client.complete(MESSAGES)

        assert result.text == "Sure thing!"

    async def test_missing_api_key(self):
        client = CompletionClient(api_key=None)
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            with pytest.raises(CompletionError):
                await client.complete(MESSAGES)
            mock_post.assert_not_called()

    async def test_http_error_status(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(
                status_code=429, json_data={"error": {"message": "Rate limit reached"}}
            )

            with pytest.raises(CompletionError) as exc_info:
                await client.complete(MESSAGES)

        assert "429" in str(exc_info.value)
        assert "Rate limit reached" in str(exc_info.value)

    async def test_http_error_without_json_body(self, client):
        response = make_response(status_code=502, text="Bad Gateway")
        response.json.side_effect = ValueError("no json")
        with patch(
            "call_assistant.services.completion_client.requests.post", return_value=response
        ):
            with pytest.raises(CompletionError) as exc_info:
                await client.complete(MESSAGES)

        assert "Bad Gateway" in str(exc_info.value)

    async def test_transport_error(self, client):
        with patch(
            "call_assistant.services.completion_client.requests.post",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(CompletionError) as exc_info:
                await client.complete(MESSAGES)

        assert "connection refused" in str(exc_info.value)

    async def test_timeout(self, client):
        with patch(
            "call_assistant.services.completion_client.requests.post",
            side_effect=requests.Timeout("read timed out"),
        ):
            with pytest.raises(CompletionError):
                await client.complete(MESSAGES)

    async def test_empty_reply(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data=completion_body(content="   "))

            with pytest.raises(CompletionError):
                await client.complete(MESSAGES)

    async def test_malformed_body(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(json_data={"choices": []})

            with pytest.raises(CompletionError):
                await client.complete(MESSAGES)

    async def test_connection_check_success(self, client):
        with patch("call_assistant.services.completion_client.requests.post") as mock_post:
            mock_post.return_value = make_response(
                json_data=completion_body(content="OpenAI connection test successful")
            )

            result = await client.test_connection()

        assert result["success"] is True
        assert result["response"] == "OpenAI connection test successful"
        assert result["model"] == "gpt-4-0613"

    async def test_connection_check_failure(self):
        result = await CompletionClient(api_key="").test_connection()

        assert result["success"] is False
        assert "OPENAI_API_KEY" in result["error"]
