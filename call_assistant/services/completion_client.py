"""
Client for the OpenAI chat completions API.

Requests are made with the requests library in a worker thread so the event loop
stays free while OpenAI generates a reply. Every failure (transport error,
timeout, non-success status, empty reply) is raised as a CompletionError.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional

import requests
from pydantic import BaseModel

from call_assistant.config.constants import (
    DEFAULT_OPENAI_MAX_TOKENS,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_OPENAI_TEMPERATURE,
    DEFAULT_RESPONSE_TIMEOUT,
    LOGGER_NAME,
    OPENAI_CHAT_COMPLETIONS_URL,
)
from call_assistant.config.logging_config import log_api_call
from call_assistant.errors import CompletionError

logger = logging.getLogger(LOGGER_NAME)


class CompletionResult(BaseModel):
    """Generated reply with the usage reported by the API."""

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    duration_ms: float = 0.0


class CompletionClient:
    """
    Generates chat completions for the conversation and its analysis.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_OPENAI_MODEL,
        max_tokens: int = DEFAULT_OPENAI_MAX_TOKENS,
        temperature: float = DEFAULT_OPENAI_TEMPERATURE,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        url: str = OPENAI_CHAT_COMPLETIONS_URL,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.url = url

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        model: Optional[str] = None,
    ) -> CompletionResult:
        """
        Request a completion for a list of role/content messages.

        Args:
            messages: Conversation messages, system prompt first
            max_tokens: Overrides the configured maximum reply length
            temperature: Overrides the configured sampling temperature
            model: Overrides the configured model id

        Returns:
            CompletionResult with the generated text and token usage

        Raises:
            CompletionError: If the request fails or the reply is empty
        """
        if not self.api_key:
            raise CompletionError("OPENAI_API_KEY is not configured")

        payload = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
            "stream": False,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        start_time = time.perf_counter()
        try:
            response = await asyncio.to_thread(
                requests.post,
                self.url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            log_api_call(logger, "openai", "chat/completions", duration_ms, False, error=e)
            raise CompletionError(f"OpenAI API error: {e}") from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code != 200:
            detail = _error_message(response)
            log_api_call(
                logger,
                "openai",
                "chat/completions",
                duration_ms,
                False,
                status=response.status_code,
                error=detail,
            )
            raise CompletionError(
                f"OpenAI API error: {response.status_code} {detail}"
            )

        try:
            data = response.json()
            text = (data["choices"][0]["message"]["content"] or "").strip()
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError(f"Malformed OpenAI response: {e}") from e

        if not text:
            raise CompletionError("Empty response from OpenAI")

        usage = data.get("usage") or {}
        result = CompletionResult(
            text=text,
            model=data.get("model") or payload["model"],
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
            duration_ms=duration_ms,
        )
        log_api_call(
            logger,
            "openai",
            "chat/completions",
            duration_ms,
            True,
            model=result.model,
            tokens=result.total_tokens,
        )
        return result

    async def test_connection(self) -> Dict[str, object]:
        """Send a tiny prompt to verify the API key and model."""
        try:
            result = await self.complete(
                [
                    {
                        "role": "user",
                        "content": 'Say "OpenAI connection test successful" exactly.',
                    }
                ],
                max_tokens=20,
                temperature=0,
            )
            return {
                "success": True,
                "response": result.text,
                "model": result.model,
                "duration": round(result.duration_ms),
            }
        except CompletionError as e:
            return {"success": False, "error": str(e)}


def _error_message(response) -> str:
    try:
        return response.json().get("error", {}).get("message", "Unknown error")
    except (ValueError, AttributeError):
        return response.text[:200] if response.text else "Unknown error"
