"""
Conversation analysis.

After each reply the most recent turns are sent to the completion API with an
instruction to describe the conversation as JSON: the caller's name, the topic,
their mood, their intent and whether the call seems to be ending. The result is
merged into the session context to bias the next prompts.
"""

import json
import logging
import re
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from call_assistant.config.constants import (
    ANALYSIS_MAX_TOKENS,
    ANALYSIS_TEMPERATURE,
    LOGGER_NAME,
)
from call_assistant.errors import AnalysisError, CompletionError
from call_assistant.models.session import Mood, Turn
from call_assistant.services.completion_client import CompletionClient

logger = logging.getLogger(LOGGER_NAME)

ANALYSIS_PROMPT = """Analyze this conversation and extract key information in JSON format:
{
    "subjectName": "the caller's name if mentioned, null otherwise",
    "topic": "main topic of conversation",
    "mood": "user's mood (positive, neutral, negative)",
    "intent": "what the user seems to want",
    "shouldEndCall": "true if conversation seems to be ending"
}
Respond with the JSON object only."""

CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
TRUTHY_VALUES = {"true", "yes", "1"}


class AnalysisResult(BaseModel):
    """
    Fields extracted from the conversation. Unset fields are not merged.

    Malformed individual fields are coerced to their neutral value rather than
    rejected, so one bad field never discards the rest of the analysis.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    subject_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("subjectName", "userName", "subject_name")
    )
    topic: Optional[str] = None
    mood: Mood = Mood.NEUTRAL
    intent: Optional[str] = None
    should_end_call: bool = Field(
        False, validation_alias=AliasChoices("shouldEndCall", "should_end_call")
    )

    @field_validator("subject_name", "topic", "intent", mode="before")
    def blank_to_none(cls, v):
        """Treat non-strings, blank strings and the literal "null" as absent."""
        if not isinstance(v, str):
            return None
        v = v.strip()
        if not v or v.lower() == "null":
            return None
        return v

    @field_validator("mood", mode="before")
    def normalize_mood(cls, v):
        """Unknown moods are classified as neutral."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v in {mood.value for mood in Mood}:
                return v
        return Mood.NEUTRAL

    @field_validator("should_end_call", mode="before")
    def normalize_should_end_call(cls, v):
        """Only an explicit true value ends the conversation."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in TRUTHY_VALUES
        if isinstance(v, (int, float)):
            return v == 1
        return False

    @classmethod
    def default(cls) -> "AnalysisResult":
        """Context used when the analysis cannot be obtained."""
        return cls(
            subject_name=None,
            topic="general",
            mood=Mood.NEUTRAL,
            intent="conversation",
            should_end_call=False,
        )

    def context_updates(self) -> dict:
        """Fields to merge into the session context."""
        return self.model_dump(exclude_unset=True)


class ConversationAnalyzer:
    """Extracts conversational context with a low-temperature completion."""

    def __init__(self, completion_client: CompletionClient):
        self.completion_client = completion_client

    async def analyze(self, turns: List[Turn]) -> AnalysisResult:
        """
        Analyze a window of recent turns.

        Args:
            turns: Most recent turns of the conversation, oldest first

        Returns:
            AnalysisResult with the fields the model provided

        Raises:
            AnalysisError: If the completion fails or its reply is not valid JSON
        """
        messages = [{"role": "system", "content": ANALYSIS_PROMPT}]
        messages.extend({"role": t.role.value, "content": t.content} for t in turns)

        try:
            result = await self.completion_client.complete(
                messages,
                max_tokens=ANALYSIS_MAX_TOKENS,
                temperature=ANALYSIS_TEMPERATURE,
            )
        except CompletionError as e:
            raise AnalysisError(f"Conversation analysis failed: {e}") from e

        return self.parse(result.text)

    @staticmethod
    def parse(text: str) -> AnalysisResult:
        """Parse the model's JSON reply, tolerating a Markdown code fence."""
        cleaned = CODE_FENCE.sub("", text.strip())
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse conversation analysis: {text[:200]}")
            raise AnalysisError(f"Analysis reply is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise AnalysisError("Analysis reply is not a JSON object")

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise AnalysisError(f"Analysis reply has invalid fields: {e}") from e
