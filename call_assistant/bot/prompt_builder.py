"""
Prompt construction for the conversation model.

The system prompt is a deterministic function of the session: a fixed behavioural
preamble for phone conversations, a short description of the call so far, and at
most one line of derived context (the caller's name wins over the topic).
"""

from typing import Dict, List

from call_assistant.models.session import Session

BASE_PROMPT = """You are a helpful AI assistant speaking with someone over the phone.

Key guidelines:
- Keep responses conversational and natural
- Responses should be 1-3 sentences maximum
- Speak as if you're having a phone conversation
- Be friendly, helpful, and engaging
- If asked about your capabilities, mention you can help with questions, provide information, and have conversations
- If the conversation seems to be ending, politely wrap up"""


class PromptBuilder:
    """Builds the message list sent to the completion API."""

    def __init__(self, base_prompt: str = BASE_PROMPT):
        self.base_prompt = base_prompt

    def build_system_prompt(self, session: Session) -> str:
        prompt = (
            f"{self.base_prompt}\n\n"
            "Current conversation context:\n"
            f"- Call started: {session.started_at.strftime('%H:%M:%S')} UTC\n"
            f"- Messages exchanged: {session.metrics.turn_count}"
        )

        context = session.context
        if context.subject_name:
            return prompt + f"\n- User's name: {context.subject_name}"
        if context.topic:
            return prompt + f"\n- Current topic: {context.topic}"
        return prompt

    def build_messages(self, session: Session) -> List[Dict[str, str]]:
        """System prompt followed by the history window, oldest first."""
        messages = [{"role": "system", "content": self.build_system_prompt(session)}]
        messages.extend(
            {"role": turn.role.value, "content": turn.content}
            for turn in session.history
        )
        return messages
