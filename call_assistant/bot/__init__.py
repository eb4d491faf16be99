"""
Bot module implementing the conversation loop of the call assistant.

This module turns a caller's utterance into the assistant's spoken reply. It owns
the conversational logic; the network clients it depends on live in
call_assistant.services and are injected.

Key components:
- ConversationOrchestrator: Runs one turn per speech result, from history update
  through completion, analysis, context update and speech synthesis, with a
  fallback for every downstream failure.
- PromptBuilder: Builds the system prompt and message list from the session.
- ConversationAnalyzer: Extracts the caller's name, topic and mood from the most
  recent turns.
- optimize_text_for_phone: Cleans reply text before it is spoken.

Usage examples:
```python
from call_assistant.bot import ConversationOrchestrator
from call_assistant.models.session_store import SessionStore

orchestrator = ConversationOrchestrator(
    session_store=SessionStore(),
    completion_client=completion_client,
    synthesis_client=synthesis_client,
    audio_store=audio_store,
)

async def on_speech(call_id, text, confidence):
    directive = await orchestrator.process_turn(call_id, text, confidence)
    return renderer.render(directive)
```
"""

from call_assistant.bot.analyzer import AnalysisResult, ConversationAnalyzer
from call_assistant.bot.orchestrator import ConversationOrchestrator, TurnState
from call_assistant.bot.prompt_builder import PromptBuilder
from call_assistant.bot.text_normalizer import optimize_text_for_phone

__all__ = [
    "AnalysisResult",
    "ConversationAnalyzer",
    "ConversationOrchestrator",
    "PromptBuilder",
    "TurnState",
    "optimize_text_for_phone",
]
