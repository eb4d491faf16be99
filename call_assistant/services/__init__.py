"""
Services module for external API integrations in the call assistant.

This module provides client implementations for the third-party services a call
depends on. Each client owns its connection details and timeouts and reports every
failure with one of the exceptions from call_assistant.errors, leaving fallback
decisions to the conversation orchestrator.

Key components:
- completion_client: OpenAI chat completions, used for replies and for the
  conversation analysis.
- synthesis_client: ElevenLabs text-to-speech.
- audio_storage: Writes synthesised audio to disk and returns the URL Twilio
  fetches it from.
- telephony: TwiML rendering of response directives and outbound Twilio calls.

Usage examples:
```python
from call_assistant.services.completion_client import CompletionClient
from call_assistant.services.synthesis_client import SynthesisClient

async def say_hello():
    completion = CompletionClient(api_key="sk-...", model="gpt-4")
    result = await completion.complete([{"role": "user", "content": "Hello"}])

    synthesis = SynthesisClient(api_key="xi-...", voice_id="voice-id")
    audio = await synthesis.synthesize(result.text)
```
"""

# Services module initialization
