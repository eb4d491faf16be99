"""
Handlers module for the Twilio voice webhooks of the call assistant.

This module provides the handlers behind the webhook routes. Each handler takes
the form parameters Twilio posted, validates them with the models from
call_assistant.models.webhook_schemas and delegates to the session store or the
conversation orchestrator.

Key components:
- voice_handlers: Incoming call (greeting), speech result (one conversation turn)
  and call status (session teardown) handlers.

Usage examples:
```python
from fastapi import Request, Response
from call_assistant.handlers import voice_handlers

@app.post("/webhook/process-speech")
async def process_speech(request: Request):
    form = dict(await request.form())
    twiml = await voice_handlers.handle_speech_result(form, orchestrator, renderer)
    return Response(content=twiml, media_type="application/xml")
```
"""

# Handlers module initialization
