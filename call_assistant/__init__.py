"""
Call Assistant - Twilio voice webhooks bridged to OpenAI and ElevenLabs

This application answers phone calls delivered by Twilio voice webhooks and holds
a spoken conversation with the caller. Each speech result from the caller runs one
turn of the conversation loop: the utterance is added to the call's session, a reply
is generated with the OpenAI chat completions API, the conversation is analysed to
keep track of who the caller is and what they are talking about, and the reply is
voiced with ElevenLabs before being handed back to Twilio as TwiML.

Architecture Overview:
- FastAPI server exposing the Twilio voice webhooks and monitoring endpoints
- In-memory session store with an idle sweep, one session per call
- Conversation orchestrator driving the per-turn pipeline with fallbacks
- TwiML rendering of the orchestrator's response directives

Key Components:
- bot: Conversation orchestrator, prompt builder, analyzer and phone text normaliser
- config: Application-wide settings, constants, and logging setup
- handlers: Webhook handlers for incoming calls, speech results and call status
- models: Session, turn and directive data structures plus the session store
- services: Clients for OpenAI, ElevenLabs, Twilio and the audio file store

Getting Started:
1. Set up environment variables (or a .env file):
   - TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER
   - OPENAI_API_KEY
   - ELEVENLABS_API_KEY, ELEVENLABS_VOICE_ID
   - PUBLIC_BASE_URL: Public URL Twilio uses to reach this server
   - PORT / HOST / LOG_LEVEL

2. Start the server:
   ```bash
   python run.py
   ```

3. Point the Twilio phone number's voice webhook at
   {PUBLIC_BASE_URL}/webhook/voice and its status callback at
   {PUBLIC_BASE_URL}/webhook/status.
"""
