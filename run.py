"""
Run script for starting the Call Assistant server.

This script checks that the Twilio, OpenAI and ElevenLabs credentials are present
and starts the FastAPI server with uvicorn.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys
from pathlib import Path

import dotenv
import uvicorn

sys.path.append(str(Path(__file__).parent))

from call_assistant.config.logging_config import configure_logging
from call_assistant.config.settings import load_settings
from call_assistant.errors import ConfigurationError

env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

# Configure logging
logger = configure_logging()


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Start the Call Assistant server")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", "0.0.0.0"),
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args()


def main():
    """Main entry point: validate configuration, then serve."""
    args = parse_args()

    settings = load_settings()
    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"Error: {e}")
        print("Set the missing variables in the environment or in a .env file")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Public base URL: {settings.base_url}")
    logger.info(
        f"OpenAI model: {settings.openai_model}, "
        f"ElevenLabs model: {settings.elevenlabs_model}"
    )

    uvicorn.run(
        "call_assistant.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        http="h11",
        # We have our own request logging
        access_log=False,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
