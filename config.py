"""
Configuration management for the slash interactions webhook.

Loads environment variables from .env file and provides typed access to configuration.
Read once at startup; the client never re-reads it.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Configuration class for the interactions webhook."""

    # Discord application
    DISCORD_PUBLIC_KEY = os.getenv("DISCORD_PUBLIC_KEY", "")

    # Server
    SLASH_URI = os.getenv("SLASH_URI", "0.0.0.0:80")
    INTERACTIONS_PATH = os.getenv("INTERACTIONS_PATH", "/interactions")

    # Discord drops interactions not answered within ~3 seconds
    INTERACTION_RESPONSE_TIMEOUT = float(os.getenv("INTERACTION_RESPONSE_TIMEOUT", "3.0"))

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["DISCORD_PUBLIC_KEY"]
        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            logger.warning(f"Missing required environment variables: {', '.join(missing)}")
            logger.warning("Please set them in .env file")
            return False

        return True
