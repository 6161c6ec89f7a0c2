"""
OSCAR Relay Configuration Settings

This module contains all configuration constants for the relay server.
Values that make sense to change per deployment can be overridden through
environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("OSCAR_RELAY_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("OSCAR_RELAY_PORT", "5190"))

    # Store settings
    STORE_SHARDS: int = int(os.environ.get("OSCAR_RELAY_STORE_SHARDS", "16"))

    # Connection settings
    READ_BUFFER_SIZE: int = 65536  # Stream buffer; longer lines are read in pieces
    ENCODING: str = "utf-8"

    # Logging settings
    DEBUG: bool = os.environ.get("OSCAR_RELAY_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("OSCAR_RELAY_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
