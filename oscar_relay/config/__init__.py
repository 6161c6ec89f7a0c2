"""Configuration module for OSCAR Relay."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
