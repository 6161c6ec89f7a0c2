"""Mailbox module for OSCAR Relay."""

from .message import Message
from .store import MessageStore

__all__ = ["Message", "MessageStore"]
