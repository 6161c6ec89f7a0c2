"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List

from ..mailbox.message import Message


# Reason texts carried by ERROR responses
INVALID_REQUEST_FORMAT = "Invalid request format"
INVALID_SEND_FORMAT = "Invalid SEND format"
INVALID_RECEIVE_FORMAT = "Invalid RECEIVE format"
UNKNOWN_COMMAND = "Unknown command"
NO_MESSAGES_FOUND = "No messages found for user"
EXCEPTION_OCCURRED = "Exception occurred"


class CommandType(Enum):
    """Enumeration of supported command types."""
    SEND = auto()
    RECEIVE = auto()
    INVALID = auto()


class ResponseStatus(Enum):
    """Enumeration of response line prefixes."""
    OK = "OK"
    ERROR = "ERROR"
    MESSAGE = "MESSAGE"


@dataclass
class Command:
    """
    Represents a parsed protocol request.

    Malformed requests are not exceptions: they parse into a Command of type
    INVALID whose ``error`` holds the reason to report to the client.

    Attributes:
        type: SEND, RECEIVE or INVALID
        sender_id: Sender for SEND
        recipient_id: Target mailbox for SEND, requested mailbox for RECEIVE
        content: Payload for SEND
        timestamp: Client timestamp for SEND
        error: Reason text for INVALID commands
        raw: The original request line
    """
    type: CommandType
    sender_id: str = ""
    recipient_id: str = ""
    content: str = ""
    timestamp: str = ""
    error: str = ""
    raw: str = ""

    @classmethod
    def invalid(cls, error: str, raw: str = "") -> "Command":
        """Create a command describing a malformed request."""
        return cls(type=CommandType.INVALID, error=error, raw=raw)

    @property
    def is_valid(self) -> bool:
        """Check if the command can be dispatched."""
        return self.type != CommandType.INVALID


@dataclass
class Response:
    """
    Represents a protocol response.

    Attributes:
        status: OK, ERROR, or MESSAGE for message deliveries
        message: Error reason for ERROR responses
        messages: Messages to deliver, one wire line each
    """
    status: ResponseStatus
    message: str = ""
    messages: List[Message] = field(default_factory=list)

    @classmethod
    def ok(cls) -> "Response":
        """Create a successful response."""
        return cls(status=ResponseStatus.OK)

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(status=ResponseStatus.ERROR, message=message)

    @classmethod
    def delivery(cls, messages: List[Message]) -> "Response":
        """Create a RECEIVE response carrying the mailbox contents."""
        return cls(status=ResponseStatus.MESSAGE, messages=list(messages))

    @classmethod
    def no_messages(cls) -> "Response":
        """Create the RECEIVE response for an empty mailbox."""
        return cls.error(NO_MESSAGES_FOUND)

    @classmethod
    def exception(cls, exc: BaseException) -> "Response":
        """Create the response reported when handling a request fails."""
        return cls.error(f"{EXCEPTION_OCCURRED}: {exc}")
