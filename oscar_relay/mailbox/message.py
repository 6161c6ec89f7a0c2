"""
Message Definition

A message is the unit the relay files into mailboxes. It is created once,
when a SEND request is accepted, and is never modified afterwards.
"""

import uuid
from dataclasses import dataclass, field


def new_message_id() -> str:
    """Generate a fresh, random message identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Message:
    """
    Represents a single relayed message.

    Attributes:
        sender_id: Identifier supplied by the sending client
        recipient_id: Identifier of the mailbox the message is filed under
        content: Message payload
        timestamp: Client-supplied timestamp, stored as-is
        id: Server-generated unique token
    """
    sender_id: str
    recipient_id: str
    content: str
    timestamp: str
    id: str = field(default_factory=new_message_id)

    @property
    def fields(self) -> tuple:
        """Message fields in wire order."""
        return (self.id, self.sender_id, self.recipient_id, self.content, self.timestamp)
