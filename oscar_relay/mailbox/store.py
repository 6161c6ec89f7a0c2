"""
Message Store Module

This module implements the in-memory mailbox storage shared by every
connection handler.

Mailboxes are spread over a fixed number of shards. Each shard has its own
lock, so writers to the same mailbox are serialised while mailboxes living
in different shards never wait on each other.
"""

import hashlib
import threading
from typing import Dict, List, Any

from ..config.settings import settings
from .message import Message


def get_shard_for_recipient(recipient_id: str, num_shards: int) -> int:
    """
    Calculate which shard owns a given recipient's mailbox.

    Uses SHA-256 so the mapping is stable across processes, unlike the
    salted builtin hash().

    Args:
        recipient_id: The mailbox key
        num_shards: Total number of shards

    Returns:
        Shard index in range(num_shards)
    """
    hash_digest = hashlib.sha256(recipient_id.encode('utf-8')).digest()
    hash_int = int.from_bytes(hash_digest[:8], byteorder='big')
    return hash_int % num_shards


class _Shard:
    """A lock and the mailboxes it guards."""

    __slots__ = ("lock", "mailboxes")

    def __init__(self):
        self.lock = threading.Lock()
        self.mailboxes: Dict[str, List[Message]] = {}


class MessageStore:
    """
    Concurrent mapping from recipient id to an ordered mailbox.

    The store supports exactly two operations on mailboxes:
    - append: File a message at the end of a recipient's mailbox
    - snapshot: Read a recipient's mailbox without removing anything

    Mailboxes are created on first append and are never shrunk or deleted.
    All methods are safe to call concurrently, from threads or from
    coroutines on the event loop, without any external locking.

    Attributes:
        num_shards: Number of independently locked partitions
    """

    def __init__(self, num_shards: int = None):
        """
        Initialize the message store.

        Args:
            num_shards: Number of shards (default from settings.STORE_SHARDS)

        Raises:
            ValueError: If num_shards is not positive
        """
        self.num_shards = num_shards if num_shards is not None else settings.STORE_SHARDS
        if self.num_shards <= 0:
            raise ValueError("num_shards must be positive")

        self._shards = [_Shard() for _ in range(self.num_shards)]

    def _shard_for(self, recipient_id: str) -> _Shard:
        return self._shards[get_shard_for_recipient(recipient_id, self.num_shards)]

    def append(self, recipient_id: str, message: Message) -> None:
        """
        Insert a message at the end of the recipient's mailbox.

        Creates the mailbox if the recipient has never received anything.
        Always succeeds; there is no capacity bound.

        Args:
            recipient_id: Mailbox to file the message under
            message: The message to store
        """
        shard = self._shard_for(recipient_id)
        with shard.lock:
            shard.mailboxes.setdefault(recipient_id, []).append(message)

    def snapshot(self, recipient_id: str) -> List[Message]:
        """
        Return the current contents of the recipient's mailbox.

        The mailbox is left untouched, so consecutive calls with no append in
        between return equal lists. The returned list is a copy.

        Args:
            recipient_id: Mailbox to read

        Returns:
            Messages in the order they were appended, or an empty list
            for a recipient that has never received a message
        """
        shard = self._shard_for(recipient_id)
        with shard.lock:
            return list(shard.mailboxes.get(recipient_id, ()))

    def size(self) -> int:
        """Get the number of mailboxes in the store."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.mailboxes)
        return total

    def message_count(self) -> int:
        """Get the total number of messages across all mailboxes."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += sum(len(mailbox) for mailbox in shard.mailboxes.values())
        return total

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - mailboxes: Number of recipients with at least one message
            - messages: Total stored messages
            - shards: Number of shards
        """
        return {
            "mailboxes": self.size(),
            "messages": self.message_count(),
            "shards": self.num_shards,
        }
