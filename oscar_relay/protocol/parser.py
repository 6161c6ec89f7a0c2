"""
Protocol Parser Module

This module handles parsing of raw request lines and formatting of responses.
"""

from typing import List

from ..mailbox.message import Message
from .commands import (
    Command,
    CommandType,
    Response,
    ResponseStatus,
    INVALID_RECEIVE_FORMAT,
    INVALID_REQUEST_FORMAT,
    INVALID_SEND_FORMAT,
    UNKNOWN_COMMAND,
)

FIELD_DELIMITER = "|"
LINE_TERMINATOR = "\n"


class ProtocolParser:
    """
    Parser for the relay's pipe-delimited text protocol.

    Protocol Format:
        Request:  <VERB>|<ARG>[|<ARG>...]\n
        Response: one or more <STATUS>[|<DATA>...]\n lines

    Commands:
        SEND|<senderId>|<recipientId>|<content>|<timestamp>  -> OK
        RECEIVE|<userId>  -> MESSAGE|<id>|<senderId>|<recipientId>|<content>|<timestamp> (per message)
                          -> ERROR|No messages found for user

    Fields cannot contain '|' or a newline; there is no escaping, so such
    characters shift every following field.
    """

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request line into a Command object.

        Never raises: a malformed line yields an INVALID command whose
        ``error`` is the reason to send back.

        Args:
            data: Raw request line (one trailing "\\n" or "\\r\\n" is removed)

        Returns:
            Command object representing the parsed request.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("SEND|alice|bob|hi|2024-01-01")
            >>> cmd.type == CommandType.SEND
            True
            >>> cmd.recipient_id
            'bob'
            >>> parser.parse_request("PING|x").error
            'Unknown command'
        """
        raw = data.removesuffix(LINE_TERMINATOR).removesuffix("\r")
        parts = raw.split(FIELD_DELIMITER)

        if len(parts) < 2:
            return Command.invalid(INVALID_REQUEST_FORMAT, raw=raw)

        verb = parts[0]
        if verb == "SEND":
            return self._parse_send(parts, raw)
        if verb == "RECEIVE":
            return self._parse_receive(parts, raw)

        return Command.invalid(UNKNOWN_COMMAND, raw=raw)

    def _parse_send(self, parts: list, raw: str) -> Command:
        """
        Parse a SEND command.

        Format: SEND|<senderId>|<recipientId>|<content>|<timestamp>
        """
        if len(parts) != 5:
            return Command.invalid(INVALID_SEND_FORMAT, raw=raw)

        _, sender_id, recipient_id, content, timestamp = parts
        return Command(
            type=CommandType.SEND,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            timestamp=timestamp,
            raw=raw,
        )

    def _parse_receive(self, parts: list, raw: str) -> Command:
        """
        Parse a RECEIVE command.

        Format: RECEIVE|<userId>
        """
        if len(parts) != 2:
            return Command.invalid(INVALID_RECEIVE_FORMAT, raw=raw)

        return Command(type=CommandType.RECEIVE, recipient_id=parts[1], raw=raw)

    def format_message(self, message: Message) -> str:
        """Format one delivered message as a MESSAGE line."""
        fields = (ResponseStatus.MESSAGE.value,) + message.fields
        return FIELD_DELIMITER.join(fields) + LINE_TERMINATOR

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into protocol text.

        Args:
            response: Response object to format

        Returns:
            Formatted response, every line newline-terminated.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.ok())
            'OK\\n'
            >>> parser.format_response(Response.error("Unknown command"))
            'ERROR|Unknown command\\n'
        """
        if response.status == ResponseStatus.MESSAGE:
            return "".join(self.format_lines(response.messages))

        if response.message:
            return f"{response.status.value}{FIELD_DELIMITER}{response.message}{LINE_TERMINATOR}"
        return f"{response.status.value}{LINE_TERMINATOR}"

    def format_lines(self, messages: List[Message]) -> List[str]:
        """Format a mailbox snapshot as MESSAGE lines, preserving order."""
        return [self.format_message(message) for message in messages]
