"""
Async TCP Server Module

This module implements the connection dispatcher for the relay.

Every connection carries exactly one request:
- Read a single line from the client
- Parse it with ProtocolParser
- Append to or read from the shared MessageStore
- Write the response and close the connection
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..config.settings import settings
from ..mailbox.message import Message
from ..mailbox.store import MessageStore
from ..protocol.commands import Command, CommandType, Response
from ..protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class RelayServer:
    """
    Asynchronous TCP server for the store-and-forward relay.

    Each client connection is handled in its own coroutine, so a slow or
    silent client only ever holds up its own handler. The accept loop is
    driven by asyncio and never waits on a client.

    Features:
    - One request per connection, connection closed after the response
    - Faults inside a handler are reported to that client only
    - One MessageStore shared by all connections

    Usage:
        server = RelayServer()
        await server.start()  # Runs forever on port 5190

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 5190)
        store: The MessageStore instance shared by all connections
        parser: The ProtocolParser for parsing requests
        buffer_limit: Stream buffer size; request lines may be longer
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: MessageStore = None,
            buffer_limit: int = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            store: MessageStore instance (creates new one if not provided)
            buffer_limit: Stream buffer size (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.store = store if store is not None else MessageStore()
        self.buffer_limit = buffer_limit if buffer_limit is not None else settings.READ_BUFFER_SIZE
        self.parser = ProtocolParser()

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._total_requests = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads one request line, dispatches it and writes the response.
        Immediate EOF counts as an empty request. Any unexpected exception
        is turned into an ``ERROR|Exception occurred: ...`` line for this
        client; nothing escapes to the accept loop. The writer is always
        closed on the way out.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        try:
            data = await self._read_line(reader)
            # Malformed bytes become U+FFFD and fall through to normal parsing
            request = data.decode(settings.ENCODING, errors="replace")
            logger.debug(f"Received request from {addr}: {request.rstrip()!r}")

            response = self.dispatch(self.parser.parse_request(request))
            await self._send_response(writer, response)

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Report to this client, keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
            await self._report_exception(writer, exc, addr)
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError) as exc:
                logger.debug(f"Error closing connection to {addr}: {exc}")
            logger.debug(f"Client disconnected: {addr}")

    async def _read_line(self, reader: StreamReader) -> bytes:
        """
        Read one line of any length, terminator included.

        Lines longer than the stream buffer are collected piece by piece.
        Returns whatever arrived before EOF when the terminator is missing,
        which is b"" for a client that sent nothing.
        """
        chunks = []
        while True:
            try:
                chunks.append(await reader.readuntil(b"\n"))
                break
            except asyncio.LimitOverrunError as exc:
                chunks.append(await reader.readexactly(exc.consumed))
            except asyncio.IncompleteReadError as exc:
                chunks.append(exc.partial)
                break
        return b"".join(chunks)

    def dispatch(self, command: Command) -> Response:
        """
        Execute a parsed command against the store.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result
        """
        if not command.is_valid:
            logger.debug(f"Rejected request {command.raw!r}: {command.error}")
            return Response.error(command.error)

        self._total_requests += 1

        if command.type == CommandType.SEND:
            message = Message(
                sender_id=command.sender_id,
                recipient_id=command.recipient_id,
                content=command.content,
                timestamp=command.timestamp,
            )
            self.store.append(message.recipient_id, message)
            logger.debug(f"Stored message {message.id} for {message.recipient_id}")
            return Response.ok()

        if command.type == CommandType.RECEIVE:
            messages = self.store.snapshot(command.recipient_id)
            logger.debug(f"Found {len(messages)} messages for {command.recipient_id}")
            if messages:
                return Response.delivery(messages)
            return Response.no_messages()

        raise ValueError(f"unsupported command type: {command.type}")

    async def _send_response(self, writer: StreamWriter, response: Response) -> None:
        """Write every line of a response, then flush once."""
        writer.write(self.parser.format_response(response).encode(settings.ENCODING))
        await writer.drain()

    async def _report_exception(self, writer: StreamWriter, exc: Exception, addr) -> None:
        """Send an exception response if the connection can still take it."""
        if writer.is_closing():
            return

        try:
            await self._send_response(writer, Response.exception(exc))
        except (ConnectionError, OSError) as write_exc:
            logger.debug(f"Could not report error to {addr}: {write_exc}")

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Creates the asyncio server and runs forever (or until cancelled or
        stopped). Bind failures propagate to the caller.

        Example:
            server = RelayServer(port=5190)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=self.buffer_limit,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop accepting connections.

        Closes the listening socket. Handlers still in flight are not
        drained.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self._total_requests,
            "store_stats": self.store.get_stats(),
        }


async def run_server(host: str = None, port: int = None) -> None:
    """
    Convenience function to create and run the server.

    Args:
        host: Bind address (default from settings)
        port: Port number (default from settings)

    Usage:
        asyncio.run(run_server())
    """
    server = RelayServer(host=host, port=port)

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await server.stop()
