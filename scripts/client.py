#!/usr/bin/env python3
"""
Interactive Test Client for OSCAR Relay

A simple command-line client for manually testing the relay server.
The server answers one request per connection, so every command opens a
fresh connection.

Usage:
    python scripts/client.py                  # Connect to localhost:5190
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Commands:
    send <from> <to> <text...>   - Send a message (timestamp added automatically)
    receive <user>               - Fetch pending messages for a user
    raw <line>                   - Send a raw protocol line
    help                         - Show this help
    exit                         - Exit client
"""

import argparse
import socket
import sys
from datetime import datetime, timezone

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class RelayClient:
    """Simple TCP client for OSCAR Relay."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout

    def request(self, line: str) -> list:
        """Send one request line and return every response line."""
        if not line.endswith('\n'):
            line += '\n'

        with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
            sock.sendall(line.encode('utf-8'))

            # Server closes the connection after responding
            response = b''
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                response += chunk

        return response.decode('utf-8').splitlines()

    def send(self, sender: str, recipient: str, content: str, timestamp: str = None) -> list:
        """Send a message to a recipient."""
        if timestamp is None:
            timestamp = datetime.now(timezone.utc).isoformat(timespec='seconds')
        return self.request(f"SEND|{sender}|{recipient}|{content}|{timestamp}")

    def receive(self, user: str) -> list:
        """Fetch pending messages for a user."""
        return self.request(f"RECEIVE|{user}")


def print_help():
    """Print help message."""
    print("""
OSCAR Relay Commands:
---------------------
  send <from> <to> <text...>   Send a message; timestamp is the current UTC time
  receive <user>               Show every message filed for <user>
  raw <line>                   Send <line> to the server unchanged

Client Commands:
----------------
  help                         Show this help message
  exit                         Exit the client

Examples:
---------
  send alice bob hello there   Leave "hello there" for bob
  receive bob                  Read bob's mailbox
  raw PING|x                   Send an arbitrary protocol line
""")


def run_command(client: RelayClient, command: str) -> list:
    """Translate a client command into a request and return the response."""
    name, _, rest = command.partition(' ')
    name = name.lower()

    if name == "send":
        args = rest.split(' ', 2)
        if len(args) < 3:
            return ["usage: send <from> <to> <text...>"]
        return client.send(args[0], args[1], args[2])

    if name == "receive":
        if not rest:
            return ["usage: receive <user>"]
        return client.receive(rest.strip())

    if name == "raw":
        return client.request(rest)

    return [f"unknown command: {name} (type 'help')"]


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for OSCAR Relay"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5190,
        help="Server port (default: 5190)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("OSCAR Relay Client")
    print("==================")
    print(f"Server: {args.host}:{args.port}. Type 'help' for commands.\n")

    client = RelayClient(args.host, args.port, args.timeout)

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    print("Goodbye!")
                    break

                try:
                    for line in run_command(client, command):
                        print(line)
                except OSError as e:
                    print(f"Connection error: {e}")
                    print(f"  Is the server running? Try: python -m oscar_relay.server --port {args.port}")

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
        sys.exit(130)


if __name__ == "__main__":
    main()
