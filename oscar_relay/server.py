#!/usr/bin/env python3
"""
OSCAR Relay Server Entry Point

This is the main entry point for starting the relay server.

Usage:
    python -m oscar_relay.server                    # Default settings (0.0.0.0:5190)
    python -m oscar_relay.server --port 8080        # Custom port
    python -m oscar_relay.server --host 127.0.0.1   # Custom host
    python -m oscar_relay.server --debug            # Enable debug logging
    python -m oscar_relay.server --shards 64        # Custom store sharding

Environment Variables:
    OSCAR_RELAY_HOST          - Server bind address
    OSCAR_RELAY_PORT          - Server port
    OSCAR_RELAY_STORE_SHARDS  - Number of store shards
    OSCAR_RELAY_DEBUG         - Enable debug mode (true/false)
    OSCAR_RELAY_LOG_LEVEL     - Log level when not in debug mode
"""

import argparse
import asyncio
import logging
import signal
import sys

from .config.settings import settings
from .mailbox.store import MessageStore
from .network.tcp_server import RelayServer


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="OSCAR Relay: In-Memory Store-and-Forward Message Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--shards",
        type=int,
        default=settings.STORE_SHARDS,
        help="Number of independently locked store shards",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def install_signal_handlers(loop: asyncio.AbstractEventLoop, server: RelayServer) -> None:
    """
    Stop accepting connections on SIGINT/SIGTERM.

    Mailboxes live only in memory, so everything stored is lost once the
    loop exits. In-flight handlers are not waited for.
    """
    logger = logging.getLogger(__name__)

    def request_stop(sig: signal.Signals) -> None:
        logger.info(f"Received signal {sig.name}, closing listener")
        loop.create_task(server.stop())

    # add_signal_handler is not available on Windows event loops
    if sys.platform == 'win32':
        return

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, request_stop, sig)


def main() -> None:
    """Main entry point for the server."""
    args = parse_args()

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    # One store per process, handed to the server explicitly
    store = MessageStore(num_shards=args.shards)
    server = RelayServer(host=args.host, port=args.port, store=store)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    install_signal_handlers(loop, server)

    logger.info(f"Starting OSCAR Relay on {args.host}:{args.port} "
                f"({args.shards} store shards, debug={args.debug})")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except OSError as e:
        # Listener faults are fatal; there is no automatic restart
        logger.error(f"Could not listen on {args.host}:{args.port}: {e}")
        raise
    finally:
        stats = store.get_stats()
        logger.info(f"Discarding {stats['messages']} stored messages in {stats['mailboxes']} mailboxes")
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
