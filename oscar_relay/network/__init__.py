"""Network module for OSCAR Relay."""

from .tcp_server import RelayServer, run_server

__all__ = ["RelayServer", "run_server"]
