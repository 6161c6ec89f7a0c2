"""
OSCAR Relay: In-Memory Store-and-Forward Message Relay

A small messaging relay built with Python asyncio. Clients deliver
messages addressed to a recipient over a line-delimited TCP protocol,
and the recipient later collects everything filed under its identifier.
"""

__version__ = "1.0.0"
