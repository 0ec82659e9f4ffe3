# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV client abstract transport interface.

Provides a low-level abstract interface for a byte stream to the TV. Does
not provide login, setup, or reply correlation; those belong to the
connection manager and command channel that consume the transport's events.

This abstraction allows tests to substitute a scripted transport for a
real socket.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from ..internal_types import *
from .transport_events import TransportEvent

class AquosClientTransport(ABC):
    """Abstract base class for AQUOS TV client transports."""

    @abstractmethod
    def open(self, host: str, port: int, events: asyncio.Queue[TransportEvent]) -> None:
        """Starts connecting to (host, port). Does not wait for the connection.

        All subsequent events (CONNECTED, DATA, CLOSED, ERRORED) are put on
        `events` in the order they occur. May be called again after a CLOSED
        event, or after an ERRORED event on a connection that never reached
        CONNECTED, to reconnect.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Writes bytes to the connection without waiting for them to be sent.

        Raises AquosConnectionError if the transport is not connected.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def close(self) -> None:
        """Closes the connection, or abandons a connection attempt in progress.
        Does not wait. A CLOSED event is delivered once closing completes.

        Has no effect if the transport is not open.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def is_open(self) -> bool:
        """Returns True if a connection is established or being attempted."""
        raise NotImplementedError()
