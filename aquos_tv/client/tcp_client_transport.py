# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV TCP/IP client transport.

Provides an implementation of AquosClientTransport over a TCP/IP
socket, using an asyncio.Protocol that turns socket callbacks into
TransportEvents.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import AquosTvError, AquosConnectionError
from ..constants import CONNECT_TIMEOUT
from ..pkg_logging import logger

from .client_transport import AquosClientTransport
from .transport_events import TransportEvent

class AquosStreamProtocol(asyncio.Protocol):
    """Forwards socket callbacks for one connection attempt to the owner's event queue.

    Callbacks that arrive after the attempt has ended (e.g., a connection that
    completes after close() abandoned it) are discarded.
    """

    owner: TcpAquosClientTransport
    attempt: int
    transport: Optional[asyncio.Transport] = None

    def __init__(self, owner: TcpAquosClientTransport, attempt: int):
        self.owner = owner
        self.attempt = attempt

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport
        if not self.owner._is_current(self.attempt):
            logger.debug(f"{self.owner}: Connection completed after it was abandoned; closing")
            transport.close()
            return
        self.owner._on_connection_made(transport)
        logger.debug(f"{self.owner}: Connection established")
        self.owner._put_event(TransportEvent.connected())

    def data_received(self, data: bytes) -> None:
        if self.owner._is_current(self.attempt):
            logger.debug(f"{self.owner}: Received {data!r}")
            self.owner._put_event(TransportEvent.data_received(data))

    def eof_received(self) -> bool:
        logger.debug(f"{self.owner}: EOF received; closing connection")
        # Returning False lets the transport close itself
        return False

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        logger.debug(f"{self.owner}: Connection lost, exception={exc}")
        if not self.owner._is_current(self.attempt):
            return
        if exc is not None:
            self.owner._put_event(TransportEvent.errored(exc))
        self.owner._emit_closed()

class TcpAquosClientTransport(AquosClientTransport):
    """AQUOS TV TCP/IP client transport.

    Each open() starts a new attempt. An attempt ends with exactly one CLOSED
    event, or with a single ERRORED event if the connection was never made.
    """

    connect_timeout_secs: float
    host: Optional[str] = None
    port: Optional[int] = None

    _events: Optional[asyncio.Queue[TransportEvent]] = None
    _transport: Optional[asyncio.Transport] = None
    _connect_task: Optional[asyncio.Task[None]] = None
    _attempt: int = 0
    _attempt_ended: bool = True

    def __init__(self, connect_timeout_secs: float=CONNECT_TIMEOUT) -> None:
        super().__init__()
        self.connect_timeout_secs = connect_timeout_secs

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt and not self._attempt_ended

    def _put_event(self, event: TransportEvent) -> None:
        assert self._events is not None
        self._events.put_nowait(event)

    def _on_connection_made(self, transport: asyncio.Transport) -> None:
        self._transport = transport

    def _emit_closed(self) -> None:
        """Ends the current attempt with a CLOSED event, if it has not already ended."""
        if self._attempt_ended:
            return
        self._attempt_ended = True
        self._transport = None
        self._put_event(TransportEvent.closed())

    async def _connect(self, host: str, port: int, attempt: int) -> None:
        loop = asyncio.get_running_loop()
        try:
            logger.debug(f"{self}: Connecting with timeout={self.connect_timeout_secs}")
            await asyncio.wait_for(
                loop.create_connection(lambda: AquosStreamProtocol(self, attempt), host, port),
                timeout=self.connect_timeout_secs)
        except asyncio.CancelledError:
            logger.debug(f"{self}: Connection attempt abandoned")
            raise
        except Exception as e:
            logger.debug(f"{self}: Connection attempt failed: {e!r}")
            if self._is_current(attempt):
                self._attempt_ended = True
                self._put_event(TransportEvent.errored(e))
        finally:
            if attempt == self._attempt:
                self._connect_task = None

    # @abstractmethod
    def open(self, host: str, port: int, events: asyncio.Queue[TransportEvent]) -> None:
        """Starts connecting to (host, port)."""
        if self.is_open():
            raise AquosTvError(f"{self}: Transport is already open")
        self.host = host
        self.port = port
        self._events = events
        self._attempt += 1
        self._attempt_ended = False
        self._transport = None
        self._connect_task = asyncio.get_running_loop().create_task(self._connect(host, port, self._attempt))

    # @abstractmethod
    def write(self, data: bytes) -> None:
        transport = self._transport
        if transport is None or transport.is_closing():
            raise AquosConnectionError(f"{self}: Not connected")
        logger.debug(f"{self}: Writing {data!r}")
        transport.write(data)

    # @abstractmethod
    def close(self) -> None:
        if self._attempt_ended:
            return
        if self._transport is not None:
            # connection_lost() delivers the CLOSED event
            if not self._transport.is_closing():
                self._transport.close()
        else:
            if self._connect_task is not None:
                self._connect_task.cancel()
                self._connect_task = None
            self._emit_closed()

    # @abstractmethod
    def is_open(self) -> bool:
        return not self._attempt_ended

    def __str__(self) -> str:
        return f"TcpAquosClientTransport({self.host}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
