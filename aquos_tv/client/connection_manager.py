# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV connection manager.

Owns the transport to the TV: connects, performs the login/setup handshake,
signals readiness once, and reconnects (silently, without limit) whenever an
established connection closes.

All transport events are consumed, in order, by a single supervisor task;
every state transition happens in that task.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from aenum import Enum as AEnum

from ..internal_types import *
from ..exceptions import (
    AquosTvError,
    AquosAuthRequiredError,
    AquosInvalidCredentialsError,
    AquosNotReadyError,
    AquosTimeoutError,
    AquosConnectionError,
    AquosConnectionLostError,
    AquosConnectionClosedError,
  )
from ..pkg_logging import logger
from ..protocol import (
    SETUP_COMMAND,
    LOGIN_PROMPT_MARKER,
    SUCCESS_MARKER,
    LOGIN_MISMATCH_MARKER,
    decode_reply_data,
  )
from .client_config import AquosTvClientConfig
from .client_transport import AquosClientTransport
from .tcp_client_transport import TcpAquosClientTransport
from .transport_events import TransportEvent, TransportEventType

ReadyCallback = Callable[[Optional[BaseException]], None]
"""Called once with None when the first connection becomes ready, or with the
   exception that prevented it."""

class ConnectionState(AEnum):
    DISCONNECTED = 0
    CONNECTING = 1
    AWAITING_LOGIN = 2
    AWAITING_SETUP_ACK = 3
    READY = 4

class AquosConnectionManager:
    """Maintains the connection to an AQUOS TV."""

    config: AquosTvClientConfig
    transport: AquosClientTransport
    host: str
    port: int

    state: ConnectionState = ConnectionState.DISCONNECTED

    ready_future: Optional[Future[None]] = None
    """Completed once, when the first connection becomes ready or fails terminally."""

    on_data: Optional[Callable[[bytes], None]] = None
    """Receives all data that arrives while READY."""

    on_disconnected: Optional[Callable[[BaseException], None]] = None
    """Called whenever the connection closes, with the error to report to
       anything waiting for a reply."""

    connect_attempts: int = 0
    """Number of times the transport has been opened."""

    ever_ready: bool = False

    _events: asyncio.Queue[Optional[TransportEvent]]
    _ready_callback: Optional[ReadyCallback] = None
    _supervisor_task: Optional[asyncio.Task[None]] = None
    _ready_event: asyncio.Event
    _wake_event: asyncio.Event
    _closing: bool = False
    _final_exc: Optional[BaseException] = None
    _transport_open: bool = False
    _attempt_connected: bool = False
    _reopen_delay: Optional[float] = None
    _handshake_text: str = ''

    def __init__(
            self,
            config: AquosTvClientConfig,
            transport: Optional[AquosClientTransport]=None,
          ) -> None:
        if config.host is None:
            raise AquosTvError("No TV host configured; provide a host or set AQUOS_TV_HOST")
        self.config = config
        self.host = config.host
        self.port = config.port
        if transport is None:
            transport = TcpAquosClientTransport(connect_timeout_secs=config.connect_timeout_secs)
        self.transport = transport
        self._events = asyncio.Queue()
        self._ready_event = asyncio.Event()
        self._wake_event = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self.state == ConnectionState.READY

    @property
    def is_closing(self) -> bool:
        return self._closing

    @property
    def final_exception(self) -> Optional[BaseException]:
        """The error that stopped the manager, if any."""
        return self._final_exc

    def connect(self, ready_callback: Optional[ReadyCallback]=None) -> Future[None]:
        """Starts connecting, and returns a future that completes when the first
           connection is ready.

        If the TV demands a login that is not configured, or rejects the configured
        credentials, or the very first connection attempt fails, the future (and
        ready_callback) receive the error and the manager stops.

        May only be called once.
        """
        if self._supervisor_task is not None or self._closing:
            raise AquosTvError(f"{self}: connect() may only be called once")
        loop = asyncio.get_running_loop()
        self.ready_future = loop.create_future()
        self._ready_callback = ready_callback
        self._open_transport()
        self._supervisor_task = loop.create_task(self._run())
        return self.ready_future

    async def wait_ready(self, timeout: Optional[float]=None) -> None:
        """Waits until the connection is READY (e.g., after a reconnect).

        Raises the terminal error if the manager has stopped, or AquosTimeoutError.
        """
        async def wait() -> None:
            while True:
                if self._final_exc is not None:
                    raise self._final_exc
                if self._closing:
                    raise AquosConnectionClosedError(f"{self}: Connection has been closed")
                if self._supervisor_task is None:
                    raise AquosNotReadyError(f"{self}: connect() has not been called")
                if self.state == ConnectionState.READY:
                    return
                await self._ready_event.wait()
                if self.state != ConnectionState.READY and self._final_exc is None and not self._closing:
                    # Became ready and closed again before we woke up
                    self._ready_event.clear()

        try:
            await asyncio.wait_for(wait(), timeout)
        except asyncio.TimeoutError:
            raise AquosTimeoutError(f"{self}: Timed out waiting for the connection to become ready") from None

    def write(self, data: bytes) -> None:
        """Writes to the TV. Only allowed while READY."""
        if self.state != ConnectionState.READY:
            raise AquosNotReadyError(f"{self}: Cannot send commands in state {self.state.name}")
        self.transport.write(data)

    def recycle(self) -> None:
        """Drops the current connection; the supervisor reconnects as after any
           other close. No commands are accepted until the new connection is ready."""
        if self._transport_open and not self._closing:
            logger.info(f"{self}: Recycling connection")
            self.state = ConnectionState.DISCONNECTED
            self._ready_event.clear()
            self.transport.close()

    def close(self) -> None:
        """Closes the connection and stops reconnecting. Does not wait.
        Safe to call from a callback. Has no effect if already closing."""
        if self._closing:
            return
        self._closing = True
        logger.info(f"{self}: Closing")
        self._ready_event.set()
        self._wake_event.set()
        self._events.put_nowait(None)
        if self._transport_open:
            self.transport.close()
        self._signal_ready(AquosConnectionClosedError(f"{self}: Connection closed before it became ready"))

    async def wait_closed(self) -> None:
        """Waits for the supervisor to finish. Does not initiate closing."""
        if self._supervisor_task is not None:
            await self._supervisor_task

    async def aclose(self) -> None:
        self.close()
        await self.wait_closed()

    def _is_finished(self) -> bool:
        return (self._closing or self._final_exc is not None) and not self._transport_open

    async def _run(self) -> None:
        """The supervisor task: consumes transport events until closed or failed."""
        try:
            while not self._is_finished():
                if self._reopen_delay is not None:
                    delay = self._reopen_delay
                    self._reopen_delay = None
                    await self._pause(delay)
                    if not self._closing:
                        self._open_transport()
                    continue
                event = await self._events.get()
                if event is not None:
                    self._handle_event(event)
        except Exception as e:
            logger.exception(f"{self}: Unexpected error in connection supervisor: {e}")
            if self._final_exc is None:
                self._final_exc = e
            self._signal_ready(e)
            if self._transport_open:
                self.transport.close()
        finally:
            self.state = ConnectionState.DISCONNECTED
            self._ready_event.set()
            self._signal_ready(AquosConnectionClosedError(f"{self}: Connection closed before it became ready"))
            logger.debug(f"{self}: Supervisor exiting")

    async def _pause(self, delay: float) -> None:
        """Sleeps for delay seconds, or until close() is called."""
        try:
            await asyncio.wait_for(self._wake_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _open_transport(self) -> None:
        self.connect_attempts += 1
        self._attempt_connected = False
        self._handshake_text = ''
        self.state = ConnectionState.CONNECTING
        self._transport_open = True
        logger.info(f"{self}: Connecting (attempt {self.connect_attempts})")
        self.transport.open(self.host, self.port, self._events)

    def _handle_event(self, event: TransportEvent) -> None:
        event_type = event.event_type
        if event_type == TransportEventType.DATA:
            if self.state == ConnectionState.READY:
                if self.on_data is None:
                    logger.debug(f"{self}: No reply handler; dropping {event.data!r}")
                else:
                    self.on_data(event.data)
            elif not self._closing and self._final_exc is None:
                self._handle_handshake_data(event.data)
        elif event_type == TransportEventType.CONNECTED:
            self._attempt_connected = True
            logger.info(f"{self}: TCP connection established")
            if self._closing or self._final_exc is not None:
                return
            if self.config.username is None or self.config.username == '':
                # No login configured; go straight to setup
                self._send_setup()
        elif event_type == TransportEventType.ERRORED:
            logger.warning(f"{self}: Transport error: {event.exc!r}")
            if not self._attempt_connected:
                # The connection was never established, so no CLOSED event follows
                self._transport_open = False
                self._on_attempt_failed(event.exc)
        elif event_type == TransportEventType.CLOSED:
            self._transport_open = False
            self._on_closed()
        else:
            raise AquosTvError(f"{self}: Unknown transport event {event}")

    def _handle_handshake_data(self, data: bytes) -> None:
        self._handshake_text += decode_reply_data(data)
        text = self._handshake_text
        if self.state == ConnectionState.AWAITING_SETUP_ACK and LOGIN_MISMATCH_MARKER in text:
            self._handshake_text = ''
            self._fail(AquosInvalidCredentialsError())
        elif LOGIN_PROMPT_MARKER in text:
            self._handshake_text = ''
            if not self.config.has_credentials:
                self._fail(AquosAuthRequiredError())
                return
            self.state = ConnectionState.AWAITING_LOGIN
            logger.debug(f"{self}: Login prompt received; sending credentials")
            username = self.config.username
            password = self.config.password
            assert username is not None and password is not None
            self.transport.write(f"{username}\n{password}\n".encode('utf-8'))
            self._send_setup()
        elif self.state == ConnectionState.AWAITING_SETUP_ACK and SUCCESS_MARKER in text:
            self._handshake_text = ''
            self._on_ready()
        else:
            logger.debug(f"{self}: Ignoring handshake text {text!r} in state {self.state.name}")

    def _send_setup(self) -> None:
        logger.debug(f"{self}: Sending setup command")
        self.transport.write(SETUP_COMMAND.encode('ascii'))
        self.state = ConnectionState.AWAITING_SETUP_ACK

    def _on_ready(self) -> None:
        self.state = ConnectionState.READY
        self._ready_event.set()
        if self.ever_ready:
            logger.info(f"{self}: Reconnected")
        else:
            self.ever_ready = True
            logger.info(f"{self}: Connected and ready")
            self._signal_ready(None)

    def _on_attempt_failed(self, exc: Optional[BaseException]) -> None:
        self.state = ConnectionState.DISCONNECTED
        if self._closing:
            return
        if self.connect_attempts <= 1:
            # The first connection is not retried
            error = AquosConnectionError(f"{self}: Unable to connect: {exc}")
            error.__cause__ = exc
            self._fail(error)
        else:
            logger.info(f"{self}: Reconnect failed; retrying in {self.config.reconnect_interval_secs} seconds")
            self._reopen_delay = self.config.reconnect_interval_secs

    def _on_closed(self) -> None:
        previous_state = self.state
        self.state = ConnectionState.DISCONNECTED
        self._ready_event.clear()
        if self.on_disconnected is not None:
            self.on_disconnected(AquosConnectionLostError(f"{self}: Connection closed while waiting for a reply"))
        if self._closing or self._final_exc is not None:
            logger.info(f"{self}: Connection closed")
            return
        logger.warning(f"{self}: Connection closed in state {previous_state.name}; reconnecting")
        self._open_transport()

    def _fail(self, exc: BaseException) -> None:
        """Stops the manager with a terminal error."""
        logger.error(f"{self}: {exc}")
        self._final_exc = exc
        self._ready_event.set()
        self._signal_ready(exc)
        if self._transport_open:
            self.transport.close()

    def _signal_ready(self, exc: Optional[BaseException]) -> None:
        """Completes the ready future and calls the ready callback, at most once."""
        if self.ready_future is None or self.ready_future.done():
            return
        if exc is None:
            self.ready_future.set_result(None)
        else:
            self.ready_future.set_exception(exc)
        callback = self._ready_callback
        self._ready_callback = None
        if callback is not None:
            try:
                callback(exc)
            except Exception:
                logger.exception(f"{self}: Exception in ready callback")

    def __str__(self) -> str:
        return f"AquosConnectionManager({self.host}:{self.port}, state={self.state.name})"

    def __repr__(self) -> str:
        return str(self)
