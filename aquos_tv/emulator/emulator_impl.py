# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV emulator.

Provides a simple emulation of an AQUOS TV remote control server on TCP/IP.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    MNEMONIC_LENGTH,
    QUERY_PARAMETER,
    SUCCESS_MARKER,
    ERROR_MARKER,
    MIN_VOLUME,
    MAX_VOLUME,
    MIN_INPUT,
    MAX_INPUT,
    MIN_CAPTIONING,
    MAX_CAPTIONING,
    MIN_REMOTE_KEY,
    MAX_REMOTE_KEY,
  )
from ..constants import DEFAULT_PORT

from .session import AquosTvEmulatorSession

def _parse_int_in_range(text: str, min_value: int, max_value: int) -> Optional[int]:
    try:
        value = int(text)
    except ValueError:
        return None
    if value < min_value or value > max_value:
        return None
    return value

class AquosTvEmulator(AsyncContextManager['AquosTvEmulator']):
    username: Optional[str]
    password: Optional[str]
    bind_addr: str
    port: int
    sessions: Dict[int, AquosTvEmulatorSession]
    next_session_id: int = 0
    requests: asyncio.Queue[Optional[Tuple[AquosTvEmulatorSession, str]]]
    server: Optional[asyncio.Server] = None
    handler_task: Optional[asyncio.Task[None]] = None
    final_result: asyncio.Future[None]

    power: int
    muted: int
    volume: int
    input: int
    channel: str
    captioning: int
    last_remote_key: Optional[int] = None

    silent_mnemonics: Set[str]
    """Commands with these mnemonics are accepted but never answered; used to test timeouts."""

    received_commands: List[str]
    """Every command received by any session, in order."""

    def __init__(
            self,
            username: Optional[str] = None,
            password: Optional[str] = None,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_PORT,
            initial_power: bool = False,
            initial_volume: int = 20,
            initial_input: int = 1,
            initial_channel: str = "1",
            silent_mnemonics: Optional[Iterable[str]] = None,
          ):
        """Creates an emulator. It starts listening on entry to its async context,
        or on start().

        If username is empty or None, no login is required. Port 0 selects an
        ephemeral port; see bound_port.
        """
        self.username = username
        self.password = password
        self.bind_addr = '0.0.0.0' if bind_addr is None else bind_addr
        self.port = port
        self.sessions = {}
        self.requests = asyncio.Queue()
        self.final_result = asyncio.get_event_loop().create_future()
        self.power = 1 if initial_power else 0
        self.muted = 2
        self.volume = initial_volume
        self.input = initial_input
        self.channel = initial_channel
        self.captioning = 0
        self.silent_mnemonics = set() if silent_mnemonics is None else set(silent_mnemonics)
        self.received_commands = []

    @property
    def requires_login(self) -> bool:
        return self.username is not None and self.username != ''

    @property
    def bound_port(self) -> int:
        """The port actually being listened on (differs from port if port is 0)."""
        if self.server is not None and len(self.server.sockets) > 0:
            return self.server.sockets[0].getsockname()[1]
        return self.port

    def check_login(self, username: str, password: str) -> bool:
        return username == self.username and password == (self.password or '')

    def alloc_session_id(self, session: AquosTvEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.sessions[result] = session
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def disconnect_all(self) -> None:
        """Drops every client connection, as if the TV had restarted its server."""
        for session in list(self.sessions.values()):
            session.close()

    def on_command_received(self, session: AquosTvEmulatorSession, command_text: str) -> None:
        """Called when a command is received from a session."""
        self.requests.put_nowait((session, command_text))

    def handle_command(self, command_text: str) -> Optional[str]:
        """Handles a single command, and returns the reply text, or None to send no reply."""
        self.received_commands.append(command_text)
        mnemonic = command_text[:MNEMONIC_LENGTH]
        parameter = command_text[MNEMONIC_LENGTH:].strip()
        if mnemonic in self.silent_mnemonics:
            return None
        is_query = parameter == QUERY_PARAMETER

        if mnemonic == "RSPW":
            return SUCCESS_MARKER
        elif mnemonic == "POWR":
            if is_query:
                return str(self.power)
            if parameter in ("0", "1"):
                self.power = int(parameter)
                return SUCCESS_MARKER
        elif mnemonic == "MUTE":
            if is_query:
                return str(self.muted)
            if parameter in ("1", "2"):
                self.muted = int(parameter)
                return SUCCESS_MARKER
        elif mnemonic == "VOLM":
            if is_query:
                return str(self.volume)
            volume = _parse_int_in_range(parameter, MIN_VOLUME, MAX_VOLUME)
            if volume is not None:
                self.volume = volume
                return SUCCESS_MARKER
        elif mnemonic == "IAVD":
            if is_query:
                return str(self.input)
            selector = _parse_int_in_range(parameter, MIN_INPUT, MAX_INPUT)
            if selector is not None:
                self.input = selector
                return SUCCESS_MARKER
        elif mnemonic == "CTBD":
            if is_query:
                return self.channel
            if parameter != '':
                self.channel = parameter
                return SUCCESS_MARKER
        elif mnemonic == "CLCP":
            if is_query:
                return str(self.captioning)
            level = _parse_int_in_range(parameter, MIN_CAPTIONING, MAX_CAPTIONING)
            if level is not None:
                self.captioning = level
                return SUCCESS_MARKER
        elif mnemonic in ("CHUP", "CHDW"):
            if self.channel.isdigit():
                delta = 1 if mnemonic == "CHUP" else -1
                self.channel = str(max(1, int(self.channel) + delta))
            return SUCCESS_MARKER
        elif mnemonic == "RCKY":
            key = _parse_int_in_range(parameter, MIN_REMOTE_KEY, MAX_REMOTE_KEY)
            if key is not None:
                self.last_remote_key = key
                return SUCCESS_MARKER

        return ERROR_MARKER

    async def handle_requests(self) -> None:
        """Handle requests from sessions."""
        while True:
            session_and_command = await self.requests.get()
            try:
                if session_and_command is None:
                    logger.debug("Emulator handler: Received EOF; exiting")
                    break
                session, command_text = session_and_command
                try:
                    logger.debug(f"{session}: Emulator handler: received command {command_text!r}")
                    reply = self.handle_command(command_text)
                    if reply is None:
                        logger.debug(f"{session}: Sending NO reply to {command_text!r}")
                    else:
                        logger.debug(f"{session}: Emulator handler: Sending reply {reply!r}")
                        session.write_reply(reply)
                except asyncio.CancelledError:
                    logger.debug(f"{session}: Handler task cancelled; exiting")
                    break
                except Exception as e:
                    logger.exception(f"{session}: Handler task: Exception while handling request; killing session: {e}")
                    session.close()
            finally:
                self.requests.task_done()

    async def run(self) -> None:
        """Runs the Emulator until it is closed."""
        async with self:
            await self.wait_closed()

    async def start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
            self.handler_task = asyncio.create_task(self.handle_requests())
            self.server = await loop.create_server(
                lambda: AquosTvEmulatorSession(self),
                host=self.bind_addr,
                port=self.port)
            logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.bound_port}")
            await self.server.start_serving()
        except BaseException as e:
            self.set_final_result(e)
            try:
                await self.wait_closed()
            except BaseException:
                pass
            raise

    def close(self, exc: Optional[BaseException]=None) -> None:
        """Stops the Emulator."""
        self.set_final_result(exc)

    async def wait_closed(self) -> None:
        """Waits for the emulator to be fully closed. Does not initiate shutdown."""
        try:
            await self.final_result
        finally:
            try:
                if self.server is not None:
                    try:
                        self.server.close()
                    finally:
                        await self.server.wait_closed()
            finally:
                self.server = None
                if self.handler_task is not None:
                    try:
                        await self.handler_task
                    finally:
                        self.handler_task = None

    async def close_and_wait(self, exc: Optional[BaseException]=None) -> None:
        self.close(exc)
        await self.wait_closed()

    def set_final_result(self, exc: Optional[BaseException]=None) -> None:
        if not self.final_result.done():
            if exc is None:
                logger.debug(f"Emulator: Setting final result to success")
                self.final_result.set_result(None)
            else:
                logger.debug(f"Emulator: Setting final exception: {exc}")
                self.final_result.set_exception(exc)
            self.requests.put_nowait(None)
            self.disconnect_all()
            if self.server is not None:
                self.server.close()

    async def __aenter__(self) -> AquosTvEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        self.set_final_result(exc)
        try:
            # ensure that final_result has been awaited
            await self.wait_closed()
        except Exception:
            pass
