# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV emulator session.

Handles one client connection to the emulator: the optional login dialog,
followed by carriage-return terminated commands.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import TERMINATOR, PASSWORD_PROMPT, LOGIN_MISMATCH_MARKER

if TYPE_CHECKING:
    from .emulator_impl import AquosTvEmulator

LOGIN_PROMPT = b"Login:"
"""Sent by the emulator on connect when a login is required."""

LOGIN_TIMEOUT = 10.0
"""Timeout for the login dialog."""

IDLE_TIMEOUT = 300.0
"""Timeout for idle connections, after login."""

class EmulatorSessionState(Enum):
    UNCONNECTED = 0
    READING_USERNAME = 1
    READING_PASSWORD = 2
    READING_COMMAND = 3
    SHUTTING_DOWN = 4
    CLOSED = 5

class AquosTvEmulatorSession(asyncio.Protocol):
    session_id: int = -1
    emulator: AquosTvEmulator
    transport: Optional[asyncio.Transport] = None
    peer_name: str = "<unconnected>"
    description: str = "EmulatorSession(<unconnected>)"
    state: EmulatorSessionState = EmulatorSessionState.UNCONNECTED
    partial_data: bytes = b""
    received_username: str = ""
    transport_closed: bool = True
    login_timer: Optional[asyncio.TimerHandle] = None
    idle_timer: Optional[asyncio.TimerHandle] = None

    def __init__(self, emulator: AquosTvEmulator):
        self.emulator = emulator
        self.session_id = emulator.alloc_session_id(self)
        self.description = f"EmulatorSession(id={self.session_id}, from=<unconnected>)"

    @property
    def is_closed(self) -> bool:
        return self.state in (EmulatorSessionState.CLOSED, EmulatorSessionState.SHUTTING_DOWN)

    def write(self, data: Union[bytes, bytearray, memoryview]) -> None:
        if self.transport is None or self.transport_closed:
            logger.debug(f"EmulatorSession: Attempt to write to closed session {self.description}; ignored")
            return
        self.transport.write(data)

    def write_reply(self, text: str) -> None:
        self.write((text + TERMINATOR).encode('utf-8'))

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """Called when a connection is made."""
        assert isinstance(transport, asyncio.Transport)
        assert self.state == EmulatorSessionState.UNCONNECTED
        self.transport = transport
        self.transport_closed = False
        self.peer_name = str(transport.get_extra_info('peername'))
        self.description = f"EmulatorSession(id={self.session_id}, from='{self.peer_name}')"
        logger.debug(f"EmulatorSession: Connection from {self.peer_name}")
        if self.emulator.requires_login:
            self.state = EmulatorSessionState.READING_USERNAME
            self.transport.write(LOGIN_PROMPT)
            self.login_timer = asyncio.get_running_loop().call_later(
                LOGIN_TIMEOUT,
                lambda: self._on_login_timeout())
        else:
            self._start_commands()

    def close(self) -> None:
        if not self.is_closed:
            self.state = EmulatorSessionState.SHUTTING_DOWN
            self._cancel_timers()
            if not self.transport_closed and not self.transport is None:
                self.transport_closed = True
                self.transport.close()
            self.state = EmulatorSessionState.CLOSED
            self.emulator.free_session_id(self.session_id)

    def _cancel_timers(self) -> None:
        if self.login_timer is not None:
            self.login_timer.cancel()
            self.login_timer = None
        if self.idle_timer is not None:
            self.idle_timer.cancel()
            self.idle_timer = None

    def _restart_idle_timer(self) -> None:
        if self.idle_timer is not None:
            self.idle_timer.cancel()
        self.idle_timer = asyncio.get_running_loop().call_later(
            IDLE_TIMEOUT,
            lambda: self._on_idle_timeout())

    def _start_commands(self) -> None:
        self.state = EmulatorSessionState.READING_COMMAND
        self._restart_idle_timer()

    def _on_login_timeout(self) -> None:
        self.login_timer = None
        if self.state in (EmulatorSessionState.READING_USERNAME, EmulatorSessionState.READING_PASSWORD):
            logger.debug(f"{self}: Login timeout")
            self.close()

    def _on_idle_timeout(self) -> None:
        self.idle_timer = None
        if self.state == EmulatorSessionState.READING_COMMAND:
            logger.debug(f"{self}: Idle timeout")
            self.close()

    def _take_line(self, terminator: bytes) -> Optional[str]:
        """Removes and returns the next terminated line from partial_data, or None."""
        i_end = self.partial_data.find(terminator)
        if i_end < 0:
            return None
        line = self.partial_data[:i_end]
        self.partial_data = self.partial_data[i_end + 1:]
        return line.decode('utf-8', errors='replace').strip('\r\n')

    def data_received(self, data: bytes) -> None:
        """Called when some data is received."""
        try:
            self.partial_data += data
            while not self.is_closed:
                if self.state == EmulatorSessionState.READING_USERNAME:
                    line = self._take_line(b'\n')
                    if line is None:
                        break
                    self.received_username = line
                    self.state = EmulatorSessionState.READING_PASSWORD
                    self.write(("\r\n" + PASSWORD_PROMPT).encode('utf-8'))
                elif self.state == EmulatorSessionState.READING_PASSWORD:
                    line = self._take_line(b'\n')
                    if line is None:
                        break
                    if self.login_timer is not None:
                        self.login_timer.cancel()
                        self.login_timer = None
                    if self.emulator.check_login(self.received_username, line):
                        logger.debug(f"{self}: Login successful")
                        self.write(b"\r\n")
                        self._start_commands()
                    else:
                        logger.debug(f"{self}: Login failed")
                        self.write(("\r\n" + LOGIN_MISMATCH_MARKER + "\r\n").encode('utf-8'))
                        self.close()
                elif self.state == EmulatorSessionState.READING_COMMAND:
                    line = self._take_line(b'\r')
                    if line is None:
                        break
                    if line == '':
                        continue
                    self._restart_idle_timer()
                    self.emulator.on_command_received(self, line)
                else:
                    break
        except Exception as e:
            logger.exception(f"{self}: Exception while processing data: {e}")
            self.close()
            raise

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        """Called when the connection is lost or closed."""
        logger.debug(f"{self}: Connection lost, exception={exc}; closing connection")
        self.transport_closed = True
        self.close()

    def eof_received(self) -> bool:
        """Called when the other end calls write_eof() or equivalent."""
        logger.debug(f"{self}: EOF received; closing connection")
        self.close()
        return True

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return str(self)
