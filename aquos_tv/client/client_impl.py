# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV client.

Provides async methods for each TV command on top of the connection manager
and command channel.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from ..internal_types import *
from ..exceptions import AquosTimeoutError
from ..pkg_logging import logger
from ..protocol import AquosCommand, AquosReply

from .client_config import AquosTvClientConfig
from .client_transport import AquosClientTransport
from .connection_manager import AquosConnectionManager, ReadyCallback
from .command_channel import AquosCommandChannel

class AquosTvClient:
    """AQUOS TV TCP/IP client.

    Commands issued concurrently from several tasks are sent one at a time, in
    the order they were issued; each caller receives the reply to its own command.

    Example:

        async with AquosTvClient("192.168.1.20", "admin", "secret") as client:
            await client.connect()
            await client.power(True)
            level = await client.volume()
    """

    config: AquosTvClientConfig
    connection: AquosConnectionManager
    channel: AquosCommandChannel

    _transaction_lock: asyncio.Lock
    """Ensures that only one command is in progress at a time."""

    def __init__(
            self,
            host: Optional[str]=None,
            username: Optional[str]=None,
            password: Optional[str]=None,
            *,
            config: Optional[AquosTvClientConfig]=None,
            transport: Optional[AquosClientTransport]=None,
          ) -> None:
        """Initializes the client. Does not connect; call connect().

        If transport is None, a TCP/IP transport is used.
        """
        self.config = AquosTvClientConfig(
            host=host,
            username=username,
            password=password,
            base_config=config,
          )
        self.connection = AquosConnectionManager(self.config, transport=transport)
        self.channel = AquosCommandChannel(self.connection)
        self._transaction_lock = asyncio.Lock()

    async def connect(self, ready_callback: Optional[ReadyCallback]=None) -> None:
        """Connects and logs in, and waits until the TV accepts commands.

        Raises AquosAuthRequiredError, AquosInvalidCredentialsError,
        AquosConnectionError or AquosTimeoutError on failure; the client is
        closed in that case.
        """
        ready = self.connection.connect(ready_callback)
        try:
            await asyncio.wait_for(asyncio.shield(ready), self.config.connect_timeout_secs)
        except asyncio.TimeoutError:
            self.connection.close()
            raise AquosTimeoutError(
                f"{self}: Not ready within {self.config.connect_timeout_secs} seconds") from None
        except BaseException:
            self.connection.close()
            raise

    def submit(self, command: AquosCommand) -> Future[AquosReply]:
        """Sends a command without waiting, and returns a future for its reply.

        Unlike transact(), does not queue: raises AquosBusyError if another
        command is waiting for its reply, or AquosNotReadyError if not connected.
        """
        return self.channel.submit(command)

    async def transact(self, command: AquosCommand) -> AquosReply:
        """Sends a command and waits for the reply.

        Raises AquosWireError if the TV reports an error. If no reply arrives
        within config.timeout_secs, the connection is recycled (so the late
        reply cannot be taken as the reply to a later command) and
        AquosTimeoutError is raised. The same recycling happens if the caller
        is cancelled while waiting.
        """
        async with self._transaction_lock:
            await self.connection.wait_ready(self.config.connect_timeout_secs)
            future = self.channel.submit(command)
            try:
                return await asyncio.wait_for(future, self.config.timeout_secs)
            except asyncio.TimeoutError:
                logger.warning(f"{self}: No reply to {command}; recycling connection")
                self.connection.recycle()
                raise AquosTimeoutError(
                    f"No reply to {command} within {self.config.timeout_secs} seconds") from None
            except asyncio.CancelledError:
                if self.channel.pending is future:
                    logger.info(f"{self}: {command} cancelled while waiting for a reply; recycling connection")
                    self.connection.recycle()
                raise

    async def transact_str(self, command_str: str) -> AquosReply:
        """Sends a command given in textual form (e.g., "volume=12"). See
           AquosCommand.create_from_str()."""
        return await self.transact(AquosCommand.create_from_str(command_str))

    async def _transact_text(self, command: AquosCommand) -> str:
        reply = await self.transact(command)
        return reply.text

    async def power(self, on: Optional[bool]=None) -> str:
        """Queries power state (None; the TV replies "1" or "0"), or turns the TV
           on (True) or off (False)."""
        return await self._transact_text(AquosCommand.power(on))

    async def mute(self, muted: Optional[bool]=None) -> str:
        """Queries mute state (None), or mutes (True) or unmutes (False)."""
        return await self._transact_text(AquosCommand.mute(muted))

    async def volume(self, level: Optional[int]=None) -> str:
        """Queries the volume level (None), or sets it to 0-60."""
        return await self._transact_text(AquosCommand.volume(level))

    async def input(self, selector: Optional[int]=None) -> str:
        """Queries the selected input (None), or selects input 1-9."""
        return await self._transact_text(AquosCommand.input(selector))

    async def channel(self, code: Optional[Union[int, str]]=None) -> str:
        return await self._transact_text(AquosCommand.channel(code))

    async def captioning(self, level: Optional[int]=None) -> str:
        return await self._transact_text(AquosCommand.captioning(level))

    async def channel_up(self) -> str:
        return await self._transact_text(AquosCommand.channel_up())

    async def channel_down(self) -> str:
        return await self._transact_text(AquosCommand.channel_down())

    async def netflix(self) -> str:
        return await self._transact_text(AquosCommand.netflix())

    async def remote_key(self, code: int) -> str:
        return await self._transact_text(AquosCommand.remote_key(code))

    async def button(self, code: str) -> str:
        """Sends raw command text. The text is not checked."""
        return await self._transact_text(AquosCommand.button(code))

    def close(self) -> None:
        """Closes the connection and stops reconnecting. Does not wait."""
        self.connection.close()

    async def aclose(self) -> None:
        await self.connection.aclose()

    async def __aenter__(self) -> AquosTvClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        await self.aclose()

    def __str__(self) -> str:
        return f"AquosTvClient({self.connection.host}:{self.connection.port})"

    def __repr__(self) -> str:
        return str(self)
