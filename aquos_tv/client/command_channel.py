# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV command channel.

Sends one command at a time and hands the next reply to that command's
future. The protocol has no request IDs, so at most one command may be
waiting for a reply; submitting another raises AquosBusyError.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from ..internal_types import *
from ..exceptions import AquosBusyError, AquosNotReadyError, AquosWireError
from ..pkg_logging import logger
from ..protocol import AquosCommand, AquosReply, ReplyFramer, ReplyKind

from .connection_manager import AquosConnectionManager

class AquosCommandChannel:
    """Correlates commands with replies over an AquosConnectionManager."""

    connection: AquosConnectionManager
    line_framing: bool
    framer: ReplyFramer

    pending: Optional[Future[AquosReply]] = None
    """The future of the command waiting for a reply, if any."""

    pending_command: Optional[AquosCommand] = None

    def __init__(self, connection: AquosConnectionManager, line_framing: Optional[bool]=None):
        self.connection = connection
        self.line_framing = connection.config.line_framing if line_framing is None else line_framing
        self.framer = ReplyFramer()
        connection.on_data = self.on_data
        connection.on_disconnected = self.reset

    @property
    def is_busy(self) -> bool:
        return self.pending is not None

    def submit(self, command: AquosCommand) -> Future[AquosReply]:
        """Writes a command and returns a future for its reply. Does not wait.

        Raises AquosNotReadyError if the connection is not ready, or AquosBusyError
        if another command is still waiting for its reply. Nothing is written in
        either case.
        """
        if not self.connection.is_ready:
            raise AquosNotReadyError(f"Cannot send {command}: connection is not ready")
        if self.pending is not None:
            raise AquosBusyError(f"Cannot send {command}: {self.pending_command} is still waiting for a reply")
        logger.debug(f"Sending {command}")
        self.connection.write(command.raw_data)
        future: Future[AquosReply] = asyncio.get_running_loop().create_future()
        self.pending = future
        self.pending_command = command
        return future

    def on_data(self, data: bytes) -> None:
        """Handles data received while the connection is ready."""
        if self.line_framing:
            for reply_data in self.framer.feed(data):
                self.on_reply(AquosReply(reply_data))
        else:
            self.on_reply(AquosReply(data))

    def on_reply(self, reply: AquosReply) -> None:
        """Completes the pending command's future with a reply, if a command is pending."""
        future = self.pending
        command = self.pending_command
        self.pending = None
        self.pending_command = None
        if future is None:
            logger.debug(f"Dropping unsolicited {reply}")
            return
        if future.done():
            # The caller gave up waiting
            logger.debug(f"Dropping {reply} for abandoned {command}")
            return
        logger.debug(f"Received {reply} for {command}")
        if reply.kind == ReplyKind.ERROR:
            future.set_exception(AquosWireError(reply.text))
        else:
            future.set_result(reply)

    def reset(self, exc: BaseException) -> None:
        """Fails the pending command, if any, and discards partial reply data.
        Called when the connection closes."""
        self.framer.clear()
        future = self.pending
        command = self.pending_command
        self.pending = None
        self.pending_command = None
        if future is not None and not future.done():
            logger.debug(f"Failing {command}: {exc}")
            future.set_exception(exc)

    def __str__(self) -> str:
        return f"AquosCommandChannel({self.connection})"

    def __repr__(self) -> str:
        return str(self)
