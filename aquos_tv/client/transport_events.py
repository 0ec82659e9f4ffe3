# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Events delivered by an AquosClientTransport to its consumer.

A transport reports everything that happens on its socket as a sequence of
TransportEvent objects on a single asyncio.Queue, in the order they occur.
"""

from __future__ import annotations

from aenum import Enum as AEnum

from ..internal_types import *

class TransportEventType(AEnum):
    CONNECTED = 1
    """The TCP connection has been established."""

    DATA = 2
    """Bytes were received. `data` holds them."""

    CLOSED = 3
    """The connection was closed by either end. No further events follow
       until the transport is opened again."""

    ERRORED = 4
    """A connect, read or write failure. `exc` holds the cause. If the
       connection had been established, a CLOSED event follows."""

class TransportEvent:
    event_type: TransportEventType
    data: bytes
    exc: Optional[BaseException]

    def __init__(
            self,
            event_type: TransportEventType,
            data: bytes=b'',
            exc: Optional[BaseException]=None,
          ) -> None:
        self.event_type = event_type
        self.data = data
        self.exc = exc

    @classmethod
    def connected(cls) -> TransportEvent:
        return cls(TransportEventType.CONNECTED)

    @classmethod
    def data_received(cls, data: bytes) -> TransportEvent:
        return cls(TransportEventType.DATA, data=data)

    @classmethod
    def closed(cls, exc: Optional[BaseException]=None) -> TransportEvent:
        return cls(TransportEventType.CLOSED, exc=exc)

    @classmethod
    def errored(cls, exc: BaseException) -> TransportEvent:
        return cls(TransportEventType.ERRORED, exc=exc)

    def __str__(self) -> str:
        if self.event_type == TransportEventType.DATA:
            return f"TransportEvent(DATA, {self.data!r})"
        if self.exc is not None:
            return f"TransportEvent({self.event_type.name}, exc={self.exc!r})"
        return f"TransportEvent({self.event_type.name})"

    def __repr__(self) -> str:
        return str(self)
