# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV reply classification and reassembly.

Replies carry no length prefix and no request ID. Each reply is a short line
of text ended by a carriage return; e.g., "OK\\r", "ERR\\r", or a queried
value such as "25\\r". Classification is by substring, not by parsing.
"""

from __future__ import annotations

from aenum import Enum as AEnum

from ..internal_types import *
from .constants import ERROR_MARKER

class ReplyKind(AEnum):
    SUCCESS = 1
    """The command was accepted. The reply text is "OK" or the queried value."""

    ERROR = 2
    """The TV replied with an error marker."""

def classify_reply(text: str) -> ReplyKind:
    """Classifies the text of one reply from the TV."""
    if ERROR_MARKER in text:
        return ReplyKind.ERROR
    return ReplyKind.SUCCESS

def decode_reply_data(data: bytes) -> str:
    """Decodes bytes received from the TV. Undecodable bytes are replaced rather than rejected."""
    return data.decode('utf-8', errors='replace')

class AquosReply:
    """A single reply received from the TV."""

    raw_data: bytes
    text: str
    kind: ReplyKind

    def __init__(self, raw_data: bytes):
        self.raw_data = raw_data
        self.text = decode_reply_data(raw_data).strip('\r\n')
        self.kind = classify_reply(self.text)

    @property
    def is_error(self) -> bool:
        return self.kind == ReplyKind.ERROR

    def __str__(self) -> str:
        return f"AquosReply({self.kind.name}: {self.text!r})"

    def __repr__(self) -> str:
        return str(self)

class ReplyFramer:
    """Reassembles a received byte stream into individual replies.

    A reply ends at a carriage return or newline. A reply split across several
    received chunks is held until its terminator arrives, and several replies
    in one chunk are split apart. Empty lines are dropped.
    """

    buffer: bytearray

    def __init__(self) -> None:
        self.buffer = bytearray()

    def feed(self, data: bytes) -> List[bytes]:
        """Adds received data, and returns the complete replies now available,
           without their terminators."""
        self.buffer.extend(data)
        results: List[bytes] = []
        while True:
            i_cr = self.buffer.find(b'\r')
            i_lf = self.buffer.find(b'\n')
            if i_cr < 0 and i_lf < 0:
                break
            if i_cr < 0 or (0 <= i_lf < i_cr):
                i_end = i_lf
            else:
                i_end = i_cr
            line = bytes(self.buffer[:i_end])
            del self.buffer[:i_end + 1]
            if len(line) > 0:
                results.append(line)
        return results

    @property
    def partial_data(self) -> bytes:
        """Any received data that has not yet been terminated."""
        return bytes(self.buffer)

    def clear(self) -> None:
        self.buffer.clear()
