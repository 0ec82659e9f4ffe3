# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for Sharp AQUOS TVs.

This module defines the text protocol served by the TV's remote control
server on TCP/IP: command formatting, reply classification, and the
handshake markers. It does not contain a connection implementation.
"""

from .constants import (
    TERMINATOR,
    MNEMONIC_LENGTH,
    PARAMETER_LENGTH,
    QUERY_PARAMETER,
    SETUP_COMMAND,
    LOGIN_PROMPT_MARKER,
    PASSWORD_PROMPT,
    SUCCESS_MARKER,
    LOGIN_MISMATCH_MARKER,
    ERROR_MARKER,
    MIN_VOLUME,
    MAX_VOLUME,
    MIN_INPUT,
    MAX_INPUT,
    MIN_CAPTIONING,
    MAX_CAPTIONING,
    MIN_REMOTE_KEY,
    MAX_REMOTE_KEY,
    NETFLIX_REMOTE_KEY,
  )

from .command import AquosCommand, COMMAND_DESCRIPTIONS

from .reply import (
    AquosReply,
    ReplyKind,
    ReplyFramer,
    classify_reply,
    decode_reply_data,
  )
