# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Protocol-specific constants
"""

from __future__ import annotations

TERMINATOR = '\r'
"""Every command sent to the TV ends with a carriage return."""

MNEMONIC_LENGTH = 4
"""Every command starts with a fixed 4-character mnemonic (e.g., "POWR")."""

PARAMETER_LENGTH = 4
"""The parameter following the mnemonic is left-justified and space-padded to this width."""

QUERY_PARAMETER = '?'
"""Parameter used in place of a value to query the current setting."""

SETUP_COMMAND = 'RSPW2   ' + TERMINATOR
"""Sent once per connection, after login (or immediately if no login is
   configured). The TV's "OK" acknowledgment means the session is ready
   for normal commands."""

# Initial connection handshake, when the TV requires a login:
#   TV:     "Login:"
#   Client: f"{username}\n{password}\n" followed by SETUP_COMMAND
#   TV:     "OK" if the credentials are correct, or LOGIN_MISMATCH_MARKER
#   <Normal command/reply session begins>
# Without a login, the client sends SETUP_COMMAND immediately after connecting.

LOGIN_PROMPT_MARKER = 'Login'
"""Substring of the TV's prompt for a username."""

PASSWORD_PROMPT = 'Password:'
"""The TV's prompt for a password, sent after the username has been read."""

SUCCESS_MARKER = 'OK'
"""Substring of a successful acknowledgment."""

LOGIN_MISMATCH_MARKER = 'User Name or Password mismatch'
"""Substring of the TV's reply to a bad username or password."""

ERROR_MARKER = 'ERR'
"""Substring of the TV's reply to a command it could not execute."""

MIN_VOLUME = 0
MAX_VOLUME = 60

MIN_INPUT = 1
MAX_INPUT = 9

MIN_CAPTIONING = 0
MAX_CAPTIONING = 99

MIN_REMOTE_KEY = 0
MAX_REMOTE_KEY = 99

NETFLIX_REMOTE_KEY = 59
"""Remote key code of the Netflix app shortcut button."""
