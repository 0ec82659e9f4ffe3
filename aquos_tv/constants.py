# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by aquos_tv"""

DEFAULT_PORT = 10002
"""The listen port number used by the TV's remote control server."""

DEFAULT_TIMEOUT = 5.0
"""The default time to wait for the reply to a single command, in seconds."""

CONNECT_TIMEOUT = 15.0
"""The timeout for connecting to the TV and completing the login handshake, in seconds."""

RECONNECT_INTERVAL = 1.0
"""The pause between failed reconnection attempts, in seconds. There is no
   limit on the number of attempts."""
