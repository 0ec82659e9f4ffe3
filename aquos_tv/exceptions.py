#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

class AquosTvError(Exception):
    """Base class for all error exceptions defined by this package."""
    pass

class AquosAuthRequiredError(AquosTvError):
    """The TV asked for a login, but no username and password were configured."""

    def __init__(self, msg: Optional[str]=None):
        if msg is None:
            msg = ("Connection refused: the TV requires a username and password. Check the "
                   "AQUOS remote control login settings on the TV and configure them.")
        super().__init__(msg)

class AquosInvalidCredentialsError(AquosTvError):
    """The TV rejected the configured username or password."""

    def __init__(self, msg: Optional[str]=None):
        super().__init__("Invalid username or password." if msg is None else msg)

class AquosRangeError(AquosTvError, ValueError):
    """A command parameter is outside the range accepted by the TV. Raised before
       anything is written."""
    pass

class AquosWireError(AquosTvError):
    """The TV replied to a command with an error marker."""
    reply_text: str

    def __init__(self, reply_text: str):
        super().__init__(f"The TV reported an error: {reply_text!r}")
        self.reply_text = reply_text

class AquosBusyError(AquosTvError):
    """A command was submitted while another command is still waiting for its reply."""
    pass

class AquosNotReadyError(AquosTvError):
    """A command was submitted before the connection finished its handshake."""
    pass

class AquosTimeoutError(AquosTvError):
    """The TV did not reply to a command in time."""
    pass

class AquosConnectionError(AquosTvError):
    """The TCP connection to the TV could not be established or was lost."""
    pass

class AquosConnectionLostError(AquosConnectionError):
    """The connection closed while a command was waiting for its reply."""
    pass

class AquosConnectionClosedError(AquosConnectionError):
    """The client was closed by the application."""
    pass
