# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package aquos_tv provides a command-line tool and API for controlling
Sharp AQUOS TVs via their TCP/IP remote control protocol.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    AquosTvError,
    AquosAuthRequiredError,
    AquosInvalidCredentialsError,
    AquosRangeError,
    AquosWireError,
    AquosBusyError,
    AquosNotReadyError,
    AquosTimeoutError,
    AquosConnectionError,
    AquosConnectionLostError,
    AquosConnectionClosedError,
  )

from .constants import DEFAULT_PORT, DEFAULT_TIMEOUT, CONNECT_TIMEOUT, RECONNECT_INTERVAL

from .client import (
    AquosTvClient,
    AquosTvClientConfig,
    AquosConnectionManager,
    AquosCommandChannel,
    AquosClientTransport,
    TcpAquosClientTransport,
    ConnectionState,
    TransportEvent,
    TransportEventType,
    aquos_tv_connect,
  )

from .protocol import (
    AquosCommand,
    AquosReply,
    ReplyKind,
    COMMAND_DESCRIPTIONS,
  )

from .util import (
    full_class_name,
    full_name_of_class,
    exception_description,
)
