# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV client.

Connection management, login handshake, and command/reply correlation
for the TV's TCP/IP remote control server.
"""

from .client_config import AquosTvClientConfig, split_host_port
from .transport_events import TransportEvent, TransportEventType
from .client_transport import AquosClientTransport
from .tcp_client_transport import TcpAquosClientTransport
from .connection_manager import AquosConnectionManager, ConnectionState, ReadyCallback
from .command_channel import AquosCommandChannel
from .client_impl import AquosTvClient
from .simple import aquos_tv_connect
