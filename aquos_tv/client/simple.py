# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV simple client connection API.
"""

from __future__ import annotations

from ..internal_types import *
from .client_config import AquosTvClientConfig
from .client_transport import AquosClientTransport
from .client_impl import AquosTvClient

async def aquos_tv_connect(
        host: Optional[str]=None,
        username: Optional[str]=None,
        password: Optional[str]=None,
        config: Optional[AquosTvClientConfig]=None,
        transport: Optional[AquosClientTransport]=None,
      ) -> AquosTvClient:
    """Create a client, connect and log in, and wait until the TV accepts commands.

    Args:
        host: The hostname or IPV4 address of the TV.
                May optionally be prefixed with "tcp://".
                May be suffixed with ":<port>" to specify a
                non-default port.
                If None, the host will be taken from config, or the
                AQUOS_TV_HOST environment variable.
        username:
                The login username. If None, it is taken from config.
        password:
                The login password. If None, it is taken from config.
        config: An AquosTvClientConfig object that specifies
                the default host, port, credentials, etc. to use.
                If None, a default config will be created.
        transport:
                The transport to use. If None, a TCP/IP transport is used.
    """
    config = AquosTvClientConfig(
        host=host,
        username=username,
        password=password,
        base_config=config
      )
    client = AquosTvClient(config=config, transport=transport)
    try:
        await client.connect()
    except BaseException:
        await client.aclose()
        raise
    return client
