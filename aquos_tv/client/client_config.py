# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV client configuration.

Provides an immutable config object for an AquosTvClient and its
connection manager.
"""

from __future__ import annotations

import os
import json

from ..internal_types import *
from ..exceptions import AquosTvError
from ..constants import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    CONNECT_TIMEOUT,
    RECONNECT_INTERVAL,
  )

_FIELD_NAMES = (
    'host',
    'port',
    'username',
    'password',
    'timeout_secs',
    'connect_timeout_secs',
    'reconnect_interval_secs',
    'line_framing',
  )

_TRUE_STRINGS = ("1", "on", "true", "yes", "y")
_FALSE_STRINGS = ("0", "off", "false", "no", "n")

def _jsonable_bool(name: str, value: Jsonable) -> bool:
    """Converts a JSON config value to a bool. Strings such as "false" or "off" are parsed."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        lvalue = value.strip().lower()
        if lvalue in _TRUE_STRINGS:
            return True
        if lvalue in _FALSE_STRINGS:
            return False
    raise AquosTvError(f"Invalid value for config setting '{name}': {value!r}; expected true or false")

def split_host_port(host: str, default_port: int) -> HostAndPort:
    """Splits a host string of the form "[tcp://]<host>[:<port>]" into (host, port)."""
    if host.startswith('tcp://'):
        host = host[6:]
    elif '://' in host:
        raise AquosTvError(f"Invalid host protocol specifier for TCP transport: '{host}'")
    if '/' in host:
        raise AquosTvError(f"Invalid host specifier for TCP transport: '{host}'")
    port = default_port
    if ':' in host:
        host, port_str = host.rsplit(':', 1)
        try:
            port = int(port_str)
        except ValueError as e:
            raise AquosTvError(f"Invalid port number in host specifier: '{port_str}'") from e
    return (host, port)

class AquosTvClientConfig:
    """AQUOS TV client configuration.

    Immutable once constructed; use base_config to derive a modified copy.
    """
    host: Optional[str]
    port: int
    username: Optional[str]
    password: Optional[str]
    timeout_secs: float
    connect_timeout_secs: float
    reconnect_interval_secs: float
    line_framing: bool

    _frozen: bool = False

    def __init__(
            self,
            host: Optional[str]=None,
            username: Optional[str]=None,
            password: Optional[str]=None,
            *,
            port: Optional[int]=None,
            timeout_secs: Optional[float]=None,
            connect_timeout_secs: Optional[float]=None,
            reconnect_interval_secs: Optional[float]=None,
            line_framing: Optional[bool]=None,
            base_config: Optional[AquosTvClientConfig]=None,
            use_config_file: bool=True,
          ) -> None:
        """Creates a configuration for an AQUOS TV client.

           Args:
             host: The hostname or IPV4 address of the TV.
                   May optionally be prefixed with "tcp://".
                   May be suffixed with ":<port>" to specify a
                   non-default port, which will override the port argument.
                   If None, the host will be taken from the base
                   configuration, or the AQUOS_TV_HOST environment variable.
             username:
                   The login username configured on the TV. If None, it is
                   taken from the AQUOS_TV_USERNAME environment variable.
                   If empty or not found, no login is attempted.
             password:
                   The login password configured on the TV. If None, it is
                   taken from the AQUOS_TV_PASSWORD environment variable.
             port: The TCP/IP port number. If None, the port is taken from
                   AQUOS_TV_PORT, or DEFAULT_PORT (10002).
             timeout_secs:
                   How long to wait for the reply to a single command, in seconds.
             connect_timeout_secs:
                   How long to wait for the initial connection and login
                   handshake, in seconds.
             reconnect_interval_secs:
                   The pause between failed reconnection attempts, in seconds.
             line_framing:
                   If True (the default), received data is split into replies
                   at carriage returns. If False, each received chunk is treated
                   as exactly one reply.
             base_config:
                   An optional base configuration to use.
             use_config_file:
                   If True and there is no base configuration, the JSON file named
                   by the AQUOS_TV_CONFIG_FILE environment variable is loaded.
        """
        if base_config is None:
            self._init_from_defaults(use_config_file=use_config_file)
        else:
            self._init_from_base_config(base_config)

        if port is not None and port > 0:
            self.port = port

        if host is not None and host != '':
            self.host = host

        if username is not None:
            self.username = username

        if password is not None:
            self.password = password

        if timeout_secs is not None:
            self.timeout_secs = timeout_secs

        if connect_timeout_secs is not None:
            self.connect_timeout_secs = connect_timeout_secs

        if reconnect_interval_secs is not None:
            self.reconnect_interval_secs = reconnect_interval_secs

        if line_framing is not None:
            self.line_framing = line_framing

        if self.host is not None:
            self.host, self.port = split_host_port(self.host, self.port)

        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise AquosTvError(f"AquosTvClientConfig is immutable; cannot set '{name}'")
        super().__setattr__(name, value)

    def _init_from_defaults(self, use_config_file: bool=True) -> None:
        self.host = None
        self.port = DEFAULT_PORT
        self.username = None
        self.password = None
        self.timeout_secs = DEFAULT_TIMEOUT
        self.connect_timeout_secs = CONNECT_TIMEOUT
        self.reconnect_interval_secs = RECONNECT_INTERVAL
        self.line_framing = True

        if use_config_file:
            config_file = os.environ.get('AQUOS_TV_CONFIG_FILE')
            if config_file is not None and config_file != '':
                with open(config_file, 'r') as f:
                    config_jsonable = json.load(f)
                self._update_from_jsonable(config_jsonable)

        host = os.environ.get('AQUOS_TV_HOST')
        if host is not None and host != '':
            self.host = host
        port_str = os.environ.get('AQUOS_TV_PORT')
        if port_str is not None and port_str != '':
            self.port = int(port_str)
        username = os.environ.get('AQUOS_TV_USERNAME')
        if username is not None and username != '':
            self.username = username
        password = os.environ.get('AQUOS_TV_PASSWORD')
        if password is not None and password != '':
            self.password = password

    def _init_from_base_config(self, base_config: AquosTvClientConfig) -> None:
        for field_name in _FIELD_NAMES:
            setattr(self, field_name, getattr(base_config, field_name))

    def _update_from_jsonable(self, jsonable: JsonableDict) -> None:
        host = jsonable.get('host')
        if host is not None and host != '':
            self.host = str(host)
        port = jsonable.get('port')
        if port is not None and port != '':
            self.port = int(port)
        username = jsonable.get('username')
        if username is not None and username != '':
            self.username = str(username)
        password = jsonable.get('password')
        if password is not None and password != '':
            self.password = str(password)
        timeout_secs = jsonable.get('timeout_secs')
        if timeout_secs is not None and timeout_secs != '':
            self.timeout_secs = float(timeout_secs)
        connect_timeout_secs = jsonable.get('connect_timeout_secs')
        if connect_timeout_secs is not None and connect_timeout_secs != '':
            self.connect_timeout_secs = float(connect_timeout_secs)
        reconnect_interval_secs = jsonable.get('reconnect_interval_secs')
        if reconnect_interval_secs is not None and reconnect_interval_secs != '':
            self.reconnect_interval_secs = float(reconnect_interval_secs)
        line_framing = jsonable.get('line_framing')
        if line_framing is not None and line_framing != '':
            self.line_framing = _jsonable_bool('line_framing', line_framing)

    @property
    def has_credentials(self) -> bool:
        """True if both a username and a password are configured."""
        return (self.username is not None and self.username != '' and
                self.password is not None and self.password != '')

    def to_jsonable(self) -> JsonableDict:
        """Returns a JSON-serializable representation of the configuration."""
        result: JsonableDict = dict(
            host=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            timeout_secs=self.timeout_secs,
            connect_timeout_secs=self.connect_timeout_secs,
            reconnect_interval_secs=self.reconnect_interval_secs,
            line_framing=self.line_framing,
          )
        return result

    def to_json(self) -> str:
        """Returns a JSON representation of the configuration."""
        return json.dumps(self.to_jsonable())

    @classmethod
    def from_jsonable(cls, jsonable: JsonableDict, use_config_file: bool=True) -> AquosTvClientConfig:
        """Creates a configuration from a JSON-serializable representation."""
        base = cls(use_config_file=use_config_file)
        # A fresh, not-yet-frozen instance is needed to apply the update.
        result = cls.__new__(cls)
        result._init_from_base_config(base)
        result._update_from_jsonable(jsonable)
        if result.host is not None:
            result.host, result.port = split_host_port(result.host, result.port)
        result._frozen = True
        return result

    @classmethod
    def from_json(cls, json_str: str, use_config_file: bool=True) -> AquosTvClientConfig:
        """Creates a configuration from a JSON representation."""
        jsonable = json.loads(json_str)
        return cls.from_jsonable(jsonable, use_config_file=use_config_file)

    @classmethod
    def from_config_file(cls, filename: str) -> AquosTvClientConfig:
        """Creates a configuration from a JSON-serialized config file."""
        with open(filename, 'r') as f:
            jsonable: JsonableDict = json.load(f)
        return cls.from_jsonable(jsonable, use_config_file=False)

    def __str__(self) -> str:
        return (
            f"AquosTvClientConfig("
            f"host={self.host}, "
            f"port={self.port}, "
            f"username={self.username!r}, "
            f"timeout_secs={self.timeout_secs!r})"
          )

    def __repr__(self) -> str:
        return str(self)
