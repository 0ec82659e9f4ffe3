"""Shared fixtures and test doubles for the aquos_tv test suite.

FakeTransport stands in for a TCP socket so that the connection manager,
command channel and client can be driven one event at a time.
"""

import asyncio
from typing import Callable, List, Optional, Tuple

import pytest

from aquos_tv import AquosTvClientConfig, AquosConnectionError
from aquos_tv.client import AquosClientTransport, TransportEvent


class FakeTransport(AquosClientTransport):
    """Scripted transport. Records opens and writes; tests inject received data."""

    def __init__(self, auto_connect: bool = True, fail_opens: int = 0):
        self.auto_connect = auto_connect
        self.fail_opens = fail_opens
        self.opens: List[Tuple[str, int]] = []
        self.writes: List[bytes] = []
        self.events: Optional[asyncio.Queue] = None
        self._open = False

    def open(self, host, port, events):
        self.opens.append((host, port))
        self.events = events
        if self.fail_opens > 0:
            self.fail_opens -= 1
            events.put_nowait(TransportEvent.errored(ConnectionRefusedError("Connection refused")))
            return
        self._open = True
        if self.auto_connect:
            events.put_nowait(TransportEvent.connected())

    def write(self, data):
        if not self._open:
            raise AquosConnectionError("Not connected")
        self.writes.append(bytes(data))

    def close(self):
        if self._open:
            self._open = False
            self.events.put_nowait(TransportEvent.closed())

    def is_open(self):
        return self._open

    def feed(self, data: bytes) -> None:
        self.events.put_nowait(TransportEvent.data_received(data))

    def peer_close(self) -> None:
        self.close()

    @property
    def written(self) -> bytes:
        return b"".join(self.writes)


async def settle(n: int = 50) -> None:
    """Lets queued events be processed by the supervisor task."""
    for _ in range(n):
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


def make_config(**kwargs) -> AquosTvClientConfig:
    defaults = dict(
        host="tv.local",
        timeout_secs=0.5,
        connect_timeout_secs=2.0,
        reconnect_interval_secs=0.01,
        use_config_file=False,
    )
    defaults.update(kwargs)
    return AquosTvClientConfig(**defaults)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
            "AQUOS_TV_HOST",
            "AQUOS_TV_PORT",
            "AQUOS_TV_USERNAME",
            "AQUOS_TV_PASSWORD",
            "AQUOS_TV_CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport():
    return FakeTransport()
