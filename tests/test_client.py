"""Tests for aquos_tv.client.client_impl: queued transactions and timeouts."""
import asyncio

import pytest

from aquos_tv import (
    AquosTvClient,
    AquosTimeoutError,
    AquosWireError,
    AquosBusyError,
    AquosAuthRequiredError,
    AquosCommand,
    aquos_tv_connect,
)

from tests.conftest import FakeTransport, make_config, settle, wait_until


async def connect_client(transport, **config_kwargs):
    client = AquosTvClient(config=make_config(**config_kwargs), transport=transport)
    task = asyncio.create_task(client.connect())
    await settle()
    transport.feed(b"OK\r")
    await asyncio.wait_for(task, 1.0)
    transport.writes.clear()
    return client


class TestClient:
    async def test_command_methods(self, transport):
        async with await connect_client(transport) as client:
            task = asyncio.create_task(client.volume(12))
            await settle()
            assert transport.writes == [b"VOLM12  \r"]
            transport.feed(b"OK\r")
            assert await asyncio.wait_for(task, 1.0) == "OK"

    async def test_concurrent_commands_are_serialized(self, transport):
        async with await connect_client(transport) as client:
            volume_task = asyncio.create_task(client.volume())
            power_task = asyncio.create_task(client.power())
            await settle()
            assert transport.writes == [b"VOLM?   \r"]
            transport.feed(b"20\r")
            await wait_until(lambda: len(transport.writes) == 2)
            assert transport.writes == [b"VOLM?   \r", b"POWR?   \r"]
            transport.feed(b"1\r")
            assert await asyncio.wait_for(volume_task, 1.0) == "20"
            assert await asyncio.wait_for(power_task, 1.0) == "1"

    async def test_submit_does_not_queue(self, transport):
        async with await connect_client(transport) as client:
            future = client.submit(AquosCommand.power())
            with pytest.raises(AquosBusyError):
                client.submit(AquosCommand.volume())
            transport.feed(b"0\r")
            assert (await asyncio.wait_for(future, 1.0)).text == "0"

    async def test_wire_error_leaves_client_usable(self, transport):
        async with await connect_client(transport) as client:
            task = asyncio.create_task(client.button("XXXX9"))
            await settle()
            transport.feed(b"ERR\r")
            with pytest.raises(AquosWireError):
                await asyncio.wait_for(task, 1.0)
            task = asyncio.create_task(client.mute(False))
            await settle()
            transport.feed(b"OK\r")
            assert await asyncio.wait_for(task, 1.0) == "OK"
            assert transport.writes[-1] == b"MUTE2   \r"

    async def test_timeout_recycles_connection(self, transport):
        async with await connect_client(transport, timeout_secs=0.05) as client:
            with pytest.raises(AquosTimeoutError):
                await client.volume()
            await wait_until(lambda: len(transport.opens) == 2)
            await settle()
            # waits for the new connection to become ready
            task = asyncio.create_task(client.input())
            await settle()
            assert not task.done()
            transport.feed(b"OK\r")
            await wait_until(lambda: transport.writes[-1] == b"IAVD?   \r")
            transport.feed(b"4\r")
            assert await asyncio.wait_for(task, 1.0) == "4"

    async def test_cancelled_transact_recycles_connection(self, transport):
        async with await connect_client(transport) as client:
            task = asyncio.create_task(client.volume())
            await settle()
            assert transport.writes == [b"VOLM?   \r"]
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await wait_until(lambda: len(transport.opens) == 2)
            await settle()
            task = asyncio.create_task(client.power())
            await settle()
            transport.feed(b"OK\r")
            await wait_until(lambda: transport.writes[-1] == b"POWR?   \r")
            transport.feed(b"1\r")
            assert await asyncio.wait_for(task, 1.0) == "1"

    async def test_transact_str(self, transport):
        async with await connect_client(transport) as client:
            task = asyncio.create_task(client.transact_str("channel=702"))
            await settle()
            transport.feed(b"OK\r")
            reply = await asyncio.wait_for(task, 1.0)
            assert reply.text == "OK"
            assert transport.writes == [b"CTBD702 \r"]

    async def test_connect_failure_closes_client(self, transport):
        task = asyncio.create_task(aquos_tv_connect(config=make_config(), transport=transport))
        await settle()
        transport.feed(b"Login:")
        with pytest.raises(AquosAuthRequiredError):
            await asyncio.wait_for(task, 1.0)
        assert not transport.is_open()

    async def test_connect_timeout(self):
        transport = FakeTransport(auto_connect=False)
        client = AquosTvClient(config=make_config(connect_timeout_secs=0.05), transport=transport)
        with pytest.raises(AquosTimeoutError):
            await client.connect()
        await client.aclose()
        assert client.connection.is_closing
