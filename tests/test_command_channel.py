"""Tests for aquos_tv.client.command_channel: command/reply correlation."""
import asyncio

import pytest

from aquos_tv import (
    AquosCommand,
    AquosConnectionManager,
    AquosCommandChannel,
    AquosBusyError,
    AquosNotReadyError,
    AquosWireError,
    AquosRangeError,
    AquosConnectionLostError,
)

from tests.conftest import make_config, settle


async def make_channel(transport, line_framing=None):
    manager = AquosConnectionManager(make_config(), transport=transport)
    channel = AquosCommandChannel(manager, line_framing=line_framing)
    ready = manager.connect()
    await settle()
    transport.feed(b"OK\r")
    await asyncio.wait_for(ready, 1.0)
    transport.writes.clear()
    return manager, channel


class TestCommandChannel:
    async def test_reply_resolves_pending_command(self, transport):
        manager, channel = await make_channel(transport)
        future = channel.submit(AquosCommand.volume())
        assert transport.writes == [b"VOLM?   \r"]
        assert channel.is_busy
        transport.feed(b"25\r")
        reply = await asyncio.wait_for(future, 1.0)
        assert reply.text == "25"
        assert not channel.is_busy
        await manager.aclose()

    async def test_second_command_is_rejected_while_busy(self, transport):
        manager, channel = await make_channel(transport)
        first = channel.submit(AquosCommand.power(True))
        with pytest.raises(AquosBusyError):
            channel.submit(AquosCommand.volume(10))
        assert transport.writes == [b"POWR1   \r"]
        transport.feed(b"OK\r")
        assert (await asyncio.wait_for(first, 1.0)).text == "OK"
        second = channel.submit(AquosCommand.volume(10))
        transport.feed(b"OK\r")
        assert (await asyncio.wait_for(second, 1.0)).text == "OK"
        assert transport.writes == [b"POWR1   \r", b"VOLM10  \r"]
        await manager.aclose()

    async def test_error_reply(self, transport):
        manager, channel = await make_channel(transport)
        future = channel.submit(AquosCommand.button("XXXX9"))
        transport.feed(b"ERR\r")
        with pytest.raises(AquosWireError) as exc_info:
            await asyncio.wait_for(future, 1.0)
        assert exc_info.value.reply_text == "ERR"
        assert not channel.is_busy
        await manager.aclose()

    async def test_unsolicited_reply_is_dropped(self, transport):
        manager, channel = await make_channel(transport)
        transport.feed(b"OK\r")
        await settle()
        future = channel.submit(AquosCommand.input())
        await settle()
        assert not future.done()
        transport.feed(b"3\r")
        assert (await asyncio.wait_for(future, 1.0)).text == "3"
        await manager.aclose()

    async def test_split_reply_is_reassembled(self, transport):
        manager, channel = await make_channel(transport)
        future = channel.submit(AquosCommand.volume())
        transport.feed(b"2")
        await settle()
        assert not future.done()
        transport.feed(b"5\r")
        assert (await asyncio.wait_for(future, 1.0)).text == "25"
        await manager.aclose()

    async def test_chunk_per_reply_without_line_framing(self, transport):
        manager, channel = await make_channel(transport, line_framing=False)
        future = channel.submit(AquosCommand.volume())
        transport.feed(b"25")
        assert (await asyncio.wait_for(future, 1.0)).text == "25"
        await manager.aclose()

    async def test_connection_loss_fails_pending_command(self, transport):
        manager, channel = await make_channel(transport)
        future = channel.submit(AquosCommand.volume())
        transport.peer_close()
        with pytest.raises(AquosConnectionLostError):
            await asyncio.wait_for(future, 1.0)
        assert not channel.is_busy
        await manager.aclose()

    async def test_close_fails_pending_command(self, transport):
        manager, channel = await make_channel(transport)
        future = channel.submit(AquosCommand.volume())
        await manager.aclose()
        with pytest.raises(AquosConnectionLostError):
            await asyncio.wait_for(future, 1.0)

    async def test_not_ready(self, transport):
        manager = AquosConnectionManager(make_config(), transport=transport)
        channel = AquosCommandChannel(manager)
        with pytest.raises(AquosNotReadyError):
            channel.submit(AquosCommand.power())
        assert transport.writes == []

    async def test_range_error_writes_nothing(self, transport):
        manager, channel = await make_channel(transport)
        with pytest.raises(AquosRangeError):
            channel.submit(AquosCommand.volume(61))
        assert transport.writes == []
        assert not channel.is_busy
        await manager.aclose()
