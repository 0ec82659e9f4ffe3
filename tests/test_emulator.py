"""End-to-end tests against the TV emulator over a real TCP socket."""
import asyncio
import json

import httpx
import pytest
import time
from fastapi import FastAPI

from aquos_tv import (
    AquosTvClientConfig,
    AquosInvalidCredentialsError,
    AquosAuthRequiredError,
    AquosRangeError,
    AquosTimeoutError,
    AquosWireError,
    aquos_tv_connect,
)
from aquos_tv.__main__ import arun
from aquos_tv.emulator import AquosTvEmulator
from aquos_tv.rest_server.api import router

from tests.conftest import wait_until


def emulator_config(emulator, **kwargs) -> AquosTvClientConfig:
    defaults = dict(
        timeout_secs=1.0,
        connect_timeout_secs=2.0,
        reconnect_interval_secs=0.05,
        use_config_file=False,
    )
    defaults.update(kwargs)
    return AquosTvClientConfig(f"127.0.0.1:{emulator.bound_port}", **defaults)


class TestEmulator:
    async def test_commands_without_login(self):
        async with AquosTvEmulator(bind_addr="127.0.0.1", port=0) as emulator:
            async with await aquos_tv_connect(config=emulator_config(emulator)) as client:
                assert await client.power(True) == "OK"
                assert await client.power() == "1"
                assert await client.volume(30) == "OK"
                assert await client.volume() == "30"
                assert emulator.volume == 30
                assert await client.channel(12) == "OK"
                assert await client.channel_up() == "OK"
                assert await client.channel() == "13"
                assert await client.netflix() == "OK"
                assert emulator.last_remote_key == 59
                with pytest.raises(AquosRangeError):
                    await client.input(10)
                with pytest.raises(AquosWireError):
                    await client.button("XXXX9")
                assert await client.mute() == "2"
            assert emulator.received_commands[0].startswith("RSPW2")
            assert not any(command.startswith("IAVD") for command in emulator.received_commands)

    async def test_login(self):
        async with AquosTvEmulator(username="admin", password="secret", bind_addr="127.0.0.1", port=0) as emulator:
            config = emulator_config(emulator, username="admin", password="secret")
            async with await aquos_tv_connect(config=config) as client:
                assert await client.input(3) == "OK"
                assert await client.input() == "3"

    async def test_bad_password(self):
        async with AquosTvEmulator(username="admin", password="secret", bind_addr="127.0.0.1", port=0) as emulator:
            config = emulator_config(emulator, username="admin", password="wrong")
            with pytest.raises(AquosInvalidCredentialsError):
                await aquos_tv_connect(config=config)

    async def test_login_not_configured(self):
        async with AquosTvEmulator(username="admin", password="secret", bind_addr="127.0.0.1", port=0) as emulator:
            with pytest.raises(AquosAuthRequiredError):
                await aquos_tv_connect(config=emulator_config(emulator))

    async def test_reconnects_after_tv_drops_connection(self):
        async with AquosTvEmulator(username="admin", password="secret", bind_addr="127.0.0.1", port=0) as emulator:
            config = emulator_config(emulator, username="admin", password="secret")
            async with await aquos_tv_connect(config=config) as client:
                assert await client.volume(5) == "OK"
                emulator.disconnect_all()
                await wait_until(lambda: client.connection.connect_attempts == 2 and client.connection.is_ready)
                assert await client.volume() == "5"

    async def test_no_reply_times_out_and_recovers(self):
        async with AquosTvEmulator(bind_addr="127.0.0.1", port=0, silent_mnemonics=["VOLM"]) as emulator:
            config = emulator_config(emulator, timeout_secs=0.2)
            async with await aquos_tv_connect(config=config) as client:
                with pytest.raises(AquosTimeoutError):
                    await client.volume()
                assert await client.power() == "0"
                assert client.connection.connect_attempts == 2


class TestCommandLine:
    async def test_exec(self, capsys):
        async with AquosTvEmulator(bind_addr="127.0.0.1", port=0) as emulator:
            rc = await arun(["exec", "--host", f"127.0.0.1:{emulator.bound_port}", "volume=12", "volume"])
            assert rc == 0
            results = json.loads(capsys.readouterr().out)
            assert results == [
                dict(name="volume=12", reply="OK"),
                dict(name="volume", reply="12"),
            ]

    async def test_exec_invalid_command(self, capsys):
        rc = await arun(["exec", "--host", "127.0.0.1:1", "volume=99"])
        assert rc == 1
        assert "between 0 and 60" in capsys.readouterr().err

    async def test_version(self, capsys):
        from aquos_tv import __version__
        assert await arun(["version"]) == 0
        assert capsys.readouterr().out.strip() == __version__


class TestRestApi:
    async def test_execute_and_ping(self):
        async with AquosTvEmulator(bind_addr="127.0.0.1", port=0) as emulator:
            async with await aquos_tv_connect(config=emulator_config(emulator, password="pw")) as client:
                app = FastAPI()
                app.include_router(router)
                app.state.tv_client = client
                app.state.launch_time = time.monotonic()
                transport = httpx.ASGITransport(app=app)
                async with httpx.AsyncClient(transport=transport, base_url="http://tv") as http:
                    response = await http.get("/api/v1/execute/volume=12")
                    assert response.json() == dict(name="volume=12", reply="OK")

                    response = await http.get("/api/v1/multi-execute/volume,volume=99,power")
                    responses = response.json()["responses"]
                    assert responses[0] == dict(name="volume", reply="12")
                    assert responses[1]["error"] == "aquos_tv.exceptions.AquosRangeError"
                    assert len(responses) == 2

                    response = await http.get("/api/v1/ping")
                    assert response.json()["tv_status"] == "OK"

                    response = await http.get("/api/v1/config")
                    assert "password" not in response.json()["config"]
