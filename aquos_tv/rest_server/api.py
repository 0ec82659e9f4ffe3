#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST API routes for the AQUOS TV REST server.

Commands are given in the textual form accepted by AquosCommand.create_from_str();
e.g., "/api/v1/execute/volume=12". A bare name such as "volume" is a query.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

import time

from .logger import logger
from ..internal_types import *
from .. import (
    __version__ as pkg_version,
    AquosTvClient,
    AquosCommand,
    COMMAND_DESCRIPTIONS,
    full_class_name,
    exception_description,
  )

router = APIRouter(prefix="/api/v1")

def get_client(request: Request) -> AquosTvClient:
    return request.app.state.tv_client

@router.get("/")
async def root(request: Request):
    client = get_client(request)
    await client.power()
    return { "message": f"Hello World! Serving TV at {client}" }

@router.get("/version")
async def version():
    """Returns the aquos-tv package version"""
    return { "version": pkg_version }

@router.get("/config")
async def config_data(request: Request) -> Dict[str, Any]:
    """Returns the current configuration of aquos-tv.

    The password is not included.
    """
    client = get_client(request)
    config_data = client.config.to_jsonable()
    config_data.pop("password", None)
    return dict(config=config_data)

@router.get("/all-commands")
async def all_commands() -> Dict[str, Any]:
    """Returns a dictionary of all commands supported by the execute() API."""
    results: Dict[str, Dict[str, Any]] = {}
    for cmd_name, description in COMMAND_DESCRIPTIONS.items():
        results[cmd_name] = dict(name=cmd_name, description=description)
    return dict(commands=results)

async def execute_one_command(client: AquosTvClient, command_str: str) -> JsonableDict:
    command = AquosCommand.create_from_str(command_str)
    reply = await client.transact(command)
    return dict(name=command_str, reply=reply.text)

def error_response_data(command_str: str, exc: Exception) -> JsonableDict:
    return dict(
        name=command_str,
        error=full_class_name(exc),
        error_message=exception_description(exc),
      )

async def execute_one_command_with_errors(
        command_str: str,
        request: Request
      ) -> Dict[str, Any]:
    client = get_client(request)
    logger.info(f"Executing command {command_str}")
    try:
        response_data = await execute_one_command(client, command_str)
    except Exception as exc:
        response_data = error_response_data(command_str, exc)
    return response_data

@router.get("/execute/{command_str}")
async def execute(
        command_str: str,
        request: Request
      ) -> Dict[str, Any]:
    """Executes a single TV command and returns the result."""
    return await execute_one_command_with_errors(command_str, request)

@router.get("/multi-execute/{command_strs}")
async def multi_execute(
        command_strs: str,
        request: Request,
        continue_on_error: str=""
      ) -> Dict[str, Any]:
    """Executes one or more commands (comma-delimited) and returns
       a list of results.

    If continue_on_error is True, then remaining commands are executed
    after a failure; Otherwise, execution stops at the
    the first error encountered. In any case, results from all commands attempted
    are returned.
    """
    client = get_client(request)
    continue_on_error_flag = continue_on_error.lower() in ("true", "1", "yes", "y", "on")
    cmd_strs = command_strs.split(',')
    logger.info(f"Executing commands {cmd_strs} with continue_on_error={continue_on_error_flag}")
    response_datas: List[JsonableDict] = []
    for cmd_str in cmd_strs:
        try:
            response_data = await execute_one_command(client, cmd_str)
        except Exception as exc:
            response_datas.append(error_response_data(cmd_str, exc))
            if not continue_on_error_flag:
                break
        else:
            response_datas.append(response_data)
    return { "responses": response_datas }

@router.get("/ping")
async def ping(
        request: Request
      ) -> Dict[str, Any]:
    """Returns the health status of the API server and the TV."""
    client = get_client(request)
    launch_time: float = request.app.state.launch_time
    up_time = time.monotonic() - launch_time
    result: Dict[str, Any] = dict(server_status="OK", up_time=up_time)
    try:
        await client.power()
    except Exception as exc:
        result["tv_status"] = "ERROR"
        result["tv_error"] = full_class_name(exc)
        result["tv_error_message"] = exception_description(exc)
    else:
        result["tv_status"] = "OK"
    return result

@router.get("/on")
async def power_on(
        request: Request
      ) -> Dict[str, Any]:
    """Turns the TV on."""
    return await execute_one_command_with_errors("power=on", request)

@router.get("/off")
async def power_off(
        request: Request
      ) -> Dict[str, Any]:
    """Turns the TV off."""
    return await execute_one_command_with_errors("power=off", request)

@router.get("/power_status")
async def power_status(
        request: Request
      ) -> Dict[str, Any]:
    """Returns the current power state of the TV ("1" is on)."""
    return await execute_one_command_with_errors("power", request)
