#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls an AQUOS TV.
"""

from __future__ import annotations

from fastapi import FastAPI

import time
import os
import json

from contextlib import asynccontextmanager

from .logger import logger
from ..internal_types import *
from .. import (
    AquosTvClient,
    aquos_tv_connect,
    AquosTvClientConfig,
  )

from .api import router as api_router

def load_raw_config() -> JsonableDict:
    """Loads the JSON file named by AQUOS_TV_CONFIG, or ./aquos_tv_config.json if it exists."""
    config_file = os.environ.get("AQUOS_TV_CONFIG", None)
    if config_file is None:
        if os.path.exists("aquos_tv_config.json"):
            config_file = "aquos_tv_config.json"
    if config_file is None:
        return {}
    with open(config_file, "r") as f:
        raw_config: JsonableDict = json.load(f)
    return raw_config

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """

    tv_client: Optional[AquosTvClient] = None
    try:
        logger.info("TV REST server starting up--initializing...")
        raw_config = load_raw_config()
        app.state.raw_config = raw_config
        tv_config = AquosTvClientConfig.from_jsonable(raw_config)
        app.state.tv_config = tv_config
        app.state.launch_time = time.monotonic()
        tv_client = await aquos_tv_connect(config=tv_config)
        app.state.tv_client = tv_client
        logger.info(f"Serving API for TV at {tv_client}...")

        logger.info("TV REST server initialization done; starting server...")
        yield
    finally:
        logger.info("TV REST server shutting down--cleaning up...")
        if tv_client is not None:
            await tv_client.aclose()

proj_api = FastAPI(lifespan=fastapi_lifetime)
proj_api.include_router(api_router)

def get_tv_client() -> AquosTvClient:
    return proj_api.state.tv_client

def get_tv_config() -> AquosTvClientConfig:
    return proj_api.state.tv_config

def get_raw_config() -> JsonableDict:
    return proj_api.state.raw_config
