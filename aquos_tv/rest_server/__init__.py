# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls an AQUOS TV.
"""
from .app import proj_api, get_tv_client, get_tv_config, get_raw_config
