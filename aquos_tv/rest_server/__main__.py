# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls an AQUOS TV.
"""
import os
import sys
import uvicorn
import logging
from dotenv import load_dotenv

def run() -> int:
    load_dotenv()

    logging.basicConfig(level=logging.getLevelName(os.environ.get("AQUOS_TV_LOG_LEVEL", "INFO").upper()))

    from aquos_tv.rest_server.app import proj_api
    uvicorn.run(
        proj_api,
        host=os.environ.get("AQUOS_TV_REST_HOST", "0.0.0.0"),
        port=int(os.environ.get("AQUOS_TV_REST_PORT", "8000")),
        log_config=None)
    return 0

if __name__ == "__main__":
    rc = run()
    sys.exit(rc)
