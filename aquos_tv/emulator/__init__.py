# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV emulator.

Provides a simple emulation of an AQUOS TV remote control server on TCP/IP.
"""

from .emulator_impl import (
    AquosTvEmulator,
  )
