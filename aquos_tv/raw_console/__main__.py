#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import argparse
import asyncio
import logging
import dotenv
import aioconsole
import colorama # type: ignore[import]
from colorama import Fore, Style
import traceback

from aquos_tv.internal_types import *
from aquos_tv.pkg_logging import logger

from aquos_tv import (
    __version__ as pkg_version,
    AquosTvClient,
    AquosTvClientConfig,
    AquosCommand,
    AquosReply,
    AquosWireError,
    COMMAND_DESCRIPTIONS,
    exception_description,
  )

class CmdExitError(RuntimeError):
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        if msg is None:
            msg = f"Command exited with return code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

def parse_console_command(raw_data: str) -> AquosCommand:
    """Parses a console line. Named commands (e.g., "volume=12", "power?") are
       validated; anything else is sent to the TV as raw command text."""
    name = raw_data.split('=', 1)[0].rstrip('?').strip().lower().replace('-', '_')
    if name in COMMAND_DESCRIPTIONS:
        return AquosCommand.create_from_str(raw_data)
    return AquosCommand.button(raw_data)

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True
    _client: Optional[AquosTvClient] = None
    _colorize_stdout: bool = True
    _colorize_stderr: bool = True

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    def ocolor(self, codes: str) -> str:
        return codes if self._colorize_stdout else ""

    def ecolor(self, codes: str) -> str:
        return codes if self._colorize_stderr else ""

    def get_client_config(self) -> AquosTvClientConfig:
        return AquosTvClientConfig(
            host=self._args.host,
            username=self._args.username,
            password=self._args.password,
            port=self._args.port,
          )

    def on_ready(self, exc: Optional[BaseException]) -> None:
        if exc is None:
            print(f"\r{self.ocolor(Fore.YELLOW)}Connected; type a command, or \"help\"{self.ocolor(Style.RESET_ALL)}")

    def print_help(self) -> None:
        print("Enter a named command, e.g. \"power=on\", \"volume=12\", \"volume?\",")
        print("or raw command text, e.g. \"VOLM12\". \"quit\" exits.")
        for name, description in COMMAND_DESCRIPTIONS.items():
            print(f"  {name:<14} {description}")

    async def handle_console_input(self) -> None:
        assert self._client is not None
        try:
            while True:
                raw_data = await aioconsole.ainput(">>> ")
                raw_data = raw_data.strip()
                if raw_data == "":
                    continue
                if raw_data == "exit" or raw_data == "quit" or raw_data == "q":
                    break
                if raw_data == "help":
                    self.print_help()
                    continue
                command: Optional[AquosCommand] = None
                try:
                    command = parse_console_command(raw_data)
                except Exception as e:
                    if self._provide_traceback:
                        print(f"\r{self.ocolor(Fore.RED)}Invalid command: {e}\n{traceback.format_exc()}{self.ocolor(Style.RESET_ALL)}")
                    else:
                        print(f"\r{self.ocolor(Fore.RED)}Invalid command: {e}{self.ocolor(Style.RESET_ALL)}")
                if command is None:
                    continue
                wire_text = command.raw_data.decode('utf-8').rstrip('\r')
                print(f"\r{self.ocolor(Fore.GREEN)}{wire_text:<20} ->{self.ocolor(Style.RESET_ALL)}")
                try:
                    reply: AquosReply = await self._client.transact(command)
                except AquosWireError as e:
                    print(f"\r{' '*20}    <- {self.ocolor(Fore.RED)}{e.reply_text}{self.ocolor(Style.RESET_ALL)}")
                except Exception as e:
                    logger.debug("Exception in transaction", exc_info=e)
                    print(f"\r{self.ocolor(Fore.RED)}Command failed: {exception_description(e)}{self.ocolor(Style.RESET_ALL)}")
                else:
                    print(f"\r{' '*20}    <- {self.ocolor(Fore.BLUE)}{reply.text}{self.ocolor(Style.RESET_ALL)}")
        except EOFError:
            print()
        finally:
            logger.debug("Console input handler exiting")

    async def cmd_bare(self) -> int:
        async with AquosTvClient(config=self.get_client_config()) as client:
            self._client = client
            await client.connect(ready_callback=self.on_ready)
            await self.handle_console_input()
            logger.debug("Command exiting")
        return 0

    async def arun(self) -> int:
        """Run the raw console tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Send commands to an AQUOS TV interactively.")

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.add_argument('--no-color', dest='no_color', action='store_true', default=False,
                            help='Do not colorize output')
        parser.add_argument('-u', '--username', default=None,
                            help='''Login username. Default: use env var AQUOS_TV_USERNAME, or no login.''')
        parser.add_argument('-p', '--password', default=None,
                            help='''Login password. Default: use env var AQUOS_TV_PASSWORD.''')
        parser.add_argument('--port', default=None, type=int,
                            help='''The port number to connect to. Default: 10002''')
        parser.add_argument('host', default=None, nargs='?',
                            help='''The LAN IP address or hostname of the TV. Default: use env var AQUOS_TV_HOST.''')

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback
        if args.no_color:
            self._colorize_stdout = False
            self._colorize_stderr = False
        else:
            colorama.init()

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            rc = await self.cmd_bare()
            logging.debug(f"Command returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"{self.ecolor(Fore.RED)}raw_console: error: {exception_description(ex)}{self.ecolor(Style.RESET_ALL)}", file=sys.stderr)
        except BaseException as ex:
            print(f"raw_console: Unhandled exception: {ex}", file=sys.stderr)
            raise

        return rc

    def run(self) -> int:
        return asyncio.run(self.arun())

def run(argv: Optional[Sequence[str]]=None) -> int:
    dotenv.load_dotenv()
    try:
        rc = CommandHandler(argv).run()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

async def arun(argv: Optional[Sequence[str]]=None) -> int:
    try:
        rc = await CommandHandler(argv).arun()
    except CmdExitError as ex:
        rc = ex.exit_code
    return rc

# allow running with "python3 -m", or as a standalone script
if __name__ == "__main__":
    sys.exit(run())
