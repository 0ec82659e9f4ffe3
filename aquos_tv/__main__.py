#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

import sys
import argparse
import json
import asyncio
import logging
import dotenv
from signal import SIGINT, SIGTERM

from aquos_tv.internal_types import *
from aquos_tv import (
    __version__ as pkg_version,
    DEFAULT_PORT,
    AquosCommand,
    COMMAND_DESCRIPTIONS,
    aquos_tv_connect,
    AquosTvClientConfig,
    full_class_name,
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

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _parser: argparse.ArgumentParser
    _args: argparse.Namespace
    _provide_traceback: bool = True

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    async def cmd_bare(self) -> int:
        print("A command is required", file=sys.stderr)
        return 1

    async def cmd_emulator(self) -> int:
        from aquos_tv.emulator import AquosTvEmulator
        emulator = AquosTvEmulator(
            username=self._args.username,
            password=self._args.password,
            bind_addr=self._args.bind,
            port=self._args.port,
          )
        def sigint_cleanup() -> None:
            emulator.close(CmdExitError(1, "Emulator terminated with SIGINT or SIGTERM"))
        loop = asyncio.get_running_loop()
        for signal in (SIGINT, SIGTERM):
            loop.add_signal_handler(signal, sigint_cleanup)
        try:
            await emulator.run()
        finally:
            for signal in (SIGINT, SIGTERM):
                loop.remove_signal_handler(signal)
        return 0

    async def cmd_exec(self) -> int:
        continue_on_error: bool = self._args.continue_on_error
        config = AquosTvClientConfig(
            host=self._args.host,
            username=self._args.username,
            password=self._args.password,
            port=self._args.port,
          )

        command_strs: List[str] = self._args.exec_command
        if len(command_strs) == 0:
            raise CmdExitError(1, "No TV commands specified")
        # Validate everything before connecting
        commands = [AquosCommand.create_from_str(command_str) for command_str in command_strs]
        response_datas: List[JsonableDict] = []
        try:
            async with await aquos_tv_connect(config=config) as client:
                for command_str, command in zip(command_strs, commands):
                    response_data: JsonableDict = dict(name=command_str)
                    try:
                        reply = await client.transact(command)
                        response_data["reply"] = reply.text
                    except Exception as exc:
                        response_data.update(
                            error=full_class_name(exc),
                            error_message=exception_description(exc),
                          )
                        response_datas.append(response_data)
                        if not continue_on_error:
                            raise
                    else:
                        response_datas.append(response_data)
        finally:
            print(json.dumps(response_datas, indent=2))
        return 0

    async def cmd_commands(self) -> int:
        for name, description in COMMAND_DESCRIPTIONS.items():
            print(f"{name:<14} {description}")
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    async def arun(self) -> int:
        """Run the aquos-tv command-line tool with provided arguments

        Args:
            argv (Optional[Sequence[str]], optional):
                A list of commandline arguments (NOT including the program as argv[0]!),
                or None to use sys.argv[1:]. Defaults to None.

        Returns:
            int: The exit code that would be returned if this were run as a standalone command.
        """
        parser = NoExitArgumentParser(description="Control a Sharp AQUOS TV.")


        # ======================= Main command

        self._parser = parser
        parser.add_argument('--traceback', "--tb", action='store_true', default=False,
                            help='Display detailed exception information')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='''The logging level to use. Default: warning''')
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            description='Valid commands',
                            help='Additional help available with "<command-name> -h"')

        # ======================= emulator

        parser_emulator = subparsers.add_parser('emulator', description="Run a TV emulator for testing purposes.")
        parser_emulator.add_argument("--port", default=DEFAULT_PORT, type=int,
            help=f"Port number to listen on. Default: {DEFAULT_PORT}")
        parser_emulator.add_argument("-u", "--username", default=None,
            help="Username required to log in. Default: None (no login required).")
        parser_emulator.add_argument("-p", "--password", default=None,
            help="Password required to log in. Default: None.")
        parser_emulator.add_argument('-b', '--bind', default="0.0.0.0",
                            help='''The local unicast IP address to bind to. Default: 0.0.0.0.''')
        parser_emulator.set_defaults(func=self.cmd_emulator)

        # ======================= exec

        parser_exec = subparsers.add_parser('exec', description="Execute one or more commands on the TV.")
        parser_exec.add_argument('--host', default=None,
                            help='''The TV host address. Default: use env var AQUOS_TV_HOST.''')
        parser_exec.add_argument("--port", default=None, type=int,
            help=f"TV port number to connect to. Default: {DEFAULT_PORT}")
        parser_exec.add_argument("-u", "--username", default=None,
            help="Login username. Default: use env var AQUOS_TV_USERNAME, or no login.")
        parser_exec.add_argument("-p", "--password", default=None,
            help="Login password. Default: use env var AQUOS_TV_PASSWORD.")
        parser_exec.add_argument('--continue', dest="continue_on_error", action='store_true', default=False,
                            help='Continue running commands on error. Default: False')
        parser_exec.add_argument('exec_command', nargs=argparse.REMAINDER,
                            help='''One or more commands to execute; e.g., "power=on" "volume=12" "volume".''')
        parser_exec.set_defaults(func=self.cmd_exec)

        # ======================= commands

        parser_commands = subparsers.add_parser('commands',
                                description='''List the command names accepted by "exec".''')
        parser_commands.set_defaults(func=self.cmd_commands)

        # ======================= version

        parser_version = subparsers.add_parser('version',
                                description='''Display version information.''')
        parser_version.set_defaults(func=self.cmd_version)

        # =========================================================

        try:
            args = parser.parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        traceback: bool = args.traceback
        self._provide_traceback = traceback

        try:
            logging.basicConfig(
                level=logging.getLevelName(args.log_level.upper()),
            )
            self._args = args
            func: Callable[[], Awaitable[int]] = args.func
            logging.debug(f"Running command {func.__name__}, tb = {traceback}")
            rc = await func()
            logging.debug(f"Command {func.__name__} returned {rc}")
        except Exception as ex:
            if isinstance(ex, CmdExitError):
                rc = ex.exit_code
            else:
                rc = 1
            if rc != 0:
                if traceback:
                    raise
            print(f"aquos-tv: error: {exception_description(ex)}", file=sys.stderr)
        except BaseException as ex:
            print(f"aquos-tv: Unhandled exception {ex.__class__.__name__}: {ex}", file=sys.stderr)
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
