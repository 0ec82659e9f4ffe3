# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
AQUOS TV command formatting.

Every command is a 4-character mnemonic followed by a parameter that is
left-justified and space-padded to 4 characters, terminated by a carriage
return; e.g., "VOLM05  \\r". Queries use "?" as the parameter.

Range checks are done here, when a command is built, so that an invalid
command is rejected before anything is written to the TV.
"""

from __future__ import annotations

from ..internal_types import *
from ..exceptions import AquosTvError, AquosRangeError
from .constants import (
    TERMINATOR,
    MNEMONIC_LENGTH,
    PARAMETER_LENGTH,
    QUERY_PARAMETER,
    MIN_VOLUME,
    MAX_VOLUME,
    MIN_INPUT,
    MAX_INPUT,
    MIN_CAPTIONING,
    MAX_CAPTIONING,
    MIN_REMOTE_KEY,
    MAX_REMOTE_KEY,
    NETFLIX_REMOTE_KEY,
  )

COMMAND_DESCRIPTIONS: Dict[str, str] = {
    "power": "Query power state, or set it with power=on|off",
    "mute": "Query mute state, or set it with mute=on|off",
    "volume": f"Query volume, or set it with volume=<{MIN_VOLUME}-{MAX_VOLUME}>",
    "input": f"Query input, or select one with input=<{MIN_INPUT}-{MAX_INPUT}>",
    "channel": "Query channel code, or tune with channel=<code of up to 4 characters>",
    "captioning": f"Query captioning, or set it with captioning=<{MIN_CAPTIONING}-{MAX_CAPTIONING}>",
    "channel_up": "Tune to the next channel",
    "channel_down": "Tune to the previous channel",
    "netflix": "Press the Netflix app shortcut button",
    "remote_key": f"Press a remote control key with remote_key=<{MIN_REMOTE_KEY}-{MAX_REMOTE_KEY}>",
    "button": "Send raw command text with button=<text>; the text is not checked",
}
"""Names accepted by AquosCommand.create_from_str(), with a short description of each."""

_TRUE_STRINGS = ("1", "on", "true", "yes", "y")
_FALSE_STRINGS = ("0", "off", "false", "no", "n")

def _check_int_range(what: str, value: int, min_value: int, max_value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise AquosRangeError(f"The given {what} must be an integer, not {value!r}.")
    if value < min_value or value > max_value:
        raise AquosRangeError(f"The given {what} must be between {min_value} and {max_value}.")
    return value

def _parse_bool(what: str, value: str) -> bool:
    lvalue = value.strip().lower()
    if lvalue in _TRUE_STRINGS:
        return True
    if lvalue in _FALSE_STRINGS:
        return False
    raise AquosRangeError(f"Invalid {what} value {value!r}; expected on or off")

def _parse_int(what: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as e:
        raise AquosRangeError(f"Invalid {what} value {value!r}; expected an integer") from e

class AquosCommand:
    """A single command to be sent to the TV."""

    name: str
    """A friendly name for the command; e.g., "volume"."""

    wire_text: str
    """The command text as sent to the TV, without the terminating carriage return."""

    is_query: bool
    """True if the command reads a setting rather than changing it."""

    def __init__(self, name: str, wire_text: str, is_query: bool=False):
        self.name = name
        self.wire_text = wire_text
        self.is_query = is_query

    @property
    def raw_data(self) -> bytes:
        """The bytes written to the TV, including the terminator."""
        return (self.wire_text + TERMINATOR).encode('utf-8')

    @property
    def mnemonic(self) -> str:
        return self.wire_text[:MNEMONIC_LENGTH]

    @property
    def parameter(self) -> str:
        """The parameter, with padding removed."""
        return self.wire_text[MNEMONIC_LENGTH:].rstrip(' ')

    @classmethod
    def create(cls, name: str, mnemonic: str, parameter: Optional[str]=None) -> AquosCommand:
        """Creates a fixed-width command. If parameter is None, a query is created."""
        if len(mnemonic) != MNEMONIC_LENGTH:
            raise AquosTvError(f"Command mnemonic must be {MNEMONIC_LENGTH} characters: {mnemonic!r}")
        is_query = parameter is None
        if parameter is None:
            parameter = QUERY_PARAMETER
        if len(parameter) > PARAMETER_LENGTH:
            raise AquosRangeError(
                f"The given {name} parameter {parameter!r} is longer than {PARAMETER_LENGTH} characters.")
        return cls(name, mnemonic + parameter.ljust(PARAMETER_LENGTH), is_query=is_query)

    @classmethod
    def power(cls, on: Optional[bool]=None) -> AquosCommand:
        """Queries power state (None), or turns the TV on (True) or off (False)."""
        return cls.create("power", "POWR", None if on is None else ('1' if on else '0'))

    @classmethod
    def mute(cls, muted: Optional[bool]=None) -> AquosCommand:
        """Queries mute state (None), or mutes (True) or unmutes (False).

        The TV uses 2, not 0, to unmute.
        """
        return cls.create("mute", "MUTE", None if muted is None else ('1' if muted else '2'))

    @classmethod
    def volume(cls, level: Optional[int]=None) -> AquosCommand:
        if level is None:
            return cls.create("volume", "VOLM")
        _check_int_range("volume level", level, MIN_VOLUME, MAX_VOLUME)
        return cls.create("volume", "VOLM", f"{level:02d}")

    @classmethod
    def input(cls, selector: Optional[int]=None) -> AquosCommand:
        if selector is None:
            return cls.create("input", "IAVD")
        _check_int_range("input", selector, MIN_INPUT, MAX_INPUT)
        return cls.create("input", "IAVD", str(selector))

    @classmethod
    def channel(cls, code: Optional[Union[int, str]]=None) -> AquosCommand:
        """Queries the current channel code (None), or tunes to a channel code
           of up to 4 characters."""
        if code is None:
            return cls.create("channel", "CTBD")
        return cls.create("channel", "CTBD", str(code))

    @classmethod
    def captioning(cls, level: Optional[int]=None) -> AquosCommand:
        if level is None:
            return cls.create("captioning", "CLCP")
        _check_int_range("captioning level", level, MIN_CAPTIONING, MAX_CAPTIONING)
        return cls.create("captioning", "CLCP", f"{level:02d}")

    @classmethod
    def channel_up(cls) -> AquosCommand:
        return cls.create("channel_up", "CHUP", "0")

    @classmethod
    def channel_down(cls) -> AquosCommand:
        return cls.create("channel_down", "CHDW", "0")

    @classmethod
    def remote_key(cls, code: int) -> AquosCommand:
        """Presses a button on the virtual remote control."""
        _check_int_range("remote key code", code, MIN_REMOTE_KEY, MAX_REMOTE_KEY)
        return cls.create("remote_key", "RCKY", f"{code:02d}")

    @classmethod
    def netflix(cls) -> AquosCommand:
        result = cls.remote_key(NETFLIX_REMOTE_KEY)
        result.name = "netflix"
        return result

    @classmethod
    def button(cls, code: str) -> AquosCommand:
        """Sends caller-supplied command text as-is, followed by the terminator.

        The text is neither padded nor checked.
        """
        return cls("button", code)

    @classmethod
    def create_from_str(cls, command_str: str) -> AquosCommand:
        """Creates a command from its textual form, as used by the command-line tools.

        Accepted forms are "<name>" (a query, or an action for commands without
        a value), "<name>?" (a query), and "<name>=<value>". See COMMAND_DESCRIPTIONS
        for valid names.
        """
        value: Optional[str] = None
        if '=' in command_str:
            name, value = command_str.split('=', 1)
        else:
            name = command_str
            if name.endswith(QUERY_PARAMETER):
                name = name[:-1]
        name = name.strip().lower().replace('-', '_')
        if not name in COMMAND_DESCRIPTIONS:
            raise AquosTvError(f"Unknown command name {name!r}")
        if name == "power":
            return cls.power(None if value is None else _parse_bool(name, value))
        elif name == "mute":
            return cls.mute(None if value is None else _parse_bool(name, value))
        elif name == "volume":
            return cls.volume(None if value is None else _parse_int(name, value))
        elif name == "input":
            return cls.input(None if value is None else _parse_int(name, value))
        elif name == "channel":
            return cls.channel(None if value is None else value.strip())
        elif name == "captioning":
            return cls.captioning(None if value is None else _parse_int(name, value))

        if name == "remote_key":
            if value is None:
                raise AquosTvError("remote_key requires a value; e.g., remote_key=12")
            return cls.remote_key(_parse_int(name, value))
        elif name == "button":
            if value is None or value == '':
                raise AquosTvError("button requires a value; e.g., button=RCKY12")
            return cls.button(value)

        if value is not None:
            raise AquosTvError(f"Command {name!r} does not take a value")
        if name == "channel_up":
            return cls.channel_up()
        elif name == "channel_down":
            return cls.channel_down()
        else:
            assert name == "netflix"
            return cls.netflix()

    def __str__(self) -> str:
        return f"AquosCommand({self.name}: {self.wire_text!r})"

    def __repr__(self) -> str:
        return str(self)
