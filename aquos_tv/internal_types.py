# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from typing import (
    Dict,
    List,
    Set,
    Optional,
    Union,
    Any,
    Tuple,
    Type,
    Callable,
    Awaitable,
    Coroutine,
    Iterable,
    Iterator,
    AsyncIterator,
    Mapping,
    Sequence,
    AsyncContextManager,
    TYPE_CHECKING,
  )

from types import TracebackType

Jsonable = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
"""A type hint for a JSON-serializable value."""

JsonableDict = Dict[str, Jsonable]
"""A type hint for a JSON-serializable dictionary."""

HostAndPort = Tuple[str, int]
"""A (host, port) tuple."""
