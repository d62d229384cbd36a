# -*- test-case-name: txpull.test.test_adapter -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Marker values shared by sources, adapters and combinators.
"""

from enum import Enum
from typing import TypeVar, Union

from typing_extensions import Literal


class _Marker(Enum):
    """
    Values which are never items.

    @cvar EXHAUSTED: The result of a pull once there will never be another
        item.
    @cvar SKIP: Returned by a transform to drop the item it was given.
    @cvar EMPTY: Returned by L{ISource.read} when nothing is buffered right
        now.
    """

    EXHAUSTED = "exhausted"
    SKIP = "skip"
    EMPTY = "empty"

    def __repr__(self) -> str:
        return f"<{self.name}>"


EXHAUSTED = _Marker.EXHAUSTED
SKIP = _Marker.SKIP
EMPTY = _Marker.EMPTY


class _Phase(Enum):
    """
    Lifecycle of a source adapter.
    """

    AWAITING_INIT = "awaiting-init"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    TERMINAL = "terminal"


_T = TypeVar("_T")

PullResult = Union[_T, Literal[_Marker.EXHAUSTED]]
