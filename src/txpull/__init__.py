# -*- test-case-name: txpull.test -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
txpull: pull items out of push sources, one L{Deferred} at a time.

Wrap a source with L{SourceAdapter} (or L{PendingSourceAdapter} if the source
is not known yet) and call the adapter to get a L{Deferred} of the next item,
or L{EXHAUSTED} once there are no more::

    pull = SourceAdapter(source)
    item = await pull()

Pull operations compose with L{select} and L{flatten}.
"""

from txpull._adapter import PendingSourceAdapter, SourceAdapter
from txpull._combinators import collect, flatten, select
from txpull._signal import Broadcast, OneShotSignal
from txpull._sources import BufferedSource, SourceProtocol
from txpull._types import EMPTY, EXHAUSTED, SKIP
from txpull._version import __version__ as version

__version__ = version.short()

__all__ = [
    "SourceAdapter",
    "PendingSourceAdapter",
    "select",
    "flatten",
    "collect",
    "Broadcast",
    "OneShotSignal",
    "BufferedSource",
    "SourceProtocol",
    "EXHAUSTED",
    "SKIP",
    "EMPTY",
]
