# -*- test-case-name: txpull.test.test_combinators -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Pull operations built from other pull operations.
"""

from __future__ import annotations

from inspect import isawaitable
from typing import Any, Callable, List, Optional

from zope.interface import implementer

from twisted.internet.defer import Deferred, maybeDeferred
from twisted.logger import Logger

from txpull._signal import Broadcast
from txpull._types import EXHAUSTED, SKIP, PullResult
from txpull.interfaces import ICancellable, IPull

Pull = Callable[[], "Deferred[PullResult[Any]]"]


@implementer(IPull, ICancellable)
class _Select:
    """
    The pull operation returned by L{select}.
    """

    _exhausted = False

    def __init__(self, pull: Pull, transform: Callable[[Any], Any]) -> None:
        self._pull = pull
        self._transform = transform

    async def _next(self) -> PullResult[Any]:
        while not self._exhausted:
            value = await self._pull()
            if value is EXHAUSTED:
                self._exhausted = True
                break
            result = self._transform(value)
            if isawaitable(result):
                result = await result
            if result is not SKIP:
                return result
        return EXHAUSTED

    def __call__(self) -> Deferred[PullResult[Any]]:
        return Deferred.fromCoroutine(self._next())

    def cancel(self) -> None:
        if ICancellable.providedBy(self._pull):
            self._pull.cancel()


def select(pull: Pull, transform: Callable[[Any], Any]) -> _Select:
    """
    Convert and filter the items of C{pull}.

    @param pull: an L{IPull} provider, or any zero-argument callable returning
        a L{Deferred} of an item or L{EXHAUSTED}.
    @param transform: called with each item.  It may return a value, a
        L{Deferred} or a coroutine.  When the result is L{SKIP} the item is
        dropped and the next one is pulled.

    @return: an L{IPull} provider.  Once C{pull} is exhausted it is never
        called again.  Failures from C{pull} or C{transform} are passed on
        unchanged; an item whose transform failed is not retried.
    """
    return _Select(pull, transform)


@implementer(IPull, ICancellable)
class _Flatten:
    """
    The pull operation returned by L{flatten}.

    @ivar _acquisition: the sub-sequence currently being read, shared by all
        concurrent callers.  Only a caller which observed the current
        acquisition may replace it, so a sub-sequence found exhausted by
        several callers at once advances the outer sequence exactly once.
    @ivar _current: the sub-sequence of the current acquisition, for
        L{cancel}.  Callers still reading a replaced sub-sequence never set
        it.
    """

    log = Logger()

    _exhausted = False
    _acquisition: Optional[Broadcast[Any]] = None
    _current: Optional[Pull] = None

    def __init__(self, outer: Callable[[], Any]) -> None:
        self._outer = outer

    def _acquire(self) -> Broadcast[Any]:
        self._acquisition = Broadcast(maybeDeferred(self._outer))
        return self._acquisition

    async def _next(self) -> PullResult[Any]:
        while not self._exhausted:
            acquisition = self._acquisition
            if acquisition is None:
                acquisition = self._acquire()
            sub = await acquisition.observe()
            if sub is None or sub is EXHAUSTED:
                self._exhausted = True
                break
            if acquisition is self._acquisition:
                self._current = sub
            value = await sub()
            if isawaitable(value):
                value = await value
            if value is not EXHAUSTED:
                return value
            if acquisition is self._acquisition:
                self.log.debug("{sub!r} exhausted; advancing", sub=sub)
                self._acquire()
        return EXHAUSTED

    def __call__(self) -> Deferred[PullResult[Any]]:
        return Deferred.fromCoroutine(self._next())

    def cancel(self) -> None:
        if ICancellable.providedBy(self._current):
            self._current.cancel()
        if ICancellable.providedBy(self._outer):
            self._outer.cancel()


def flatten(outer: Callable[[], Any]) -> _Flatten:
    """
    Merge a sequence of pull operations into one.

    @param outer: a zero-argument callable returning a pull operation, or a
        L{Deferred} of one, each time it is called; L{None} or L{EXHAUSTED}
        means there are no more.

    @return: an L{IPull} provider yielding every item of every sub-sequence,
        one sub-sequence after the other.  Empty sub-sequences are skipped.
        An item which is itself awaitable is awaited.
    """
    return _Flatten(outer)


def collect(pull: Pull) -> Deferred[List[Any]]:
    """
    Pull every item, one at a time.

    @return: a L{Deferred} firing with the list of items once C{pull} is
        exhausted, or failing with the first failure.
    """

    async def gather() -> List[Any]:
        items = []
        while True:
            item = await pull()
            if item is EXHAUSTED:
                return items
            items.append(item)

    return Deferred.fromCoroutine(gather())
