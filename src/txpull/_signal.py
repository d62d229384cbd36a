# -*- test-case-name: txpull.test.test_signal -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Fan-out primitives which let many waiters observe one event.

A L{Deferred} delivers its result down a single callback chain, so it cannot
simply be shared: the first consumer to add a callback may change what the
next one sees.  These helpers give every waiter its own L{Deferred}.
"""

from __future__ import annotations

from typing import Generic, List, Tuple, TypeVar, Union

from twisted.internet.defer import Deferred, fail, succeed
from twisted.python.failure import Failure

_T = TypeVar("_T")

_NO_RESULT = object()


class Broadcast(Generic[_T]):
    """
    The result of one L{Deferred}, delivered to any number of observers.

    @ivar _result: the result, once known; L{_NO_RESULT} until then.
    @ivar _observers: L{Deferred}s handed out before the result was known.
    """

    def __init__(self, source: Deferred[_T]) -> None:
        self._result: Union[_T, Failure, object] = _NO_RESULT
        self._observers: List[Deferred[_T]] = []
        source.addBoth(self._settle)

    @property
    def called(self) -> bool:
        """
        Has the result arrived?
        """
        return self._result is not _NO_RESULT

    @property
    def result(self) -> Union[_T, Failure, None]:
        """
        The result if it has arrived, otherwise L{None}.
        """
        if self._result is _NO_RESULT:
            return None
        return self._result  # type: ignore[return-value]

    def _settle(self, result: Union[_T, Failure]) -> None:
        self._result = result
        observers, self._observers = self._observers, []
        for observer in observers:
            # An earlier observer's callbacks may have cancelled this one.
            if observer.called:
                continue
            if isinstance(result, Failure):
                observer.errback(result)
            else:
                observer.callback(result)
        # Every observer has its own copy; nothing is left unhandled here.
        return None

    def _forget(self, observer: Deferred[_T]) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def observe(self) -> Deferred[_T]:
        """
        @return: a new L{Deferred} which fires with the result.  Cancelling it
            only stops this observer from being notified.
        """
        if self._result is _NO_RESULT:
            observer: Deferred[_T] = Deferred(self._forget)
            self._observers.append(observer)
            return observer
        if isinstance(self._result, Failure):
            return fail(self._result)
        return succeed(self._result)  # type: ignore[arg-type]


def _newRound() -> Tuple[Deferred[None], Broadcast[None]]:
    trigger: Deferred[None] = Deferred()
    return trigger, Broadcast(trigger)


class OneShotSignal:
    """
    A reusable wake-up call.

    Each call to L{wait} joins the current round.  L{fire} or L{fail} settles
    that round and installs a new one before any waiter runs, so a waiter
    which calls L{wait} again from its callback waits for the I{next} event.
    """

    def __init__(self) -> None:
        self._trigger, self._round = _newRound()

    def wait(self) -> Deferred[None]:
        """
        @return: a L{Deferred} which fires with L{None} on the next L{fire},
            or fails on the next L{fail}.
        """
        return self._round.observe()

    def fire(self) -> None:
        """
        Wake every current waiter.
        """
        trigger = self._trigger
        self._trigger, self._round = _newRound()
        trigger.callback(None)

    def fail(self, reason: Failure) -> None:
        """
        Fail every current waiter with C{reason}.
        """
        trigger = self._trigger
        self._trigger, self._round = _newRound()
        trigger.errback(reason)
