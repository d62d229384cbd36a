# -*- test-case-name: txpull.test.test_adapter -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Adapters which turn an L{ISource} into an L{IPull}.
"""

from __future__ import annotations

from inspect import isawaitable
from typing import TYPE_CHECKING, Callable, Generic, Optional, TypeVar, Union

from zope.interface import implementer

from twisted.internet.defer import CancelledError, Deferred, maybeDeferred, succeed
from twisted.logger import Logger
from twisted.python.failure import Failure

from txpull._signal import OneShotSignal
from txpull._types import EMPTY, EXHAUSTED, SKIP, PullResult, _Marker, _Phase
from txpull.error import AlreadyInitializedError
from txpull.interfaces import ICancellable, IPull, ISource, ISourceListener

_T = TypeVar("_T")

if TYPE_CHECKING:
    SourceOrFactory = Union[
        ISource,
        Deferred[ISource],
        Callable[[], Union[ISource, Deferred[ISource]]],
    ]


def _checkSource(sourceOrFactory: object) -> None:
    """
    @raise TypeError: if C{sourceOrFactory} is neither an L{ISource}
        provider, a L{Deferred} nor a callable.
    """
    if (
        isinstance(sourceOrFactory, Deferred)
        or ISource.providedBy(sourceOrFactory)
        or callable(sourceOrFactory)
    ):
        return
    raise TypeError(
        f"Expected an ISource provider, a Deferred or a factory, "
        f"not {sourceOrFactory!r}"
    )


@implementer(IPull, ICancellable, ISourceListener)
class _Adapter(Generic[_T]):
    """
    The machinery shared by L{SourceAdapter} and L{PendingSourceAdapter}.

    Pulls never read the source while suspended.  Each attempt drains the
    source synchronously, so two callers can never take the same item, and
    a caller which wakes up to find nothing simply waits for the next
    notification.

    An item which is a L{Deferred} or another awaitable is awaited after it
    has been taken, and the pull fires with its result.  An item which is a
    L{Failure} fails the pull which took it, just as a L{Failure} returned
    from a callback fails a L{Deferred}; later pulls are unaffected.

    @ivar _phase: where this adapter is in its lifecycle.  It is only
        reported by C{repr}; C{_failure}, C{_exhausted} and C{_source} decide
        what a pull does.
    @ivar _signal: woken whenever the source may have something new.
    @ivar _failure: the sticky L{Failure}; once set, every pull fails with
        it.
    @ivar _exhausted: C{True} once the source has ended.
    @ivar _source: the attached L{ISource}, or L{None}.
    @ivar _pending: the L{Deferred} of an initialization in progress.
    @ivar _generation: bumped on cancellation; an initialization which
        completes with a stale generation is discarded.
    """

    log = Logger()

    _phase = _Phase.AWAITING_INIT
    _failure: Optional[Failure] = None
    _exhausted = False
    _source: Optional[ISource] = None
    _pending: Optional[Deferred[None]] = None
    _generation = 0
    _cancelled = False

    def __init__(
        self, transform: Optional[Callable[[object], Union[_T, _Marker]]] = None
    ) -> None:
        self._transform = transform
        self._signal = OneShotSignal()

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return f"<{name} {self._phase.value} source={self._source!r}>"

    # Initialization

    def _initialize(self, sourceOrFactory: SourceOrFactory) -> None:
        if isinstance(sourceOrFactory, Deferred):
            d = sourceOrFactory
        elif ISource.providedBy(sourceOrFactory):
            d = succeed(sourceOrFactory)
        else:
            d = maybeDeferred(sourceOrFactory)

        if not self._cancelled:
            self._phase = _Phase.INITIALIZING
        generation = self._generation

        def attach(source: ISource) -> None:
            if generation != self._generation or self._cancelled:
                self.log.debug(
                    "Discarding {source!r}; initialization was abandoned",
                    source=source,
                )
                with self.log.failuresHandled(
                    "while pausing discarded {source!r}", source=source
                ):
                    source.pauseProducing()
                return
            self._pending = None
            self._attach(source)

        def failed(reason: Failure) -> None:
            if generation != self._generation or self._cancelled:
                self.log.debug(
                    "Ignoring abandoned initialization: {reason}",
                    reason=reason.getErrorMessage(),
                )
                return
            self._pending = None
            self.log.debug(
                "Initialization failed: {reason}", reason=reason.getErrorMessage()
            )
            self._fail(reason)

        d.addCallback(attach).addErrback(failed)
        if not d.called:
            self._pending = d

    def _attach(self, source: ISource) -> None:
        self._source = source
        self._phase = _Phase.ACTIVE
        self.log.debug("Attached to {source!r}", source=source)
        source.subscribe(self)
        # Pulls which arrived before the source should look at it now.
        self._signal.fire()

    # ISourceListener

    def dataAvailable(self) -> None:
        self._signal.fire()

    def sourceEnded(self) -> None:
        self.log.debug("{source!r} ended", source=self._source)
        self._exhausted = True
        self._phase = _Phase.TERMINAL
        self._signal.fire()

    def sourceFailed(self, reason: Failure) -> None:
        self.log.debug(
            "{source!r} failed: {reason}",
            source=self._source,
            reason=reason.getErrorMessage(),
        )
        self._fail(reason)

    def _fail(self, reason: Failure) -> None:
        if self._failure is None:
            self._failure = reason
        self._phase = _Phase.TERMINAL
        self._signal.fail(self._failure)

    # IPull

    def _drain(self) -> Union[_T, _Marker]:
        """
        Take items from the source until one survives the transform.

        This never suspends.

        @return: the item, or L{EMPTY} if the source had nothing suitable.
        """
        source = self._source
        if source is None:
            return EMPTY
        while True:
            raw = source.read()
            if raw is EMPTY:
                return EMPTY
            if self._transform is None:
                return raw  # type: ignore[return-value]
            value = self._transform(raw)
            if value is not SKIP:
                return value

    async def _next(self) -> PullResult[_T]:
        while True:
            if self._failure is not None:
                # Buffered items are not delivered once the source has broken.
                self._failure.raiseException()
            item = self._drain()
            if item is not EMPTY:
                # The item is ours now, so waiting on it cannot race.
                if isinstance(item, Failure):
                    item.raiseException()
                if isawaitable(item):
                    return await item
                return item  # type: ignore[return-value]
            if self._exhausted:
                return EXHAUSTED
            await self._signal.wait()

    def __call__(self) -> Deferred[PullResult[_T]]:
        """
        Pull the next item.

        @return: a L{Deferred} firing with the next item or L{EXHAUSTED}.  It
            fails with the adapter's sticky failure, which is a
            L{CancelledError} after L{cancel}.  Cancelling the returned
            L{Deferred} withdraws only this request.
        """
        return Deferred.fromCoroutine(self._next())

    # ICancellable

    def cancel(self) -> None:
        """
        Stop pulling from the source.

        A pending initialization is abandoned; an attached source is asked to
        pause.  Every suspended and future pull fails with L{CancelledError},
        unless the source had already failed, in which case that failure is
        kept.
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._generation += 1
        self.log.debug("Cancelling {adapter!r}", adapter=self)

        pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()
        elif self._source is not None:
            with self.log.failuresHandled(
                "while pausing {source!r}", source=self._source
            ):
                self._source.pauseProducing()

        if self._failure is None:
            self._failure = Failure(CancelledError())
        self._phase = _Phase.TERMINAL
        self._signal.fail(self._failure)


class SourceAdapter(_Adapter[_T]):
    """
    A pull operation over a source which is available, or being produced,
    now.

    @param sourceOrFactory: an L{ISource} provider, a L{Deferred} which fires
        with one, or a zero-argument callable returning either.
    @param transform: an optional synchronous callable applied to every item
        taken from the source.  Items for which it returns L{SKIP} are
        dropped.  If it raises, the pull which took the item fails and the
        item is lost.
    """

    def __init__(
        self,
        sourceOrFactory: SourceOrFactory,
        transform: Optional[Callable[[object], Union[_T, _Marker]]] = None,
    ) -> None:
        super().__init__(transform)
        _checkSource(sourceOrFactory)
        self._initialize(sourceOrFactory)


class PendingSourceAdapter(_Adapter[_T]):
    """
    A pull operation whose source is supplied later, with L{init}.

    Pulls made before L{init} wait for it.
    """

    _initCalled = False

    def init(self, sourceOrFactory: SourceOrFactory) -> None:
        """
        Supply the source.  See L{SourceAdapter} for what C{sourceOrFactory}
        may be.

        If this adapter was already cancelled the source is paused and never
        read.

        @raise AlreadyInitializedError: if called more than once.
        @raise TypeError: if C{sourceOrFactory} is unsuitable.  The adapter
            may still be initialized afterwards.
        """
        if self._initCalled:
            raise AlreadyInitializedError(f"{self!r} was already initialized")
        _checkSource(sourceOrFactory)
        self._initCalled = True
        self._initialize(sourceOrFactory)
