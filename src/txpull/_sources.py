# -*- test-case-name: txpull.test.test_sources -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Ready-made L{ISource} implementations.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, Optional, Union

from zope.interface import implementer

from twisted.internet.error import ConnectionDone
from twisted.internet.interfaces import IConsumer, IPushProducer
from twisted.internet.protocol import Protocol, connectionDone
from twisted.logger import Logger
from twisted.python.failure import Failure

from txpull._types import EMPTY
from txpull.error import AlreadySubscribedError, SourceClosedError
from txpull.interfaces import ISource, ISourceListener


@implementer(ISource, IConsumer, IPushProducer)
class BufferedSource:
    """
    An in-memory source.

    Items are added with L{push} (or L{write}, so that a streaming producer
    registered with L{registerProducer} can feed it) and taken with L{read}.
    Pausing, resuming and stopping are passed on to the registered producer.

    @ivar paused: C{True} between L{pauseProducing} and L{resumeProducing}.
    @ivar ended: C{True} once L{end} has been called.
    @ivar failure: the L{Failure} given to L{fail}, if any.
    @ivar producer: the registered producer, if any.
    """

    log = Logger()

    paused = False
    ended = False
    failure: Optional[Failure] = None
    producer: Optional[IPushProducer] = None
    _listener: Optional[ISourceListener] = None

    def __init__(self, items: Iterable[object] = ()) -> None:
        self._buffer: Deque[object] = deque(items)

    def __repr__(self) -> str:
        return f"<BufferedSource buffered={len(self._buffer)} ended={self.ended}>"

    @property
    def closed(self) -> bool:
        """
        Has this source ended or failed?
        """
        return self.ended or self.failure is not None

    # ISource

    def subscribe(self, listener: ISourceListener) -> None:
        if self._listener is not None:
            raise AlreadySubscribedError(f"{self!r} already has a listener")
        self._listener = listener
        if self._buffer:
            listener.dataAvailable()
        if self.failure is not None:
            listener.sourceFailed(self.failure)
        elif self.ended:
            listener.sourceEnded()

    def read(self) -> object:
        if self._buffer:
            return self._buffer.popleft()
        return EMPTY

    # Feeding

    def push(self, item: object) -> None:
        """
        Buffer C{item} and tell the listener.

        @raise SourceClosedError: if this source has ended or failed.
        """
        if self.closed:
            raise SourceClosedError(f"Cannot push {item!r} to {self!r}")
        self._buffer.append(item)
        if self._listener is not None:
            self._listener.dataAvailable()

    def end(self) -> None:
        """
        There will be no more items.  Ending twice is a no-op.
        """
        if self.closed:
            return
        self.ended = True
        if self._listener is not None:
            self._listener.sourceEnded()

    def fail(self, reason: Union[Failure, BaseException, None] = None) -> None:
        """
        Break this source.

        @param reason: a L{Failure} or exception; defaults to the exception
            currently being handled.
        """
        if self.closed:
            return
        if not isinstance(reason, Failure):
            reason = Failure(reason)
        self.failure = reason
        if self._listener is not None:
            self._listener.sourceFailed(reason)

    # IConsumer

    def registerProducer(self, producer: IPushProducer, streaming: bool) -> None:
        """
        @see: L{IConsumer.registerProducer}

        @raise ValueError: if C{producer} is not a streaming producer, or
            another producer is registered.
        """
        if not streaming:
            raise ValueError("BufferedSource only accepts streaming producers")
        if self.producer is not None:
            raise ValueError(f"{self!r} already has producer {self.producer!r}")
        self.producer = producer
        if self.paused:
            producer.pauseProducing()

    def unregisterProducer(self) -> None:
        self.producer = None

    def write(self, data: object) -> None:
        """
        @see: L{IConsumer.write}
        """
        self.push(data)

    # IPushProducer

    def pauseProducing(self) -> None:
        self.paused = True
        if self.producer is not None:
            self.producer.pauseProducing()

    def resumeProducing(self) -> None:
        self.paused = False
        if self.producer is not None:
            self.producer.resumeProducing()

    def stopProducing(self) -> None:
        producer, self.producer = self.producer, None
        if producer is not None:
            with self.log.failuresHandled(
                "while stopping {producer!r}", producer=producer
            ):
                producer.stopProducing()


@implementer(ISource)
class SourceProtocol(Protocol):
    """
    A protocol whose received data is an L{ISource}.

    Every C{dataReceived} chunk is one item.  A clean close ends the source;
    any other disconnection fails it with the reason.  Pausing pauses the
    transport.
    """

    def __init__(self) -> None:
        self._buffer = BufferedSource()

    def dataReceived(self, data: bytes) -> None:
        self._buffer.push(data)

    def connectionLost(self, reason: Failure = connectionDone) -> None:
        if reason.check(ConnectionDone):
            self._buffer.end()
        else:
            self._buffer.fail(reason)

    def subscribe(self, listener: ISourceListener) -> None:
        self._buffer.subscribe(listener)

    def read(self) -> object:
        return self._buffer.read()

    def pauseProducing(self) -> None:
        if self.transport is not None:
            self.transport.pauseProducing()
