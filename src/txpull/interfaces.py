# -*- test-case-name: txpull.test -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Interfaces between push sources, the adapters which drain them, and the pull
operations built on top of those adapters.
"""

from zope.interface import Interface


class ISourceListener(Interface):
    """
    An object notified by an L{ISource} about the state of its buffer.

    Notifications are delivered synchronously by the source; a listener must
    not block.
    """

    def dataAvailable() -> None:
        """
        At least one new item may be available from L{ISource.read}.

        A source may call this more often than strictly necessary; listeners
        must tolerate finding nothing when they read.
        """

    def sourceEnded() -> None:
        """
        The source will never buffer another item.  Items already buffered may
        still be read.  Called at most once, and never after
        L{sourceFailed}.
        """

    def sourceFailed(reason: object) -> None:
        """
        The source broke and is dead.  Called at most once.

        @param reason: why it broke.
        @type reason: L{twisted.python.failure.Failure}
        """


class ISource(Interface):
    """
    A push-based producer of items with a non-blocking read.
    """

    def subscribe(listener: ISourceListener) -> None:
        """
        Start delivering notifications to C{listener}.

        If items are already buffered, or the source has already ended or
        failed, the corresponding notifications are delivered during this
        call.
        """

    def read() -> object:
        """
        Take the next buffered item without blocking.

        @return: the item, or L{txpull.EMPTY} if nothing is buffered right
            now.
        """

    def pauseProducing() -> None:
        """
        Ask the source to stop producing.  This is advisory: a source may keep
        notifying for a while.
        """


class IPull(Interface):
    """
    A pull operation: each call returns a L{Deferred
    <twisted.internet.defer.Deferred>} which fires with the next item, or
    with L{txpull.EXHAUSTED} once there are no more.

    Calls may overlap.  Every item is delivered to exactly one caller; which
    caller receives which item, among callers waiting at the same time, is
    not specified.
    """

    def __call__() -> object:
        """
        Request the next item.

        @rtype: L{Deferred <twisted.internet.defer.Deferred>}
        """


class ICancellable(Interface):
    """
    Something whose outstanding and future work can be abandoned.
    """

    def cancel() -> None:
        """
        Stop.  Calling this more than once has the same effect as calling it
        once.
        """


__all__ = ["ISourceListener", "ISource", "IPull", "ICancellable"]
