# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Exceptions raised by txpull.

Cancellation is reported with L{twisted.internet.defer.CancelledError}, so it
is not redefined here.
"""


class AlreadyInitializedError(Exception):
    """
    L{txpull.PendingSourceAdapter.init} was called more than once.
    """


class AlreadySubscribedError(Exception):
    """
    A source which supports a single listener was subscribed to twice.
    """


class SourceClosedError(Exception):
    """
    An item was written to a source after it ended or failed.
    """


__all__ = ["AlreadyInitializedError", "AlreadySubscribedError", "SourceClosedError"]
