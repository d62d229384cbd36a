# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txpull._sources}.
"""

from zope.interface import implementer
from zope.interface.verify import verifyObject

from twisted.internet.defer import CancelledError
from twisted.internet.error import ConnectionLost
from twisted.internet.interfaces import IConsumer, IPushProducer
from twisted.internet.protocol import connectionDone
from twisted.internet.testing import StringTransport
from twisted.python.failure import Failure
from twisted.trial.unittest import SynchronousTestCase

from txpull import EMPTY, BufferedSource, SourceAdapter, SourceProtocol, collect
from txpull.error import AlreadySubscribedError, SourceClosedError
from txpull.interfaces import ISource, ISourceListener


@implementer(ISourceListener)
class RecordingListener:
    """
    Remembers every notification.
    """

    def __init__(self):
        self.events = []

    def dataAvailable(self):
        self.events.append("data")

    def sourceEnded(self):
        self.events.append("ended")

    def sourceFailed(self, reason):
        self.events.append(reason)


@implementer(IPushProducer)
class RecordingProducer:
    """
    Remembers which producer methods were called.
    """

    def __init__(self):
        self.calls = []

    def pauseProducing(self):
        self.calls.append("pause")

    def resumeProducing(self):
        self.calls.append("resume")

    def stopProducing(self):
        self.calls.append("stop")


class BufferedSourceTests(SynchronousTestCase):
    """
    Tests for L{BufferedSource}.
    """

    def test_interfaces(self):
        """
        L{BufferedSource} is an L{ISource}, an L{IConsumer} and an
        L{IPushProducer}.
        """
        source = BufferedSource()
        self.assertTrue(verifyObject(ISource, source))
        self.assertTrue(verifyObject(IConsumer, source))
        self.assertTrue(verifyObject(IPushProducer, source))

    def test_read(self):
        """
        L{BufferedSource.read} returns buffered items in order, then
        L{EMPTY}.
        """
        source = BufferedSource([None, 0])
        source.push("")
        items = [source.read(), source.read(), source.read()]
        self.assertEqual(items, [None, 0, ""])
        self.assertIs(source.read(), EMPTY)

    def test_notifications(self):
        """
        The listener is told about every push, then the end.
        """
        source = BufferedSource()
        listener = RecordingListener()
        source.subscribe(listener)
        source.push(1)
        source.push(2)
        source.end()
        source.end()
        self.assertEqual(listener.events, ["data", "data", "ended"])

    def test_lateSubscriber(self):
        """
        A listener subscribing after items and the end were buffered is told
        about both straight away.
        """
        source = BufferedSource([1])
        source.end()
        listener = RecordingListener()
        source.subscribe(listener)
        self.assertEqual(listener.events, ["data", "ended"])

    def test_lateSubscriberFailed(self):
        """
        A listener subscribing to a failed source is given the failure.
        """
        source = BufferedSource()
        source.fail(ValueError())
        listener = RecordingListener()
        source.subscribe(listener)
        [reason] = listener.events
        self.assertTrue(reason.check(ValueError))

    def test_subscribeTwice(self):
        """
        A second listener is refused.
        """
        source = BufferedSource()
        source.subscribe(RecordingListener())
        self.assertRaises(
            AlreadySubscribedError, source.subscribe, RecordingListener()
        )

    def test_pushAfterClose(self):
        """
        Nothing can be pushed once the source has ended or failed.
        """
        ended = BufferedSource()
        ended.end()
        self.assertRaises(SourceClosedError, ended.push, 1)

        failed = BufferedSource()
        failed.fail(ValueError())
        self.assertRaises(SourceClosedError, failed.write, b"data")

    def test_failAfterEnd(self):
        """
        Failing an ended source changes nothing.
        """
        source = BufferedSource()
        listener = RecordingListener()
        source.subscribe(listener)
        source.end()
        source.fail(ValueError())
        self.assertIsNone(source.failure)
        self.assertEqual(listener.events, ["ended"])

    def test_producer(self):
        """
        A registered streaming producer writes into the source and is
        paused, resumed and stopped along with it.
        """
        source = BufferedSource()
        producer = RecordingProducer()
        source.registerProducer(producer, True)
        source.write(b"chunk")
        source.pauseProducing()
        source.resumeProducing()
        source.stopProducing()

        self.assertEqual(source.read(), b"chunk")
        self.assertEqual(producer.calls, ["pause", "resume", "stop"])
        self.assertIsNone(source.producer)

    def test_producerRegisteredWhilePaused(self):
        """
        A producer registered with a paused source is paused immediately.
        """
        source = BufferedSource()
        source.pauseProducing()
        producer = RecordingProducer()
        source.registerProducer(producer, True)
        self.assertEqual(producer.calls, ["pause"])

    def test_pullProducerRefused(self):
        """
        Only streaming producers may be registered.
        """
        source = BufferedSource()
        self.assertRaises(ValueError, source.registerProducer, object(), False)

    def test_secondProducerRefused(self):
        """
        Only one producer may be registered at a time.
        """
        source = BufferedSource()
        source.registerProducer(RecordingProducer(), True)
        self.assertRaises(
            ValueError, source.registerProducer, RecordingProducer(), True
        )
        source.unregisterProducer()
        source.registerProducer(RecordingProducer(), True)

    def test_cancelPausesProducer(self):
        """
        Cancelling an adapter over the source pauses the producer feeding it.
        """
        source = BufferedSource()
        producer = RecordingProducer()
        source.registerProducer(producer, True)
        adapter = SourceAdapter(source)
        d = adapter()
        adapter.cancel()
        self.failureResultOf(d, CancelledError)
        self.assertEqual(producer.calls, ["pause"])


class SourceProtocolTests(SynchronousTestCase):
    """
    Tests for L{SourceProtocol}.
    """

    def connected(self):
        protocol = SourceProtocol()
        transport = StringTransport()
        protocol.makeConnection(transport)
        return protocol, transport

    def test_interface(self):
        """
        L{SourceProtocol} is an L{ISource}.
        """
        protocol, transport = self.connected()
        self.assertTrue(verifyObject(ISource, protocol))

    def test_chunks(self):
        """
        Every chunk of received data is an item; a clean close ends the
        sequence.
        """
        protocol, transport = self.connected()
        d = collect(SourceAdapter(protocol))
        protocol.dataReceived(b"hello ")
        protocol.dataReceived(b"world")
        self.assertNoResult(d)
        protocol.connectionLost(connectionDone)
        self.assertEqual(self.successResultOf(d), [b"hello ", b"world"])

    def test_connectionLost(self):
        """
        Losing the connection uncleanly fails the sequence with the reason.
        """
        protocol, transport = self.connected()
        adapter = SourceAdapter(protocol)
        d = adapter()
        protocol.connectionLost(Failure(ConnectionLost()))
        self.failureResultOf(d, ConnectionLost)

    def test_cancelPausesTransport(self):
        """
        Cancelling the adapter pauses the transport.
        """
        protocol, transport = self.connected()
        adapter = SourceAdapter(protocol)
        adapter.cancel()
        self.assertEqual(transport.producerState, "paused")
