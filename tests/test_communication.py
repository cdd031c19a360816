import threading
import time

import pytest

from npcbrain.communication import Message, MessageQueue, NoopNetwork


def _receive_within(queue, seconds=2.0):
    deadline = time.monotonic() + seconds
    while time.monotonic() < deadline:
        msg = queue.try_receive()
        if msg is not None:
            return msg
        time.sleep(0.005)
    return None


def test_fifo_order():
    q = MessageQueue(4)
    first, second = Message("a", 1), Message("b", 2)
    q.send(first)
    q.send(second)
    assert q.try_receive() == first
    assert q.try_receive() == second
    assert q.try_receive() is None


def test_empty_queue_returns_none():
    assert MessageQueue(1).try_receive() is None


def test_full_queue_blocks_sender():
    q = MessageQueue(1)
    first, second = Message("a"), Message("b")
    q.send(first)
    sender = threading.Thread(target=q.send, args=(second,))
    sender.start()
    sender.join(0.1)
    assert sender.is_alive()
    assert q.try_receive() == first
    sender.join(2.0)
    assert not sender.is_alive()
    assert q.try_receive() == second


def test_unbuffered_rendezvous():
    q = MessageQueue(0)
    assert q.try_receive() is None
    msg = Message("ping", {"n": 1})
    sender = threading.Thread(target=q.send, args=(msg,))
    sender.start()
    assert _receive_within(q) == msg
    sender.join(2.0)
    assert not sender.is_alive()


def test_negative_buffer_rejected():
    with pytest.raises(ValueError):
        MessageQueue(-1)


def test_noop_network():
    net = NoopNetwork()
    assert net.is_connected() is False
    assert net.send({"x": 1}) is None
    assert net.is_connected() is False