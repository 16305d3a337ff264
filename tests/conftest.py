# tests/conftest.py
import threading
import time

import pytest

from udpbroker.client import BrokerClient
from udpbroker.server import BrokerServer


@pytest.fixture
def broker():
    """Live broker on a free loopback port, receive loop in a background thread."""
    server = BrokerServer("127.0.0.1", 0)
    server.bind()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.stop()
    thread.join(timeout=2)


@pytest.fixture
def client(broker):
    """Client talking to the ``broker`` fixture."""
    host, port = broker.address
    with BrokerClient(host, port, timeout=1.0) as c:
        yield c


@pytest.fixture
def wait_for():
    """Poll a predicate until it holds or the timeout runs out."""

    def _wait(predicate, timeout=2.0, interval=0.01):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait
