# tests/test_util.py
import logging

from udpbroker.util import LOG, configure_logging, get_local_ip


def test_local_ip_towards_loopback():
    assert get_local_ip("127.0.0.1") == "127.0.0.1"


def test_local_ip_falls_back_without_route():
    assert get_local_ip("no-such-host.invalid") == "127.0.0.1"


def test_configure_logging_is_idempotent():
    before = list(LOG.handlers)
    assert configure_logging() is LOG
    assert LOG.handlers == before
    assert LOG.name == "udpbroker"
    assert LOG.level == logging.INFO
