# tests/test_handlers.py
import pytest

from udpbroker.errors import DuplicateHandlerError, HandlerAbsentError, NotFoundError
from udpbroker.handlers import HandlerRegistry, echo_handler
from udpbroker.protocol import MessageType


def _reply_pong(payload):
    return b"pong"


class TestHandlerRegistry:

    def test_register_and_lookup(self):
        registry = HandlerRegistry()
        registry.register(MessageType.PING, _reply_pong)
        assert registry.lookup(MessageType.PING) is _reply_pong
        assert registry.lookup(0x01) is _reply_pong
        assert MessageType.PING in registry
        assert len(registry) == 1

    def test_duplicate_registration_fails_and_keeps_first(self):
        registry = HandlerRegistry()
        registry.register(MessageType.PING, _reply_pong)
        with pytest.raises(DuplicateHandlerError):
            registry.register(MessageType.PING, echo_handler)
        assert registry.lookup(MessageType.PING) is _reply_pong

    def test_lookup_missing(self):
        with pytest.raises(NotFoundError):
            HandlerRegistry().lookup(MessageType.CONTROL)

    def test_missing_handler_error_is_handler_absent(self):
        with pytest.raises(HandlerAbsentError):
            HandlerRegistry().lookup(MessageType.CONTROL)

    def test_unregister(self):
        registry = HandlerRegistry()
        registry.register(MessageType.TEST, echo_handler)
        registry.unregister(MessageType.TEST)
        assert MessageType.TEST not in registry
        with pytest.raises(NotFoundError):
            registry.lookup(MessageType.TEST)

    def test_unregister_missing(self):
        with pytest.raises(NotFoundError):
            HandlerRegistry().unregister(MessageType.TEST)

    def test_reregister_after_unregister(self):
        registry = HandlerRegistry()
        registry.register(MessageType.TEST, echo_handler)
        registry.unregister(MessageType.TEST)
        registry.register(MessageType.TEST, _reply_pong)
        assert registry.lookup(MessageType.TEST) is _reply_pong

    def test_registered_types_sorted(self):
        registry = HandlerRegistry()
        registry.register(MessageType.CONTROL, echo_handler)
        registry.register(MessageType.TEST, echo_handler)
        assert registry.registered_types() == [0x00, 0x05]


def test_echo_handler_returns_payload_bytes():
    assert echo_handler("héllo") == "héllo".encode("utf-8")
