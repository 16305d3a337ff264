# tests/test_client.py
import socket

import colorama
import pytest

from udpbroker import client as client_mod
from udpbroker.client import BrokerClient, _print_reply
from udpbroker.protocol import MessageType, encode_message, make_message


class TestPrintReply:

    def test_timeout(self, capsys):
        assert _print_reply(None) == 1
        assert "[TIMEOUT]" in capsys.readouterr().out

    def test_register_ack(self, capsys):
        data = encode_message(make_message(MessageType.REGISTERACK, "TOPICS: a,b"))
        assert _print_reply(data) == 0
        assert "subscribed to a, b" in capsys.readouterr().out

    def test_other_message(self, capsys):
        assert _print_reply(encode_message(make_message(MessageType.PONG, "t1"))) == 0
        assert "[PONG]" in capsys.readouterr().out

    def test_raw_bytes(self, capsys):
        assert _print_reply(b"hello") == 0
        assert "[RAW]" in capsys.readouterr().out


def test_register_times_out_against_silent_peer():
    silent = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    silent.bind(("127.0.0.1", 0))
    try:
        with BrokerClient(*silent.getsockname(), timeout=0.2) as c:
            assert c.register(["weather"]) is None
    finally:
        silent.close()


def test_cli_register(broker):
    host, port = broker.address
    try:
        with pytest.raises(SystemExit) as info:
            client_mod.main([host, "--port", str(port), "--topics", "news, sport"])
    finally:
        colorama.deinit()
    assert info.value.code == 0
    assert len(broker.clients.get_clients("news")) == 1
    assert len(broker.clients.get_clients("sport")) == 1
