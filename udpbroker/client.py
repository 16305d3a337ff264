#!/usr/bin/env python3
"""Command‑line / programmatic broker *client*:

* Subscribe to topics (REGISTER ➜ REGISTERACK)
* Fire arbitrary typed messages and wait for an optional reply
* ANSI‑coloured output via *colorama*.

Usage (after installing package locally):

    udpbroker-client 203.0.113.22 --topics weather,alerts
    udpbroker-client 203.0.113.22 --type 0 --payload hello
"""

from __future__ import annotations

import argparse                                    # For CLI parsing
import socket                                      # Low‑level UDP API
from typing import Iterable, Optional, Tuple

from colorama import Fore, Style, init

from .errors import DecodeError
from .packet_spec import make_register_payload, parse_topics
from .protocol import (
    BUF_SIZE, DEFAULT_PORT, Message, MessageType, decode_message, encode_message,
    make_message, verify_integrity,
)
from .util import LOG


class BrokerClient:
    """One UDP socket talking to one broker.  Also usable as a context manager."""

    def __init__(self, server_ip: str, server_port: int = DEFAULT_PORT,
                 timeout: float = 2.0) -> None:
        # Resolve once so replies can be matched against the sender address
        self.server: Tuple[str, int] = (socket.gethostbyname(server_ip), server_port)
        self.timeout = timeout

        # Ephemeral local port so multiple clients can run side by side
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("", 0))
        self.sock.settimeout(timeout)
        LOG.debug("Client bound on %s:%d", *self.sock.getsockname()[:2])

    def __enter__(self) -> "BrokerClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.sock.close()

    # ---------------------------------------------------------------- networking
    def send(self, message: Message) -> None:
        self.sock.sendto(encode_message(message), self.server)

    def send_raw(self, data: bytes) -> None:
        self.sock.sendto(data, self.server)

    def receive_raw(self) -> Optional[bytes]:
        """Next datagram from the broker, or None after ``timeout`` seconds."""
        while True:
            try:
                data, addr = self.sock.recvfrom(BUF_SIZE)
            except socket.timeout:
                return None
            if addr[:2] == self.server:
                return data
            LOG.debug("Ignoring datagram from %s", addr)   # Not our broker

    def receive(self) -> Optional[Message]:
        """Next reply decoded as an envelope (raises DecodeError otherwise)."""
        data = self.receive_raw()
        return None if data is None else decode_message(data)

    def request(self, message: Message) -> Optional[Message]:
        self.send(message)
        return self.receive()

    def register(self, topics: Iterable[str]) -> Optional[Message]:
        """Subscribe to *topics*; returns the REGISTERACK or None on timeout."""
        return self.request(make_message(MessageType.REGISTER, make_register_payload(topics)))

# ======================================================================
#  Command‑line entry point
# ======================================================================

def _print_reply(data: Optional[bytes]) -> int:
    if data is None:
        print(f"{Fore.RED}[TIMEOUT]{Style.RESET_ALL} no reply from broker")
        return 1
    try:
        reply = decode_message(data)
    except DecodeError:                            # Handler sent raw bytes (e.g. echo)
        print(f"{Fore.CYAN}[RAW]{Style.RESET_ALL} {data.decode('utf-8', 'replace')}")
        return 0

    if reply.type == MessageType.REGISTERACK:
        topics = ", ".join(parse_topics(reply.payload))
        print(f"{Fore.GREEN}[REGISTERACK]{Style.RESET_ALL} subscribed to {topics}")
    else:
        colour = Fore.CYAN if verify_integrity(reply) else Fore.YELLOW
        print(f"{colour}[{reply.type_name}]{Style.RESET_ALL} {reply.payload}")
    return 0


def main(argv=None) -> None:
    """Parse CLI args then send one message and print the reply."""
    init(autoreset=True)                           # Reset colour after each print
    parser = argparse.ArgumentParser("udpbroker-client")
    parser.add_argument("server_ip", help="IP address of the broker")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="UDP port of broker")
    parser.add_argument("--timeout", type=float, default=2.0, help="seconds to wait for a reply")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--topics", help="comma-separated topics to register for")
    group.add_argument("--type", type=lambda s: int(s, 0), dest="mtype",
                       help="message type code (e.g. 0 or 0x01)")
    parser.add_argument("--payload", default="", help="payload for --type")
    args = parser.parse_args(argv)

    with BrokerClient(args.server_ip, args.port, args.timeout) as client:
        if args.topics is not None:
            topics = [t.strip() for t in args.topics.split(",")]
            client.send(make_message(MessageType.REGISTER, make_register_payload(topics)))
        else:
            client.send(make_message(args.mtype, args.payload))
        data = client.receive_raw()
    parser.exit(_print_reply(data))


if __name__ == "__main__":
    main()
