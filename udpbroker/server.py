#!/usr/bin/env python3
"""UDP message broker.

* One receive loop reads datagrams from the shared socket.
* Every datagram is processed in its own thread: decode ➜ verify checksum ➜
  validate type ➜ REGISTER into the client pool or dispatch to a handler ➜
  reply to the sender.
* Broken, corrupted or unsupported datagrams get **no** reply; the fault is
  logged and counted in :attr:`BrokerServer.faults`.
"""

from __future__ import annotations

import argparse                       # CLI parsing
import enum
import logging
import socket                         # UDP socket operations
import threading                      # Concurrency primitives
from collections import Counter
from typing import Optional, Tuple

from .clients import CLIENT_ACTIVE, Client, ClientPool
from .errors import (
    CONNECTION_CLOSED, ERROR, AddressResolutionError, BindError,
    BrokerConnectionError, EncodeError, HandlerAbsentError, HandlerFailedError,
    IntegrityError, InternalError, PacketError, UnsupportedTypeError,
)
from .handlers import HandlerRegistry, Reply, echo_handler
from .packet_spec import make_register_payload, parse_topics
from .protocol import (
    BUF_SIZE, DEFAULT_HOST, DEFAULT_PORT, Message, MessageType, decode_message,
    encode_message, make_message, validate_type, verify_integrity,
)
from .util import LOG, get_local_ip

POLL_INTERVAL: float = 0.5     # recvfrom() timeout so the loop notices stop()


class ServerState(enum.Enum):
    CREATED = "created"        # Address resolved, socket not bound
    LISTENING = "listening"    # Bound, accepting datagrams
    STOPPED = "stopped"        # Socket released (terminal)


class BrokerServer:
    """Receives datagrams, keeps the topic registry and answers senders."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        handlers: Optional[HandlerRegistry] = None,
        clients: Optional[ClientPool] = None,
    ) -> None:
        self.host = host
        self.port = port

        # ------ resolve listening address ------
        try:
            infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
        except (socket.gaierror, OverflowError, UnicodeError) as exc:
            LOG.error("Error translating UDP address %s:%s: %s", host, port, exc)
            raise AddressResolutionError(
                f"Unable to resolve UDP address {host}:{port}") from exc
        self._family, _, _, _, self._sockaddr = infos[0]

        # ------ runtime state ------
        self.handlers = handlers if handlers is not None else HandlerRegistry()
        self.clients = clients if clients is not None else ClientPool()
        self.sock: Optional[socket.socket] = None
        self.state = ServerState.CREATED

        self.faults: Counter[str] = Counter()      # fault name ➜ occurrences
        self._faults_lock = threading.Lock()

        # Flag to shut the receive loop down cooperatively.
        self.running = threading.Event()

    # ================================================================= main ===
    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the requested pair before bind()."""
        if self.sock is not None and self.state is ServerState.LISTENING:
            return self.sock.getsockname()[:2]
        return self._sockaddr[:2]

    def bind(self) -> None:
        """CREATED ➜ LISTENING."""
        if self.state is not ServerState.CREATED:
            raise BrokerConnectionError(
                CONNECTION_CLOSED, f"cannot bind a {self.state.value} server", ERROR)

        sock = socket.socket(self._family, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(self._sockaddr)
        except (OSError, OverflowError) as exc:
            sock.close()
            LOG.error("Unable to start the UDP server on %s:%s: %s", self.host, self.port, exc)
            raise BindError(
                f"Unable to bind to {self.host}:{self.port} for listening") from exc

        sock.settimeout(POLL_INTERVAL)
        self.sock = sock
        self.state = ServerState.LISTENING
        self.running.set()

    def start(self) -> None:
        """Blocking entry point: serve until Ctrl‑C or stop()."""
        if self.state is ServerState.CREATED:
            self.bind()
        LOG.info("Broker listening on %s:%d", *self.address)
        try:
            self.serve_forever()
        except KeyboardInterrupt:
            LOG.info("Shutdown requested")
        finally:
            self.stop()

    def serve_forever(self) -> None:
        """Receive loop; returns once the socket is closed or fails."""
        if self.state is ServerState.CREATED:
            self.bind()
        if self.state is ServerState.STOPPED:
            raise BrokerConnectionError(CONNECTION_CLOSED, "server already stopped", ERROR)

        try:
            while self.running.is_set():
                try:
                    data, addr = self.sock.recvfrom(BUF_SIZE)
                except socket.timeout:
                    continue                        # Allow shutdown check
                except OSError as exc:              # Socket closed / error
                    if self.running.is_set():
                        LOG.error("Error occurred while reading data: %s", exc)
                    break

                LOG.debug("Read %d bytes from %s", len(data), addr)
                threading.Thread(
                    target=self.handle_datagram, args=(data, addr), daemon=True,
                ).start()
        finally:
            self.stop()

    def stop(self) -> None:
        """Close the socket; a pending recvfrom() fails and the loop exits."""
        self.running.clear()
        if self.sock is not None:
            self.sock.close()
        if self.state is not ServerState.STOPPED:
            self.state = ServerState.STOPPED
            LOG.info("Broker stopped")

    # ---------------------------------------------------------------- per packet
    def handle_datagram(self, data: bytes, addr: Tuple) -> None:
        """Task body for one datagram.  Never raises."""
        try:
            reply = self.process_datagram(data, addr)
        except HandlerAbsentError as exc:
            self._record(exc, addr, logging.DEBUG)
            return
        except HandlerFailedError as exc:
            self._record(exc, addr, logging.ERROR, exc_info=exc.__cause__)
            return
        except PacketError as exc:
            self._record(exc, addr, logging.WARNING)
            return
        except Exception as exc:
            self._record(InternalError(f"{exc.__class__.__name__}: {exc}"), addr,
                         logging.ERROR, exc_info=exc)
            return

        if reply is not None:
            self._send(reply, addr)

    def process_datagram(self, data: bytes, addr: Tuple) -> Optional[bytes]:
        """Decode, check and dispatch one datagram; return the encoded reply.

        Raises:
            PacketError: one subclass per reason the packet was dropped.
        """
        message = decode_message(data)
        if not verify_integrity(message):
            raise IntegrityError(f"corrupted packet (checksum {message.checksum!r})")
        if not validate_type(message):
            raise UnsupportedTypeError(f"unsupported message type {message.type}")

        if message.type == MessageType.REGISTER:
            return self._render(self._handle_register(message, addr))

        handler = self.handlers.lookup(message.type)
        try:
            reply = handler(message.payload)
        except PacketError:
            raise
        except Exception as exc:
            raise HandlerFailedError(
                f"{message.type_name} handler raised {exc.__class__.__name__}: {exc}") from exc
        return self._render(reply)

    def fault_count(self, fault: str) -> int:
        with self._faults_lock:
            return self.faults[fault]

    # ---------------------------------------------------------------- handlers
    def _handle_register(self, message: Message, addr: Tuple) -> Message:
        topics = parse_topics(message.payload)          # NoTopicsError
        client = Client(addr, CLIENT_ACTIVE)
        for topic in topics:
            self.clients.add_client(topic, client)
        LOG.info("%s:%d registered for %s", addr[0], addr[1], ", ".join(topics))
        return make_message(MessageType.REGISTERACK, make_register_payload(topics))

    # ---------------------------------------------------------------- internals
    @staticmethod
    def _render(reply: Reply) -> Optional[bytes]:
        if reply is None or isinstance(reply, bytes):
            return reply
        if isinstance(reply, Message):
            return encode_message(reply)
        raise EncodeError(f"handler returned unsupported reply {type(reply).__name__}")

    def _send(self, pkt: bytes, addr: Tuple) -> None:
        if self.sock is None:
            LOG.warning("Reply to %s dropped: server not bound", addr)
            return
        try:
            self.sock.sendto(pkt, addr)
        except OSError as exc:                         # Closed socket
            LOG.warning("Reply to %s failed: %s", addr, exc)

    def _record(self, exc: PacketError, addr: Tuple, level: int, exc_info=None) -> None:
        with self._faults_lock:
            self.faults[exc.fault] += 1
        LOG.log(level, "Dropped packet from %s [%s]: %s", addr, exc.fault, exc,
                exc_info=exc_info)

# ======================================================================
#  Command‑line entry point
# ======================================================================

def main(argv=None) -> None:
    parser = argparse.ArgumentParser("udpbroker-server", description="UDP topic broker")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--public", nargs="?", const="8.8.8.8", metavar="ROUTE_VIA",
                        help="listen on the IP this host uses to reach ROUTE_VIA "
                             "(default 8.8.8.8) instead of --host")
    parser.add_argument("--echo", action="store_true",
                        help="answer TEST messages by echoing their payload")
    args = parser.parse_args(argv)

    host = get_local_ip(args.public) if args.public else args.host
    try:
        server = BrokerServer(host, args.port)
        if args.echo:
            server.handlers.register(MessageType.TEST, echo_handler)
        server.start()
    except BrokerConnectionError as exc:
        parser.exit(1, f"{exc}\n")


if __name__ == "__main__":
    main()
