"""UDP Broker – a minimal UDP topic broker library.

Importing this package exposes :class:`udpbroker.BrokerServer` and
:class:`udpbroker.BrokerClient` together with the envelope helpers, allowing
the broker to be embedded in another application or launched via the
``udpbroker-server`` console script.
"""

# ------------------------ re-exports ------------------------
from .client import BrokerClient                     # noqa: F401
from .clients import CLIENT_ACTIVE, CLIENT_CLOSED, Client, ClientPool  # noqa: F401
from .handlers import HandlerRegistry, echo_handler  # noqa: F401
from .protocol import (                              # noqa: F401
    MESSAGE_TYPES, Message, MessageType, decode_message, encode_message,
    make_message, validate_type, verify_integrity,
)
from .server import BrokerServer, ServerState        # noqa: F401

# ------------------------ public API ------------------------
__all__: list[str] = [
    "BrokerClient",
    "BrokerServer",
    "ServerState",
    "CLIENT_ACTIVE",
    "CLIENT_CLOSED",
    "Client",
    "ClientPool",
    "HandlerRegistry",
    "echo_handler",
    "MESSAGE_TYPES",
    "Message",
    "MessageType",
    "decode_message",
    "encode_message",
    "make_message",
    "validate_type",
    "verify_integrity",
]
