#!/usr/bin/env python3
"""Exception hierarchy shared by the broker, its registries and the client.

Two families:

* :class:`BrokerConnectionError` – startup faults (address / socket).  They
  carry an error number and a severity and abort initialisation.
* :class:`PacketError` – per‑datagram faults.  The server catches them inside
  the datagram task, counts them under :attr:`PacketError.fault` and drops the
  packet without replying.
"""

from __future__ import annotations

# --- Severities -------------------------------------------------------------
FATAL   = "FATAL"
ERROR   = "ERROR"
WARNING = "WARNING"

# --- Connection error numbers ----------------------------------------------
ADDRESS_ERROR     = 100
CONNECTION_FAILED = 101
CONNECTION_CLOSED = 102
PARTIAL_DATA      = 103


class BrokerError(Exception):
    """Root of every exception raised by :mod:`udpbroker`."""


# ======================================================================
#  Startup / connection errors
# ======================================================================

class BrokerConnectionError(BrokerError):
    """Connection level failure, rendered as ``[SEVERITY]errno: message``."""

    def __init__(self, errno: int, message: str, severity: str = ERROR) -> None:
        super().__init__(message)
        self.errno = errno
        self.message = message
        self.severity = severity

    def __str__(self) -> str:
        return f"[{self.severity}]{self.errno}: {self.message}"


class AddressResolutionError(BrokerConnectionError):
    def __init__(self, message: str = "Unable to resolve UDP address") -> None:
        super().__init__(ADDRESS_ERROR, message, ERROR)


class BindError(BrokerConnectionError):
    def __init__(self, message: str = "Unable to bind to the address for listening") -> None:
        super().__init__(CONNECTION_FAILED, message, FATAL)


# ======================================================================
#  Handler registry errors
# ======================================================================

class DuplicateHandlerError(BrokerError):
    """A handler is already registered for this message type."""


class NotFoundError(BrokerError, LookupError):
    """Requested entry does not exist."""


# ======================================================================
#  Per‑packet errors
# ======================================================================

class PacketError(BrokerError):
    fault: str = "packet"


class DecodeError(PacketError):
    fault = "decode"


class EncodeError(PacketError):
    fault = "encode"


class IntegrityError(PacketError):
    fault = "integrity"


class UnsupportedTypeError(PacketError):
    fault = "unsupported_type"


class NoTopicsError(PacketError):
    fault = "no_topics"


class HandlerAbsentError(PacketError, NotFoundError):
    """No handler for a recognised type – a configuration gap, not a protocol fault."""

    fault = "handler_absent"


class HandlerFailedError(PacketError):
    """A registered handler raised while processing a payload."""

    fault = "handler_failed"


class InternalError(PacketError):
    """Unexpected failure inside the broker while processing a datagram."""

    fault = "internal"
