#!/usr/bin/env python3
"""Shared constants, the message envelope and its wire helpers.

Everything that travels over the network is built, encoded, decoded and
checked via the utilities here so that broker & clients never disagree on
wire‑format details.

Wire form: one UTF‑8 JSON object per datagram::

    {"type": 6, "checksum": "<md5 hex of payload>", "payload": "TOPICS: weather"}

Decoding only checks *structure*.  Integrity (:func:`verify_integrity`) and
type membership (:func:`validate_type`) are separate predicates so callers can
tell "unparsable" from "parsed but invalid".
"""

from __future__ import annotations       # Postponed annotation evaluation (PEP 563)
import hashlib                           # Payload digest
import json                              # JSON is our lightweight wire format
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from .errors import DecodeError, EncodeError
from .packet_spec import ENVELOPE_FIELDS

# --- Network configuration -------------------------------------------------
BUF_SIZE: int = 32768            # Max UDP datagram size we read; larger ones truncate
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 10001        # Well‑known port on which the broker listens

# --- Message‑type catalog --------------------------------------------------

class MessageType(IntEnum):
    TEST        = 0x00    # Connection test
    PING        = 0x01    # Liveliness check of the recipient
    SHUTDOWN    = 0x02    # Shut the client down
    CLOSE       = 0x03    # Disconnect the client
    MAINTENANCE = 0x04    # Send the client into maintenance
    CONTROL     = 0x05    # Switch the client back to operational mode
    REGISTER    = 0x06    # Subscribe the sender to one or more topics
    PONG        = 0x07    # Answer to PING
    REGISTERACK = 0x08    # Broker acknowledges a REGISTER


# code ➜ name, built once; read‑only for the life of the process.
MESSAGE_TYPES: Mapping[int, str] = MappingProxyType(
    {int(t): t.name for t in MessageType}
)

# --- Envelope --------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Message:
    """A single envelope.  ``type`` stays a raw int so unknown codes survive decoding."""

    type: int
    checksum: str
    payload: str

    @property
    def type_name(self) -> str:
        return MESSAGE_TYPES.get(self.type, "UNKNOWN")


def checksum(payload: str) -> str:
    """Hex MD5 digest of *payload* – corruption detection, not security."""
    # surrogatepass: a lone surrogate can arrive via a JSON "\ud800" escape
    return hashlib.md5(payload.encode("utf-8", "surrogatepass")).hexdigest()


def make_message(mtype: int, payload: str = "") -> Message:
    """Build a message, computing the checksum over *payload*."""
    return Message(type=int(mtype), checksum=checksum(payload), payload=payload)


def encode_message(message: Message) -> bytes:
    """Serialize a :class:`Message` ⟶ JSON ⟶ UTF‑8 bytes suitable for sendto()."""
    doc = {
        "type": message.type,
        "checksum": message.checksum,
        "payload": message.payload,
    }
    try:
        return json.dumps(doc, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise EncodeError(f"cannot serialise message: {exc}") from exc


def decode_message(data: bytes) -> Message:
    """Inverse of :func:`encode_message` – bytes ⟶ :class:`Message`.

    Raises:
        DecodeError: not UTF‑8 JSON, not an object, a required field is
            missing, or a field has the wrong type.
    """
    try:
        doc = json.loads(data.decode("utf-8"))
    # ValueError covers JSONDecodeError and over-long integer literals;
    # RecursionError comes from deeply nested arrays or objects.
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise DecodeError(f"unparsable datagram: {exc}") from exc

    if not isinstance(doc, dict):
        raise DecodeError("datagram is not a JSON object")

    missing = ENVELOPE_FIELDS - doc.keys()
    if missing:
        raise DecodeError(f"missing fields: {', '.join(sorted(missing))}")

    mtype, digest, payload = doc["type"], doc["checksum"], doc["payload"]
    # bool is an int subclass; true/false is not a type code.
    if not isinstance(mtype, int) or isinstance(mtype, bool):
        raise DecodeError(f"type must be an integer, got {mtype!r}")
    if not isinstance(digest, str) or not isinstance(payload, str):
        raise DecodeError("checksum and payload must be strings")

    return Message(type=mtype, checksum=digest, payload=payload)


def verify_integrity(message: Message) -> bool:
    """True iff the carried checksum matches the payload."""
    return checksum(message.payload) == message.checksum


def validate_type(message: Message) -> bool:
    """True iff ``message.type`` is in the catalog."""
    return message.type in MESSAGE_TYPES
