#!/usr/bin/env python3
"""Message‑type ➜ handler table.

A handler receives the payload string of a verified, catalogued message and
returns the reply: a :class:`~udpbroker.protocol.Message` (encoded for it),
raw ``bytes`` (sent as‑is) or ``None`` for no reply.  Failures are raised.
"""

from __future__ import annotations
import threading
from typing import Callable, Dict, List, Optional, Union

from .errors import DuplicateHandlerError, HandlerAbsentError
from .protocol import MESSAGE_TYPES, Message
from .util import LOG

Reply = Union[Message, bytes, None]
Handler = Callable[[str], Reply]


class HandlerRegistry:
    """At most one handler per type code; re‑registration fails instead of overwriting."""

    def __init__(self) -> None:
        self._handlers: Dict[int, Handler] = {}
        self._lock = threading.Lock()

    def register(self, mtype: int, handler: Handler) -> None:
        mtype = int(mtype)
        with self._lock:
            if mtype in self._handlers:
                raise DuplicateHandlerError(
                    f"handler already exists for type {_label(mtype)}")
            self._handlers[mtype] = handler

    def unregister(self, mtype: int) -> None:
        mtype = int(mtype)
        with self._lock:
            if self._handlers.pop(mtype, None) is None:
                raise HandlerAbsentError(f"no handler registered for type {_label(mtype)}")

    def lookup(self, mtype: int) -> Handler:
        mtype = int(mtype)
        with self._lock:
            handler = self._handlers.get(mtype)
        if handler is None:
            raise HandlerAbsentError(f"no handler registered for type {_label(mtype)}")
        return handler

    def registered_types(self) -> List[int]:
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, mtype: object) -> bool:
        with self._lock:
            return mtype in self._handlers

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)


def echo_handler(payload: str) -> Optional[bytes]:
    """Log the payload and send it straight back."""
    LOG.info("echo: %s", payload)
    return payload.encode("utf-8")


def _label(mtype: int) -> str:
    return f"{MESSAGE_TYPES.get(mtype, 'UNKNOWN')}(0x{mtype:02x})"
