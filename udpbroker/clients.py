#!/usr/bin/env python3
"""Topic‑keyed subscriber pool.

The pool is written by every concurrent REGISTER task, so all access goes
through one lock.  Readers get copies, never the internal lists.

Known limitations (kept on purpose):

* No deduplication – registering the same address for the same topic twice
  yields two entries.
* ``known_clients`` is keyed by the whole :class:`Client` (address *and*
  state), so the same address in another state counts as a different client.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Set, Tuple

Address = Tuple  # (host, port) for IPv4, (host, port, flowinfo, scope_id) for IPv6

CLIENT_ACTIVE: bool = True
CLIENT_CLOSED: bool = False


@dataclass(frozen=True, slots=True)
class Client:
    """Remote endpoint that registered for one or more topics."""

    address: Address              # As reported by recvfrom(), e.g. ("192.0.2.10", 64233)
    state: bool = CLIENT_ACTIVE   # Transitions belong to the (future) delivery layer

    @property
    def active(self) -> bool:
        return self.state == CLIENT_ACTIVE


class ClientPool:
    """topic ➜ ordered subscriber list, plus the set of every client ever seen."""

    def __init__(self) -> None:
        self._pool: Dict[str, List[Client]] = {}
        self._known: Set[Client] = set()
        self._lock = threading.Lock()

    def add_client(self, topic: str, client: Client) -> None:
        with self._lock:
            self._pool.setdefault(topic, []).append(client)
            self._known.add(client)

    def get_clients(self, topic: str) -> List[Client]:
        """Snapshot of the subscribers of *topic* (empty if none)."""
        with self._lock:
            return list(self._pool.get(topic, ()))

    def is_known(self, client: Client) -> bool:
        with self._lock:
            return client in self._known

    def known_clients(self) -> FrozenSet[Client]:
        with self._lock:
            return frozenset(self._known)

    def topics(self) -> List[str]:
        """Topics with at least one subscriber, in first‑subscription order."""
        with self._lock:
            return list(self._pool)
