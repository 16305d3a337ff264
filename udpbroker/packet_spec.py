# udpbroker/packet_spec.py
"""
Defines the required envelope fields and the payload convention used by
REGISTER messages.  Broker and client both read these so the format lives in
one place.
"""

from __future__ import annotations
from typing import Iterable, List

from .errors import NoTopicsError

# --- Envelope -----------------------------------------------------------------

# Every datagram must carry these top‑level keys (extra keys are ignored)
ENVELOPE_FIELDS = frozenset({"type", "checksum", "payload"})

# --- REGISTER payload ---------------------------------------------------------

# Free text containing this marker followed by comma‑separated topic names,
# e.g. "client v2 TOPICS: weather,alerts"
TOPICS_MARKER = "TOPICS: "
TOPIC_SEPARATOR = ","


def parse_topics(payload: str) -> List[str]:
    """Extract topic names from a REGISTER payload.

    The list runs from the marker to the end of that line.  Names are stripped,
    empties dropped, order and case kept.

    Raises:
        NoTopicsError: marker absent or no names after it.
    """
    idx = payload.find(TOPICS_MARKER)
    if idx < 0:
        raise NoTopicsError(f"payload has no {TOPICS_MARKER!r} marker")

    tail = payload[idx + len(TOPICS_MARKER):].splitlines()
    line = tail[0] if tail else ""
    topics = [name.strip() for name in line.split(TOPIC_SEPARATOR)]
    topics = [name for name in topics if name]
    if not topics:
        raise NoTopicsError("topic list is empty")
    return topics


def make_register_payload(topics: Iterable[str]) -> str:
    """Inverse of :func:`parse_topics`; also used as the REGISTERACK payload."""
    return TOPICS_MARKER + TOPIC_SEPARATOR.join(topics)
