#!/usr/bin/env python3
"""Logging utils **and** helper that discovers our outward‑facing IP address."""

from __future__ import annotations
import logging                           # Python stdlib logging framework
import socket                            # Needed for IP detection
import sys                               # For stderr/stdout handles
from logging.handlers import RotatingFileHandler

__all__ = ["LOG", "LOG_FILE", "configure_logging", "get_local_ip"]

LOG_FILE: str = "udp_broker.log"

# ----------------------------------------------------------------------
# configure_logging() builds a ready‑to‑use Logger with both console + file
# output.  Calling it twice returns the same logger without stacking handlers.
# ----------------------------------------------------------------------

def configure_logging(log_file: str | None = LOG_FILE,
                      level: int = logging.INFO) -> logging.Logger:
    """Return a logger named "udpbroker" with console (+ optional file) output."""

    logger = logging.getLogger("udpbroker")
    logger.setLevel(level)
    if logger.handlers:                      # Already configured
        return logger

    fmt = logging.Formatter("[%(asctime)s] %(levelname)-8s %(message)s", "%H:%M:%S")

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    if log_file:
        # Rotates once file hits ±1 MiB, keeps 3 backups ⇒ log ≲ 4 MiB on disk.
        fh = RotatingFileHandler(
            log_file,
            maxBytes=1_048_576,
            backupCount=3,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger

# Importers simply do:  from udpbroker.util import LOG
LOG = configure_logging()

# ----------------------------------------------------------------------
# best‑effort outward IP discovery (no external calls, works offline)
# ----------------------------------------------------------------------

def get_local_ip(route_via: str = "8.8.8.8") -> str:
    """Source address the OS would use to reach *route_via*.

    Falls back to 127.0.0.1 when there is no route (offline, no NIC).
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.connect((route_via, 9))        # UDP connect() sends nothing
        except OSError:
            return "127.0.0.1"
        return sock.getsockname()[0]
