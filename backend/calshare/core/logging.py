"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging
import sys

from calshare.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """Attach a single stream handler to the ``calshare`` logger tree."""
    global _configured

    root = logging.getLogger("calshare")
    root.setLevel((level or settings.LOG_LEVEL).upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
