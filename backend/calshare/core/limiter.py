"""Rate limiting configuration."""

from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from calshare.core.config import settings

logger = logging.getLogger(__name__)

# memory:// for a single instance; point RATE_LIMIT_STORAGE_URI at redis:// when scaled out
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
logger.debug(
    "Rate limiter configured: storage=%s enabled=%s",
    settings.RATE_LIMIT_STORAGE_URI,
    settings.RATE_LIMIT_ENABLED,
)
