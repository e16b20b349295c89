from __future__ import annotations

import logging
import sys

from server.core.config import get_settings

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging() -> None:
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stdout)
    else:
        root.setLevel(level)
    # httpx logs full request URLs (including signed media links) at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
