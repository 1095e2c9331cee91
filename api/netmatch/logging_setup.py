from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the ``netmatch`` logger.

    Safe to call more than once; later calls replace the handler and level.
    """
    global _configured

    logger = logging.getLogger("netmatch")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if _configured:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    _configured = True
    return logger
