"""Process-wide logging setup.

Modules only ever call ``logging.getLogger(__name__)``; this module wires the
root logger once for the HTTP entrypoint.
"""

import logging
import sys
from typing import Optional

from mediaconv.core.config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger. Safe to call more than once."""
    global _configured

    resolved = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(resolved)

    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # uvicorn installs its own handlers; keep its access log but route through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True

    _configured = True
