"""
Logging setup for the server and hook entry points.

Hooks talk to their host over stdout, so every handler here writes to stderr
or to a file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(debug: bool = False, error_log: Optional[Path] = None) -> None:
    """Attach a stderr handler to the root logger, plus an optional error log file.

    Args:
        debug: Log at DEBUG instead of INFO
        error_log: File that receives WARNING and above (created if missing)
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(stderr_handler)

    if error_log is not None:
        try:
            error_log.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(error_log, encoding="utf-8")
        except OSError as e:
            root.warning(f"Cannot open error log {error_log}: {e}")
            return
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
