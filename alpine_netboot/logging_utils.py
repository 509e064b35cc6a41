from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_LOG_PATH = "/var/log/alpine-netboot.log"
FALLBACK_LOG_NAME = "alpine-netboot.log"

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_FORMAT = "%(levelname)s %(message)s"

_configured_path: Optional[str] = None


def _open_log_file(log_path: str) -> Tuple[logging.FileHandler, str]:
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(log_path: str = DEFAULT_LOG_PATH, level: int = logging.INFO) -> str:
    """Send the root logger to a file (full detail) and to stderr (short).

    /var/log usually needs root; an unwritable path falls back to
    ./alpine-netboot.log. Later calls only change the level. Returns the
    file actually written.
    """

    global _configured_path

    root = logging.getLogger()
    root.setLevel(level)
    if _configured_path is not None:
        return _configured_path

    file_handler, chosen = _open_log_file(log_path)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    _configured_path = chosen
    logging.getLogger(__name__).info("Logging to %s", chosen)
    return chosen
