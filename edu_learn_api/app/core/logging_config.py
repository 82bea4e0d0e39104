"""Root logger setup shared by the API server and the maintenance scripts."""

import logging
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Driver loggers that only speak up at WARNING unless the app runs in DEBUG.
QUIET_LOGGERS = ("pymongo",)


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Send records to stderr and, if ``logfile`` is given, to that file.

    Only the first call has an effect; ``create_app`` runs once per test
    and must not stack handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
