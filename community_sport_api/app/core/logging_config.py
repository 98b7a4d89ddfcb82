"""
Logging configuration for the Community Sport API.

``setup_logging`` sets the level of the ``community_sport_api`` logger
hierarchy and, when nothing else has configured the root logger yet,
attaches a console handler and an optional file handler.  Under
uvicorn or pytest the root handlers already exist, so only the package
level is applied and records flow to those handlers.
"""

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "community_sport_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure logging for the service.

    Parameters
    ----------
    level : str
        Logging level name for the service's own loggers (e.g.
        ``"DEBUG"`` shows catalog cache hits).  Case insensitive;
        unknown names fall back to ``INFO``.
    logfile : Optional[str]
        File that receives the same records as the console.  Parent
        directories are created.  Ignored when the root logger is
        already configured.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(min(numeric_level, logging.INFO))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
