"""Process-wide logging shared by ``kappctl`` and ``kappital-engine``."""
from __future__ import annotations

import logging

CLI_FORMAT = "%(levelname)s %(name)s: %(message)s"
SERVER_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# libraries that log every request or connection at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.error")


def setup_logging(verbose: bool, *, level: int = logging.WARNING, fmt: str = CLI_FORMAT) -> None:
    root_level = logging.DEBUG if verbose else level
    logging.basicConfig(level=root_level, format=fmt)

    quiet = logging.DEBUG if verbose else max(level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
