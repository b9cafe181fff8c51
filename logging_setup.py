from __future__ import annotations

import logging
import sys

_QUIET_LIBRARIES = ("httpx", "httpcore", "sqlalchemy")


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Configure root logging with a single stderr handler.

    Third-party libraries are limited to WARNING so request-level chatter
    from the HTTP client and the SQL engine stays out of the console.
    Call this once, before the first log record is emitted.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
