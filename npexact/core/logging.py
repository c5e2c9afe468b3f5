"""
npexact.core.logging
====================

Every module logs through `get_logger(name)`, a child of the "npexact"
logger. The package itself only attaches a NullHandler; applications that
want to see table builds and numerical fallbacks call `configure_logging`.
"""

from __future__ import annotations
import logging
from typing import IO, Optional, Union

ROOT = "npexact"
FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

logging.getLogger(ROOT).addHandler(logging.NullHandler())

_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT}.{name}")


def configure_logging(level: Union[int, str] = logging.INFO, stream: Optional[IO[str]] = None) -> logging.Handler:
    """
    Send npexact records at `level` and above to `stream` (stderr by default).

    Calling it again swaps the previous handler for a new one.
    """
    global _handler
    root = logging.getLogger(ROOT)
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream)
    _handler.setFormatter(logging.Formatter(FORMAT))
    root.addHandler(_handler)
    root.setLevel(level)
    return _handler
