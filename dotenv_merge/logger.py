"""Debug logging for dotenv-merge.

Set ``DOTENV_MERGE_DEBUG=1`` in the environment (or call ``enable_debug``)
to see analysis and alignment details on stderr.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator, Optional

ENV_VAR_NAME = "DOTENV_MERGE_DEBUG"
LOG_PREFIX = "[dotenv-merge]"
ROOT_LOGGER_NAME = "dotenv_merge"

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Check whether debug logging was requested through the environment."""
    return os.environ.get(ENV_VAR_NAME, "").strip().lower() in _TRUTHY


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)

    # Only configure once (avoid duplicate handlers)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(f"{LOG_PREFIX} %(levelname)s: %(message)s"))
        root.addHandler(handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.DEBUG if debug_enabled() else logging.WARNING)

    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger inside the dotenv_merge hierarchy.

    Args:
        name: Module name (typically __name__). Names outside the package
            are nested under it.

    Returns:
        Logger sharing the package handler and level.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER_NAME:
        return root
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def enable_debug() -> None:
    """Turn on debug output for the whole package."""
    _configure_root().setLevel(logging.DEBUG)


@contextmanager
def timed(logger: logging.Logger, operation: str) -> Iterator[None]:
    """Log how long the wrapped block took, at debug level."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("%s completed in %.2fms", operation, elapsed_ms)
