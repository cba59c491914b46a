"""Logger hierarchy and handler setup for nuxtpack.

Every module logs under the ``nuxtpack`` logger. Work done on behalf of a
single page goes through :func:`page_logger`, which tags records with the
page's serving path so interleaved output from the packaging threads stays
readable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, TextIO, Tuple

ROOT_LOGGER = "nuxtpack"
CONSOLE_FORMAT = "[nuxtpack] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] page=%(page)s: %(message)s"
NO_PAGE = "-"


class PageLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[serving path]`` and records it as ``page``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        page = self.extra["page"]
        kwargs["extra"] = {**kwargs.get("extra", {}), "page": page}
        return f"[{page}] {msg}", kwargs


class _PageField(logging.Filter):
    # Records logged outside a page still need a value for FILE_FORMAT.
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "page"):
            record.page = NO_PAGE
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``nuxtpack.<name>``, or the root ``nuxtpack`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def page_logger(name: str, serving_path: str) -> PageLoggerAdapter:
    """Return a logger for work done while packaging ``serving_path``."""
    return PageLoggerAdapter(get_logger(name), {"page": serving_path})


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the nuxtpack logger.

    ``verbose`` enables debug output; ``quiet`` limits the console to
    warnings and errors. The file sink always records at the logger level.
    Calling this again replaces the handlers from the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream)
    console.setLevel(logging.WARNING if quiet and not verbose else level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.addFilter(_PageField())
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = [
    "CONSOLE_FORMAT",
    "FILE_FORMAT",
    "PageLoggerAdapter",
    "ROOT_LOGGER",
    "configure_logging",
    "get_logger",
    "page_logger",
]
