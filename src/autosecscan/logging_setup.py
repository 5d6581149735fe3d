"""Logging configuration for the CLI and per-scan logger handles."""

import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "autosecscan"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class ScanLoggerAdapter(logging.LoggerAdapter):
    """Prefix every record with the domain being scanned."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['target']}] {msg}", kwargs


def scan_logger(name: str, domain: str) -> ScanLoggerAdapter:
    """Logger handle for one component of one scan."""
    return ScanLoggerAdapter(logging.getLogger(name), {"target": domain})


def configure_logging(verbose: bool = False, log_file: str | Path | None = None) -> logging.Logger:
    """Attach a rich console handler, and optionally a file handler, to the package logger.

    Calling it again replaces the handlers installed by an earlier call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger
