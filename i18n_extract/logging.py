"""Logging for the ``i18n`` command.

Records are written to stderr like compiler diagnostics
(``i18n: warning: Skipping app/b.py: ...``) so they never mix with the
sync report on stdout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

_LOGGER_NAME = "i18n_extract"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below ``i18n_extract`` (``get_logger("walker")``)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class DiagnosticFormatter(logging.Formatter):
    """Formats records as ``i18n: <level>: <message>``.

    With ``show_component`` the emitting component is included, for example
    ``i18n[walker]: debug: ...``.
    """

    def __init__(self, *, show_component: bool = False) -> None:
        super().__init__()
        self.show_component = show_component

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        prefix = "i18n"
        if self.show_component:
            component = record.name.removeprefix(_LOGGER_NAME).lstrip(".")
            if component:
                prefix = f"i18n[{component}]"
        return f"{prefix}: {record.levelname.lower()}: {message}"


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route ``i18n_extract`` records to stderr and, optionally, ``log_file``.

    Calling it again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(verbose, log_file):
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def _build_handlers(verbose: bool, log_file: Path | None) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setFormatter(DiagnosticFormatter(show_component=verbose))
    handlers: List[logging.Handler] = [console]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        handlers.append(sink)
    return handlers


__all__ = ["DiagnosticFormatter", "configure_logging", "get_logger"]
