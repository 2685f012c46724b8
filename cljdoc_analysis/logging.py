"""Logging helpers for analysis runs.

Pipeline stages log through :func:`get_logger`; messages emitted while a
specific artifact is being analyzed go through :func:`run_logger` so every
line names the project and version it belongs to.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping

_LOGGER_NAME = "cljdoc_analysis"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the cljdoc_analysis hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class RunLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the ``project@version`` under analysis."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        return f"{extra.get('project')}@{extra.get('version')}: {msg}", kwargs


def run_logger(name: str, project: str, version: str) -> RunLoggerAdapter:
    return RunLoggerAdapter(get_logger(name), {"project": project, "version": version})


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[cljdoc-analysis] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["RunLoggerAdapter", "configure_logging", "get_logger", "run_logger"]
