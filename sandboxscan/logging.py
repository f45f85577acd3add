"""Logging utilities for sandboxscan commands and the service.

Every command sent to a sandbox is logged at DEBUG on the ``commands``
channel. That is one line per ``stat``/``cat`` pair per file, which drowns
everything else on a project of any size, so ``--verbose`` leaves the
channel at INFO and ``--trace-commands`` opens it separately.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "sandboxscan"
COMMANDS_CHANNEL = "commands"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the sandboxscan hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class SessionLogAdapter(logging.LoggerAdapter):
    """Prefixes records with the sandbox they concern.

    The service may swap sessions while running; tagging each line keeps log
    output from different sandboxes apart.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("sandbox", self.extra["sandbox"])
        kwargs["extra"] = extra
        return f"[{self.extra['sandbox']}] {msg}", kwargs


def get_session_logger(name: str, sandbox: str) -> SessionLogAdapter:
    return SessionLogAdapter(get_logger(name), {"sandbox": sandbox})


def configure_logging(
    *,
    verbose: bool = False,
    trace_commands: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the sandboxscan logger with console output and optional file sink."""
    level = logging.DEBUG if verbose or trace_commands else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    get_logger(COMMANDS_CHANNEL).setLevel(logging.DEBUG if trace_commands else logging.INFO)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(
        logging.Formatter("[sandboxscan] %(levelname)s %(message)s")
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        # The file sink always records command traffic for post-mortems.
        get_logger(COMMANDS_CHANNEL).setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "COMMANDS_CHANNEL",
    "SessionLogAdapter",
    "configure_logging",
    "get_logger",
    "get_session_logger",
]
