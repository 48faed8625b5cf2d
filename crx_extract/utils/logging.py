# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Logging configuration for crx-extract."""

import logging
import sys
from enum import Enum
from typing import Any

import errorhandler

_SECRET_KEYS = frozenset({"password", "token", "key", "secret"})
_REDACTED = "[REDACTED]"


class VerbosityLevel(str, Enum):
    """Log verbosity levels accepted on the command line and in config."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def logging_level(self) -> int:
        return int(getattr(logging, self.value))


def configure_logging(
    level: VerbosityLevel | str,
    error_handler: errorhandler.ErrorHandler | None = None,
) -> None:
    """Configure root logging for a CLI run.

    Args:
        level: Verbosity level name.
        error_handler: Optional handler that records whether any ERROR was
            logged; it is reset so each run starts clean.
    """
    verbosity = VerbosityLevel(str(getattr(level, "value", level)).upper())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if not isinstance(existing, errorhandler.ErrorHandler):
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)-7s] %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    root.addHandler(handler)
    root.setLevel(verbosity.logging_level)

    if error_handler is not None:
        error_handler.reset()


def redact_secrets(data: Any) -> Any:
    """Return a copy of ``data`` with secret-looking mapping values masked."""
    if isinstance(data, dict):
        return {
            key: _REDACTED
            if str(key).lower() in _SECRET_KEYS
            else redact_secrets(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(redact_secrets(item) for item in data)
    return data
