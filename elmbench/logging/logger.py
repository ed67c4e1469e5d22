# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for elm-bench.

Every log entry is a single JSON line: timestamped, leveled, and tagged with
the source module. Plain print() calls are not used for diagnostics.

How this works:
  - Every module asks for its logger with `get_logger(__name__)`. Those are
    ordinary children of the `elmbench` logger and carry no handlers of
    their own.
  - `configure_logging` installs the JsonFormatter on the `elmbench` logger
    once per process. Records from every module propagate up to it.
  - Logs go to stderr. stdout is reserved for the benchmark report, so a
    user can pipe the report somewhere without log lines mixed in.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "elmbench.manifest.merger", "msg": "Merged manifests", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

ROOT_LOGGER_NAME = "elmbench"

_STANDARD_ATTRS = frozenset({
    "name",
    "msg",
    "args",
    "created",
    "relativeCreated",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "pathname",
    "filename",
    "module",
    "levelno",
    "levelname",
    "processName",
    "process",
    "threadName",
    "thread",
    "message",
    "msecs",
    "taskName",
})


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry carries four mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name (usually the Python module path)
      msg   : the formatted message string

    Anything passed through `extra=` is merged into the object as additional
    context. That's how the pipeline attaches stage names, paths and
    candidate labels to its records.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def configure_logging(
    log_level: str = "WARNING",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach the JSON handlers to the package root logger.

    Safe to call more than once: existing handlers are replaced, so the CLI
    can reconfigure after loading a config file that changes the level.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  the stream and the file.
        stream: Where console records go. Defaults to the current sys.stderr.

    Returns:
        The configured `elmbench` root logger.
    """
    level = _resolve_log_level(log_level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter()

    console_handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # We handle all output ourselves.
    root.propagate = False

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module.

    This is the only sanctioned way to get a logger in elm-bench. Every
    module calls it once at the top with `__name__`. Names outside the
    package are nested under `elmbench` so their records still reach the
    configured handlers.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
