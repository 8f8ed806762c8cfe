"""
# Logging Manager

Central place for creating loggers. Every module asks for its logger through `get_logger()`
so formatting and levels stay consistent across the application.

Loggers are plain `logging.Logger` children of the `LifeLessons` root logger. A `prefix`
such as `"[DATABASE]"` is injected into every record so log lines from one subsystem can be
grepped together:

```
2026-01-01 10:00:00,000 | INFO | LifeLessons.database | [DATABASE] Connected to MongoDB
```

## Usage

```python
from life_lessons.managers.logging_manager import get_logger

logger = get_logger(prefix="[Lesson Routes]")
logger.info("Created lesson %s", lesson_id)
```
"""

import logging
import sys
from typing import Optional

from life_lessons.config import settings

ROOT_LOGGER_NAME = "LifeLessons"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(prefix)s%(message)s"

_configured = False


class PrefixAdapter(logging.LoggerAdapter):
    """Adds a subsystem prefix to every record emitted through the adapter."""

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra.setdefault("prefix", self.extra["prefix"])
        return msg, kwargs


class _DefaultPrefixFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "prefix"):
            record.prefix = ""
        return True


def _configure_root() -> None:
    global _configured
    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_DefaultPrefixFilter())
    root.addHandler(handler)
    root.propagate = False

    _configured = True


def get_logger(name: Optional[str] = None, prefix: str = "") -> logging.LoggerAdapter:
    """
    Return a logger for a subsystem.

    Args:
        name (Optional[str]): Child logger name under `LifeLessons` (e.g. `"database"`).
            Defaults to the root application logger.
        prefix (str): Text prepended to every message, e.g. `"[DATABASE]"`.

    Returns:
        logging.LoggerAdapter: A logger that supports the usual `info`/`warning`/`error` calls.
    """
    _configure_root()
    logger_name = f"{ROOT_LOGGER_NAME}.{name}" if name else ROOT_LOGGER_NAME
    formatted_prefix = f"{prefix} " if prefix else ""
    return PrefixAdapter(logging.getLogger(logger_name), {"prefix": formatted_prefix})
