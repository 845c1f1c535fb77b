from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from flask import Flask

LOGGER_PREFIX = "scisubmit"

# category -> file name under LOGGING_BASE_DIR
CATEGORY_FILES: Dict[str, str] = {
    "app": "application.log",
    "auth": "auth.log",
    "paper": "paper.log",
    "review": "review.log",
    "conference": "conference.log",
    "mail": "mail.log",
    "storage": "storage.log",
    "audit": "audit.log",
    "error": "errors.log",
}

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "taskName"}

_context: ContextVar[Dict[str, Any]] = ContextVar("scisubmit_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    return dict(_context.get())


def update_log_context(**fields: Any) -> None:
    """Merge ``fields`` into the current context. A ``None`` value drops the key."""
    merged = dict(_context.get())
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    _context.set(merged)


def clear_log_context(*keys: str) -> None:
    if not keys:
        _context.set({})
        return
    _context.set({k: v for k, v in _context.get().items() if k not in keys})


@contextmanager
def log_context(**fields: Any):
    """Attach ``fields`` to every record logged inside the ``with`` block."""
    token = _context.set({**_context.get(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _context.reset(token)


class ContextFormatter(logging.Formatter):
    """Plain text with a trailing ``key=value`` context suffix, or one JSON object per line."""

    TEXT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"

    def __init__(self, *, as_json: bool = False, app_name: Optional[str] = None) -> None:
        super().__init__(self.TEXT_FORMAT)
        self.as_json = as_json
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        context = _context.get()
        if not self.as_json:
            line = super().format(record)
            if context:
                line += " | " + " ".join(f"{k}={context[k]}" for k in sorted(context))
            return line

        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.app_name:
            entry["app"] = self.app_name
        # anything passed through ``extra=``
        entry.update({k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS and not k.startswith("_")})
        if context:
            entry["context"] = dict(context)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, separators=(",", ":"))


class LoggerManager:
    """
    Hands out ``scisubmit.<category>`` loggers, each writing to its own daily
    rotated file and, optionally, a shared console stream. Reconfiguring only
    swaps handlers, so module-level ``log = get_logger(...)`` references stay
    valid across app factories.
    """

    def __init__(
        self,
        *,
        base_dir: Optional[str] = None,
        level: int = logging.INFO,
        rotation_when: str = "midnight",
        backup_count: int = 7,
        console: bool = True,
        as_json: bool = False,
        app_name: Optional[str] = None,
        extra_handlers: Optional[List[logging.Handler]] = None,
    ) -> None:
        self.base_dir = Path(base_dir or os.getenv("LOGGING_BASE_DIR", "/tmp/scisubmit/logs"))
        self.level = level
        self.rotation_when = rotation_when
        self.backup_count = backup_count
        self.formatter = ContextFormatter(as_json=as_json, app_name=app_name)
        self.console = logging.StreamHandler() if console else None
        if self.console is not None:
            self.console.setFormatter(self.formatter)
        self.extra_handlers = list(extra_handlers or [])
        self._owned: Dict[str, List[logging.Handler]] = {}

    def get_logger(self, category: str) -> logging.Logger:
        name = category.strip().lower()
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{name}")
        if name not in self._owned:
            self._wire(name, logger)
        return logger

    def _file_handler(self, name: str) -> Optional[logging.Handler]:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logging.getLogger(LOGGER_PREFIX).warning("Log directory %s unavailable", self.base_dir)
            return None
        handler = TimedRotatingFileHandler(
            self.base_dir / CATEGORY_FILES.get(name, f"{name}.log"),
            when=self.rotation_when,
            backupCount=self.backup_count,
            encoding="utf-8",
            utc=True,
            delay=True,
        )
        handler.setFormatter(self.formatter)
        return handler

    def _wire(self, name: str, logger: logging.Logger) -> None:
        handlers = [h for h in (self._file_handler(name), self.console) if h is not None]
        handlers.extend(h for h in self.extra_handlers if h not in handlers)
        logger.propagate = False
        logger.setLevel(self.level)
        for handler in handlers:
            logger.addHandler(handler)
        self._owned[name] = handlers

    def adopt_existing(self) -> None:
        """Wire ``scisubmit.*`` loggers that were created at import time."""
        prefix = LOGGER_PREFIX + "."
        for logger_name in list(logging.root.manager.loggerDict):
            if logger_name.startswith(prefix):
                self.get_logger(logger_name[len(prefix):])

    def close(self) -> None:
        for name, handlers in self._owned.items():
            logger = logging.getLogger(f"{LOGGER_PREFIX}.{name}")
            for handler in handlers:
                logger.removeHandler(handler)
                if isinstance(handler, TimedRotatingFileHandler):
                    handler.close()
        self._owned.clear()


def _level(value: Any) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value or "INFO").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


_manager: Optional[LoggerManager] = None


def init_logger(app: Flask) -> LoggerManager:
    """Rebuild the shared manager from ``app.config``; called by the app factory."""
    global _manager
    if _manager is not None:
        _manager.close()
    _manager = LoggerManager(
        base_dir=app.config.get("LOGGING_BASE_DIR"),
        level=_level(app.config.get("LOGGING_DEFAULT_LEVEL")),
        rotation_when=app.config.get("LOGGING_ROTATION_WHEN", "midnight"),
        backup_count=int(app.config.get("LOGGING_ROTATION_BACKUP_COUNT") or 7),
        console=_flag(app.config.get("LOGGING_CONSOLE_ENABLED"), True),
        as_json=_flag(app.config.get("LOGGING_JSON_FORMAT"), False),
        app_name=app.config.get("APP_NAME", "SciSubmit"),
        # records also reach the Flask app log file
        extra_handlers=app.logger.handlers,
    )
    _manager.adopt_existing()
    return _manager


def get_logger(category: str) -> logging.Logger:
    global _manager
    if _manager is None:
        # import-time use before any app exists
        _manager = LoggerManager(
            console=_flag(os.getenv("LOGGING_CONSOLE_ENABLED"), True),
            level=_level(os.getenv("LOGGING_DEFAULT_LEVEL")),
        )
    return _manager.get_logger(category)
