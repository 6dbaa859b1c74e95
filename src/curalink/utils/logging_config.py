# src/curalink/utils/logging_config.py
"""
Centralized file logging for CuraLink.

Usage:
    from curalink.utils.logging_config import Logger, LogFiles

    Logger.info("Connection requested", file=LogFiles.CONNECTIONS)
    Logger.error("Store unavailable", file=LogFiles.ERROR)

    # Default file (logs/curalink.log)
    Logger.info("General message")

Configuration via environment variables:
    CURALINK_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    CURALINK_LOG_DIR: Base directory for log files (default: logs/)
    CURALINK_LOG_MAX_BYTES: Max size per log file in bytes (default: 10MB)
    CURALINK_LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
"""

from __future__ import annotations

import inspect
import logging
import os
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

# Per-request trace id (async-safe)
_trace_id_var: ContextVar[Optional[str]] = ContextVar("trace_id", default=None)

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "curalink.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_FORMAT = "{timestamp} [{level}] [{trace_id}] {filename}:{lineno} - {message}"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_CONFIG_FILE = Path(__file__).parent / "log_config.yaml"


class _LogFilesMeta(type):
    """Allows attribute access like LogFiles.CHAT."""

    def __getattr__(cls, name: str) -> str:
        cls._load()
        key = name.lower()
        if key in cls._files:
            return cls._files[key]
        raise AttributeError(f"Log file '{name}' not found in config")


class LogFiles(metaclass=_LogFilesMeta):
    """
    Log file paths, defaults overridable from log_config.yaml (``files:`` section).
    """

    _loaded = False
    _files: Dict[str, str] = {}

    @classmethod
    def _load(cls) -> None:
        if cls._loaded:
            return

        cls._files = {
            "api": "api/api.log",
            "auth": "auth/auth.log",
            "connections": "connections/connections.log",
            "chat": "chat/chat.log",
            "external": "external/external.log",
            "assistant": "assistant/assistant.log",
            "error": "errors/error.log",
        }

        try:
            import yaml

            if LOG_CONFIG_FILE.exists():
                with open(LOG_CONFIG_FILE, "r", encoding="utf-8") as f:
                    config = yaml.safe_load(f)
                if config and isinstance(config.get("files"), dict):
                    cls._files.update({str(k).lower(): str(v) for k, v in config["files"].items()})
        except Exception:
            pass

        cls._loaded = True

    @classmethod
    def get(cls, name: str) -> str:
        cls._load()
        return cls._files.get(name.lower(), f"{name}/{name}.log")


LOG_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

_initialized = False
_config: dict = {}
_file_handlers: Dict[str, RotatingFileHandler] = {}


def _get_config() -> dict:
    return {
        "level": os.environ.get("CURALINK_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        "base_dir": os.environ.get("CURALINK_LOG_DIR", DEFAULT_LOG_DIR),
        "max_bytes": int(os.environ.get("CURALINK_LOG_MAX_BYTES", DEFAULT_MAX_BYTES)),
        "backup_count": int(os.environ.get("CURALINK_LOG_BACKUP_COUNT", DEFAULT_BACKUP_COUNT)),
    }


def _get_file_handler(file_path: str) -> RotatingFileHandler:
    handler = _file_handlers.get(file_path)
    if handler is None:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(path),
            maxBytes=_config.get("max_bytes", DEFAULT_MAX_BYTES),
            backupCount=_config.get("backup_count", DEFAULT_BACKUP_COUNT),
            encoding="utf-8",
        )
        _file_handlers[file_path] = handler
    return handler


def _resolve_file_path(file: Optional[str]) -> str:
    base_dir = _config.get("base_dir", DEFAULT_LOG_DIR)
    return str(Path(base_dir) / (file or DEFAULT_LOG_FILE))


def _should_log(level: str) -> bool:
    current_level = _config.get("level", DEFAULT_LOG_LEVEL)
    return LOG_LEVELS.get(level, 0) >= LOG_LEVELS.get(current_level, 0)


def _write_log(level: str, message: str, file: Optional[str] = None) -> None:
    if not _should_log(level):
        return

    # Skip _write_log and the public Logger method
    frame = inspect.currentframe()
    caller_frame = frame.f_back.f_back if frame and frame.f_back else None
    if caller_frame:
        filename = os.path.basename(caller_frame.f_code.co_filename)
        lineno = caller_frame.f_lineno
    else:
        filename = "unknown"
        lineno = 0

    formatted = DEFAULT_FORMAT.format(
        timestamp=datetime.now().strftime(DEFAULT_DATE_FORMAT),
        level=level,
        trace_id=_trace_id_var.get() or "-",
        filename=filename,
        lineno=lineno,
        message=message,
    )

    handler = _get_file_handler(_resolve_file_path(file))
    if handler.shouldRollover(logging.makeLogRecord({"msg": formatted})):
        handler.doRollover()
    handler.stream.write(formatted + "\n")
    handler.stream.flush()


class Logger:
    """Static logger writing to per-concern rotating files."""

    @staticmethod
    def init(level: Optional[str] = None, base_dir: Optional[str] = None) -> None:
        global _initialized, _config

        if _initialized:
            return

        _config = _get_config()
        if level:
            _config["level"] = level.upper()
        if base_dir:
            _config["base_dir"] = base_dir
        _initialized = True

    @staticmethod
    def _ensure_init() -> None:
        if not _initialized:
            Logger.init()

    @staticmethod
    def debug(message: str, file: Optional[str] = None) -> None:
        Logger._ensure_init()
        _write_log("DEBUG", message, file)

    @staticmethod
    def info(message: str, file: Optional[str] = None) -> None:
        Logger._ensure_init()
        _write_log("INFO", message, file)

    @staticmethod
    def warning(message: str, file: Optional[str] = None) -> None:
        Logger._ensure_init()
        _write_log("WARNING", message, file)

    @staticmethod
    def error(message: str, file: Optional[str] = None) -> None:
        Logger._ensure_init()
        _write_log("ERROR", message, file)

    @staticmethod
    def close() -> None:
        for handler in _file_handlers.values():
            handler.close()
        _file_handlers.clear()


# ============================================================================
# Trace ID Management
# ============================================================================

def generate_trace_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Set (or generate) the trace id for the current request context."""
    tid = trace_id or generate_trace_id()
    _trace_id_var.set(tid)
    return tid


def get_trace_id() -> Optional[str]:
    return _trace_id_var.get()


def clear_trace_id() -> None:
    _trace_id_var.set(None)
