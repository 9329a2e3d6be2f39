"""
Logging setup for the DoubtDesk backend and conversation client.

Console output is human-readable and colored; the optional file output is
one JSON object per line in a size-rotated file. Helpers at the bottom keep
credentials and oversized payloads out of the logs.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

SENSITIVE_KEYS = ['password', 'token', 'secret', 'authorization', 'api_key', 'api-key', 'key']


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{color}{original:8s}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """File formatter emitting structured JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config: Any) -> None:
    """
    Configure the root logger from a Settings object.

    Args:
        config: Settings object with the ``log_*`` fields
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if config.log_console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(console_handler)

    if config.log_file_enabled:
        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        if config.log_json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
        root_logger.addHandler(file_handler)

    # Quiet down chatty libraries
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: level={config.log_level.upper()}, "
        f"console={config.log_console_enabled}, file={config.log_file_enabled}"
    )


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that attaches fixed context to every record as ``extra_fields``.

    Usage:
        log = LoggerAdapter(logging.getLogger(__name__), {"user_id": "123"})
        log.info("Doubt received")
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.setdefault('extra', {})
        extra['extra_fields'] = {**self.extra, **extra.get('extra_fields', {})}
        return msg, kwargs


def filter_sensitive_data(data: Any, sensitive_keys: Optional[list] = None) -> Any:
    """
    Mask values whose key looks like a credential.

    Args:
        data: dict, list or primitive to filter
        sensitive_keys: substrings that mark a key as sensitive

    Returns:
        A copy of ``data`` with sensitive values replaced by "***FILTERED***"
    """
    keys = sensitive_keys if sensitive_keys is not None else SENSITIVE_KEYS

    if isinstance(data, dict):
        return {
            k: "***FILTERED***" if any(s in str(k).lower() for s in keys)
            else filter_sensitive_data(v, keys)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [filter_sensitive_data(item, keys) for item in data]
    return data


def truncate_large_data(data: str, max_length: int = 5000) -> str:
    """Cut ``data`` down to ``max_length`` characters, noting the original size."""
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"
