"""
Structured logging configuration for the ping-pong trader.

Provides JSON-formatted structured logging with:
- Secret filtering (wallet keys, mnemonics, API credentials never reach a log line)
- Raw aggregator payloads collapsed to placeholders
- Decimal and int amounts rendered as exact strings

Usage:
    from pingpong.logging_config import setup_logging, get_logger

    setup_logging()  # Call once at startup
    logger = get_logger(__name__)
    logger.info("order created", extra={"order_id": "abc", "direction": "buy"})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

# Patterns scrubbed from free-form text (msg, exc)
_URL_QUERY_PATTERN = re.compile(r"(https?://[^\s\"'<>?]+)\?[^\s\"'<>]*")
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(api[_-]?key|apikey)[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[API_KEY]"),
    (re.compile(r"\b(bearer)[=:\s]+['\"]?[\w\-\.]+['\"]?", re.I), "[AUTH]"),
    (re.compile(r"(authorization)[=:\s]+['\"]?[\w\-\.\s]+['\"]?", re.I), "[AUTH]"),
    # Base58 secret keys are 87-88 chars; public addresses (32-44) are left alone
    (re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{80,90}\b"), "[SECRET_KEY]"),
]

# Fields that must never appear in logs. Matched case-insensitively, also as substrings.
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "api_key",
        "secret",
        "private_key",
        "secret_key",
        "keypair",
        "mnemonic",
        "seed_phrase",
        "password",
        "authorization",
        "bearer",
        "credential",
    }
)

# Fields whose raw value is replaced with a placeholder
PAYLOAD_FIELDS: dict[str, str] = {
    "routes": "[ROUTES]",
    "quote": "[QUOTE]",
    "payload": "[PAYLOAD]",
    "body": "[BODY]",
    "params": "[PARAMS]",
}

_RESERVED_RECORD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)


def _sanitize_text(text: str) -> str:
    """Strip URL query strings and secret-looking tokens from free-form text."""
    if not text:
        return text

    result = _URL_QUERY_PATTERN.sub(r"\1", text)
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Filter secret and payload fields from the extra fields of a log record.

    Recursively filters nested dicts up to depth 3.
    """
    if _depth > 3:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}

    for key, value in record.items():
        key_lower = key.lower()

        if any(blocked in key_lower for blocked in BLOCKED_FIELDS):
            continue

        if key_lower in PAYLOAD_FIELDS:
            filtered[key] = PAYLOAD_FIELDS[key_lower]
            continue

        if isinstance(value, (bool, float, type(None))):
            filtered[key] = value
        elif isinstance(value, (int, Decimal)):
            # Base-unit amounts exceed float/JSON-number precision; keep them exact
            filtered[key] = str(value) if isinstance(value, Decimal) or abs(value) >= 2**53 else value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= 10:
                filtered[key] = [str(v) if isinstance(v, Decimal) else v for v in value]
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line.

    Output format:
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        extra = _extra_fields(record)
        if extra:
            log_dict.update(_filter_log_record(extra))

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development and the paper-trading CLI."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"

        extra = _extra_fields(record)
        if extra:
            filtered = _filter_log_record(extra)
            if filtered:
                extra_str = " ".join(f"{k}={v}" for k, v in filtered.items())
                base = f"{base} | {extra_str}"

        if record.exc_info:
            base = f"{base}\n{_sanitize_text(self.formatException(record.exc_info))}"

        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True for production).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)
