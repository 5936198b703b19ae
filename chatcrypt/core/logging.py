"""
Secure Logging Module
=====================

Logging for the encryption core, with secret redaction.

Security Features:
- Redaction of key assignments, PEM blocks and long hex/base64 runs
- Raw bytes arguments are never rendered, only their length
- Rotating log files with size limits
- JSON output carrying worker thread and CryptoError code
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Optional, Pattern

if TYPE_CHECKING:
    from chatcrypt.core.config import CryptoConfig


PACKAGE_LOGGER: Final[str] = "chatcrypt"

# "name=value" or "name:value"; a colon followed by a space is prose
_ASSIGNMENT: Final[str] = r"""(?:\s*=\s*|:)["']?[^\s"',]+["']?"""

_REDACTIONS: Final[tuple[tuple[str, Pattern[str]], ...]] = (
    ("pem", re.compile(r"-----BEGIN [A-Z ]+-----.*?-----END [A-Z ]+-----", re.DOTALL)),
    ("key", re.compile(r"(?i)\b(?:(?:secret|private|session)[_-]?)?key" + _ASSIGNMENT)),
    ("password", re.compile(r"(?i)\b(?:password|passwd|pwd)" + _ASSIGNMENT)),
    ("token", re.compile(r"(?i)\b(?:token|bearer)" + _ASSIGNMENT)),
    # Long encoded runs look like raw material: mixed-case base64 (40+) and hex (32+).
    # "/" is left out of the base64 run so filesystem paths survive.
    ("base64_secret", re.compile(r"(?=[A-Za-z0-9+]*[A-Z])(?=[A-Za-z0-9+]*[a-z])[A-Za-z0-9+]{40,}={0,2}")),
    ("hex_secret", re.compile(r"(?i)(?:0x)?[a-f0-9]{32,}")),
)

_REDACTED_TEXT: Final[str] = "[REDACTED]"

_CONSOLE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FILE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"

_DEFAULT_MAX_BYTES: Final[int] = 10 * 1024 * 1024


def redact(text: str, extra: tuple[Pattern[str], ...] = ()) -> str:
    """Replace secret-looking fragments of text with a redaction marker."""
    for label, pattern in _REDACTIONS:
        text = pattern.sub(f"{label}={_REDACTED_TEXT}", text)
    for pattern in extra:
        text = pattern.sub(_REDACTED_TEXT, text)
    return text


def _scrub(value: Any, extra: tuple[Pattern[str], ...]) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(value)} bytes>"
    if isinstance(value, str):
        return redact(value, extra)
    return value


class SecureLogFilter(logging.Filter):
    """
    Sanitizes every record that passes through a handler.

    The record is always kept. String arguments are redacted and bytes
    arguments are replaced by their length, so a stray
    ``log.debug("%s", key.encoded)`` never writes key material.
    """

    def __init__(self, name: str = "", additional_patterns: Optional[list[Pattern[str]]] = None) -> None:
        super().__init__(name)
        self._extra = tuple(additional_patterns or ())

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg, self._extra)

        args = record.args
        if isinstance(args, dict):
            record.args = {k: _scrub(v, self._extra) for k, v in args.items()}
        elif isinstance(args, tuple):
            record.args = tuple(_scrub(arg, self._extra) for arg in args)

        return True


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        if record.exc_info:
            exc = record.exc_info[1]
            code = getattr(exc, "code", None)
            if code is not None:
                entry["error_code"] = code
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class SecureRotatingFileHandler(RotatingFileHandler):
    """Rotating file handler that refuses traversal paths and creates its directory."""

    def __init__(
        self,
        filename: str | Path,
        mode: str = "a",
        maxBytes: int = _DEFAULT_MAX_BYTES,
        backupCount: int = 5,
        encoding: str = "utf-8",
    ) -> None:
        path = Path(filename)
        if ".." in path.parts:
            raise ValueError("Log path cannot contain path traversal sequences")

        path = path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(str(path), mode=mode, maxBytes=maxBytes, backupCount=backupCount, encoding=encoding)


def _console_handler(secure_filter: SecureLogFilter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    handler.addFilter(secure_filter)
    return handler


def _file_handler(
    path: Path,
    secure_filter: SecureLogFilter,
    enable_json: bool,
    max_file_size: int,
    backup_count: int,
) -> logging.Handler:
    handler = SecureRotatingFileHandler(path, maxBytes=max_file_size, backupCount=backup_count)
    if enable_json:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(secure_filter)
    return handler


def get_secure_logger(
    name: str,
    log_dir: Optional[Path] = None,
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = True,
    enable_json: bool = False,
    max_file_size: int = _DEFAULT_MAX_BYTES,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Create a logger whose handlers redact secrets.

    Args:
        name: Logger name (typically "chatcrypt")
        log_dir: Directory for log files (file output is skipped without one)
        level: Logging level name
        enable_console: Write to stderr
        enable_file: Write to ``<log_dir>/<name>.log`` with rotation
        enable_json: Use JSON lines for the file
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files to keep

    Returns:
        The configured logger. A logger that already has handlers is
        returned unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level.upper())
    secure_filter = SecureLogFilter()

    if enable_console:
        logger.addHandler(_console_handler(secure_filter))

    if enable_file and log_dir:
        log_path = Path(log_dir) / f"{name.replace('.', '_')}.log"
        logger.addHandler(_file_handler(log_path, secure_filter, enable_json, max_file_size, backup_count))

    # Component loggers (chatcrypt.crypto.aes, chatcrypt.plugins, ...) stop here
    logger.propagate = False
    return logger


def configure_logging(config: Optional["CryptoConfig"] = None) -> logging.Logger:
    """
    Configure the package logger from a CryptoConfig.

    Call once at application startup; component loggers inherit its
    handlers. Defaults to ``CryptoConfig.get_instance()``.
    """
    if config is None:
        from chatcrypt.core.config import CryptoConfig
        config = CryptoConfig.get_instance()

    settings = config.logging
    return get_secure_logger(
        PACKAGE_LOGGER,
        log_dir=config.paths.log_dir,
        level=settings.level,
        enable_console=settings.enable_console,
        enable_file=settings.enable_file,
        enable_json=settings.enable_json,
        max_file_size=settings.max_file_size_bytes,
        backup_count=settings.backup_count,
    )
