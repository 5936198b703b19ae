"""
Configuration
=============

Immutable settings for the encryption core, with environment overrides.

Sections:
    paths    - where log files go
    engine   - worker threads, default plugin, startup self-test
    logging  - level, handlers, rotation

Overrides use ``<PREFIX>_<SECTION>__<FIELD>``, for example
``CHATCRYPT_ENGINE__WORKER_THREADS=8``. Variables whose field name looks
like it carries a secret are never read.
"""

from __future__ import annotations

import dataclasses
import hashlib
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Final, Optional


_SENSITIVE_WORDS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key", "token", "private",
    "credential", "auth", "salt", "material",
})

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})

_LOG_LEVELS: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _looks_sensitive(config_key: str) -> bool:
    # Only the field name counts, so "engine.default_plugin" stays readable
    leaf = config_key.rsplit(".", 1)[-1]
    return any(word in leaf for word in _SENSITIVE_WORDS)


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


# Field annotations are strings under postponed evaluation
_CONVERTERS: Final[dict[str, Callable[[str], Any]]] = {
    "int": int,
    "bool": _parse_bool,
    "str": str,
    "Path": Path,
}


def _default_log_dir() -> Path:
    system = platform.system()
    home = Path.home()

    if system == "Windows":
        return Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local")) / "ChatCrypt" / "Logs"
    if system == "Darwin":
        return home / "Library" / "Logs" / "ChatCrypt"
    return Path(os.environ.get("XDG_STATE_HOME", home / ".local" / "state")) / "chatcrypt" / "logs"


@dataclass(frozen=True, slots=True)
class PathConfig:
    """Filesystem locations. Paths must be absolute."""

    log_dir: Path = field(default_factory=_default_log_dir)

    def __post_init__(self) -> None:
        if not self.log_dir.is_absolute():
            raise ValueError(f"log_dir must be an absolute path: {self.log_dir}")


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Plugin execution settings."""

    worker_threads: int = 4
    default_plugin: str = "AES-256-GCM"
    self_test_on_startup: bool = True

    def __post_init__(self) -> None:
        if self.worker_threads < 1:
            raise ValueError("worker_threads must be at least 1")
        if not self.default_plugin or not self.default_plugin.strip():
            raise ValueError("default_plugin cannot be blank")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Package logger settings; file output is off unless enabled."""

    level: str = "INFO"
    max_file_size_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False

    def __post_init__(self) -> None:
        if self.level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")
        if self.max_file_size_bytes <= 0:
            raise ValueError("max_file_size_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count cannot be negative")


_SECTIONS: Final[dict[str, type]] = {
    "paths": PathConfig,
    "engine": EngineConfig,
    "logging": LoggingConfig,
}


def _build_section(section_cls: type, raw: dict[str, str]) -> Any:
    """Instantiate a section dataclass from raw string overrides."""
    known = {f.name: f for f in dataclasses.fields(section_cls)}
    kwargs: dict[str, Any] = {}
    for name, value in raw.items():
        if name not in known:
            raise ValueError(f"Unknown {section_cls.__name__} setting: {name}")
        converter = _CONVERTERS[str(known[name].type)]
        kwargs[name] = converter(value)
    return section_cls(**kwargs)


class CryptoConfig:
    """
    Immutable configuration for the encryption core.

    Usage:
        config = CryptoConfig.load()
        workers = config.engine.worker_threads
        level = config.logging.level
    """

    __slots__ = ("_paths", "_engine", "_logging", "_frozen", "_config_hash")

    _instance: Optional[CryptoConfig] = None

    def __init__(
        self,
        paths: Optional[PathConfig] = None,
        engine: Optional[EngineConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        object.__setattr__(self, "_frozen", False)
        self._paths = paths or PathConfig()
        self._engine = engine or EngineConfig()
        self._logging = logging or LoggingConfig()
        digest = hashlib.sha256(repr((self._paths, self._engine, self._logging)).encode())
        self._config_hash = digest.hexdigest()[:16]
        self._frozen = True

    @property
    def paths(self) -> PathConfig:
        return self._paths

    @property
    def engine(self) -> EngineConfig:
        return self._engine

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        """Short digest identifying these settings (safe to log)."""
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "CHATCRYPT") -> CryptoConfig:
        """
        Build configuration from defaults plus environment overrides.

        Examples:
            CHATCRYPT_LOGGING__LEVEL=DEBUG
            CHATCRYPT_ENGINE__DEFAULT_PLUGIN=RSA-4096
            CHATCRYPT_PATHS__LOG_DIR=/var/log/chatcrypt

        Raises:
            ValueError: If an override has an invalid value or names an
                unknown field of a known section
        """
        grouped: dict[str, dict[str, str]] = {}
        for config_key, value in cls._parse_env_overrides(env_prefix).items():
            section, _, name = config_key.partition(".")
            if section in _SECTIONS and name:
                grouped.setdefault(section, {})[name] = value

        sections = {
            section: _build_section(_SECTIONS[section], raw)
            for section, raw in grouped.items()
        }
        return cls(**sections)

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Map ``PREFIX_SECTION__FIELD`` variables to ``section.field`` keys."""
        marker = f"{prefix.upper()}_"
        overrides: dict[str, str] = {}

        for env_key, value in os.environ.items():
            if not env_key.startswith(marker):
                continue
            config_key = env_key[len(marker):].lower().replace("__", ".")
            if _looks_sensitive(config_key):
                continue
            overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> CryptoConfig:
        """Process-wide configuration, loaded on first use."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the process-wide configuration (tests only)."""
        cls._instance = None

    def __repr__(self) -> str:
        return f"CryptoConfig(hash={self._config_hash}, default_plugin={self._engine.default_plugin!r})"

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError("CryptoConfig is immutable after initialization")
        object.__setattr__(self, name, value)
