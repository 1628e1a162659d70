"""Configuration dataclasses for zk-trylock.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be created from command-line arguments or
used directly in code.
"""

from __future__ import annotations

import argparse
import logging
import math
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from zk_trylock.core.exceptions import ConfigurationError


@dataclass
class RetryConfig:
    """Configuration for the fixed-delay retry loops.

    The same budget bounds directory setup, child enumeration and the
    outer lock loop.

    Attributes:
        max_attempts: Attempt budget for each bounded loop (default: 5)
        delay_seconds: Fixed delay before each retry in seconds (default: 0.5)
    """

    max_attempts: int = 5
    delay_seconds: float = 0.5


@dataclass
class SessionConfig:
    """Configuration for the ZooKeeper session.

    Attributes:
        hosts: Comma-separated host:port list, optionally with a chroot suffix
        session_timeout: Requested session timeout in seconds (default: 30)
        connect_timeout: Seconds to wait for the first connection (default: 15)
        auth: Optional "scheme:credential" pair added to the session
    """

    hosts: str = "127.0.0.1:2181"
    session_timeout: float = 30.0
    connect_timeout: float = 15.0
    auth: str | None = None

    def auth_data(self) -> list[tuple[str, str]] | None:
        """Return kazoo auth_data, or None when no auth is configured."""
        if not self.auth:
            return None
        scheme, _, credential = self.auth.partition(":")
        return [(scheme, credential)]


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "WARNING")
        format: "text" or "json" (default: "text")
        file: Optional log file path
        file_max_bytes: Maximum size per log file (default: 10MB)
        file_backup_count: Number of backup log files (default: 5)
    """

    level: str = "WARNING"
    format: str = "text"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class TrylockConfig:
    """Master configuration for one zk-trylock run.

    Attributes:
        lock_path: Lock directory all candidates register under
        retry: Retry configuration
        session: Session configuration
        log: Logging configuration
        command: Workload to run while the lock is held (empty: none)
        hold_seconds: Seconds to hold the lock when no command is given (default: 10)
        quiet: Suppress outcome lines on stdout
    """

    lock_path: str = "/"
    retry: RetryConfig = field(default_factory=RetryConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log: LogConfig = field(default_factory=LogConfig)
    command: list[str] = field(default_factory=list)
    hold_seconds: float = 10.0
    quiet: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> TrylockConfig:
        """Create configuration from parsed command-line arguments."""
        return cls(
            lock_path=args.lock_path,
            retry=RetryConfig(
                max_attempts=getattr(args, "max_attempts", 5),
                delay_seconds=getattr(args, "retry_delay", 0.5),
            ),
            session=SessionConfig(
                hosts=args.hosts,
                session_timeout=getattr(args, "session_timeout", 30.0),
                connect_timeout=getattr(args, "connect_timeout", 15.0),
                auth=getattr(args, "auth", None),
            ),
            log=LogConfig(
                level=getattr(args, "log_level", None) or "WARNING",
                format=getattr(args, "log_format", "text"),
                file=getattr(args, "log_file", None),
            ),
            command=list(getattr(args, "command", None) or []),
            hold_seconds=getattr(args, "hold", 10.0),
            quiet=getattr(args, "quiet", False),
        )

    def validate(self) -> None:
        """Raise ConfigurationError for values the run cannot start with."""
        if not self.session.hosts or not self.session.hosts.strip():
            raise ConfigurationError("ZooKeeper host list is empty", field="hosts")
        if not self.lock_path.startswith("/"):
            raise ConfigurationError(
                "Lock path must be an absolute znode path", field="lock_path", details=self.lock_path
            )
        if self.lock_path.rstrip("/") == "":
            raise ConfigurationError("Lock path must not be the root znode", field="lock_path")
        if self.retry.max_attempts < 1:
            raise ConfigurationError("Attempt budget must be at least 1", field="max_attempts")
        if self.retry.delay_seconds < 0:
            raise ConfigurationError("Retry delay must not be negative", field="delay_seconds")
        if self.session.auth is not None and ":" not in self.session.auth:
            raise ConfigurationError("Auth must look like SCHEME:CREDENTIAL", field="auth")


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


def env_number(
    name: str,
    default: int | float,
    cast: Callable[[str], Any],
    *,
    minimum: int | float = 0,
    logger: logging.Logger | None = None,
) -> Any:
    """Read a numeric default from the environment.

    Invalid or out-of-range values are ignored with a warning so a bad
    crontab environment never prevents the run from starting.
    """
    raw = os.environ.get(name)
    parsed = _parse_env_numeric(raw, cast)
    if parsed is not None and parsed >= minimum:
        return parsed
    if raw is not None:
        (logger or logging.getLogger(__name__)).warning(
            f"Ignoring invalid {name}={raw!r}; using default {default}"
        )
    return default
