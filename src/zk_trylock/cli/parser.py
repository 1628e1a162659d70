"""CLI argument parsing for zk-trylock."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from zk_trylock.core.config import env_number
from zk_trylock.core.constants import (
    DEFAULT_HOLD_SECONDS,
    DEFAULT_RETRY,
    DEFAULT_SESSION,
    ENV_AUTH,
    ENV_CONNECT_TIMEOUT,
    ENV_HOLD,
    ENV_MAX_ATTEMPTS,
    ENV_RETRY_DELAY,
    ENV_SESSION_TIMEOUT,
)
from zk_trylock.core.version import __version__


def _bounded_float(min_val: float, max_val: float):
    """Argparse type factory for a float bounded to [min_val, max_val]."""

    def _type(value: str) -> float:
        try:
            f = float(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
        if f < min_val or f > max_val:
            raise argparse.ArgumentTypeError(f"must be between {min_val} and {max_val}, got {f}")
        return f

    _type.__name__ = f"float[{min_val}-{max_val}]"
    return _type


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def build_parser(logger: logging.Logger | None = None) -> argparse.ArgumentParser:
    """Build the argument parser. Defaults are read from the environment."""
    parser = argparse.ArgumentParser(
        prog="zk-trylock",
        usage="%(prog)s [options] HOSTS LOCK_PATH [-- COMMAND [ARG ...]]",
        description="Run a command only if no other host holds the ZooKeeper lock",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Take the lock and hold it for a minute
  zk-trylock zk1:2181,zk2:2181 /cron/nightly --hold 60

  # Run a job only if no other host is running it
  zk-trylock zk1:2181 /cron/nightly -- /usr/local/bin/nightly-report --full

  # JSON logs for aggregation
  zk-trylock zk1:2181 /cron/nightly --log-level INFO --log-format json -- ./job.sh

A process that finds the lock held prints "BLOCKED: <node>" and exits 0.
Run with --exit-codes for the full exit code reference.
""",
    )

    parser.add_argument("hosts", nargs="?", help="ZooKeeper hosts, e.g. zk1:2181,zk2:2181[/chroot]")
    parser.add_argument("lock_path", nargs="?", help="Lock directory, e.g. /cron/nightly")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--exit-codes", action="store_true", help="Display exit code reference and exit")

    # ==================== RETRY ARGUMENTS ====================

    retry_group = parser.add_argument_group("Retry", "Bounds for directory setup, listing and lock attempts")
    retry_group.add_argument(
        "--max-attempts",
        type=_positive_int,
        default=env_number(ENV_MAX_ATTEMPTS, DEFAULT_RETRY.max_attempts, int, minimum=1, logger=logger),
        metavar="N",
        help=f"Attempt budget for each retry loop (default: {DEFAULT_RETRY.max_attempts}, or {ENV_MAX_ATTEMPTS} env var)",
    )
    retry_group.add_argument(
        "--retry-delay",
        type=_bounded_float(0.0, 60.0),
        default=env_number(ENV_RETRY_DELAY, DEFAULT_RETRY.delay_seconds, float, logger=logger),
        metavar="SECONDS",
        help=f"Fixed delay before each retry (default: {DEFAULT_RETRY.delay_seconds}, or {ENV_RETRY_DELAY} env var)",
    )

    # ==================== SESSION ARGUMENTS ====================

    session_group = parser.add_argument_group("Session", "ZooKeeper session options")
    session_group.add_argument(
        "--session-timeout",
        type=_bounded_float(1.0, 3600.0),
        default=env_number(ENV_SESSION_TIMEOUT, DEFAULT_SESSION.session_timeout, float, minimum=1, logger=logger),
        metavar="SECONDS",
        help=f"Session timeout (default: {DEFAULT_SESSION.session_timeout:g}, or {ENV_SESSION_TIMEOUT} env var)",
    )
    session_group.add_argument(
        "--connect-timeout",
        type=_bounded_float(0.1, 3600.0),
        default=env_number(ENV_CONNECT_TIMEOUT, DEFAULT_SESSION.connect_timeout, float, minimum=0.1, logger=logger),
        metavar="SECONDS",
        help=f"Time to wait for the first connection (default: {DEFAULT_SESSION.connect_timeout:g}, "
        f"or {ENV_CONNECT_TIMEOUT} env var)",
    )
    session_group.add_argument(
        "--auth",
        default=os.environ.get(ENV_AUTH) or None,
        metavar="SCHEME:CREDENTIAL",
        help=f"Add session auth, e.g. digest:user:password (or {ENV_AUTH} env var)",
    )

    # ==================== WORKLOAD ARGUMENTS ====================

    parser.add_argument(
        "--hold",
        type=_bounded_float(0.0, 86400.0),
        default=env_number(ENV_HOLD, DEFAULT_HOLD_SECONDS, float, logger=logger),
        metavar="SECONDS",
        help=f"Seconds to keep the lock after acquiring it when no command is given "
        f"(default: {DEFAULT_HOLD_SECONDS:g}, or {ENV_HOLD} env var; 0 releases at once)",
    )

    # ==================== OUTPUT ARGUMENTS ====================

    output_group = parser.add_argument_group("Output", "Logging and reporting")
    output_group.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING, or LOG_LEVEL env var)",
    )
    output_group.add_argument(
        "--log-format",
        default="text",
        choices=["text", "json"],
        help="Log output format (default: text)",
    )
    output_group.add_argument("--log-file", default=None, metavar="PATH", help="Also write logs to a rotating file")
    output_group.add_argument(
        "-q", "--quiet", action="store_true", help="Do not print ACQUIRED/BLOCKED lines on stdout"
    )

    return parser


def split_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split argv at the first "--" into (options, command)."""
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1 :]


def parse_arguments(argv: list[str] | None = None, logger: logging.Logger | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Everything after the first "--" is the command to run under the lock and
    is never interpreted as options. ``hosts`` and ``lock_path`` are only
    optional for ``--exit-codes``.
    """
    options, command = split_command(list(sys.argv[1:] if argv is None else argv))
    parser = build_parser(logger)
    args = parser.parse_args(options)
    if not args.exit_codes and (not args.hosts or not args.lock_path):
        parser.error("the following arguments are required: hosts, lock_path")
    if args.lock_path and not args.lock_path.startswith("/"):
        parser.error(f"lock_path must be an absolute znode path, got {args.lock_path!r}")
    if args.auth and ":" not in args.auth:
        parser.error("--auth must look like SCHEME:CREDENTIAL")
    args.command = command
    return args
