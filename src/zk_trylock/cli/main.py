"""CLI entrypoint for zk-trylock."""

from __future__ import annotations

import logging
import subprocess
import sys
import time

from zk_trylock.cli.parser import parse_arguments
from zk_trylock.core.colors import ConsoleColors
from zk_trylock.core.config import TrylockConfig
from zk_trylock.core.constants import (
    BANNER_WIDTH,
    EXIT_CODE_REFERENCE,
    EXIT_COMMAND_FAILED,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECT_FAILED,
    EXIT_OK,
    EXIT_PATH_SETUP_FAILED,
    EXIT_RETRIES_EXHAUSTED,
)
from zk_trylock.core.exceptions import (
    ConfigurationError,
    CoordinationError,
    LockPathSetupError,
    RetryBudgetExhaustedError,
    SessionConnectError,
)
from zk_trylock.core.logging import setup_logging, with_log_context
from zk_trylock.lock.manager import TryLockManager
from zk_trylock.lock.models import LockOutcome, LockStatus
from zk_trylock.zk.client import bootstrap_dotenv, close_session, connect_session
from zk_trylock.zk.store import KazooCoordinationStore


def _print_error(msg: str) -> None:
    """Print a coloured error message to stderr."""
    print(ConsoleColors.error(f"ERROR: {msg}"), file=sys.stderr)


def print_exit_codes() -> None:
    print("=" * BANNER_WIDTH)
    print("zk-trylock exit codes")
    print("=" * BANNER_WIDTH)
    for code, description in sorted(EXIT_CODE_REFERENCE.items()):
        print(f"  {code:>3}  {description}")
    print("  ...  With a command after --, the command's own exit code is returned")


def run_command(command: list[str], logger: logging.Logger | logging.LoggerAdapter) -> int:
    """Run the workload while the lock is held and return its exit code."""
    logger.info(f"Running command: {' '.join(command)}")
    try:
        completed = subprocess.run(command, check=False)
    except OSError as e:
        _print_error(f"Could not run command {command[0]!r}: {e}")
        logger.error(f"Could not run command {command[0]!r}: {e}")
        return EXIT_COMMAND_FAILED
    if completed.returncode != 0:
        logger.warning(f"Command exited with code {completed.returncode}")
    else:
        logger.info("Command finished successfully")
    return completed.returncode


def hold_lock(outcome: LockOutcome, config: TrylockConfig, logger: logging.Logger | logging.LoggerAdapter) -> int:
    """Do the locked work: run the command, or keep the session for --hold seconds."""
    if config.command:
        return run_command(config.command, logger)
    if config.hold_seconds > 0:
        logger.info(f"Holding {outcome.node_path} for {config.hold_seconds:g}s")
        time.sleep(config.hold_seconds)
    return EXIT_OK


def report_outcome(outcome: LockOutcome, quiet: bool = False) -> None:
    """Print the machine-readable outcome line on stdout."""
    if quiet:
        return
    if outcome.status == LockStatus.LOCKED:
        print(f"ACQUIRED: {outcome.node_path}", flush=True)
    elif outcome.status == LockStatus.BLOCKED:
        print(f"BLOCKED: {outcome.predecessor_path}", flush=True)


def run(config: TrylockConfig, logger: logging.Logger | None = None) -> int:
    """Connect, try the lock once and act on the outcome.

    Returns:
        Process exit code
    """
    log = with_log_context(logger or logging.getLogger(__name__), lock_path=config.lock_path)
    client = connect_session(config.session, logger=logger)
    try:
        manager = TryLockManager(
            KazooCoordinationStore(client),
            config.lock_path,
            retry=config.retry,
            logger=logger,
        )
        outcome = manager.acquire()
        outcome.raise_for_status()
        report_outcome(outcome, quiet=config.quiet)

        if outcome.status == LockStatus.BLOCKED:
            return EXIT_OK
        return hold_lock(outcome, config, log)
    finally:
        close_session(client, logger)


def _main_impl(argv: list[str] | None = None) -> int:
    bootstrap_dotenv()
    args = parse_arguments(argv)

    if args.exit_codes:
        print_exit_codes()
        return EXIT_OK

    config = TrylockConfig.from_args(args)
    logger = setup_logging(
        config.log.level,
        config.log.format,
        config.log.file,
        max_bytes=config.log.file_max_bytes,
        backup_count=config.log.file_backup_count,
    )

    try:
        config.validate()
        return run(config, logger)
    except ConfigurationError as e:
        _print_error(str(e))
        return EXIT_CONFIG_ERROR
    except SessionConnectError as e:
        _print_error(e.message)
        return EXIT_CONNECT_FAILED
    except LockPathSetupError as e:
        _print_error(e.message)
        logger.debug(f"Lock directory setup failed: {e}")
        return EXIT_PATH_SETUP_FAILED
    except RetryBudgetExhaustedError as e:
        _print_error(e.message)
        return EXIT_RETRIES_EXHAUSTED
    except CoordinationError as e:
        _print_error(str(e))
        logger.error(f"Unexpected ZooKeeper error: {e}")
        return EXIT_CONFIG_ERROR


def main(argv: list[str] | None = None) -> None:
    """Console script entry point."""
    try:
        exit_code = _main_impl(argv)
    except KeyboardInterrupt:
        print(ConsoleColors.warning("Interrupted"), file=sys.stderr)
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
