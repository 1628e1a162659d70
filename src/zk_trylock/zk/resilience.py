"""Retry helpers and error messages for ZooKeeper calls.

Retries here use a fixed delay rather than exponential backoff: the lock
recipe bounds every loop by the same small attempt budget, and candidates
racing on one directory gain nothing from spreading out.
"""

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from zk_trylock.core.config import RetryConfig
from zk_trylock.core.constants import BANNER_WIDTH
from zk_trylock.core.exceptions import TransientConnectivityError

T = TypeVar("T")

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (TransientConnectivityError,)


class ErrorMessageHelper:
    """Provides contextual error messages with actionable suggestions."""

    @staticmethod
    def get_connection_error_message(hosts: str, error: Exception | None = None, operation: str = "connect") -> str:
        """Get detailed message for a failed or lost ZooKeeper connection."""
        output = [
            f"{'=' * BANNER_WIDTH}",
            "ZooKeeper Connection Failed",
            f"{'=' * BANNER_WIDTH}",
            f"Operation: {operation}",
            f"Hosts: {hosts}",
        ]
        if error is not None:
            output.append(f"Error: {type(error).__name__}: {error}")
        output.extend(
            [
                "",
                "Why this happened:",
                "  No server in the host list accepted a session in time",
                "",
                "How to fix it:",
                "  1. Check the host list format (host1:2181,host2:2181[/chroot])",
                "  2. Verify the ensemble is running: echo ruok | nc <host> 2181",
                "  3. Check firewalls between this host and the ensemble",
                "  4. Increase --connect-timeout or --session-timeout for slow networks",
            ]
        )
        return "\n".join(output)


def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    retry: RetryConfig | None = None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
    operation_name: str = "ZooKeeper call",
    retryable_exceptions: tuple[type[Exception], ...] | None = None,
    **kwargs: Any,
) -> T:
    """
    Execute a ZooKeeper call, retrying on transient connectivity errors.

    Makes at most ``retry.max_attempts`` calls with ``retry.delay_seconds``
    slept before each retry. Non-retryable exceptions are raised immediately.

    Args:
        func: The store function to call
        *args: Positional arguments to pass to the function
        retry: Attempt budget and delay (defaults to RetryConfig())
        logger: Logger instance for retry messages
        operation_name: Human-readable name for logging
        retryable_exceptions: Exception types to retry (default: transient connectivity)
        **kwargs: Keyword arguments to pass to the function

    Returns:
        Result from the call

    Raises:
        The last retryable exception if every attempt fails

    Example:
        children = call_with_retry(
            store.get_children,
            "/cron/nightly",
            retry=config.retry,
            operation_name="get_children",
        )
    """
    _logger = logger or logging.getLogger(__name__)
    _retry = retry or RetryConfig()
    _retryable = retryable_exceptions if retryable_exceptions is not None else RETRYABLE_EXCEPTIONS
    max_attempts = max(1, _retry.max_attempts)

    for attempt in range(1, max_attempts + 1):
        try:
            result = func(*args, **kwargs)
            if attempt > 1:
                _logger.info(f"✓ {operation_name} succeeded on attempt {attempt}/{max_attempts}")
            return result
        except _retryable as e:
            if attempt == max_attempts:
                _logger.error(f"All {max_attempts} attempts failed for {operation_name}: {e!s}")
                raise
            _logger.warning(
                f"⚠ {operation_name} attempt {attempt}/{max_attempts} failed: {e!s}. "
                f"Retrying in {_retry.delay_seconds:.1f}s..."
            )
            time.sleep(_retry.delay_seconds)

    # Unreachable: the last attempt always returns or raises.
    raise RuntimeError(f"Retry loop exited unexpectedly for {operation_name}")
