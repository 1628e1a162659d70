"""Custom exceptions for zk-trylock.

All exception classes are designed to provide clear, actionable error messages
with context about which operation failed and on which path.
"""


class TrylockError(Exception):
    """Base exception for all zk-trylock errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(TrylockError):
    """Exception raised for configuration-related errors.

    Examples:
        - Empty ZooKeeper host list
        - Lock path that is not absolute
        - Auth value without a scheme
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class CoordinationError(TrylockError):
    """Exception raised for ZooKeeper operation failures.

    Wraps kazoo errors with the operation and path involved. Raised as-is
    for failures that are not otherwise classified.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.operation = operation
        self.path = path
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.append(f"during {self.operation}")
        if self.path:
            parts.append(f"on {self.path}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class TransientConnectivityError(CoordinationError):
    """Connection to the ensemble was lost or timed out; safe to retry."""


class NodeAlreadyExistsError(CoordinationError):
    """The node being created already exists."""


class NodeMissingError(CoordinationError):
    """The node (or its parent) does not exist."""


class SessionConnectError(CoordinationError):
    """Raised when no session could be established with the ensemble."""

    def __init__(self, hosts: str, details: str | None = None, original_error: Exception | None = None):
        self.hosts = hosts
        super().__init__(
            f"Could not connect to {hosts}",
            operation="connect",
            details=details,
            original_error=original_error,
        )


class LockError(TrylockError):
    """Base exception for lock recipe failures.

    Attributes:
        lock_path: Lock directory the failure relates to
    """

    def __init__(self, message: str, lock_path: str | None = None, details: str | None = None):
        self.lock_path = lock_path
        super().__init__(message, details)


class InvalidNodeNameError(LockError):
    """A child of the lock directory does not carry a valid sequence suffix.

    Ordering is refused rather than guessed when a name does not end in a
    fixed-width decimal sequence.
    """

    def __init__(self, name: str, lock_path: str | None = None, details: str | None = None):
        self.name = name
        super().__init__(f"Invalid lock node name '{name}'", lock_path, details)


class CandidateCreateError(LockError):
    """The ephemeral sequential candidate node could not be created."""


class ChildEnumerationError(LockError):
    """The children of the lock directory could not be listed."""


class LockPathSetupError(LockError):
    """The lock directory could not be created or confirmed. Fatal for the run."""

    def __init__(self, lock_path: str, attempts: int, details: str | None = None):
        self.attempts = attempts
        super().__init__(f"Could not create {lock_path}", lock_path, details)


class RetryBudgetExhaustedError(LockError):
    """Every lock attempt in the retry budget failed. Fatal for the run."""

    def __init__(self, lock_path: str, attempts: int, details: str | None = None):
        self.attempts = attempts
        super().__init__(f"Too many retries while trying to lock {lock_path}", lock_path, details)


class LockStateError(LockError):
    """The decision step found an inconsistent view of the lock directory."""
