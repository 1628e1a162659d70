"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Logging setup
- Console colors
"""

from zk_trylock.core.version import __version__

from zk_trylock.core.exceptions import (
    TrylockError,
    ConfigurationError,
    CoordinationError,
    TransientConnectivityError,
    NodeAlreadyExistsError,
    NodeMissingError,
    SessionConnectError,
    LockError,
    InvalidNodeNameError,
    CandidateCreateError,
    ChildEnumerationError,
    LockPathSetupError,
    RetryBudgetExhaustedError,
    LockStateError,
)

from zk_trylock.core.config import (
    RetryConfig,
    SessionConfig,
    LogConfig,
    TrylockConfig,
    env_number,
)

from zk_trylock.core.constants import (
    NODE_PREFIX,
    SEQUENCE_WIDTH,
    DEFAULT_RETRY,
    DEFAULT_SESSION,
    EXIT_CODE_REFERENCE,
)

from zk_trylock.core.colors import ConsoleColors

from zk_trylock.core.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    setup_logging,
    with_log_context,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'TrylockError',
    'ConfigurationError',
    'CoordinationError',
    'TransientConnectivityError',
    'NodeAlreadyExistsError',
    'NodeMissingError',
    'SessionConnectError',
    'LockError',
    'InvalidNodeNameError',
    'CandidateCreateError',
    'ChildEnumerationError',
    'LockPathSetupError',
    'RetryBudgetExhaustedError',
    'LockStateError',
    # Config dataclasses
    'RetryConfig',
    'SessionConfig',
    'LogConfig',
    'TrylockConfig',
    'env_number',
    # Constants
    'NODE_PREFIX',
    'SEQUENCE_WIDTH',
    'DEFAULT_RETRY',
    'DEFAULT_SESSION',
    'EXIT_CODE_REFERENCE',
    # Colors
    'ConsoleColors',
    # Logging
    'JSONFormatter',
    'SensitiveDataFilter',
    'setup_logging',
    'with_log_context',
]
