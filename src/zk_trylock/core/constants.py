"""Constants and default values for zk-trylock.

This module centralizes all magic numbers, environment variable names
and exit codes used throughout the application.
"""

from zk_trylock.core.config import RetryConfig, SessionConfig

# ==================== LOCK NODE NAMING ====================

# Candidate nodes are named "x-<16 hex session id>-<sequence>"
NODE_PREFIX: str = "x-"
SESSION_ID_HEX_WIDTH: int = 16
SESSION_ID_MASK: int = (1 << 64) - 1
SEQUENCE_SEPARATOR: str = "-"
# ZooKeeper appends a 10 digit zero-padded counter to sequential nodes
SEQUENCE_WIDTH: int = 10

# ==================== DISPLAY CONSTANTS ====================

BANNER_WIDTH: int = 60

# ==================== LOCK HOLD ====================

# Seconds to keep the session after acquiring when no command is given.
# Runs on other hosts that fire within this window see the lock held.
DEFAULT_HOLD_SECONDS: float = 10.0

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep
DEFAULT_LOG_LEVEL: str = "WARNING"

# ==================== DEFAULT CONFIG INSTANCES ====================

DEFAULT_RETRY = RetryConfig()
DEFAULT_SESSION = SessionConfig()

# ==================== ENVIRONMENT VARIABLES ====================

ENV_MAX_ATTEMPTS: str = "ZK_TRYLOCK_MAX_ATTEMPTS"
ENV_RETRY_DELAY: str = "ZK_TRYLOCK_RETRY_DELAY"
ENV_SESSION_TIMEOUT: str = "ZK_TRYLOCK_SESSION_TIMEOUT"
ENV_CONNECT_TIMEOUT: str = "ZK_TRYLOCK_CONNECT_TIMEOUT"
ENV_AUTH: str = "ZK_TRYLOCK_AUTH"
ENV_HOLD: str = "ZK_TRYLOCK_HOLD"
ENV_LOG_LEVEL: str = "LOG_LEVEL"

# ==================== EXIT CODES ====================

EXIT_OK: int = 0  # Lock acquired (no command) or blocked by another holder
EXIT_CONFIG_ERROR: int = 1
EXIT_USAGE_ERROR: int = 2  # argparse convention
EXIT_PATH_SETUP_FAILED: int = 3
EXIT_RETRIES_EXHAUSTED: int = 4
EXIT_CONNECT_FAILED: int = 5
EXIT_COMMAND_FAILED: int = 6

EXIT_CODE_REFERENCE: dict[int, str] = {
    EXIT_OK: "Lock acquired, or lock held by another process (run skipped)",
    EXIT_CONFIG_ERROR: "Invalid configuration or unexpected ZooKeeper error",
    EXIT_USAGE_ERROR: "Invalid command-line usage",
    EXIT_PATH_SETUP_FAILED: "Could not create the lock directory",
    EXIT_RETRIES_EXHAUSTED: "Too many retries while trying to lock",
    EXIT_CONNECT_FAILED: "Could not connect to ZooKeeper",
    EXIT_COMMAND_FAILED: "Lock acquired but the command could not be started",
}
