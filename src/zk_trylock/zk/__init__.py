"""ZooKeeper integration - session setup, store adapter and retry helpers."""

from zk_trylock.zk.client import close_session, connect_session, create_zk_client
from zk_trylock.zk.resilience import RETRYABLE_EXCEPTIONS, ErrorMessageHelper, call_with_retry
from zk_trylock.zk.store import CoordinationStore, KazooCoordinationStore, classify_kazoo_error

__all__ = [
    "RETRYABLE_EXCEPTIONS",
    "CoordinationStore",
    "ErrorMessageHelper",
    "KazooCoordinationStore",
    "call_with_retry",
    "classify_kazoo_error",
    "close_session",
    "connect_session",
    "create_zk_client",
]
