"""Try-lock recipe over ZooKeeper ephemeral sequential nodes.

This package holds the distributed-coordination logic: directory setup,
candidate registration, ordering by sequence number and the
locked-or-blocked decision, driven by a bounded retry loop.
"""

from zk_trylock.lock.manager import TryLockManager
from zk_trylock.lock.models import LockOutcome, LockStatus, join_path
from zk_trylock.lock.ordering import child_floor, sequence_suffix, sort_by_sequence_suffix
from zk_trylock.lock.recipe import (
    ChildEnumerator,
    LockDecisionEngine,
    PathEnsurer,
    SessionCandidateResolver,
    find_session_node,
    session_prefix,
)

__all__ = [
    "ChildEnumerator",
    "LockDecisionEngine",
    "LockOutcome",
    "LockStatus",
    "PathEnsurer",
    "SessionCandidateResolver",
    "TryLockManager",
    "child_floor",
    "find_session_node",
    "join_path",
    "sequence_suffix",
    "session_prefix",
    "sort_by_sequence_suffix",
]
