"""Building blocks of the ZooKeeper try-lock recipe.

Each component takes the coordination store as an explicit collaborator and
is safe to call repeatedly: nothing is cached between lock attempts.

- PathEnsurer: make sure the lock directory exists
- ChildEnumerator: list the lock directory with bounded retry
- SessionCandidateResolver: find or register this session's candidate node
- LockDecisionEngine: decide locked or blocked from an ordered child set
"""

from __future__ import annotations

import logging
import time
from enum import Enum

from zk_trylock.core.config import RetryConfig
from zk_trylock.core.constants import NODE_PREFIX, SEQUENCE_SEPARATOR, SESSION_ID_HEX_WIDTH, SESSION_ID_MASK
from zk_trylock.core.exceptions import (
    CandidateCreateError,
    ChildEnumerationError,
    CoordinationError,
    LockPathSetupError,
    LockStateError,
    NodeAlreadyExistsError,
    NodeMissingError,
    TransientConnectivityError,
)
from zk_trylock.lock.models import LockOutcome, LockStatus, join_path
from zk_trylock.lock.ordering import child_floor
from zk_trylock.zk.resilience import call_with_retry
from zk_trylock.zk.store import CoordinationStore


class _PathState(Enum):
    READY = "ready"
    ABSENT = "absent"
    UNREACHABLE = "unreachable"


class PathEnsurer:
    """Ensures the lock directory exists before any candidate registers.

    Many processes may race to create the directory; whoever loses sees
    "node already exists", which counts as ready.
    """

    def __init__(
        self,
        store: CoordinationStore,
        *,
        retry: RetryConfig | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.store = store
        self.retry = retry or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)

    def ensure(self, path: str) -> None:
        """Check for ``path`` and create it if absent.

        Raises:
            LockPathSetupError: if the directory is still absent or unreachable
                after the retry budget, or the store rejects the operation
        """
        last_error: CoordinationError | None = None
        state, last_error = self._check_path(path)
        attempts = 0

        while state != _PathState.READY and attempts < self.retry.max_attempts:
            attempts += 1
            time.sleep(self.retry.delay_seconds)
            if state == _PathState.UNREACHABLE:
                state, last_error = self._check_path(path)
            else:
                state, last_error = self._create(path)

        if state != _PathState.READY:
            details = str(last_error) if last_error is not None else "lock directory is still absent"
            self.logger.error(f"Could not create {path} after {attempts} attempt(s): {details}")
            raise LockPathSetupError(path, attempts, details=details)

        self.logger.debug(f"Lock directory {path} is ready")

    def _check_path(self, path: str) -> tuple[_PathState, CoordinationError | None]:
        try:
            if self.store.exists(path):
                return _PathState.READY, None
            return _PathState.ABSENT, None
        except TransientConnectivityError as e:
            self.logger.warning(f"⚠ exists({path}) failed: {e!s}")
            return _PathState.UNREACHABLE, e
        except CoordinationError as e:
            raise LockPathSetupError(path, 0, details=str(e)) from e

    def _create(self, path: str) -> tuple[_PathState, CoordinationError | None]:
        try:
            self.store.create(path, makepath=True)
            self.logger.info(f"Created lock directory {path}")
            return _PathState.READY, None
        except NodeAlreadyExistsError:
            self.logger.debug(f"Lock directory {path} was created concurrently")
            return _PathState.READY, None
        except TransientConnectivityError as e:
            # The create may have reached the server; look again before retrying it.
            self.logger.warning(f"⚠ create({path}) failed: {e!s}")
            return _PathState.UNREACHABLE, e
        except NodeMissingError as e:
            return _PathState.ABSENT, e
        except CoordinationError as e:
            raise LockPathSetupError(path, 0, details=str(e)) from e


class ChildEnumerator:
    """Lists the lock directory, retrying only on transient connectivity errors."""

    def __init__(
        self,
        store: CoordinationStore,
        *,
        retry: RetryConfig | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.store = store
        self.retry = retry or RetryConfig()
        self.logger = logger or logging.getLogger(__name__)

    def list_children(self, path: str) -> list[str]:
        """Return a fresh snapshot of the children of ``path``.

        Raises:
            ChildEnumerationError: on any non-transient error, or when the
                transient retry budget runs out
        """
        try:
            return call_with_retry(
                self.store.get_children,
                path,
                retry=self.retry,
                logger=self.logger,
                operation_name=f"get_children({path})",
            )
        except CoordinationError as e:
            raise ChildEnumerationError(f"Could not enumerate folder {path}", path, details=str(e)) from e


def session_prefix(session_id: int) -> str:
    """Return the candidate name prefix owned by a session.

    The id is rendered as an unsigned 64-bit value, e.g.
    ``x-0000018f2a3b4c5d-``.
    """
    return f"{NODE_PREFIX}{session_id & SESSION_ID_MASK:0{SESSION_ID_HEX_WIDTH}x}{SEQUENCE_SEPARATOR}"


def find_session_node(children: list[str], prefix: str) -> str | None:
    """Return the first child that starts with ``prefix``."""
    for child in children:
        if child.startswith(prefix):
            return child
    return None


class SessionCandidateResolver:
    """Finds this session's candidate node, registering one if needed.

    A session owns at most one live candidate. An existing node with the
    session's prefix is always reused, which also reconciles a create that
    reported failure but did reach the server.
    """

    def __init__(
        self,
        store: CoordinationStore,
        *,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, path: str, session_id: int, children: list[str]) -> str:
        """Return the name (not the full path) of this session's candidate.

        Raises:
            CandidateCreateError: if a new candidate had to be created and the
                create failed. The create is never retried here.
        """
        prefix = session_prefix(session_id)
        existing = find_session_node(children, prefix)
        if existing is not None:
            self.logger.debug(f"Reusing candidate node {join_path(path, existing)}")
            return existing

        node_path = join_path(path, prefix)
        try:
            created = self.store.create(node_path, ephemeral=True, sequence=True)
        except CoordinationError as e:
            raise CandidateCreateError(f"Could not create locking node {node_path}", path, details=str(e)) from e

        name = created.rsplit("/", 1)[-1]
        self.logger.info(f"Registered candidate node {join_path(path, name)}")
        return name


class LockDecisionEngine:
    """Decides the outcome of one attempt from an ordered child set."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def decide(self, lock_path: str, ordered: list[str], my_name: str, attempts: int = 0) -> LockOutcome:
        """Return LOCKED if nothing is ordered before ``my_name``, otherwise BLOCKED.

        Raises:
            LockStateError: if no candidate precedes ours but ours is not the
                lowest child (for example, it vanished from the listing)
        """
        holder = ordered[0] if ordered else None
        predecessor = child_floor(ordered, my_name)

        if predecessor is None:
            if my_name != holder:
                raise LockStateError(
                    f"Candidate {my_name} has no predecessor but the lowest node is {holder}",
                    lock_path,
                )
            return LockOutcome(LockStatus.LOCKED, lock_path, node=my_name, holder=holder, attempts=attempts)

        return LockOutcome(
            LockStatus.BLOCKED,
            lock_path,
            node=my_name,
            predecessor=predecessor,
            holder=holder,
            attempts=attempts,
        )
