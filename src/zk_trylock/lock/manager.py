"""Try-lock manager driving the recipe under a bounded retry budget."""

from __future__ import annotations

import logging
import time

from zk_trylock.core.config import RetryConfig
from zk_trylock.core.exceptions import (
    CandidateCreateError,
    ChildEnumerationError,
    InvalidNodeNameError,
    LockStateError,
    TransientConnectivityError,
)
from zk_trylock.core.logging import with_log_context
from zk_trylock.lock.models import LockOutcome, LockStatus
from zk_trylock.lock.ordering import sort_by_sequence_suffix
from zk_trylock.lock.recipe import ChildEnumerator, LockDecisionEngine, PathEnsurer, SessionCandidateResolver
from zk_trylock.zk.store import CoordinationStore

# Failures that end one attempt but leave the run ATTEMPTING
ATTEMPT_FAILURES: tuple[type[Exception], ...] = (
    CandidateCreateError,
    ChildEnumerationError,
    InvalidNodeNameError,
    LockStateError,
    TransientConnectivityError,
)


class TryLockManager:
    """Non-blocking lock manager for one lock directory.

    ``acquire()`` ensures the directory once, then loops: sleep the fixed
    delay, count the attempt, resolve this session's candidate, list and
    order the directory, decide. The first LOCKED or BLOCKED decision ends
    the run; running out of attempts yields EXHAUSTED.

    The lock is released when the session closes. The manager never deletes
    its candidate node.

    Example:
        manager = TryLockManager(KazooCoordinationStore(client), "/cron/nightly")
        outcome = manager.acquire()
        if outcome.acquired:
            run_job()
    """

    def __init__(
        self,
        store: CoordinationStore,
        lock_path: str,
        *,
        retry: RetryConfig | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.store = store
        self.lock_path = lock_path
        self.retry = retry or RetryConfig()
        self.logger = with_log_context(logger or logging.getLogger(__name__), lock_path=lock_path)
        self.state = LockStatus.ATTEMPTING
        self.attempts = 0

        self.path_ensurer = PathEnsurer(store, retry=self.retry, logger=self.logger)
        self.enumerator = ChildEnumerator(store, retry=self.retry, logger=self.logger)
        self.resolver = SessionCandidateResolver(store, logger=self.logger)
        self.engine = LockDecisionEngine(logger=self.logger)

    def acquire(self) -> LockOutcome:
        """Attempt to take the lock without waiting for the current holder.

        Returns:
            LockOutcome with status LOCKED, BLOCKED or EXHAUSTED

        Raises:
            LockPathSetupError: if the lock directory cannot be created
        """
        self.state = LockStatus.ATTEMPTING
        self.attempts = 0
        self.path_ensurer.ensure(self.lock_path)

        while self.attempts < self.retry.max_attempts:
            time.sleep(self.retry.delay_seconds)
            self.attempts += 1
            log = with_log_context(self.logger, attempt=self.attempts)
            try:
                outcome = self._attempt()
            except ATTEMPT_FAILURES as e:
                log.warning(f"⚠ Lock attempt {self.attempts}/{self.retry.max_attempts} failed: {e!s}")
                continue

            self.state = outcome.status
            if outcome.acquired:
                log.info(f"Acquired lock {outcome.node_path}")
            else:
                log.info(f"Lock {self.lock_path} is held by {outcome.holder_path}; blocked by {outcome.predecessor_path}")
            return outcome

        self.state = LockStatus.EXHAUSTED
        self.logger.error(f"Too many retries while trying to lock {self.lock_path}")
        return LockOutcome(LockStatus.EXHAUSTED, self.lock_path, attempts=self.attempts)

    def _attempt(self) -> LockOutcome:
        session_id = self.store.session_id()
        children = self.enumerator.list_children(self.lock_path)
        my_name = self.resolver.resolve(self.lock_path, session_id, children)

        # The decision needs a listing that includes our own node.
        children = self.enumerator.list_children(self.lock_path)
        ordered = sort_by_sequence_suffix(children)
        return self.engine.decide(self.lock_path, ordered, my_name, attempts=self.attempts)
