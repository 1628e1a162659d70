"""Data models for lock attempts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from zk_trylock.core.exceptions import RetryBudgetExhaustedError


def join_path(parent: str, name: str) -> str:
    """Join a znode path and a child name."""
    return f"{parent.rstrip('/')}/{name}"


class LockStatus(str, Enum):
    """States of one try-lock run."""

    ATTEMPTING = "attempting"
    LOCKED = "locked"
    BLOCKED = "blocked"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class LockOutcome:
    """Terminal decision of one try-lock run.

    Attributes:
        status: LOCKED, BLOCKED or EXHAUSTED
        lock_path: Lock directory
        node: This session's candidate node name, if one was resolved
        predecessor: Candidate ordered immediately before ours (BLOCKED only)
        holder: Lowest candidate, i.e. the current lock owner
        attempts: Outer attempts used to reach the decision
    """

    status: LockStatus
    lock_path: str
    node: str | None = None
    predecessor: str | None = None
    holder: str | None = None
    attempts: int = 0

    @property
    def acquired(self) -> bool:
        return self.status == LockStatus.LOCKED

    @property
    def node_path(self) -> str | None:
        return join_path(self.lock_path, self.node) if self.node else None

    @property
    def predecessor_path(self) -> str | None:
        return join_path(self.lock_path, self.predecessor) if self.predecessor else None

    @property
    def holder_path(self) -> str | None:
        return join_path(self.lock_path, self.holder) if self.holder else None

    def raise_for_status(self) -> None:
        """Raise RetryBudgetExhaustedError if the run ran out of attempts."""
        if self.status == LockStatus.EXHAUSTED:
            raise RetryBudgetExhaustedError(self.lock_path, self.attempts)
