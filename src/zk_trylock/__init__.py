"""
zk-trylock - ZooKeeper try-lock for distributed cron jobs

Lets independent processes agree, through a shared ZooKeeper directory,
on which single process may run a job. Losers report the current holder
and exit instead of waiting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from zk_trylock.core.version import __version__

__all__ = ["__version__", "LockOutcome", "LockStatus", "TryLockManager", "main"]

if TYPE_CHECKING:
    from zk_trylock.cli.main import main
    from zk_trylock.lock.manager import TryLockManager
    from zk_trylock.lock.models import LockOutcome, LockStatus

_LAZY_EXPORTS = {
    "LockOutcome": "zk_trylock.lock.models",
    "LockStatus": "zk_trylock.lock.models",
    "TryLockManager": "zk_trylock.lock.manager",
    "main": "zk_trylock.cli.main",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        import importlib

        return getattr(importlib.import_module(_LAZY_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
