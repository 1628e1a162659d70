"""Pytest configuration and fixtures for zk-trylock tests"""

from __future__ import annotations

import logging
from collections import defaultdict
from unittest.mock import patch

import pytest

from zk_trylock.core.config import RetryConfig
from zk_trylock.core.exceptions import NodeAlreadyExistsError, NodeMissingError


class FakeEnsemble:
    """In-memory znode tree shared by any number of FakeStore sessions."""

    def __init__(self):
        self.nodes: dict[str, int | None] = {"/": None}
        self.counters: dict[str, int] = defaultdict(int)

    def session(self, session_id: int) -> FakeStore:
        return FakeStore(self, session_id)

    def expire(self, session_id: int) -> None:
        """Drop every ephemeral node owned by ``session_id``."""
        for path, owner in list(self.nodes.items()):
            if owner == session_id:
                del self.nodes[path]

    def children(self, path: str) -> list[str]:
        prefix = path.rstrip("/") + "/"
        return [p[len(prefix):] for p in self.nodes if p.startswith(prefix) and "/" not in p[len(prefix):] and p != "/"]


class FakeStore:
    """CoordinationStore over a FakeEnsemble with scripted failures.

    ``fail(operation, error)`` makes the next call of ``operation`` raise
    ``error``. With ``applied=True`` the operation takes effect first, the
    way a create can reach the server before the connection drops.
    """

    def __init__(self, ensemble: FakeEnsemble, session_id: int):
        self.ensemble = ensemble
        self._session_id = session_id
        self.failures: dict[str, list[tuple[Exception, bool]]] = defaultdict(list)
        self.calls: list[tuple[str, str | None]] = []

    def fail(self, operation: str, *errors: Exception, applied: bool = False) -> None:
        self.failures[operation].extend((error, applied) for error in errors)

    def _next_failure(self, operation: str) -> tuple[Exception, bool] | None:
        if self.failures[operation]:
            return self.failures[operation].pop(0)
        return None

    def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        failure = self._next_failure("exists")
        if failure:
            raise failure[0]
        return path in self.ensemble.nodes

    def create(self, path, *, ephemeral=False, sequence=False, makepath=False) -> str:
        self.calls.append(("create", path))
        failure = self._next_failure("create")
        if failure and not failure[1]:
            raise failure[0]

        parent = path.rsplit("/", 1)[0] or "/"
        if parent not in self.ensemble.nodes:
            if not makepath:
                raise NodeMissingError("Node does not exist", operation="create", path=parent)
            current = ""
            for part in parent.strip("/").split("/"):
                current = f"{current}/{part}"
                self.ensemble.nodes.setdefault(current, None)

        if sequence:
            path = f"{path}{self.ensemble.counters[parent]:010d}"
            self.ensemble.counters[parent] += 1
        if path in self.ensemble.nodes:
            raise NodeAlreadyExistsError("Node already exists", operation="create", path=path)
        self.ensemble.nodes[path] = self._session_id if ephemeral else None

        if failure:
            raise failure[0]
        return path

    def get_children(self, path: str) -> list[str]:
        self.calls.append(("get_children", path))
        failure = self._next_failure("get_children")
        if failure:
            raise failure[0]
        if path not in self.ensemble.nodes:
            raise NodeMissingError("Node does not exist", operation="get_children", path=path)
        # Servers return children unordered; reverse so callers must sort.
        return sorted(self.ensemble.children(path), reverse=True)

    def session_id(self) -> int:
        self.calls.append(("session_id", None))
        failure = self._next_failure("session_id")
        if failure:
            raise failure[0]
        return self._session_id

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


@pytest.fixture
def ensemble():
    """Empty shared znode tree"""
    return FakeEnsemble()


@pytest.fixture
def store(ensemble):
    """Store for session 0x1f on the shared tree"""
    return ensemble.session(0x1F)


@pytest.fixture
def fast_retry():
    """Default attempt budget with no delay"""
    return RetryConfig(max_attempts=5, delay_seconds=0.0)


@pytest.fixture
def no_sleep():
    """Patch time.sleep so retry delays cost nothing"""
    with patch("time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def restore_root_logging():
    """Restore root logger handlers and level after setup_logging() tests"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    kazoo_level = logging.getLogger("kazoo").level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("kazoo").setLevel(kazoo_level)
