"""Coordination store adapter over kazoo.

The lock recipe never sees kazoo exceptions or protocol codes. This module
translates them into the small error taxonomy the recipe reasons about:

- connection loss, dropped connections and timeouts -> TransientConnectivityError
- node exists on create -> NodeAlreadyExistsError
- missing node (or parent) -> NodeMissingError
- everything else kazoo raises -> CoordinationError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from kazoo.exceptions import (
    ConnectionDropped,
    ConnectionLoss,
    KazooException,
    NodeExistsError,
    NoNodeError,
    OperationTimeoutError,
)
from kazoo.handlers.threading import KazooTimeoutError

from zk_trylock.core.exceptions import (
    CoordinationError,
    NodeAlreadyExistsError,
    NodeMissingError,
    TransientConnectivityError,
)

if TYPE_CHECKING:
    from kazoo.client import KazooClient

TRANSIENT_KAZOO_ERRORS: tuple[type[Exception], ...] = (
    ConnectionLoss,
    ConnectionDropped,
    OperationTimeoutError,
    KazooTimeoutError,
)


class CoordinationStore(Protocol):
    """The subset of a ZooKeeper client the lock recipe depends on."""

    def exists(self, path: str) -> bool:
        """Return True if the node exists."""

    def create(
        self,
        path: str,
        *,
        ephemeral: bool = False,
        sequence: bool = False,
        makepath: bool = False,
    ) -> str:
        """Create a node with no data and the default ACL; return the created path."""

    def get_children(self, path: str) -> list[str]:
        """Return the child names of a node."""

    def session_id(self) -> int:
        """Return the 64-bit id of the current session."""


def classify_kazoo_error(error: Exception, operation: str, path: str | None = None) -> CoordinationError:
    """Map a kazoo exception onto the coordination error taxonomy."""
    if isinstance(error, TRANSIENT_KAZOO_ERRORS):
        error_cls: type[CoordinationError] = TransientConnectivityError
        message = "Connection to ZooKeeper lost"
    elif isinstance(error, NodeExistsError):
        error_cls = NodeAlreadyExistsError
        message = "Node already exists"
    elif isinstance(error, NoNodeError):
        error_cls = NodeMissingError
        message = "Node does not exist"
    else:
        error_cls = CoordinationError
        message = "ZooKeeper operation failed"
    return error_cls(
        message,
        operation=operation,
        path=path,
        details=f"{type(error).__name__}: {error}" if str(error) else type(error).__name__,
        original_error=error,
    )


class KazooCoordinationStore:
    """CoordinationStore backed by a started KazooClient.

    Nodes are created with no data and the client's default ACL.
    """

    def __init__(self, client: KazooClient):
        self.client = client

    def exists(self, path: str) -> bool:
        try:
            return self.client.exists(path) is not None
        except (KazooException, KazooTimeoutError) as e:
            raise classify_kazoo_error(e, "exists", path) from e

    def create(
        self,
        path: str,
        *,
        ephemeral: bool = False,
        sequence: bool = False,
        makepath: bool = False,
    ) -> str:
        try:
            return self.client.create(
                path,
                b"",
                ephemeral=ephemeral,
                sequence=sequence,
                makepath=makepath,
            )
        except (KazooException, KazooTimeoutError) as e:
            raise classify_kazoo_error(e, "create", path) from e

    def get_children(self, path: str) -> list[str]:
        try:
            return list(self.client.get_children(path))
        except (KazooException, KazooTimeoutError) as e:
            raise classify_kazoo_error(e, "get_children", path) from e

    def session_id(self) -> int:
        client_id = self.client.client_id
        if client_id is None:
            raise TransientConnectivityError("No active ZooKeeper session", operation="session_id")
        return int(client_id[0])
