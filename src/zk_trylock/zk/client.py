"""ZooKeeper session setup for zk-trylock."""

from __future__ import annotations

import logging
from collections.abc import Callable

from dotenv import load_dotenv
from kazoo.client import KazooClient
from kazoo.exceptions import KazooException
from kazoo.handlers.threading import KazooTimeoutError
from kazoo.protocol.states import KazooState

from zk_trylock.core.config import SessionConfig
from zk_trylock.core.constants import SESSION_ID_MASK
from zk_trylock.core.exceptions import SessionConnectError
from zk_trylock.zk.resilience import ErrorMessageHelper


def bootstrap_dotenv(logger: logging.Logger | None = None) -> bool:
    """Load a .env file from the working directory into the environment.

    Existing environment variables win over values in the file.
    """
    log = logger or logging.getLogger(__name__)
    loaded = load_dotenv(override=False)
    if loaded:
        log.debug(".env file found and loaded")
    else:
        log.debug(".env file not found")
    return loaded


def format_session_id(session_id: int) -> str:
    return f"0x{session_id & SESSION_ID_MASK:x}"


def session_state_listener(logger: logging.Logger) -> Callable[[str], None]:
    """Build a kazoo listener that logs connection state transitions.

    kazoo calls listeners from its connection thread, so the listener only logs.
    """

    def _listener(state: str) -> None:
        if state == KazooState.CONNECTED:
            logger.info("ZooKeeper connection state: CONNECTED")
        elif state == KazooState.SUSPENDED:
            logger.warning("ZooKeeper connection state: SUSPENDED (connection lost, session may still be alive)")
        elif state == KazooState.LOST:
            logger.warning("ZooKeeper connection state: LOST (session expired or closed; ephemeral lock node released)")
        else:
            logger.warning(f"ZooKeeper connection state: {state}")

    return _listener


def create_zk_client(config: SessionConfig) -> KazooClient:
    """Build an unstarted KazooClient for the configured ensemble."""
    return KazooClient(
        hosts=config.hosts,
        timeout=config.session_timeout,
        auth_data=config.auth_data(),
    )


def connect_session(
    config: SessionConfig,
    logger: logging.Logger | None = None,
    client_factory: Callable[[SessionConfig], KazooClient] = create_zk_client,
) -> KazooClient:
    """Start a ZooKeeper session and return the connected client.

    Args:
        config: Session configuration
        logger: Logger instance
        client_factory: Builds the client (replaced in tests)

    Returns:
        Started KazooClient with a state listener attached

    Raises:
        SessionConnectError: if no session is established within
            ``config.connect_timeout`` seconds
    """
    log = logger or logging.getLogger(__name__)
    client = client_factory(config)
    client.add_listener(session_state_listener(log))

    log.debug(f"Connecting to ZooKeeper at {config.hosts} (timeout {config.connect_timeout:.1f}s)")
    try:
        client.start(timeout=config.connect_timeout)
    except (KazooTimeoutError, KazooException) as e:
        log.error("\n" + ErrorMessageHelper.get_connection_error_message(config.hosts, e))
        close_session(client, log)
        raise SessionConnectError(config.hosts, details=str(e) or type(e).__name__, original_error=e) from e

    client_id = client.client_id
    if client_id is not None:
        log.info(f"Got a new session id: {format_session_id(client_id[0])}")
    return client


def close_session(client: KazooClient, logger: logging.Logger | None = None) -> None:
    """Stop and close the client. Ending the session releases any held lock."""
    log = logger or logging.getLogger(__name__)
    try:
        client.stop()
        client.close()
    except (KazooException, OSError) as e:
        log.warning(f"Error while closing ZooKeeper session: {e!s}")
    else:
        log.debug("ZooKeeper session closed")
