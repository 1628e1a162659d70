"""Tests for the lock recipe building blocks"""

from unittest.mock import Mock

import pytest

from zk_trylock.core.config import RetryConfig
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
from zk_trylock.lock.models import LockStatus
from zk_trylock.lock.recipe import (
    ChildEnumerator,
    LockDecisionEngine,
    PathEnsurer,
    SessionCandidateResolver,
    find_session_node,
    session_prefix,
)


def _transient():
    return TransientConnectivityError("Connection to ZooKeeper lost", operation="test")


class TestPathEnsurer:
    """Test lock directory setup"""

    def test_existing_directory_is_left_alone(self, store, no_sleep):
        store.ensemble.nodes["/cron"] = None
        store.ensemble.nodes["/cron/job"] = None

        PathEnsurer(store).ensure("/cron/job")

        assert store.count("create") == 0
        no_sleep.assert_not_called()

    def test_creates_missing_directory_with_parents(self, store, no_sleep):
        PathEnsurer(store).ensure("/cron/nightly/job")

        assert "/cron/nightly/job" in store.ensemble.nodes
        assert store.ensemble.nodes["/cron/nightly/job"] is None
        assert store.count("create") == 1

    def test_lost_creation_race_counts_as_ready(self, no_sleep):
        store = Mock()
        store.exists.return_value = False
        store.create.side_effect = NodeAlreadyExistsError("Node already exists", operation="create")

        PathEnsurer(store).ensure("/cron/job")

        store.create.assert_called_once_with("/cron/job", makepath=True)

    def test_transient_create_error_rechecks_before_retrying(self, no_sleep):
        """A create that timed out may have succeeded; look before creating again"""
        store = Mock()
        store.exists.side_effect = [False, True]
        store.create.side_effect = _transient()

        PathEnsurer(store).ensure("/cron/job")

        assert store.create.call_count == 1
        assert store.exists.call_count == 2

    def test_unreachable_store_exhausts_budget(self, no_sleep):
        store = Mock()
        store.exists.side_effect = _transient()

        with pytest.raises(LockPathSetupError) as exc_info:
            PathEnsurer(store, retry=RetryConfig(max_attempts=3, delay_seconds=0.5)).ensure("/cron/job")

        assert exc_info.value.attempts == 3
        assert exc_info.value.message == "Could not create /cron/job"
        assert store.exists.call_count == 4
        assert no_sleep.call_count == 3
        no_sleep.assert_called_with(0.5)

    def test_recovers_on_final_attempt(self, no_sleep):
        store = Mock()
        store.exists.side_effect = [_transient(), _transient(), True]

        PathEnsurer(store, retry=RetryConfig(max_attempts=2, delay_seconds=0.0)).ensure("/cron/job")

        store.create.assert_not_called()

    def test_non_transient_error_is_fatal_immediately(self, no_sleep):
        store = Mock()
        store.exists.side_effect = CoordinationError("ZooKeeper operation failed", operation="exists")

        with pytest.raises(LockPathSetupError):
            PathEnsurer(store).ensure("/cron/job")

        assert store.exists.call_count == 1
        no_sleep.assert_not_called()

    def test_missing_parent_keeps_creating(self, no_sleep):
        store = Mock()
        store.exists.return_value = False
        store.create.side_effect = [NodeMissingError("Node does not exist"), "/cron/job"]

        PathEnsurer(store).ensure("/cron/job")

        assert store.create.call_count == 2


class TestChildEnumerator:
    """Test bounded listing of the lock directory"""

    def test_returns_listing(self, store):
        store.ensemble.nodes["/job"] = None
        store.ensemble.nodes["/job/x-a-0000000000"] = 1

        assert ChildEnumerator(store).list_children("/job") == ["x-a-0000000000"]

    def test_retries_transient_errors(self, store, no_sleep):
        store.ensemble.nodes["/job"] = None
        store.fail("get_children", _transient(), _transient())

        assert ChildEnumerator(store).list_children("/job") == []
        assert store.count("get_children") == 3
        assert no_sleep.call_count == 2

    def test_exhausted_retries_raise_enumeration_error(self, store, no_sleep):
        store.ensemble.nodes["/job"] = None
        store.fail("get_children", *[_transient() for _ in range(5)])

        with pytest.raises(ChildEnumerationError) as exc_info:
            ChildEnumerator(store).list_children("/job")

        assert exc_info.value.message == "Could not enumerate folder /job"
        assert store.count("get_children") == 5

    def test_missing_directory_is_not_retried(self, store, no_sleep):
        with pytest.raises(ChildEnumerationError):
            ChildEnumerator(store).list_children("/job")

        assert store.count("get_children") == 1
        no_sleep.assert_not_called()


class TestSessionCandidates:
    """Test session prefix naming and candidate registration"""

    def test_session_prefix_is_sixteen_hex_digits(self):
        assert session_prefix(0x1F) == "x-000000000000001f-"

    def test_negative_session_id_is_rendered_unsigned(self):
        assert session_prefix(-1) == "x-ffffffffffffffff-"

    def test_find_session_node(self):
        children = ["x-0000000000000002-0000000000", "x-000000000000001f-0000000001"]
        assert find_session_node(children, "x-000000000000001f-") == "x-000000000000001f-0000000001"
        assert find_session_node(children, "x-0000000000000003-") is None

    def test_reuses_existing_candidate(self):
        store = Mock()
        children = ["x-000000000000001f-0000000003"]

        name = SessionCandidateResolver(store).resolve("/job", 0x1F, children)

        assert name == "x-000000000000001f-0000000003"
        store.create.assert_not_called()

    def test_creates_ephemeral_sequential_candidate(self, store):
        store.ensemble.nodes["/job"] = None

        name = SessionCandidateResolver(store).resolve("/job", 0x1F, [])

        assert name == "x-000000000000001f-0000000000"
        assert store.ensemble.nodes["/job/x-000000000000001f-0000000000"] == 0x1F

    def test_create_failure_is_not_retried(self):
        store = Mock()
        store.create.side_effect = _transient()

        with pytest.raises(CandidateCreateError) as exc_info:
            SessionCandidateResolver(store).resolve("/job", 0x1F, [])

        assert store.create.call_count == 1
        store.create.assert_called_with("/job/x-000000000000001f-", ephemeral=True, sequence=True)
        assert "Could not create locking node" in exc_info.value.message


class TestLockDecisionEngine:
    """Test the locked-or-blocked decision"""

    ORDERED = ["x-a-0000000000", "x-b-0000000001", "x-c-0000000002"]

    def test_lowest_candidate_is_locked(self):
        outcome = LockDecisionEngine().decide("/job", self.ORDERED, "x-a-0000000000", attempts=1)

        assert outcome.status == LockStatus.LOCKED
        assert outcome.acquired
        assert outcome.node_path == "/job/x-a-0000000000"
        assert outcome.predecessor is None
        assert outcome.attempts == 1

    def test_blocked_reports_immediate_predecessor_and_holder(self):
        outcome = LockDecisionEngine().decide("/job", self.ORDERED, "x-c-0000000002")

        assert outcome.status == LockStatus.BLOCKED
        assert outcome.predecessor_path == "/job/x-b-0000000001"
        assert outcome.holder_path == "/job/x-a-0000000000"

    def test_missing_own_node_without_floor_is_inconsistent(self):
        with pytest.raises(LockStateError):
            LockDecisionEngine().decide("/job", ["x-a-0000000003"], "x-b-0000000001")

    def test_empty_listing_is_inconsistent(self):
        with pytest.raises(LockStateError):
            LockDecisionEngine().decide("/job", [], "x-b-0000000001")
