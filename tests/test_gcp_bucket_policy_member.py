"""Tests for the bucket policy member reconcile adapter."""

from unittest.mock import patch, MagicMock
import pytest

from google.auth import exceptions as auth_exceptions

from policybind.base.config import GCPConfig
from policybind.base.context import CycleContext
from policybind.base.exceptions import (
    ConnectError,
    CycleCancelledError,
    PermissionDeniedError,
    PolicyNotFoundError,
    ReconcileError,
    RemoteUnavailableError,
    TypeMismatchError,
    VersionConflictError,
    WriteConflictError,
)
from policybind.base.external import ExternalCreation, ExternalObservation, ExternalUpdate
from policybind.base.models import PolicyDocument
from policybind.base.policy_client import PolicyClientBlueprint
from policybind.base.resources import BucketPolicyMember
from policybind.gcp.bucket_policy_member import (
    BucketPolicyMemberConnector,
    BucketPolicyMemberExternal,
)


ROLE = "roles/storage.objectViewer"
MEMBER = "user:a@example.com"


def make_mg(deletion_requested=False):
    return BucketPolicyMember(
        name="readers",
        spec={"for_provider": {"bucket": "my-bucket", "role": ROLE, "member": MEMBER}},
        deletion_requested=deletion_requested,
    )


def policy(bindings=None, etag="BwXYZ"):
    return PolicyDocument(
        etag=etag,
        version=3,
        bindings={role: frozenset(m) for role, m in (bindings or {}).items()},
    )


@pytest.fixture
def svc():
    client = MagicMock(spec=PolicyClientBlueprint)
    yield BucketPolicyMemberExternal(client, logger=MagicMock()), client


# --- type checks ---

class TestTypeMismatch:
    @pytest.mark.parametrize("verb", ["observe", "create", "update", "delete"])
    def test_rejects_other_kinds(self, svc, verb):
        inst, client = svc
        with pytest.raises(TypeMismatchError):
            getattr(inst, verb)({"bucket": "my-bucket"})
        client.fetch.assert_not_called()


# --- observe ---

class TestObserve:
    def test_up_to_date(self, svc):
        inst, client = svc
        mg = make_mg()
        client.fetch.return_value = policy({ROLE: {MEMBER}})
        obs = inst.observe(mg)
        assert obs == ExternalObservation(resource_exists=True, resource_up_to_date=True)
        client.replace.assert_not_called()
        assert mg.status.get_condition("Ready").reason == "Available"

    def test_drift(self, svc):
        inst, client = svc
        mg = make_mg()
        client.fetch.return_value = policy({ROLE: {"user:other@example.com"}})
        obs = inst.observe(mg)
        assert obs.resource_exists is False
        client.replace.assert_not_called()
        assert mg.status.get_condition("Ready") is None

    def test_not_found_reports_absent(self, svc):
        inst, client = svc
        client.fetch.side_effect = PolicyNotFoundError("gone")
        assert inst.observe(make_mg()) == ExternalObservation()

    def test_fetch_error_wrapped(self, svc):
        inst, client = svc
        client.fetch.side_effect = PermissionDeniedError("denied")
        with pytest.raises(ReconcileError) as exc_info:
            inst.observe(make_mg())
        assert exc_info.value.stage == "observe-fetch"
        assert isinstance(exc_info.value.cause, PermissionDeniedError)
        assert exc_info.value.retryable is False


# --- create / update ---

class TestCreate:
    def test_binds_member(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({"roles/owner": {"user:z@example.com"}})
        assert inst.create(make_mg()) == ExternalCreation()

        client.fetch.assert_called_once_with("my-bucket", timeout=None)
        resource_id, written = client.replace.call_args[0]
        assert resource_id == "my-bucket"
        assert written.etag == "BwXYZ"
        assert written.members(ROLE) == {MEMBER}
        assert written.members("roles/owner") == {"user:z@example.com"}

    def test_already_bound_is_noop(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {MEMBER}})
        inst.create(make_mg())
        client.replace.assert_not_called()

    def test_conflict_is_distinct_and_retryable(self, svc):
        inst, client = svc
        client.fetch.return_value = policy()
        client.replace.side_effect = VersionConflictError("stale etag")
        with pytest.raises(WriteConflictError) as exc_info:
            inst.create(make_mg())
        assert exc_info.value.stage == "create-write"
        assert exc_info.value.retryable is True
        client.replace.assert_called_once()

    def test_other_write_failure_not_conflict(self, svc):
        inst, client = svc
        client.fetch.return_value = policy()
        client.replace.side_effect = RemoteUnavailableError("down")
        with pytest.raises(ReconcileError) as exc_info:
            inst.create(make_mg())
        assert not isinstance(exc_info.value, WriteConflictError)
        assert exc_info.value.stage == "create-write"
        assert exc_info.value.retryable is True

    def test_fetch_failure(self, svc):
        inst, client = svc
        client.fetch.side_effect = PolicyNotFoundError("no bucket")
        with pytest.raises(ReconcileError) as exc_info:
            inst.create(make_mg())
        assert exc_info.value.stage == "create-fetch"
        client.replace.assert_not_called()

    def test_each_call_fetches_fresh(self, svc):
        inst, client = svc
        client.fetch.side_effect = [policy(etag="one"), policy(etag="two")]
        client.replace.side_effect = [VersionConflictError("stale"), None]
        with pytest.raises(WriteConflictError):
            inst.create(make_mg())
        inst.create(make_mg())
        assert client.fetch.call_count == 2
        assert [c[0][1].etag for c in client.replace.call_args_list] == ["one", "two"]

    def test_update_delegates_to_create(self, svc):
        inst, client = svc
        client.fetch.return_value = policy()
        assert inst.update(make_mg()) == ExternalUpdate()
        client.replace.assert_called_once()

    def test_update_surfaces_create_errors(self, svc):
        inst, client = svc
        client.fetch.return_value = policy()
        client.replace.side_effect = VersionConflictError("stale")
        with pytest.raises(WriteConflictError):
            inst.update(make_mg())


# --- delete ---

class TestDelete:
    def test_unbinds_and_prunes(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {MEMBER}, "roles/owner": {"user:z@example.com"}})
        assert inst.delete(make_mg(deletion_requested=True)) is None
        written = client.replace.call_args[0][1]
        assert ROLE not in written.bindings
        assert written.members("roles/owner") == {"user:z@example.com"}
        assert written.etag == "BwXYZ"

    def test_keeps_other_members(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {MEMBER, "user:b@example.com"}})
        inst.delete(make_mg())
        assert client.replace.call_args[0][1].members(ROLE) == {"user:b@example.com"}

    def test_not_bound_is_noop(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {"user:b@example.com"}})
        inst.delete(make_mg())
        client.replace.assert_not_called()

    def test_not_found_is_noop(self, svc):
        inst, client = svc
        client.fetch.side_effect = PolicyNotFoundError("gone")
        inst.delete(make_mg())
        client.replace.assert_not_called()

    def test_fetch_failure(self, svc):
        inst, client = svc
        client.fetch.side_effect = RemoteUnavailableError("down")
        with pytest.raises(ReconcileError) as exc_info:
            inst.delete(make_mg())
        assert exc_info.value.stage == "delete-fetch"

    def test_conflict(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {MEMBER}})
        client.replace.side_effect = VersionConflictError("stale")
        with pytest.raises(WriteConflictError) as exc_info:
            inst.delete(make_mg())
        assert exc_info.value.stage == "delete-write"

    def test_write_failure(self, svc):
        inst, client = svc
        client.fetch.return_value = policy({ROLE: {MEMBER}})
        client.replace.side_effect = PermissionDeniedError("denied")
        with pytest.raises(ReconcileError) as exc_info:
            inst.delete(make_mg())
        assert exc_info.value.stage == "delete-write"
        assert exc_info.value.retryable is False


# --- cancellation ---

class TestCancellation:
    def test_cancelled_before_fetch(self, svc):
        inst, client = svc
        ctx = CycleContext()
        ctx.cancel()
        with pytest.raises(CycleCancelledError) as exc_info:
            inst.create(make_mg(), ctx)
        assert exc_info.value.stage == "create-fetch"
        client.fetch.assert_not_called()

    def test_cancelled_between_fetch_and_write(self, svc):
        inst, client = svc
        ctx = CycleContext(timeout=30)

        def fetch(*args, **kwargs):
            ctx.cancel()
            return policy()

        client.fetch.side_effect = fetch
        with pytest.raises(CycleCancelledError) as exc_info:
            inst.create(make_mg(), ctx)
        assert exc_info.value.stage == "create-write"
        client.replace.assert_not_called()

    def test_expired_deadline(self, svc):
        inst, client = svc
        with pytest.raises(CycleCancelledError):
            inst.delete(make_mg(), CycleContext(timeout=0))
        client.fetch.assert_not_called()

    def test_remaining_time_passed_as_timeout(self, svc):
        inst, client = svc
        client.fetch.return_value = policy()
        inst.create(make_mg(), CycleContext(timeout=30))
        fetch_timeout = client.fetch.call_args[1]["timeout"]
        write_timeout = client.replace.call_args[1]["timeout"]
        assert 0 < write_timeout <= fetch_timeout <= 30

    def test_no_deadline_defers_to_client_timeout(self, svc):
        inst, client = svc
        ctx = CycleContext()

        def fetch(*args, **kwargs):
            ctx.cancel()
            return policy()

        client.fetch.side_effect = fetch
        with pytest.raises(CycleCancelledError):
            inst.create(make_mg(), ctx)
        assert client.fetch.call_args[1]["timeout"] is None
        client.replace.assert_not_called()


# --- connector ---

class TestConnector:
    def test_connect_builds_fresh_client(self):
        with patch("policybind.gcp.bucket_policy_member.BucketPolicyClient") as MockClient:
            connector = BucketPolicyMemberConnector(GCPConfig(project_id="p"))
            first = connector.connect(make_mg())
            second = connector.connect(make_mg())
        assert isinstance(first, BucketPolicyMemberExternal)
        assert first is not second
        assert MockClient.call_count == 2
        assert MockClient.call_args[0][0].project_id == "p"

    def test_connect_rejects_other_kinds(self):
        connector = BucketPolicyMemberConnector(GCPConfig(project_id="p"))
        with pytest.raises(TypeMismatchError):
            connector.connect(object())

    def test_connect_wraps_credential_errors(self):
        with patch("policybind.gcp.storage_policy.gcs") as mock_gcs:
            mock_gcs.Client.side_effect = auth_exceptions.DefaultCredentialsError(
                "Your default credentials were not found"
            )
            connector = BucketPolicyMemberConnector(GCPConfig(project_id="p"))
            with pytest.raises(ConnectError) as exc_info:
                connector.connect(make_mg())
        assert exc_info.value.stage == "connect"
        assert isinstance(exc_info.value.__cause__, auth_exceptions.DefaultCredentialsError)
        assert "default credentials" in str(exc_info.value)
