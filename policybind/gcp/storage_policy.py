"""GCP Cloud Storage implementation of the policy client blueprint."""

from __future__ import annotations

from google.api_core import exceptions as gcp_exceptions
from google.api_core.iam import Policy
from google.auth import exceptions as auth_exceptions
from google.cloud import storage as gcs

from policybind.base.config import IAM_POLICY_VERSION, GCPConfig, ReconcileConfig
from policybind.base.exceptions import (
    MissingVersionTokenError,
    PermissionDeniedError,
    PolicyClientError,
    PolicyNotFoundError,
    RemoteUnavailableError,
    VersionConflictError,
)
from policybind.base.models import PolicyDocument
from policybind.base.policy_client import PolicyClientBlueprint


def _handle_error(e: Exception, message: str):
    """Raise a mapped exception or a generic PolicyClientError."""
    if isinstance(e, gcp_exceptions.NotFound):
        raise PolicyNotFoundError(message) from e
    if isinstance(e, (gcp_exceptions.Forbidden, gcp_exceptions.Unauthorized)):
        raise PermissionDeniedError(message) from e
    # A stale etag is rejected with 412 by the JSON API and 409/ABORTED by gRPC.
    if isinstance(e, (gcp_exceptions.PreconditionFailed, gcp_exceptions.Conflict)):
        raise VersionConflictError(message) from e
    if isinstance(
        e,
        (
            gcp_exceptions.ServerError,
            gcp_exceptions.TooManyRequests,
            gcp_exceptions.RetryError,
            auth_exceptions.TransportError,
            OSError,
        ),
    ):
        raise RemoteUnavailableError(message) from e
    raise PolicyClientError(message) from e


class BucketPolicyClient(PolicyClientBlueprint):
    """Reads and replaces a GCS bucket's IAM policy.

    The SDK's built-in retry is disabled on both calls.

    Attributes:
        client: Cloud Storage client.
        requested_policy_version: IAM policy version asked for on fetch (always 3).
        default_timeout: Timeout in seconds used when the caller gives none.
    """

    def __init__(self, config: GCPConfig, settings: ReconcileConfig | None = None) -> None:
        """Initialize the Cloud Storage client.

        Args:
            config: GCP configuration with project ID and optional credentials.
            settings: Reconcile settings; defaults apply when omitted.
        """
        settings = settings or ReconcileConfig()
        self.client = gcs.Client(
            project=config.project_id,
            credentials=config.credentials,
        )
        self.requested_policy_version: int = IAM_POLICY_VERSION
        self.default_timeout: float = settings.call_timeout_seconds

    def _timeout(self, timeout: float | None) -> float:
        return self.default_timeout if timeout is None else timeout

    def fetch(self, resource_id: str, *, timeout: float | None = None) -> PolicyDocument:
        """Fetch the bucket's IAM policy at the configured policy version."""
        try:
            bucket = self.client.bucket(resource_id)
            policy = bucket.get_iam_policy(
                requested_policy_version=self.requested_policy_version,
                timeout=self._timeout(timeout),
                retry=None,
            )
        except (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError,
                auth_exceptions.GoogleAuthError, OSError) as e:
            _handle_error(e, f"Failed to get IAM policy of bucket '{resource_id}'.")
        return PolicyDocument.from_api_repr(policy.to_api_repr())

    def replace(
        self,
        resource_id: str,
        document: PolicyDocument,
        *,
        timeout: float | None = None,
    ) -> PolicyDocument:
        """Write *document* as the bucket's IAM policy, guarded by its etag."""
        if not document.etag:
            raise MissingVersionTokenError(
                f"Refusing to set IAM policy of bucket '{resource_id}' without an etag."
            )
        try:
            bucket = self.client.bucket(resource_id)
            stored = bucket.set_iam_policy(
                Policy.from_api_repr(document.to_api_repr()),
                timeout=self._timeout(timeout),
                retry=None,
            )
        except (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError,
                auth_exceptions.GoogleAuthError, OSError) as e:
            _handle_error(e, f"Failed to set IAM policy of bucket '{resource_id}'.")
        return PolicyDocument.from_api_repr(stored.to_api_repr())
