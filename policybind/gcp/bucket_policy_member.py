"""GCP bucket IAM policy member: connector and reconcile adapter.

Keeps one member bound to one role in a bucket's IAM policy.  Every verb
fetches the policy fresh, diffs it with the membership resolver and, only
if something must change, writes it back once with the etag of that fetch.
"""

from __future__ import annotations

import logging
from typing import Any

from google.auth import exceptions as auth_exceptions

from policybind.base.config import GCPConfig, ReconcileConfig
from policybind.base.context import CycleContext, background
from policybind.base.exceptions import (
    ConnectError,
    PolicyClientError,
    PolicyNotFoundError,
    ReconcileError,
    TypeMismatchError,
    VersionConflictError,
    WriteConflictError,
)
from policybind.base.external import (
    ExternalClientBlueprint,
    ExternalConnectorBlueprint,
    ExternalCreation,
    ExternalObservation,
    ExternalUpdate,
)
from policybind.base.logger import PolicyBindLogger, pb_logger
from policybind.base.membership import ensure_absent, ensure_present
from policybind.base.models import DesiredBinding, PolicyDocument
from policybind.base.policy_client import PolicyClientBlueprint
from policybind.base.resources import BucketPolicyMember, available
from policybind.gcp.storage_policy import BucketPolicyClient

ERR_NOT_BUCKET_POLICY_MEMBER = "managed resource is not a GCP BucketPolicyMember"

STAGE_OBSERVE_FETCH = "observe-fetch"
STAGE_CREATE_FETCH = "create-fetch"
STAGE_CREATE_WRITE = "create-write"
STAGE_DELETE_FETCH = "delete-fetch"
STAGE_DELETE_WRITE = "delete-write"


def desired_binding(mg: Any) -> DesiredBinding:
    """Validate *mg* and return the binding it declares."""
    if not isinstance(mg, BucketPolicyMember):
        raise TypeMismatchError(ERR_NOT_BUCKET_POLICY_MEMBER)
    return mg.desired_binding()


class BucketPolicyMemberConnector(ExternalConnectorBlueprint):
    """Builds a :class:`BucketPolicyMemberExternal` from explicit credentials.

    Holds only configuration; each :meth:`connect` creates a new client.
    """

    def __init__(
        self,
        config: GCPConfig,
        settings: ReconcileConfig | None = None,
        logger: PolicyBindLogger | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or ReconcileConfig()
        self.logger = logger or pb_logger

    def connect(self, mg: Any) -> BucketPolicyMemberExternal:
        desired_binding(mg)
        try:
            policy_client = BucketPolicyClient(self.config, self.settings)
        except auth_exceptions.GoogleAuthError as e:
            raise ConnectError(f"connect: cannot create storage client: {e}") from e
        return BucketPolicyMemberExternal(policy_client, logger=self.logger)


class BucketPolicyMemberExternal(ExternalClientBlueprint):
    """Observe / create / update / delete for one bucket policy member.

    Nothing is retried or cached here: a failed call is raised to the
    control loop wrapped in a :class:`ReconcileError` naming the stage.
    """

    def __init__(
        self,
        policy_client: PolicyClientBlueprint,
        logger: PolicyBindLogger | None = None,
    ) -> None:
        self.policy_client = policy_client
        self.logger = logger or pb_logger

    def _fetch(self, binding: DesiredBinding, ctx: CycleContext, stage: str) -> PolicyDocument:
        ctx.check(stage)
        self.logger.log_binding(logging.DEBUG, "Fetching IAM policy", binding, stage)
        try:
            return self.policy_client.fetch(binding.resource_id, timeout=ctx.remaining())
        except PolicyClientError as e:
            raise ReconcileError(stage, e) from e

    def _write(
        self,
        binding: DesiredBinding,
        document: PolicyDocument,
        ctx: CycleContext,
        stage: str,
    ) -> None:
        ctx.check(stage)
        try:
            self.policy_client.replace(
                binding.resource_id, document, timeout=ctx.remaining()
            )
        except VersionConflictError as e:
            self.logger.log_binding(
                logging.WARNING, "IAM policy changed concurrently", binding, stage
            )
            raise WriteConflictError(stage, e) from e
        except PolicyClientError as e:
            raise ReconcileError(stage, e) from e
        self.logger.log_binding(logging.INFO, "IAM policy updated", binding, stage)

    def observe(self, mg: Any, ctx: CycleContext | None = None) -> ExternalObservation:
        binding = desired_binding(mg)
        ctx = ctx or background()
        try:
            document = self._fetch(binding, ctx, STAGE_OBSERVE_FETCH)
        except ReconcileError as e:
            if isinstance(e.cause, PolicyNotFoundError):
                self.logger.log_binding(
                    logging.DEBUG, "IAM policy not found", binding, STAGE_OBSERVE_FETCH
                )
                return ExternalObservation()
            raise

        _, changed = ensure_present(document, binding)
        if changed:
            return ExternalObservation()

        mg.status.set_conditions(available())
        return ExternalObservation(resource_exists=True, resource_up_to_date=True)

    def create(self, mg: Any, ctx: CycleContext | None = None) -> ExternalCreation:
        binding = desired_binding(mg)
        ctx = ctx or background()
        document = self._fetch(binding, ctx, STAGE_CREATE_FETCH)

        updated, changed = ensure_present(document, binding)
        if not changed:
            self.logger.log_binding(
                logging.DEBUG, "Member already bound", binding, STAGE_CREATE_WRITE
            )
            return ExternalCreation()

        self._write(binding, updated, ctx, STAGE_CREATE_WRITE)
        return ExternalCreation()

    def update(self, mg: Any, ctx: CycleContext | None = None) -> ExternalUpdate:
        # Correcting drift is the same action as the initial bind.
        self.create(mg, ctx)
        return ExternalUpdate()

    def delete(self, mg: Any, ctx: CycleContext | None = None) -> None:
        binding = desired_binding(mg)
        ctx = ctx or background()
        try:
            document = self._fetch(binding, ctx, STAGE_DELETE_FETCH)
        except ReconcileError as e:
            if isinstance(e.cause, PolicyNotFoundError):
                self.logger.log_binding(
                    logging.DEBUG, "IAM policy not found", binding, STAGE_DELETE_FETCH
                )
                return
            raise

        updated, changed = ensure_absent(document, binding)
        if not changed:
            self.logger.log_binding(
                logging.DEBUG, "Member already unbound", binding, STAGE_DELETE_WRITE
            )
            return

        self._write(binding, updated, ctx, STAGE_DELETE_WRITE)
