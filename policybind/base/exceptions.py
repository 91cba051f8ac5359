"""
Policybind exception hierarchy.

Remote failures raised by a policy client inherit from
:class:`PolicyClientError`.  The reconcile adapter wraps them in a
:class:`ReconcileError` that names the stage (``observe-fetch``,
``create-write`` ...) where the failure happened.
"""

from __future__ import annotations


# ── Base ──────────────────────────────────────────────────────────────
class PolicyBindError(Exception):
    """Root exception for all policybind errors."""


# ── Policy client ─────────────────────────────────────────────────────
class PolicyClientError(PolicyBindError):
    """Base exception for policy fetch / replace operations."""

    retryable: bool = False


class PolicyNotFoundError(PolicyClientError):
    """The resource or its policy does not exist."""


class PermissionDeniedError(PolicyClientError):
    """The caller may not read or write the policy."""


class RemoteUnavailableError(PolicyClientError):
    """Transient failure talking to the policy store."""

    retryable = True


class VersionConflictError(PolicyClientError):
    """The policy changed since it was read; the write was rejected."""

    retryable = True


class MissingVersionTokenError(PolicyClientError):
    """A write was attempted with a document that carries no etag."""


# ── Managed resource ──────────────────────────────────────────────────
class TypeMismatchError(PolicyBindError):
    """The managed resource is not of the kind this adapter handles."""


class ConnectError(PolicyBindError):
    """The client for the external system could not be built."""

    stage = "connect"


# ── Reconcile ─────────────────────────────────────────────────────────
class CycleCancelledError(PolicyBindError):
    """The reconcile cycle was cancelled or ran past its deadline."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"reconcile cycle cancelled before {stage}")
        self.stage = stage


class ReconcileError(PolicyBindError):
    """A policy client failure annotated with the stage it happened in."""

    def __init__(self, stage: str, cause: PolicyClientError) -> None:
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.cause = cause

    @property
    def retryable(self) -> bool:
        return self.cause.retryable


class WriteConflictError(ReconcileError):
    """Another writer changed the policy between our fetch and replace."""
