"""Policybind: keep one member bound to one role in a resource's IAM policy.

Entry point for the library.  Import :func:`universal_connector` to build
the adapter for a managed resource kind and drive it with a
:class:`Reconciler`::

    from policybind import BucketPolicyMember, Reconciler, universal_connector

    connector = universal_connector("bucket_policy_member", "gcp", {"project_id": "p"})
    Reconciler(connector).reconcile(member)
"""

from .base import (
    BucketPolicyMember,
    CycleContext,
    DesiredBinding,
    PolicyDocument,
    ensure_absent,
    ensure_present,
)
from .factory import universal_connector
from .reconciler import ReconcileAction, ReconcileResult, Reconciler

__all__ = [
    "BucketPolicyMember",
    "CycleContext",
    "DesiredBinding",
    "PolicyDocument",
    "ensure_absent",
    "ensure_present",
    "universal_connector",
    "ReconcileAction",
    "ReconcileResult",
    "Reconciler",
]
