"""Provider-agnostic blueprints, value types and core utilities.

Every provider adapter builds on the blueprints defined here.  The
membership resolver and the policy document model are usable on their own.
"""

from .policy_client import PolicyClientBlueprint
from .external import (
    ExternalClientBlueprint,
    ExternalConnectorBlueprint,
    ExternalCreation,
    ExternalObservation,
    ExternalUpdate,
)
from .models import DesiredBinding, PolicyDocument
from .membership import ensure_absent, ensure_present
from .context import CycleContext, background
from .resources import BucketPolicyMember
from .supported_services import existing_kinds, existing_cloud_providers


__all__ = [
    "PolicyClientBlueprint",
    "ExternalClientBlueprint",
    "ExternalConnectorBlueprint",
    "ExternalCreation",
    "ExternalObservation",
    "ExternalUpdate",
    "DesiredBinding",
    "PolicyDocument",
    "ensure_absent",
    "ensure_present",
    "CycleContext",
    "background",
    "BucketPolicyMember",
    "existing_kinds",
    "existing_cloud_providers",
]
