"""GCP provider implementations."""

from .bucket_policy_member import (
    BucketPolicyMemberConnector,
    BucketPolicyMemberExternal,
)
from .storage_policy import BucketPolicyClient

__all__ = [
    "BucketPolicyClient",
    "BucketPolicyMemberConnector",
    "BucketPolicyMemberExternal",
]
