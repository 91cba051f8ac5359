"""GCP connector factory.

Maps managed resource kinds to their GCP connectors.
``CONNECTOR_REGISTRY`` is consumed by :func:`policybind.factory.universal_connector`.
"""

from policybind.gcp.bucket_policy_member import BucketPolicyMemberConnector


# Connector registry for GCP
CONNECTOR_REGISTRY: dict[str, type] = {
    "bucket_policy_member": BucketPolicyMemberConnector,
}
