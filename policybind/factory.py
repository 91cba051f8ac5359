"""Universal connector factory.

Provides :func:`universal_connector`, the single entry-point for building
the connector that reconciles a kind of managed resource.  The function
dispatches to provider-specific registries based on ``cloud_provider`` and
validates the credentials config before anything talks to the network.
"""

from __future__ import annotations

from policybind.base import (
    ExternalConnectorBlueprint,
    existing_kinds,
    existing_cloud_providers,
)
from policybind.base.config import ReconcileConfig, validate_config
from policybind.base.logger import PolicyBindLogger
from policybind.gcp.factory import CONNECTOR_REGISTRY as GCP_CONNECTORS


# Nested factory registry: cloud_provider -> connector registry
_FACTORY_REGISTRY: dict[str, dict[str, type]] = {
    "gcp": GCP_CONNECTORS,
}


def universal_connector(
    kind: existing_kinds,
    cloud_provider: existing_cloud_providers,
    config: dict,
    settings: dict | None = None,
    logger: PolicyBindLogger | None = None,
) -> ExternalConnectorBlueprint:
    """
    Create a connector for a managed resource kind on a cloud provider.
    Args:
        kind: The managed resource kind (e.g. 'bucket_policy_member').
        cloud_provider: The cloud provider (e.g. 'gcp').
        config: Credentials configuration for the provider.
        settings: Optional reconcile settings (timeouts, policy version).
        logger: Optional logger handed to the adapters.
    Returns:
        A connector whose ``connect`` builds a fresh external client.
    Raises:
        ValueError: If the cloud provider or kind is not supported.
    """
    if cloud_provider not in _FACTORY_REGISTRY:
        raise ValueError(f"Unsupported cloud provider: {cloud_provider}")

    provider_connectors = _FACTORY_REGISTRY[cloud_provider]

    if kind not in provider_connectors:
        raise ValueError(
            f"Unsupported kind '{kind}' for provider '{cloud_provider}'"
        )

    connector_class = provider_connectors[kind]
    configObj = validate_config(cloud_provider, config)
    settingsObj = ReconcileConfig(**(settings or {}))
    return connector_class(configObj, settingsObj, logger)
