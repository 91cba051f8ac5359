"""
Single-pass, level-triggered reconciliation.

:class:`Reconciler` runs one cycle for one managed resource: observe the
external state, then create, update, delete or do nothing.  Scheduling,
backoff and retry belong to whatever calls :meth:`Reconciler.reconcile`;
every error is raised to that caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from policybind.base.context import CycleContext, background
from policybind.base.external import ExternalConnectorBlueprint, ExternalObservation


class ReconcileAction(str, Enum):
    """What a reconcile cycle did to the external system."""

    NONE = "none"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ReconcileResult:
    action: ReconcileAction
    observation: ExternalObservation


class Reconciler:
    """Drives an external client through one observe-then-act cycle.

    Attributes:
        connector: Builds a fresh external client for every cycle.
    """

    def __init__(self, connector: ExternalConnectorBlueprint) -> None:
        self.connector = connector

    def reconcile(self, mg: Any, ctx: CycleContext | None = None) -> ReconcileResult:
        """Run one reconcile cycle for *mg*.

        Args:
            mg: Managed resource; ``deletion_requested`` marks it for removal.
            ctx: Cycle cancellation/deadline context.

        Returns:
            The action taken and the observation it was based on.
        """
        ctx = ctx or background()
        external = self.connector.connect(mg)
        observation = external.observe(mg, ctx)

        if getattr(mg, "deletion_requested", False):
            if not observation.resource_exists:
                return ReconcileResult(ReconcileAction.NONE, observation)
            external.delete(mg, ctx)
            return ReconcileResult(ReconcileAction.DELETED, observation)

        if not observation.resource_exists:
            external.create(mg, ctx)
            return ReconcileResult(ReconcileAction.CREATED, observation)

        if not observation.resource_up_to_date:
            external.update(mg, ctx)
            return ReconcileResult(ReconcileAction.UPDATED, observation)

        return ReconcileResult(ReconcileAction.NONE, observation)
