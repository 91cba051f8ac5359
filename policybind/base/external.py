"""External client blueprint: the four verbs a control loop drives."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from policybind.base.context import CycleContext


@dataclass(frozen=True)
class ExternalObservation:
    """What observe found.

    ``resource_exists=False`` tells the control loop to call ``create``;
    ``resource_up_to_date=False`` on an existing resource asks for ``update``.
    """

    resource_exists: bool = False
    resource_up_to_date: bool = False


@dataclass(frozen=True)
class ExternalCreation:
    """Result of a successful create."""


@dataclass(frozen=True)
class ExternalUpdate:
    """Result of a successful update."""


class ExternalClientBlueprint(ABC):
    """Lifecycle contract between a managed resource and the external system."""

    @abstractmethod
    def observe(self, mg: Any, ctx: CycleContext | None = None) -> ExternalObservation:
        """Report whether the external state matches *mg*."""

    @abstractmethod
    def create(self, mg: Any, ctx: CycleContext | None = None) -> ExternalCreation:
        """Bring the external state in line with *mg*."""

    @abstractmethod
    def update(self, mg: Any, ctx: CycleContext | None = None) -> ExternalUpdate:
        """Correct drift on an existing external resource."""

    @abstractmethod
    def delete(self, mg: Any, ctx: CycleContext | None = None) -> None:
        """Remove the external state described by *mg*."""


class ExternalConnectorBlueprint(ABC):
    """Builds an :class:`ExternalClientBlueprint` bound to credentials."""

    @abstractmethod
    def connect(self, mg: Any) -> ExternalClientBlueprint:
        """Return a client ready to reconcile *mg*."""
