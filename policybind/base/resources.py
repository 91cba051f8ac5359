"""
Managed resource models.

A :class:`BucketPolicyMember` is the declared intent handed to the adapter
by the resource layer: "member M holds role R on bucket B".  It is validated
here once and turned into a :class:`~policybind.base.models.DesiredBinding`
before reaching the reconcile core.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from policybind.base.models import DesiredBinding

# Members that are not of the "<type>:<id>" form.
_SPECIAL_MEMBERS = frozenset({"allUsers", "allAuthenticatedUsers"})

CONDITION_AVAILABLE = "Ready"
REASON_AVAILABLE = "Available"


class Condition(BaseModel):
    """A status condition, e.g. ``Ready=True (Available)``."""

    type: str
    status: Literal["True", "False", "Unknown"]
    reason: str
    last_transition_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def available() -> Condition:
    """Condition set when the binding is observed in place."""
    return Condition(type=CONDITION_AVAILABLE, status="True", reason=REASON_AVAILABLE)


class BucketPolicyMemberParameters(BaseModel):
    """Desired binding of a single member to a role on a bucket."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    bucket: str = Field(min_length=1, description="Bucket whose policy is managed")
    role: str = Field(min_length=1, description="Role, e.g. 'roles/storage.objectViewer'")
    member: str = Field(min_length=1, description="Member, e.g. 'user:a@example.com'")

    @field_validator("member")
    @classmethod
    def check_member(cls, value: str) -> str:
        if value in _SPECIAL_MEMBERS:
            return value
        kind, sep, ident = value.partition(":")
        if not sep or not kind or not ident:
            raise ValueError(
                f"member must look like '<type>:<id>' or be one of "
                f"{sorted(_SPECIAL_MEMBERS)}, got {value!r}"
            )
        return value


class BucketPolicyMemberSpec(BaseModel):
    for_provider: BucketPolicyMemberParameters


class ResourceStatus(BaseModel):
    conditions: list[Condition] = Field(default_factory=list)

    def set_conditions(self, *conditions: Condition) -> None:
        """Set conditions, replacing any existing condition of the same type.

        The transition time is kept when the status does not change.
        """
        for new in conditions:
            for i, old in enumerate(self.conditions):
                if old.type != new.type:
                    continue
                if old.status == new.status and old.reason == new.reason:
                    break
                self.conditions[i] = new
                break
            else:
                self.conditions.append(new)

    def get_condition(self, condition_type: str) -> Condition | None:
        return next((c for c in self.conditions if c.type == condition_type), None)


class BucketPolicyMember(BaseModel):
    """Declared intent for one bucket IAM policy membership."""

    name: str
    spec: BucketPolicyMemberSpec
    status: ResourceStatus = Field(default_factory=ResourceStatus)
    deletion_requested: bool = False

    def desired_binding(self) -> DesiredBinding:
        params = self.spec.for_provider
        return DesiredBinding(
            resource_id=params.bucket, role=params.role, member=params.member
        )
