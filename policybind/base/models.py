"""Value types shared by the policy client, the resolver and the adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class DesiredBinding:
    """One ``(role, member)`` pair that should hold on *resource_id*."""

    resource_id: str
    role: str
    member: str


@dataclass(frozen=True)
class PolicyDocument:
    """A fetched access policy.

    ``bindings`` maps a role to the set of members holding it.  Bindings
    that carry a condition are not interpreted; they ride along in
    ``conditional_bindings`` so a write never drops them.

    ``etag`` is the version token of the read that produced the document.
    Only documents returned by a policy client's ``fetch`` carry one.
    """

    etag: str | None = None
    version: int | None = None
    bindings: Mapping[str, frozenset[str]] = field(default_factory=dict)
    conditional_bindings: tuple[dict[str, Any], ...] = ()

    def members(self, role: str) -> frozenset[str]:
        return (self.bindings or {}).get(role, frozenset())

    @classmethod
    def from_api_repr(cls, resource: Mapping[str, Any] | None) -> PolicyDocument:
        """Build a document from the JSON shape used by the IAM APIs.

        Missing or malformed ``bindings`` are read as an empty mapping.
        Repeated entries for the same role are merged.
        """
        resource = resource or {}
        bindings: dict[str, set[str]] = {}
        conditional: list[dict[str, Any]] = []
        for entry in resource.get("bindings") or []:
            if not isinstance(entry, Mapping) or not entry.get("role"):
                continue
            if entry.get("condition"):
                conditional.append(dict(entry))
                continue
            members = entry.get("members") or ()
            bindings.setdefault(entry["role"], set()).update(members)
        return cls(
            etag=resource.get("etag"),
            version=resource.get("version"),
            bindings={role: frozenset(m) for role, m in bindings.items() if m},
            conditional_bindings=tuple(conditional),
        )

    def to_api_repr(self) -> dict[str, Any]:
        """Render the document for a ``setIamPolicy`` call.

        Roles with no members are omitted; roles and members are sorted so
        the payload is stable.
        """
        resource: dict[str, Any] = {}
        if self.etag is not None:
            resource["etag"] = self.etag
        if self.version is not None:
            resource["version"] = self.version
        bindings = [
            {"role": role, "members": sorted(members)}
            for role, members in sorted((self.bindings or {}).items())
            if members
        ]
        bindings.extend(dict(b) for b in self.conditional_bindings)
        if bindings:
            resource["bindings"] = bindings
        return resource
