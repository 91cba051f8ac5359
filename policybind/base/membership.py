"""
Membership resolution.

Pure functions deciding whether a ``(role, member)`` pair is present in a
:class:`~policybind.base.models.PolicyDocument` and producing the document
with the pair added or removed.  The input document is never mutated; the
returned one keeps the input's etag and version so it can be written back.
"""

from __future__ import annotations

from dataclasses import replace

from policybind.base.models import DesiredBinding, PolicyDocument


def _bindings_of(doc: PolicyDocument) -> dict[str, frozenset[str]]:
    # A document without a bindings map is treated as empty.
    return dict(doc.bindings or {})


def ensure_present(
    doc: PolicyDocument, binding: DesiredBinding
) -> tuple[PolicyDocument, bool]:
    """Return *doc* with ``binding.member`` holding ``binding.role``.

    Returns:
        ``(doc, False)`` if the member already holds the role, otherwise
        ``(new_doc, True)``.
    """
    bindings = _bindings_of(doc)
    members = bindings.get(binding.role, frozenset())
    if binding.member in members:
        return doc, False
    bindings[binding.role] = members | {binding.member}
    return replace(doc, bindings=bindings), True


def ensure_absent(
    doc: PolicyDocument, binding: DesiredBinding
) -> tuple[PolicyDocument, bool]:
    """Return *doc* without ``binding.member`` in ``binding.role``.

    A role left with no members is dropped from the mapping.

    Returns:
        ``(doc, False)`` if the member did not hold the role, otherwise
        ``(new_doc, True)``.
    """
    bindings = _bindings_of(doc)
    members = bindings.get(binding.role, frozenset())
    if binding.member not in members:
        return doc, False
    remaining = members - {binding.member}
    if remaining:
        bindings[binding.role] = remaining
    else:
        del bindings[binding.role]
    return replace(doc, bindings=bindings), True
