"""Policy client blueprint."""

from abc import ABC, abstractmethod

from policybind.base.models import PolicyDocument


class PolicyClientBlueprint(ABC):
    """Abstract interface for reading and replacing a resource's access policy.

    The document is treated as an opaque versioned blob.  Implementations
    make exactly one remote call per method and never retry; retrying is
    the control loop's job.
    """

    @abstractmethod
    def fetch(self, resource_id: str, *, timeout: float | None = None) -> PolicyDocument:
        """Fetch the latest policy of *resource_id*.

        The richest policy representation is requested so that every
        effective binding is visible to the resolver.

        Raises:
            PolicyNotFoundError: The resource or policy does not exist.
            PermissionDeniedError: The caller may not read the policy.
            RemoteUnavailableError: Transient failure.
        """

    @abstractmethod
    def replace(
        self,
        resource_id: str,
        document: PolicyDocument,
        *,
        timeout: float | None = None,
    ) -> PolicyDocument:
        """Replace the policy of *resource_id* with *document*.

        *document* must carry the etag of the fetch it was derived from.

        Returns:
            The policy as stored after the write.

        Raises:
            MissingVersionTokenError: *document* has no etag.
            VersionConflictError: The policy changed since it was fetched.
            PermissionDeniedError: The caller may not write the policy.
            RemoteUnavailableError: Transient failure.
        """
