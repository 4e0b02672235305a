"""
Errors raised by kubedev.

Every error carries the workload name and the operation that failed so a
caller can tell what to look at without parsing the message.
"""

from typing import Optional


class KubeDevError(Exception):
    """Base class for all kubedev errors."""

    def __init__(self, message: str, name: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.name = name
        self.operation = operation


class NotFoundError(KubeDevError):
    """The workload does not exist in the cluster."""


class ConflictError(KubeDevError):
    """An object with the same name already exists (create)."""


class VersionConflictError(KubeDevError):
    """The object changed since it was read (stale resource version on update)."""


class TransportError(KubeDevError):
    """The Kubernetes API call failed or timed out."""


class MalformedManifestError(KubeDevError):
    """A manifest stored in an annotation could not be deserialized."""


class CloneNameCollisionError(KubeDevError):
    """A divert clone name is already used by a workload owned by someone else."""


class DevModeConflictError(KubeDevError):
    """The workload is already in dev mode for a different session."""


class DivertError(KubeDevError):
    """Creating or applying a divert clone failed."""
