"""
Workload Adapter

App wraps one Kubernetes controller object (Deployment, StatefulSet) behind a
uniform surface so the dev-mode and divert logic never branches on kind.

Maps that were never initialized read as empty and are created on first
write; deleting a key that is not there is a no-op.
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from kubernetes import client

from ..errors import KubeDevError
from ..model import constants

logger = logging.getLogger(__name__)


class App(ABC):
    """
    Abstract base class for workload adapters.

    Subclasses wrap a concrete kubernetes model and implement the one
    kind-specific piece: how the update strategy is read and written.
    """

    #: Workload kind ("Deployment", "StatefulSet")
    kind: str = ""

    #: kubernetes client model name used for (de)serialization
    model_type: str = ""

    def __init__(self, obj: Any):
        self._obj = obj
        if self._obj.metadata is None:
            self._obj.metadata = client.V1ObjectMeta()

    @property
    def obj(self) -> Any:
        """The wrapped kubernetes model."""
        return self._obj

    def replace(self, obj: Any) -> None:
        """Swap the wrapped object for another one of the same kind."""
        if obj.metadata is None:
            obj.metadata = client.V1ObjectMeta()
        self._obj = obj

    def copy(self) -> "App":
        """Deep copy of this adapter and its object."""
        return type(self)(copy.deepcopy(self._obj))

    # =========================================================================
    # IDENTITY
    # =========================================================================

    @property
    def name(self) -> str:
        return self._obj.metadata.name or ""

    @property
    def namespace(self) -> str:
        return self._obj.metadata.namespace or ""

    @property
    def resource_version(self) -> Optional[str]:
        return self._obj.metadata.resource_version

    @resource_version.setter
    def resource_version(self, value: Optional[str]) -> None:
        self._obj.metadata.resource_version = value

    @property
    def replicas(self) -> int:
        # The API server defaults an unset replica count to 1
        replicas = self._obj.spec.replicas
        return 1 if replicas is None else replicas

    def set_replicas(self, replicas: int) -> None:
        self._obj.spec.replicas = replicas

    # =========================================================================
    # LABELS AND ANNOTATIONS
    # =========================================================================

    def _template(self) -> client.V1PodTemplateSpec:
        if self._obj.spec.template is None:
            self._obj.spec.template = client.V1PodTemplateSpec()
        if self._obj.spec.template.metadata is None:
            self._obj.spec.template.metadata = client.V1ObjectMeta()
        return self._obj.spec.template

    def _pod_metadata(self) -> Optional[client.V1ObjectMeta]:
        # Read path: never allocates a missing template
        template = self._obj.spec.template
        return template.metadata if template is not None else None

    def _pod_map(self, attr: str) -> Dict[str, str]:
        metadata = self._pod_metadata()
        return (getattr(metadata, attr) if metadata is not None else None) or {}

    @property
    def labels(self) -> Dict[str, str]:
        return dict(self._obj.metadata.labels or {})

    @property
    def annotations(self) -> Dict[str, str]:
        return dict(self._obj.metadata.annotations or {})

    @property
    def pod_labels(self) -> Dict[str, str]:
        return dict(self._pod_map("labels"))

    @property
    def pod_annotations(self) -> Dict[str, str]:
        return dict(self._pod_map("annotations"))

    def get_label(self, key: str) -> str:
        return (self._obj.metadata.labels or {}).get(key, "")

    def get_annotation(self, key: str) -> str:
        return (self._obj.metadata.annotations or {}).get(key, "")

    def get_pod_label(self, key: str) -> str:
        return self._pod_map("labels").get(key, "")

    def get_pod_annotation(self, key: str) -> str:
        return self._pod_map("annotations").get(key, "")

    def set_label(self, key: str, value: str) -> None:
        if self._obj.metadata.labels is None:
            self._obj.metadata.labels = {}
        self._obj.metadata.labels[key] = value

    def set_annotation(self, key: str, value: str) -> None:
        if self._obj.metadata.annotations is None:
            self._obj.metadata.annotations = {}
        self._obj.metadata.annotations[key] = value

    def set_pod_label(self, key: str, value: str) -> None:
        metadata = self._template().metadata
        if metadata.labels is None:
            metadata.labels = {}
        metadata.labels[key] = value

    def set_pod_annotation(self, key: str, value: str) -> None:
        metadata = self._template().metadata
        if metadata.annotations is None:
            metadata.annotations = {}
        metadata.annotations[key] = value

    def replace_labels(self, labels: Dict[str, str]) -> None:
        self._obj.metadata.labels = dict(labels)

    def replace_pod_labels(self, labels: Dict[str, str]) -> None:
        self._template().metadata.labels = dict(labels)

    @staticmethod
    def _pop(metadata: Optional[client.V1ObjectMeta], attr: str, key: str) -> None:
        # A map emptied by a delete goes back to unset, as it was before the
        # key was added
        values = getattr(metadata, attr) if metadata is not None else None
        if values and key in values:
            del values[key]
            if not values:
                setattr(metadata, attr, None)

    def delete_label(self, key: str) -> None:
        self._pop(self._obj.metadata, "labels", key)

    def delete_annotation(self, key: str) -> None:
        self._pop(self._obj.metadata, "annotations", key)

    def delete_pod_label(self, key: str) -> None:
        self._pop(self._pod_metadata(), "labels", key)

    def delete_pod_annotation(self, key: str) -> None:
        self._pop(self._pod_metadata(), "annotations", key)

    def pod_spec(self) -> client.V1PodSpec:
        """Mutable view of the embedded pod specification."""
        template = self._template()
        if template.spec is None:
            template.spec = client.V1PodSpec(containers=[])
        return template.spec

    # =========================================================================
    # DEV MODE MARKERS
    # =========================================================================

    def is_dev_mode_on(self) -> bool:
        """True when the workload carries the dev-mode marker label."""
        return bool(self.get_label(constants.DEV_LABEL))

    def set_revision(self) -> None:
        """
        Record the current rollout revision as the pre-dev-mode revision.

        An existing record is kept: it belongs to the session that is still
        active and overwriting it would lose the rollback point.
        """
        if self.get_annotation(constants.REVISION_ANNOTATION):
            return
        revision = self.get_annotation(constants.DEPLOYMENT_REVISION_ANNOTATION)
        if revision:
            self.set_annotation(constants.REVISION_ANNOTATION, revision)

    def set_last_built_annotation(self) -> None:
        """Stamp the pod template so the controller rolls out new pods."""
        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")
        self.set_pod_annotation(constants.LAST_BUILT_ANNOTATION, now)

    def check_condition_errors(self) -> None:
        """
        Raise if the controller reports a failure condition.

        Quota and replica creation failures only show up as conditions on
        the workload status, never as API errors.
        """
        status = self._obj.status
        for condition in (getattr(status, "conditions", None) or []):
            if condition.type == "ReplicaFailure" and condition.status == "True":
                message = condition.message or condition.reason or "replica failure"
                if "exceeded quota" in message:
                    raise KubeDevError(
                        f"quota exceeded, you have reached the maximum number of resources: {message}",
                        name=self.name,
                        operation="check_condition_errors"
                    )
                raise KubeDevError(message, name=self.name, operation="check_condition_errors")

    # =========================================================================
    # KIND-SPECIFIC
    # =========================================================================

    @abstractmethod
    def get_strategy(self) -> Dict[str, Any]:
        """Current update strategy as plain data (wire format)."""
        pass

    @abstractmethod
    def set_strategy(self, strategy: Optional[Dict[str, Any]]) -> None:
        """Restore an update strategy previously returned by get_strategy()."""
        pass

    @abstractmethod
    def dev_mode_strategy(self) -> Dict[str, Any]:
        """The non-overlapping update strategy forced while in dev mode."""
        pass

    def clear_status(self) -> None:
        """Drop transient controller status."""
        self._obj.status = None

    def selector(self) -> Dict[str, str]:
        """The workload's matchLabels selector."""
        selector = self._obj.spec.selector
        if selector is None:
            return {}
        return dict(selector.match_labels or {})

    def set_selector(self, match_labels: Dict[str, str]) -> None:
        """Replace the workload's pod selector."""
        self._obj.spec.selector = client.V1LabelSelector(match_labels=dict(match_labels))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.namespace}/{self.name}>"
