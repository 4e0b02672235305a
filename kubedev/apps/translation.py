"""
Translation

A Translation is the immutable snapshot taken right before a workload enters
dev mode. It holds everything exit_dev_mode() needs to put the workload back:
replica count, update strategy and the session metadata that was added.

The snapshot is also written to the pod template (TRANSLATION_ANNOTATION) so
a later, independent invocation can revert the workload.
"""

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import DevModeConflictError, MalformedManifestError
from ..kubernetes.serialization import to_dict, from_dict
from ..model import Dev, constants
from .base import App

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Translation:
    interactive: bool
    name: str
    version: str
    annotations: Mapping[str, str]
    tolerations: Tuple[Mapping[str, Any], ...]
    replicas: int
    strategy: Mapping[str, Any]
    # Lookup only: the adapter the snapshot was taken from
    app: Optional[App] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations)))
        object.__setattr__(self, "tolerations", tuple(MappingProxyType(dict(t)) for t in self.tolerations))
        object.__setattr__(self, "strategy", MappingProxyType(dict(self.strategy)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interactive": self.interactive,
            "name": self.name,
            "version": self.version,
            "annotations": dict(self.annotations),
            "tolerations": [dict(t) for t in self.tolerations],
            "replicas": self.replicas,
            "strategy": _thaw(self.strategy),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_app(cls, app: App) -> Optional["Translation"]:
        """
        Read the snapshot stored on a workload.

        Returns:
            The stored Translation, or None when the workload carries none

        Raises:
            MalformedManifestError: If the stored snapshot cannot be decoded
        """
        raw = app.get_pod_annotation(constants.TRANSLATION_ANNOTATION)
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return cls(
                interactive=bool(data.get("interactive", True)),
                name=data["name"],
                version=data.get("version", constants.TRANSLATION_VERSION),
                annotations=data.get("annotations") or {},
                tolerations=data.get("tolerations") or [],
                replicas=int(data["replicas"]),
                strategy=data.get("strategy") or {},
                app=app,
            )
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            raise MalformedManifestError(
                f"malformed translation stored in '{app.name}': {e}",
                name=app.name,
                operation="read_translation"
            ) from e


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


def new_translation(app: App, dev: Dev) -> Translation:
    """
    Snapshot a workload before it enters dev mode.

    Must run before any dev-mode mutation: afterwards the replica count and
    strategy on the object are the dev-mode ones, not the originals.

    Raises:
        DevModeConflictError: If the workload is already in dev mode
    """
    if app.is_dev_mode_on():
        raise DevModeConflictError(
            f"'{app.name}' is already in dev mode, its current state cannot be used as the original",
            name=app.name,
            operation="new_translation"
        )

    # Only tolerations the pod spec lacks are recorded, so reverting removes
    # exactly what dev mode added
    existing = [to_dict(t) for t in (app.pod_spec().tolerations or [])]
    tolerations = [t for t in dev.tolerations if to_dict(from_dict(t, "V1Toleration")) not in existing]

    translation = Translation(
        interactive=dev.interactive,
        name=dev.name,
        version=constants.TRANSLATION_VERSION,
        annotations=dev.annotations,
        tolerations=tolerations,
        replicas=app.replicas,
        strategy=app.get_strategy(),
        app=app,
    )
    logger.debug(f"[DEVMODE] Snapshot of {app.kind} '{app.name}': replicas={translation.replicas}")
    return translation
