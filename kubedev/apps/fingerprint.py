"""
Change Detection

kubedev records a fingerprint of a workload's configuration every time it
writes the workload. Comparing against a fresh fingerprint tells whether
someone else changed the workload since. The check is advisory: callers warn,
they do not refuse to proceed.
"""

import hashlib
import json
import logging

from ..kubernetes.serialization import to_dict
from ..model import constants
from .base import App

logger = logging.getLogger(__name__)

# Bookkeeping that changes without any user edit
IGNORED_ANNOTATIONS = frozenset({
    constants.FINGERPRINT_ANNOTATION,
    constants.REVISION_ANNOTATION,
    constants.DEPLOYMENT_REVISION_ANNOTATION,
    "kubectl.kubernetes.io/last-applied-configuration",
})


def fingerprint(app: App) -> str:
    """sha256 over labels, annotations and spec of the workload."""
    annotations = {k: v for k, v in app.annotations.items() if k not in IGNORED_ANNOTATIONS}
    payload = {
        "kind": app.kind,
        "labels": app.labels,
        "annotations": annotations,
        "spec": to_dict(app.obj.spec),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def record_fingerprint(app: App) -> str:
    """Store the current fingerprint on the workload and return it."""
    value = fingerprint(app)
    app.set_annotation(constants.FINGERPRINT_ANNOTATION, value)
    return value


def has_been_changed(app: App) -> bool:
    """
    True when the workload differs from the last recorded fingerprint.

    A workload kubedev never wrote has nothing to compare against and is
    reported as unchanged.
    """
    recorded = app.get_annotation(constants.FINGERPRINT_ANNOTATION)
    if not recorded:
        return False
    changed = recorded != fingerprint(app)
    if changed:
        logger.debug(f"{app.kind} '{app.name}' fingerprint changed since last write")
    return changed
