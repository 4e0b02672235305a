"""
Dev Mode Transitions

A workload is either in its normal state or in dev mode. Entering dev mode
scales it to exactly one replica and forces a non-overlapping update
strategy; leaving it restores both from the Translation taken beforehand and
removes every marker the session added.

None of these functions talk to the cluster: they mutate the adapter in
memory and the caller persists it.
"""

import json
import logging

from ..errors import DevModeConflictError, MalformedManifestError
from ..kubernetes.serialization import to_dict, to_json, from_dict
from ..model import constants
from .fingerprint import has_been_changed as fingerprint_changed
from .base import App
from .translation import Translation

logger = logging.getLogger(__name__)

# Keys owned by a dev session (removed on exit whether or not they are set)
SESSION_ANNOTATIONS = (constants.VERSION_ANNOTATION, constants.REVISION_ANNOTATION)
SESSION_POD_ANNOTATIONS = (constants.TRANSLATION_ANNOTATION, constants.RESTART_ANNOTATION)
SESSION_LABELS = (constants.DEV_LABEL,)
SESSION_POD_LABELS = (constants.INTERACTIVE_DEV_LABEL, constants.DETACHED_DEV_LABEL)


def enter_dev_mode(app: App, translation: Translation) -> None:
    """
    Put a workload in dev mode.

    Idempotent for a given translation. The translation is stored on the pod
    template so exit_dev_mode() can run from a different process.

    Raises:
        DevModeConflictError: If another session already holds the workload
    """
    current = Translation.from_app(app)
    if current is not None and current.name != translation.name:
        raise DevModeConflictError(
            f"'{app.name}' is already in dev mode for session '{current.name}'",
            name=app.name,
            operation="enter_dev_mode"
        )

    for key, value in translation.annotations.items():
        app.set_annotation(key, value)
    app.set_annotation(constants.VERSION_ANNOTATION, translation.version)
    app.set_revision()
    app.set_label(constants.DEV_LABEL, "true")

    session_label = constants.INTERACTIVE_DEV_LABEL if translation.interactive else constants.DETACHED_DEV_LABEL
    app.set_pod_label(session_label, translation.name)

    pod_spec = app.pod_spec()
    if translation.tolerations:
        tolerations = list(pod_spec.tolerations or [])
        present = [to_dict(t) for t in tolerations]
        for toleration in translation.tolerations:
            model = from_dict(dict(toleration), "V1Toleration")
            if to_dict(model) not in present:
                tolerations.append(model)
                present.append(to_dict(model))
        pod_spec.tolerations = tolerations

    if current is None:
        app.set_pod_annotation(constants.TRANSLATION_ANNOTATION, translation.to_json())

    app.set_replicas(1)
    app.set_strategy(app.dev_mode_strategy())
    logger.info(f"[DEVMODE] {app.kind} '{app.name}' switched to dev mode (session '{translation.name}')")


def strip_session_markers(app: App) -> None:
    """Remove every label and annotation a dev session owns; missing keys are skipped."""
    for key in SESSION_ANNOTATIONS:
        app.delete_annotation(key)
    for key in SESSION_POD_ANNOTATIONS:
        app.delete_pod_annotation(key)
    for key in SESSION_LABELS:
        app.delete_label(key)
    for key in SESSION_POD_LABELS:
        app.delete_pod_label(key)


def exit_dev_mode(app: App, translation: Translation) -> None:
    """
    Restore a workload from its pre-dev-mode snapshot.

    Every session marker is removed; missing keys are skipped.
    """
    app.set_replicas(translation.replicas)
    app.set_strategy(dict(translation.strategy))

    strip_session_markers(app)
    for key in translation.annotations:
        app.delete_annotation(key)

    if translation.tolerations:
        added = [to_dict(from_dict(dict(t), "V1Toleration")) for t in translation.tolerations]
        pod_spec = app.pod_spec()
        remaining = [t for t in (pod_spec.tolerations or []) if to_dict(t) not in added]
        pod_spec.tolerations = remaining or None

    logger.info(f"[DEVMODE] {app.kind} '{app.name}' restored (replicas: {translation.replicas})")


def has_been_changed(app: App) -> bool:
    """Whether the workload drifted since kubedev last wrote it (advisory)."""
    return fingerprint_changed(app)


# =============================================================================
# Full-manifest backup (legacy)
# =============================================================================

def set_original_manifest(app: App) -> None:
    """
    Back up the whole workload into MANIFEST_ANNOTATION.

    The stale backup and the controller status are dropped before
    serializing. Nothing is written if serialization fails.
    """
    app.delete_annotation(constants.MANIFEST_ANNOTATION)
    app.clear_status()
    manifest = to_json(app.obj)
    app.set_annotation(constants.MANIFEST_ANNOTATION, manifest)


def restore_original(app: App) -> bool:
    """
    Replace the workload with the manifest backed up by set_original_manifest().

    Returns:
        True if a backup was found and restored, False if there was none

    Raises:
        MalformedManifestError: If the backup cannot be decoded or is not a
            manifest of this workload; the workload is left untouched
    """
    manifest = app.get_annotation(constants.MANIFEST_ANNOTATION)
    if not manifest:
        return False

    logger.info("deprecated devmodeoff behavior")
    try:
        data = json.loads(manifest)
        if not isinstance(data, dict):
            raise ValueError("manifest is not an object")
        if data.get("kind") not in (None, app.kind):
            raise ValueError(f"manifest is a {data['kind']}, not a {app.kind}")
        original = from_dict(data, app.model_type)
        if original.spec is None:
            raise ValueError("manifest has no spec")
        backup_name = original.metadata.name if original.metadata is not None else None
        if backup_name != app.name:
            raise ValueError(f"manifest is for '{backup_name or ''}', not '{app.name}'")
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedManifestError(
            f"malformed manifest: {e}",
            name=app.name,
            operation="restore_original"
        ) from e

    app.replace(original)
    return True
