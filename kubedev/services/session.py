"""
Dev Session Workflows

activate() and deactivate() run a full read-mutate-write cycle against the
cluster for one workload:

1. Resolve the workload named by the dev manifest (Deployment first, then
   StatefulSet) and warn if it changed since kubedev last wrote it
2. Apply the transition on a fresh copy, retrying on version conflicts
3. Record the fingerprint of what the API server stored
"""

import logging
from typing import Dict, Optional

from ..apps import (
    App,
    Translation,
    enter_dev_mode,
    exit_dev_mode,
    fingerprint,
    has_been_changed,
    new_translation,
    restore_original,
    strip_session_markers,
)
from ..apps.factory import LOOKUP_ORDER
from ..errors import (
    DevModeConflictError,
    KubeDevError,
    MalformedManifestError,
    NotFoundError,
)
from ..kubernetes.client import KubernetesClient
from ..model import Dev, constants

logger = logging.getLogger(__name__)


async def get_app(client: KubernetesClient, dev: Dev) -> App:
    """
    Fetch the workload a dev manifest refers to.

    Raises:
        NotFoundError: If no supported workload has that name
    """
    namespace = dev.resolved_namespace()
    for kind in LOOKUP_ORDER:
        try:
            return await client.get(kind, dev.name, namespace)
        except NotFoundError:
            logger.debug(f"No {kind} named '{dev.name}' in '{namespace}'")
    raise NotFoundError(
        f"'{dev.name}' not found in namespace '{namespace}'",
        name=dev.name,
        operation="get_app"
    )


def warn_if_changed(app: App) -> bool:
    """Log a warning when the workload drifted since the last kubedev write."""
    changed = has_been_changed(app)
    if changed:
        logger.warning(
            f"{app.kind} '{app.name}' was modified outside kubedev since it was last updated, "
            f"those changes may be lost"
        )
    return changed


def translation_for(app: App, dev: Dev) -> Translation:
    """
    Snapshot to use for entering dev mode.

    A workload already in dev mode for the same session keeps its stored
    snapshot: the live object no longer shows the original replicas and
    strategy.
    """
    stored = Translation.from_app(app)
    if stored is None:
        if app.is_dev_mode_on():
            raise DevModeConflictError(
                f"'{app.name}' is in dev mode but has no record of its original state, run 'kubedev down' first",
                name=app.name,
                operation="activate"
            )
        return new_translation(app, dev)

    if stored.name != dev.name:
        raise DevModeConflictError(
            f"'{app.name}' is already in dev mode for session '{stored.name}'",
            name=app.name,
            operation="activate"
        )
    return stored


async def record_fingerprint(client: KubernetesClient, app: App) -> Optional[App]:
    """
    Store the fingerprint of the object the API server returned.

    The transition it follows has already landed, so a failed write is
    logged and the drift check simply has nothing to compare against.
    """
    try:
        return await client.patch_annotations(app, {constants.FINGERPRINT_ANNOTATION: fingerprint(app)})
    except KubeDevError as e:
        logger.warning(f"[DEVMODE] Could not record fingerprint of {app.kind} '{app.name}': {e}")
        return None


async def activate(client: KubernetesClient, dev: Dev) -> Translation:
    """
    Put the workload named by `dev` in dev mode.

    Returns:
        The Translation that deactivate() will restore from
    """
    app = await get_app(client, dev)
    warn_if_changed(app)

    result: Dict[str, Translation] = {}

    def mutate(current: App) -> None:
        translation = translation_for(current, dev)
        enter_dev_mode(current, translation)
        result["translation"] = translation

    updated = await client.update_with_retry(app.kind, app.name, app.namespace, mutate)
    await record_fingerprint(client, updated)
    logger.info(f"[DEVMODE] ✅ Dev mode active for {updated.kind} '{updated.name}'")
    return result["translation"]


def _stored_translation(app: App) -> Optional[Translation]:
    try:
        return Translation.from_app(app)
    except MalformedManifestError as e:
        logger.warning(f"[DEVMODE] Ignoring unreadable dev mode record on {app.kind} '{app.name}': {e}")
        return None


async def deactivate(client: KubernetesClient, dev: Dev) -> bool:
    """
    Take the workload named by `dev` out of dev mode.

    Workloads backed up with the legacy full-manifest annotation are
    replaced by that manifest; all others are reverted from their stored
    Translation. A workload marked as in dev mode whose Translation is
    missing or unreadable only gets its session markers removed, since its
    original replicas and strategy are unknown.

    Returns:
        True if the workload was taken out of dev mode, False if it was not
        in dev mode
    """
    app = await get_app(client, dev)
    warn_if_changed(app)

    outcome = {"restored": False, "markers_only": False}

    def mutate(current: App):
        outcome.update(restored=False, markers_only=False)
        live_version = current.resource_version
        if restore_original(current):
            current.resource_version = live_version
            outcome["restored"] = True
            return None

        has_record = bool(current.get_pod_annotation(constants.TRANSLATION_ANNOTATION))
        translation = _stored_translation(current)
        if translation is None:
            if not current.is_dev_mode_on() and not has_record:
                return False
            strip_session_markers(current)
            outcome["markers_only"] = True
            return None

        exit_dev_mode(current, translation)
        outcome["restored"] = True
        return None

    updated = await client.update_with_retry(app.kind, app.name, app.namespace, mutate)
    if not outcome["restored"] and not outcome["markers_only"]:
        logger.info(f"[DEVMODE] {app.kind} '{app.name}' is not in dev mode, nothing to restore")
        return False

    await record_fingerprint(client, updated)
    if outcome["markers_only"]:
        logger.warning(
            f"[DEVMODE] ⚠️ Dev mode markers removed from {updated.kind} '{updated.name}', but its "
            f"replicas and update strategy could not be restored (currently {updated.replicas} "
            f"replica(s)), set them by hand"
        )
        return True

    logger.info(f"[DEVMODE] ✅ Dev mode deactivated for {updated.kind} '{updated.name}'")
    return True
