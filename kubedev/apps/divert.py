"""
Divert

A divert clone is a per-user copy of a workload that receives only the
traffic routed to that user. The clone keeps the original pod template and
the deployed-by label, and nothing else of its identity: it gets a new name,
a fresh uid/resource version and a selector built from a single divert label,
so its pods never match the original's selector.

The original workload is never modified.
"""

import hashlib
import logging
import re
from typing import TYPE_CHECKING

from ..errors import (
    CloneNameCollisionError,
    DivertError,
    KubeDevError,
)
from ..model import constants
from .base import App

if TYPE_CHECKING:
    from ..kubernetes.client import KubernetesClient

logger = logging.getLogger(__name__)

# DNS-1123 label limit
MAX_NAME_LENGTH = 63

# Kubernetes label value syntax, non-empty
LABEL_VALUE_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")


def validate_username(username: str) -> None:
    """
    Reject usernames that cannot serve as the divert label value.

    The username is the only key of the clone's selector, so an empty or
    invalid one would either be refused by the API server or match objects
    that belong to nobody.

    Raises:
        DivertError: If the username is not a non-empty label value
    """
    if not username or len(username) > MAX_NAME_LENGTH or not LABEL_VALUE_RE.match(username):
        raise DivertError(
            f"invalid divert username '{username}': must be 1-{MAX_NAME_LENGTH} alphanumeric "
            f"characters, '-', '_' or '.', starting and ending with an alphanumeric",
            name=username,
            operation="divert"
        )


def divert_name(username: str, name: str) -> str:
    """
    Name of the divert clone of `name` for `username`.

    Deterministic, so diverting again updates the same clone. Names that had
    to be sanitized or cut to the Kubernetes limit get a hash of the full
    name appended to keep different (username, name) pairs apart.

    Examples:
        >>> divert_name("alice", "web")
        'alice-web'
    """
    full = f"{username}-{name}"
    safe = full.lower()
    safe = re.sub(r"[^a-z0-9-]", "-", safe)
    safe = re.sub(r"-{2,}", "-", safe).strip("-")

    if safe != full or len(safe) > MAX_NAME_LENGTH:
        digest = hashlib.sha256(full.encode("utf-8")).hexdigest()[:8]
        safe = f"{safe[:MAX_NAME_LENGTH - 9].rstrip('-')}-{digest}"
    return safe


def translate_divert(username: str, app: App) -> App:
    """
    Build the divert clone of a workload without touching the original.

    Raises:
        DivertError: If the workload is itself a divert clone or the
            username is not a valid label value
    """
    validate_username(username)
    if app.get_label(constants.DIVERT_LABEL) or constants.DIVERT_LABEL in app.selector():
        raise DivertError(
            f"'{app.name}' is a divert clone and cannot be diverted again",
            name=app.name,
            operation="divert"
        )

    clone = app.copy()
    metadata = clone.obj.metadata
    metadata.name = divert_name(username, app.name)
    metadata.uid = None
    metadata.resource_version = None
    metadata.creation_timestamp = None
    metadata.generation = None
    metadata.managed_fields = None
    metadata.self_link = None

    labels = {constants.DIVERT_LABEL: username}
    deployed_by = app.get_label(constants.DEPLOYED_BY_LABEL)
    if deployed_by:
        labels[constants.DEPLOYED_BY_LABEL] = deployed_by
    clone.replace_labels(labels)

    clone.set_selector({constants.DIVERT_LABEL: username})
    clone.replace_pod_labels({constants.DIVERT_LABEL: username})
    clone.set_annotation(constants.AUTO_CREATE_ANNOTATION, constants.UP_COMMAND)
    clone.clear_status()
    return clone


async def divert(client: "KubernetesClient", username: str, app: App) -> App:
    """
    Create or update the divert clone of a workload for a user.

    The original is re-read first so the clone is built from current state.
    The clone is created directly; when its name is already taken, the
    stored object is only overwritten if it is this user's clone, checked
    again on every update attempt.

    Returns:
        The clone as stored by the API server

    Raises:
        NotFoundError: If the original workload no longer exists
        CloneNameCollisionError: If the clone name belongs to another owner
        DivertError: If the clone could not be created or updated
    """
    validate_username(username)
    original = await client.get(app.kind, app.name, app.namespace)
    clone = translate_divert(username, original)
    logger.info(f"[DIVERT] Diverting {original.kind} '{original.name}' for '{username}' as '{clone.name}'")

    def check_owner(existing: App) -> None:
        if existing.get_label(constants.DIVERT_LABEL) != username:
            raise CloneNameCollisionError(
                f"'{clone.name}' already exists and is not the divert of '{original.name}' for '{username}'",
                name=clone.name,
                operation="divert"
            )

    try:
        result = await client.deploy(clone, check=check_owner)
    except CloneNameCollisionError:
        raise
    except KubeDevError as e:
        raise DivertError(
            f"error creating divert {clone.kind.lower()} '{clone.name}': {e}",
            name=clone.name,
            operation="divert"
        ) from e

    logger.info(f"[DIVERT] ✅ {clone.kind} '{clone.name}' ready")
    return result
