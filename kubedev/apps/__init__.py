"""
Workload adapters and the dev-mode / divert logic built on them.

- App: uniform read/write surface over Deployments and StatefulSets
- Translation: pre-dev-mode snapshot used to revert
- modes: enter_dev_mode / exit_dev_mode and the legacy manifest backup
- fingerprint: drift detection
- divert: per-user clones with a disjoint selector
"""

from .base import App
from .deployments import DeploymentApp
from .statefulsets import StatefulSetApp
from .factory import new_app, app_class
from .translation import Translation, new_translation
from .modes import (
    enter_dev_mode,
    exit_dev_mode,
    has_been_changed,
    restore_original,
    set_original_manifest,
    strip_session_markers,
)
from .fingerprint import fingerprint, record_fingerprint
from .divert import divert, divert_name, translate_divert, validate_username

__all__ = [
    "App",
    "DeploymentApp",
    "StatefulSetApp",
    "new_app",
    "app_class",
    "Translation",
    "new_translation",
    "enter_dev_mode",
    "exit_dev_mode",
    "has_been_changed",
    "restore_original",
    "set_original_manifest",
    "strip_session_markers",
    "fingerprint",
    "record_fingerprint",
    "divert",
    "divert_name",
    "translate_divert",
    "validate_username",
]
