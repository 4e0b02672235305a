"""
Dev Manifest

The dev descriptor names the workload to flip into dev mode and the
session-level settings applied while it runs there.

Example kubedev.yml:

    name: web
    namespace: shop
    annotations:
      team: payments
    tolerations:
      - key: dedicated
        operator: Equal
        value: dev
        effect: NoSchedule
"""

import logging
from pathlib import Path
from typing import Dict, List, Any, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..config import get_settings
from ..errors import KubeDevError

logger = logging.getLogger(__name__)


class Dev(BaseModel):
    """A development session descriptor."""

    name: str
    namespace: str = ""
    interactive: bool = True
    annotations: Dict[str, str] = Field(default_factory=dict)
    tolerations: List[Dict[str, Any]] = Field(default_factory=list)

    def resolved_namespace(self) -> str:
        """Namespace from the manifest, else the configured default."""
        return self.namespace or get_settings().k8s_default_namespace


def read_dev(path: Union[str, Path]) -> Dev:
    """
    Load a dev descriptor from a YAML file.

    Raises:
        KubeDevError: If the file is missing, is not YAML or fails validation
    """
    path = Path(path)
    try:
        raw = path.read_text()
    except FileNotFoundError as e:
        raise KubeDevError(f"dev manifest '{path}' does not exist", operation="read_dev") from e

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise KubeDevError(f"dev manifest '{path}' is not valid YAML: {e}", operation="read_dev") from e

    if not isinstance(data, dict):
        raise KubeDevError(f"dev manifest '{path}' must be a mapping", operation="read_dev")

    try:
        dev = Dev(**data)
    except ValidationError as e:
        raise KubeDevError(f"invalid dev manifest '{path}': {e}", operation="read_dev") from e

    logger.debug(f"Loaded dev manifest {path} for '{dev.name}'")
    return dev
