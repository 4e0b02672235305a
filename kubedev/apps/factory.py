"""
Adapter Factory

Picks the App implementation for a kubernetes object or kind name.
"""

import logging
from typing import Any, Dict, Type

from kubernetes import client

from ..model import constants
from .base import App
from .deployments import DeploymentApp
from .statefulsets import StatefulSetApp

logger = logging.getLogger(__name__)

APPS: Dict[str, Type[App]] = {
    constants.DEPLOYMENT: DeploymentApp,
    constants.STATEFULSET: StatefulSetApp,
}

# Lookup order when the dev manifest does not say which kind to use
LOOKUP_ORDER = (constants.DEPLOYMENT, constants.STATEFULSET)


def app_class(kind: str) -> Type[App]:
    """
    Raises:
        ValueError: If the kind is not supported
    """
    try:
        return APPS[kind]
    except KeyError:
        valid = ", ".join(APPS)
        raise ValueError(f"Unsupported workload kind: '{kind}'. Valid kinds: {valid}") from None


def new_app(obj: Any) -> App:
    """Wrap a V1Deployment or V1StatefulSet in its adapter."""
    if isinstance(obj, client.V1Deployment):
        return DeploymentApp(obj)
    if isinstance(obj, client.V1StatefulSet):
        return StatefulSetApp(obj)
    raise ValueError(f"Unsupported workload object: {type(obj).__name__}")
