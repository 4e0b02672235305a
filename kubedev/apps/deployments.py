"""Deployment adapter."""

from typing import Any, Dict, Optional

from kubernetes import client

from ..kubernetes.serialization import to_dict, from_dict
from ..model import constants
from .base import App


class DeploymentApp(App):
    """App backed by an apps/v1 Deployment."""

    kind = constants.DEPLOYMENT
    model_type = "V1Deployment"

    def __init__(self, deployment: client.V1Deployment):
        super().__init__(deployment)

    def get_strategy(self) -> Dict[str, Any]:
        strategy = self._obj.spec.strategy
        if strategy is None:
            return {}
        return to_dict(strategy)

    def set_strategy(self, strategy: Optional[Dict[str, Any]]) -> None:
        if not strategy:
            self._obj.spec.strategy = None
            return
        self._obj.spec.strategy = from_dict(strategy, "V1DeploymentStrategy")

    def dev_mode_strategy(self) -> Dict[str, Any]:
        # Never run the old and the new pod side by side
        return {"type": "Recreate"}
