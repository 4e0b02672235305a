"""StatefulSet adapter."""

from typing import Any, Dict, Optional

from kubernetes import client

from ..kubernetes.serialization import to_dict, from_dict
from ..model import constants
from .base import App


class StatefulSetApp(App):
    """
    App backed by an apps/v1 StatefulSet.

    StatefulSets have no Recreate strategy. A RollingUpdate without partition
    over a single replica terminates the old pod before its replacement
    starts, which is the same guarantee.
    """

    kind = constants.STATEFULSET
    model_type = "V1StatefulSet"

    def __init__(self, statefulset: client.V1StatefulSet):
        super().__init__(statefulset)

    def get_strategy(self) -> Dict[str, Any]:
        strategy = self._obj.spec.update_strategy
        if strategy is None:
            return {}
        return to_dict(strategy)

    def set_strategy(self, strategy: Optional[Dict[str, Any]]) -> None:
        if not strategy:
            self._obj.spec.update_strategy = None
            return
        self._obj.spec.update_strategy = from_dict(strategy, "V1StatefulSetUpdateStrategy")

    def dev_mode_strategy(self) -> Dict[str, Any]:
        return {"type": "RollingUpdate"}
