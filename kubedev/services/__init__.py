from .session import activate, deactivate, get_app
from .syncthing import Syncthing

__all__ = ["activate", "deactivate", "get_app", "Syncthing"]
