"""
File synchronization daemon handle.

The sync daemon is started by `kubedev up` and writes its pid under
<sync_home>/<namespace>/<name>/syncthing.pid. Only stopping it is handled
here.
"""

import logging
import os
import signal
from pathlib import Path
from typing import Optional

from ..config import get_settings

logger = logging.getLogger(__name__)


class Syncthing:
    """Local sync daemon of one dev session."""

    def __init__(self, name: str, namespace: str, home: Optional[str] = None):
        self.name = name
        self.namespace = namespace
        base = Path(home or get_settings().sync_home).expanduser()
        self.home = base / namespace / name
        self.pid_path = self.home / "syncthing.pid"

    def pid(self) -> Optional[int]:
        """Pid of the running daemon, None if there is no pid file."""
        try:
            return int(self.pid_path.read_text().strip())
        except FileNotFoundError:
            return None
        except ValueError:
            logger.warning(f"Ignoring corrupt pid file {self.pid_path}")
            return None

    def stop(self) -> None:
        """
        Terminate the daemon and remove its pid file.

        A missing pid file or an already exited process means there is
        nothing to stop.
        """
        pid = self.pid()
        if pid is None:
            logger.debug(f"No sync daemon running for {self.namespace}/{self.name}")
            self.pid_path.unlink(missing_ok=True)
            return

        try:
            os.kill(pid, signal.SIGTERM)
            logger.info(f"Stopped sync daemon (pid {pid}) for {self.namespace}/{self.name}")
        except ProcessLookupError:
            logger.debug(f"Sync daemon pid {pid} already exited")

        self.pid_path.unlink(missing_ok=True)
