"""
Kubernetes Client for Workload Read/Write

This module is the only place kubedev talks to the Kubernetes API. It reads
workloads into App adapters and writes them back, translating API failures
into kubedev errors:

- 404 -> NotFoundError
- 409 on create -> ConflictError
- 409 on update -> VersionConflictError (retried by update_with_retry)
- anything else, including timeouts -> TransportError

Every call is bounded by settings.k8s_request_timeout. Nothing is cached:
each operation reads the current object from the API server.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..apps.base import App
from ..apps.factory import app_class, new_app
from ..config import get_settings
from ..errors import (
    ConflictError,
    NotFoundError,
    TransportError,
    VersionConflictError,
)
from ..model import constants
from .retry import conflict_retrying

logger = logging.getLogger(__name__)


class KubernetesClient:
    """
    Reads and writes Deployments and StatefulSets.

    Uses optimistic concurrency: updates send the resource version the
    object was read at, and update_with_retry() re-reads and re-applies the
    change when the API server reports a conflict.
    """

    def __init__(self, apps_v1: Optional[client.AppsV1Api] = None):
        """Initialize Kubernetes client with in-cluster or kubeconfig."""
        self.settings = get_settings()

        if apps_v1 is None:
            try:
                # Try in-cluster config first
                config.load_incluster_config()
                logger.info("Loaded in-cluster Kubernetes configuration")
            except config.ConfigException:
                try:
                    # Fall back to kubeconfig
                    config.load_kube_config()
                    logger.info("Loaded kubeconfig")
                except config.ConfigException as e:
                    logger.error(f"Failed to load Kubernetes config: {e}")
                    raise RuntimeError("Cannot load Kubernetes configuration") from e
            apps_v1 = client.AppsV1Api()

        self.apps_v1 = apps_v1
        self.timeout = self.settings.k8s_request_timeout

    def _verbs(self, kind: str) -> Dict[str, Callable]:
        if kind == constants.DEPLOYMENT:
            return {
                "get": self.apps_v1.read_namespaced_deployment,
                "create": self.apps_v1.create_namespaced_deployment,
                "update": self.apps_v1.replace_namespaced_deployment,
                "patch": self.apps_v1.patch_namespaced_deployment,
            }
        if kind == constants.STATEFULSET:
            return {
                "get": self.apps_v1.read_namespaced_stateful_set,
                "create": self.apps_v1.create_namespaced_stateful_set,
                "update": self.apps_v1.replace_namespaced_stateful_set,
                "patch": self.apps_v1.patch_namespaced_stateful_set,
            }
        app_class(kind)  # raises ValueError for unsupported kinds
        raise ValueError(f"No API verbs registered for kind '{kind}'")

    async def _call(
        self,
        operation: str,
        kind: str,
        name: str,
        namespace: str,
        timeout: Optional[float] = None,
        **kwargs
    ) -> Any:
        fn = self._verbs(kind)[operation]
        if operation != "create":
            kwargs["name"] = name
        timeout = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, namespace=namespace, _request_timeout=timeout, **kwargs),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"{operation} {kind} '{name}' timed out after {timeout}s",
                name=name,
                operation=operation
            ) from e
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(
                    f"{kind} '{name}' not found in namespace '{namespace}'",
                    name=name,
                    operation=operation
                ) from e
            if e.status == 409:
                if operation == "create":
                    raise ConflictError(
                        f"{kind} '{name}' already exists in namespace '{namespace}'",
                        name=name,
                        operation=operation
                    ) from e
                raise VersionConflictError(
                    f"{kind} '{name}' was modified concurrently",
                    name=name,
                    operation=operation
                ) from e
            raise TransportError(
                f"{operation} {kind} '{name}' failed: {e.status} {e.reason}",
                name=name,
                operation=operation
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise TransportError(
                f"{operation} {kind} '{name}' failed: {e}",
                name=name,
                operation=operation
            ) from e

    # =========================================================================
    # READ / WRITE
    #
    # Every call takes an optional timeout in seconds, defaulting to
    # settings.k8s_request_timeout.
    # =========================================================================

    async def get(self, kind: str, name: str, namespace: str, timeout: Optional[float] = None) -> App:
        """Fetch a workload."""
        obj = await self._call("get", kind, name, namespace, timeout=timeout)
        logger.debug(f"[K8S] Read {kind} {namespace}/{name} (resourceVersion {obj.metadata.resource_version})")
        return new_app(obj)

    async def create(self, app: App, timeout: Optional[float] = None) -> App:
        """Create a workload; ConflictError if the name is taken."""
        obj = await self._call("create", app.kind, app.name, app.namespace, timeout=timeout, body=app.obj)
        logger.info(f"[K8S] ✅ Created {app.kind}: {app.name}")
        return new_app(obj)

    async def update(self, app: App, timeout: Optional[float] = None) -> App:
        """
        Replace a workload with the adapter's object.

        Raises:
            VersionConflictError: If the object changed since it was read
        """
        obj = await self._call("update", app.kind, app.name, app.namespace, timeout=timeout, body=app.obj)
        logger.info(f"[K8S] ✅ Updated {app.kind}: {app.name}")
        return new_app(obj)

    async def patch_annotations(
        self,
        app: App,
        annotations: Dict[str, str],
        timeout: Optional[float] = None
    ) -> App:
        """Merge-patch metadata annotations only; the spec is left alone."""
        body = {"metadata": {"annotations": annotations}}
        obj = await self._call("patch", app.kind, app.name, app.namespace, timeout=timeout, body=body)
        return new_app(obj)

    async def deploy(
        self,
        app: App,
        check: Optional[Callable[[App], None]] = None,
        timeout: Optional[float] = None
    ) -> App:
        """
        Create or update a workload.

        When the name is taken, check() is called with the stored object
        before every update attempt and may raise to refuse overwriting it.
        """
        try:
            return await self.create(app, timeout=timeout)
        except ConflictError:
            logger.info(f"[K8S] {app.kind} {app.name} exists, updating...")

        async for attempt in conflict_retrying():
            with attempt:
                current = await self.get(app.kind, app.name, app.namespace, timeout=timeout)
                if check is not None:
                    check(current)
                app.resource_version = current.resource_version
                return await self.update(app, timeout=timeout)

    async def update_with_retry(
        self,
        kind: str,
        name: str,
        namespace: str,
        mutate: Callable[[App], Any],
        timeout: Optional[float] = None
    ) -> App:
        """
        Read a workload, apply mutate() and write it back.

        On a version conflict the whole cycle starts over from a fresh read,
        up to settings.k8s_conflict_retries attempts. mutate() must therefore
        be safe to apply to any fresh copy of the object; its return value is
        ignored unless it is False, which skips the write. The timeout bounds
        each API call, not the whole cycle.

        Returns:
            The workload as stored by the API server
        """
        async for attempt in conflict_retrying():
            with attempt:
                app = await self.get(kind, name, namespace, timeout=timeout)
                if mutate(app) is False:
                    logger.debug(f"[K8S] Nothing to write for {kind} {namespace}/{name}")
                    return app
                return await self.update(app, timeout=timeout)


# Global instance - lazily initialized
_k8s_client_instance: Optional[KubernetesClient] = None


def get_k8s_client() -> KubernetesClient:
    """Get or create the global Kubernetes client instance."""
    global _k8s_client_instance
    if _k8s_client_instance is None:
        _k8s_client_instance = KubernetesClient()
    return _k8s_client_instance
