"""
Test configuration and fixtures for pytest.

Provides kubernetes workload builders, dev descriptors and an in-memory
AppsV1Api stand-in that enforces resource versions the way the API server
does.
"""

import copy
import os
from typing import Dict, Optional, Tuple

import pytest

pytest.importorskip("kubernetes")

from kubernetes import client
from kubernetes.client.rest import ApiException


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    Sets up test environment variables and registers custom markers.
    """
    # No backoff between conflict retries in tests
    os.environ["KUBEDEV_K8S_CONFLICT_MIN_WAIT"] = "0"
    os.environ["KUBEDEV_K8S_CONFLICT_MAX_WAIT"] = "0"
    os.environ["KUBEDEV_K8S_CONFLICT_RETRIES"] = "3"
    os.environ["KUBEDEV_K8S_REQUEST_TIMEOUT"] = "5"

    from kubedev.config import get_settings
    get_settings.cache_clear()

    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "kubernetes: mark test as exercising the Kubernetes client layer")


def make_deployment(
    name: str = "web",
    namespace: str = "shop",
    replicas: Optional[int] = 3,
    labels: Optional[Dict[str, str]] = None,
    annotations: Optional[Dict[str, str]] = None,
    resource_version: Optional[str] = "10",
) -> client.V1Deployment:
    """A Deployment with a RollingUpdate strategy, as returned by the API server."""
    selector = {"app": name}
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            uid="6f1c2b1e-1111-2222-3333-444455556666",
            resource_version=resource_version,
            labels=labels if labels is not None else dict(selector),
            annotations=annotations,
        ),
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=client.V1LabelSelector(match_labels=dict(selector)),
            strategy=client.V1DeploymentStrategy(
                type="RollingUpdate",
                rolling_update=client.V1RollingUpdateDeployment(max_surge="25%", max_unavailable="25%"),
            ),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(selector)),
                spec=client.V1PodSpec(
                    containers=[client.V1Container(name=name, image="nginx:1.25")]
                ),
            ),
        ),
    )


def make_statefulset(
    name: str = "db",
    namespace: str = "shop",
    replicas: int = 2,
    resource_version: Optional[str] = "20",
) -> client.V1StatefulSet:
    selector = {"app": name}
    return client.V1StatefulSet(
        api_version="apps/v1",
        kind="StatefulSet",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            uid="0d7e0000-aaaa-bbbb-cccc-ddddeeeeffff",
            resource_version=resource_version,
            labels=dict(selector),
        ),
        spec=client.V1StatefulSetSpec(
            replicas=replicas,
            service_name=name,
            selector=client.V1LabelSelector(match_labels=dict(selector)),
            update_strategy=client.V1StatefulSetUpdateStrategy(
                type="RollingUpdate",
                rolling_update=client.V1RollingUpdateStatefulSetStrategy(partition=0),
            ),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=dict(selector)),
                spec=client.V1PodSpec(
                    containers=[client.V1Container(name=name, image="postgres:16")]
                ),
            ),
        ),
    )


class FakeAppsV1:
    """
    In-memory AppsV1Api for Deployments and StatefulSets.

    Objects are copied in and out, creates of existing names and replaces
    with a stale resource version fail with 409, and every write bumps the
    resource version.
    """

    def __init__(self):
        self.objects: Dict[Tuple[str, str, str], object] = {}
        self.version = 100
        self.conflicts_to_inject = 0
        self.calls = []

    # -- helpers --------------------------------------------------------------

    def add(self, obj):
        kind = "StatefulSet" if isinstance(obj, client.V1StatefulSet) else "Deployment"
        self.objects[(kind, obj.metadata.namespace, obj.metadata.name)] = copy.deepcopy(obj)

    def stored(self, kind: str, namespace: str, name: str):
        return self.objects[(kind, namespace, name)]

    def _bump(self, obj):
        self.version += 1
        obj.metadata.resource_version = str(self.version)

    def _read(self, kind, name, namespace):
        self.calls.append(("get", kind, name))
        key = (kind, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        return copy.deepcopy(self.objects[key])

    def _create(self, kind, namespace, body):
        self.calls.append(("create", kind, body.metadata.name))
        key = (kind, namespace, body.metadata.name)
        if key in self.objects:
            raise ApiException(status=409, reason="AlreadyExists")
        stored = copy.deepcopy(body)
        stored.metadata.namespace = namespace
        stored.metadata.uid = f"uid-{body.metadata.name}"
        self._bump(stored)
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def _replace(self, kind, name, namespace, body):
        self.calls.append(("update", kind, name))
        key = (kind, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        if self.conflicts_to_inject > 0:
            self.conflicts_to_inject -= 1
            # Someone else wrote in between
            self._bump(self.objects[key])
            raise ApiException(status=409, reason="Conflict")
        if body.metadata.resource_version != self.objects[key].metadata.resource_version:
            raise ApiException(status=409, reason="Conflict")
        stored = copy.deepcopy(body)
        self._bump(stored)
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def _patch(self, kind, name, namespace, body):
        self.calls.append(("patch", kind, name))
        key = (kind, namespace, name)
        if key not in self.objects:
            raise ApiException(status=404, reason="Not Found")
        stored = self.objects[key]
        annotations = (body.get("metadata") or {}).get("annotations") or {}
        if annotations:
            stored.metadata.annotations = {**(stored.metadata.annotations or {}), **annotations}
        self._bump(stored)
        return copy.deepcopy(stored)

    # -- AppsV1Api surface ----------------------------------------------------

    def read_namespaced_deployment(self, name, namespace, **kwargs):
        return self._read("Deployment", name, namespace)

    def create_namespaced_deployment(self, namespace, body, **kwargs):
        return self._create("Deployment", namespace, body)

    def replace_namespaced_deployment(self, name, namespace, body, **kwargs):
        return self._replace("Deployment", name, namespace, body)

    def patch_namespaced_deployment(self, name, namespace, body, **kwargs):
        return self._patch("Deployment", name, namespace, body)

    def read_namespaced_stateful_set(self, name, namespace, **kwargs):
        return self._read("StatefulSet", name, namespace)

    def create_namespaced_stateful_set(self, namespace, body, **kwargs):
        return self._create("StatefulSet", namespace, body)

    def replace_namespaced_stateful_set(self, name, namespace, body, **kwargs):
        return self._replace("StatefulSet", name, namespace, body)

    def patch_namespaced_stateful_set(self, name, namespace, body, **kwargs):
        return self._patch("StatefulSet", name, namespace, body)


@pytest.fixture
def deployment():
    return make_deployment()


@pytest.fixture
def statefulset():
    return make_statefulset()


@pytest.fixture
def dev():
    from kubedev.model import Dev
    return Dev(name="web", namespace="shop", annotations={"team": "payments"})


@pytest.fixture
def fake_apps_v1():
    return FakeAppsV1()


@pytest.fixture
def k8s_client(fake_apps_v1):
    """KubernetesClient wired to the in-memory API."""
    from kubedev.kubernetes.client import KubernetesClient
    return KubernetesClient(apps_v1=fake_apps_v1)
