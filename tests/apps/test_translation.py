"""
Unit tests for Translation snapshots.
"""

import dataclasses
import json

import pytest

pytest.importorskip("kubernetes")

from kubedev.apps import DeploymentApp, Translation, enter_dev_mode, new_translation
from kubedev.errors import DevModeConflictError, MalformedManifestError
from kubedev.model import Dev, constants


@pytest.mark.unit
class TestNewTranslation:

    def test_snapshot_before_mutation(self, deployment, dev):
        app = DeploymentApp(deployment)
        translation = new_translation(app, dev)

        assert translation.name == "web"
        assert translation.interactive is True
        assert translation.version == constants.TRANSLATION_VERSION
        assert translation.replicas == 3
        assert translation.strategy["type"] == "RollingUpdate"
        assert dict(translation.annotations) == {"team": "payments"}
        assert translation.app is app

    def test_snapshot_is_not_affected_by_later_mutation(self, deployment, dev):
        app = DeploymentApp(deployment)
        translation = new_translation(app, dev)

        enter_dev_mode(app, translation)

        assert translation.replicas == 3
        assert translation.strategy["rollingUpdate"] == {"maxSurge": "25%", "maxUnavailable": "25%"}

    def test_translation_is_immutable(self, deployment, dev):
        translation = new_translation(DeploymentApp(deployment), dev)

        with pytest.raises(dataclasses.FrozenInstanceError):
            translation.replicas = 1
        with pytest.raises(TypeError):
            translation.annotations["team"] = "other"

    def test_snapshot_of_dev_mode_workload_is_refused(self, deployment, dev):
        app = DeploymentApp(deployment)
        app.set_label(constants.DEV_LABEL, "true")

        with pytest.raises(DevModeConflictError):
            new_translation(app, dev)


@pytest.mark.unit
class TestStoredTranslation:

    def test_stored_on_enter_and_read_back(self, deployment, dev):
        app = DeploymentApp(deployment)
        translation = new_translation(app, dev)
        enter_dev_mode(app, translation)

        stored = Translation.from_app(app)

        assert stored == translation
        assert stored.app is app
        assert json.loads(app.get_pod_annotation(constants.TRANSLATION_ANNOTATION))["replicas"] == 3

    def test_absent(self, deployment):
        assert Translation.from_app(DeploymentApp(deployment)) is None

    @pytest.mark.parametrize("raw", ["{broken", '{"name": "web"}', '{"name": "web", "replicas": "many"}'])
    def test_malformed(self, deployment, raw):
        app = DeploymentApp(deployment)
        app.set_pod_annotation(constants.TRANSLATION_ANNOTATION, raw)

        with pytest.raises(MalformedManifestError):
            Translation.from_app(app)

    def test_detached_round_trip(self, deployment):
        app = DeploymentApp(deployment)
        translation = new_translation(app, Dev(name="worker", interactive=False))
        enter_dev_mode(app, translation)

        assert Translation.from_app(app).interactive is False
