import pytest

import ranchermigrator.services.pipeline as pipeline_module
from ranchermigrator.errors import MigratorError
from ranchermigrator.models import ApplicationState, MigrationOptions
from ranchermigrator.services.pipeline import ApplicationPipeline


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def exception(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeArgoCD:
    def __init__(self, failures=()):
        self.failures = list(failures)
        self.calls = []

    def check_app_synced(self, application, namespace, region):
        self.calls.append((application, namespace, region))
        if self.failures and self.failures.pop(0):
            raise MigratorError(f"[{application}-{namespace}-{region}] not synced in argo cd")


class FakeRancher:
    def __init__(self, present=True, delete_error=None):
        self.present = present
        self.delete_error = delete_error
        self.deleted = []

    def check_app_present(self, application, namespace, prefix=""):
        if not self.present:
            raise MigratorError(f"{prefix} cannot find rancher application")

    def delete_app(self, application, namespace, prefix=""):
        if self.delete_error:
            raise self.delete_error
        self.deleted.append(application)
        return f"{application}-{namespace}"


class FakeKubernetes:
    def __init__(self):
        self.deleted = []

    def delete_config_maps(self, application, namespace, prefix=""):
        self.deleted.append(application)
        return f"{application}-{namespace}"


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(pipeline_module.time, "sleep", recorded.append)
    return recorded


def _options(force=False):
    return MigrationOptions(
        context="ops-e1",
        namespace="ns",
        applications=("myapp",),
        region="e1",
        rancher_token="token",
        rancher_context="c-1:p-1",
        force=force,
    )


def _pipeline(argocd=None, rancher=None, kubernetes=None, force=False):
    return ApplicationPipeline(
        options=_options(force=force),
        argocd_service=argocd or FakeArgoCD(),
        rancher_service=rancher or FakeRancher(),
        kubernetes_service=kubernetes or FakeKubernetes(),
        logger=DummyLogger(),
        console=DummyConsole(),
    )


def test_pipeline_runs_every_step_in_order(sleeps):
    argocd = FakeArgoCD()
    kubernetes = FakeKubernetes()
    rancher = FakeRancher()

    outcome = _pipeline(argocd=argocd, rancher=rancher, kubernetes=kubernetes).run("myapp")

    assert outcome.succeeded
    assert outcome.state == ApplicationState.POST_SYNC_CHECKED
    assert outcome.error is None
    assert [step.name for step in outcome.steps] == [
        "argocd_sync",
        "rancher_app",
        "config_maps",
        "rancher_delete",
        "argocd_post_sync",
    ]
    assert len(argocd.calls) == 2
    assert kubernetes.deleted == ["myapp"]
    assert rancher.deleted == ["myapp"]
    assert sleeps == [2.0, 5.0]


def test_pipeline_stops_at_first_failure(sleeps):
    kubernetes = FakeKubernetes()

    outcome = _pipeline(rancher=FakeRancher(present=False), kubernetes=kubernetes).run("myapp")

    assert outcome.state == ApplicationState.FAILED
    assert outcome.error == "[myapp-ns-e1] cannot find rancher application"
    assert [step.name for step in outcome.steps] == ["argocd_sync", "rancher_app"]
    assert outcome.steps[-1].success is False
    assert kubernetes.deleted == []
    assert sleeps == []


def test_force_skips_only_the_first_sync_check(sleeps):
    argocd = FakeArgoCD()

    outcome = _pipeline(argocd=argocd, force=True).run("myapp")

    assert outcome.succeeded
    assert outcome.steps[0].skipped is True
    assert argocd.calls == [("myapp", "ns", "e1")]


def test_post_deletion_sync_failure_is_recorded(sleeps):
    argocd = FakeArgoCD(failures=[False, True])

    outcome = _pipeline(argocd=argocd).run("myapp")

    assert outcome.state == ApplicationState.FAILED
    assert outcome.steps[-1].name == "argocd_post_sync"
    assert "not synced in argo cd" in outcome.error


def test_unexpected_errors_are_isolated_to_the_application(sleeps):
    rancher = FakeRancher(delete_error=ValueError("boom"))

    outcome = _pipeline(rancher=rancher).run("myapp")

    assert outcome.state == ApplicationState.FAILED
    assert outcome.steps[-1].name == "rancher_delete"
    assert outcome.error == "[myapp-ns-e1] unexpected error: boom"
