import subprocess

import pytest

import ranchermigrator.services.argocd as argocd_module
from ranchermigrator.errors import MigratorError
from ranchermigrator.services.argocd import ArgoCDService


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class ScriptedRunCmd:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, cmd, check=False):
        self.calls.append(cmd)
        returncode, stdout, stderr = self.responses.pop(0)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(argocd_module.time, "sleep", lambda *_args, **_kwargs: None)


def _service(run_cmd):
    return ArgoCDService(logger=DummyLogger(), console=DummyConsole(), run_cmd=run_cmd)


def test_ensure_authenticated_skips_login_when_already_authenticated():
    run_cmd = ScriptedRunCmd([(0, "NAME  CLUSTER\n", "")])

    _service(run_cmd).ensure_authenticated("argocd.example.com")

    assert run_cmd.calls == [["argocd", "app", "list"]]


def test_ensure_authenticated_logs_in_with_sso():
    run_cmd = ScriptedRunCmd([(1, "", "Unauthenticated"), (0, "Logged in\n", "")])

    _service(run_cmd).ensure_authenticated("argocd.example.com")

    assert run_cmd.calls[1] == [
        "argocd",
        "login",
        "argocd.example.com",
        "--sso",
        "--grpc-web-root-path",
        "/",
    ]


def test_ensure_authenticated_raises_when_login_fails():
    run_cmd = ScriptedRunCmd([(1, "", "Unauthenticated"), (1, "", "sso failed")])

    with pytest.raises(MigratorError, match="Cannot log into argo cd"):
        _service(run_cmd).ensure_authenticated("argocd.example.com")


def test_check_app_synced_queries_by_label_selector():
    run_cmd = ScriptedRunCmd([(0, "myapp-ns-e1  in-cluster  ns  default  Synced  Healthy\n", "")])

    _service(run_cmd).check_app_synced("myapp", "ns", "e1")

    assert run_cmd.calls == [
        ["argocd", "app", "list", "-l", "namespace=ns,application=myapp,region=e1"],
    ]


def test_check_app_synced_raises_when_not_healthy():
    run_cmd = ScriptedRunCmd([(0, "myapp-ns-e1  in-cluster  ns  default  Synced  Missing\n", "")])

    with pytest.raises(MigratorError, match=r"\[myapp-ns-e1\] not synced in argo cd"):
        _service(run_cmd).check_app_synced("myapp", "ns", "e1")


def test_check_app_synced_raises_when_listing_fails():
    run_cmd = ScriptedRunCmd([(20, "", "rpc error: code = Unauthenticated")])

    with pytest.raises(MigratorError, match="cannot list argo cd applications: rpc error"):
        _service(run_cmd).check_app_synced("myapp", "ns", "e1")
