"""Matching helpers for the text printed by the argocd, rancher and kubectl CLIs.

Every check the migration makes against a CLI listing goes through one of
these functions so the patterns can be tested against captured output.

Example of a healthy ``argocd app list`` row::

    krona-reconciliation-qainternal-e1  qainternal  krona-qainternal  Synced  Healthy  Auto-Prune ...

Example of a ``rancher apps ls`` row::

    p-abc12:reconciliation-qainternal  reconciliation-qainternal  active  krona-reconciliation  2.4.0
"""

import re

NO_RESOURCES_FOUND = "No resources found"


def argocd_selector(application: str, namespace: str, region: str) -> str:
    return f"namespace={namespace},application={application},region={region}"


def argocd_app_pattern(application: str, namespace: str, region: str) -> "re.Pattern[str]":
    name = re.escape(f"{application}-{namespace}-{region}")
    return re.compile(rf"(?:^|[-/ \t]){name}(?:[ \t]|$).*\bSynced\b.*\bHealthy\b", re.MULTILINE)


def rancher_app_pattern(application: str, namespace: str) -> "re.Pattern[str]":
    name = re.escape(application)
    return re.compile(
        rf"(?:^|[:/ \t]){name}(?:-{re.escape(namespace)})?[ \t].*\b(?:active|installing)\b",
        re.MULTILINE,
    )


def argocd_app_synced(output: str, application: str, namespace: str, region: str) -> bool:
    return argocd_app_pattern(application, namespace, region).search(output or "") is not None


def rancher_app_present(output: str, application: str, namespace: str) -> bool:
    return rancher_app_pattern(application, namespace).search(output or "") is not None


def no_resources_found(stdout: str, stderr: str = "") -> bool:
    return NO_RESOURCES_FOUND in (stdout or "") or NO_RESOURCES_FOUND in (stderr or "")
