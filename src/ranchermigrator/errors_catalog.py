"""Actionable error catalog for ranchermigrator."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "invalid_region": {
        "what": "Invalid region '{region}'. Must be one of [{regions}].",
        "next": "Pass `--region` with one of the supported regions.",
    },
    "command_not_found": {
        "what": "Required command not found: {command}.",
        "next": "Install `{command}` and make sure it is on your PATH.",
    },
    "context_switch_failed": {
        "what": "[{context}] cannot switch contexts.",
        "next": "Check the context name with `kubectl config get-contexts`.",
    },
    "namespace_not_found": {
        "what": "[{namespace}] cannot access namespace.",
        "next": "Check the namespace name and that the context points to the right cluster.",
    },
    "argocd_login_failed": {
        "what": "Cannot log into argo cd.",
        "next": "Log in manually using `argocd login {server} --sso --grpc-web-root-path /`.",
    },
    "rancher_login_failed": {
        "what": "[{context}] cannot authenticate with rancher.",
        "next": "Check that the Rancher token is valid and not expired.",
    },
    "permission_denied": {
        "what": "[{namespace}] not authorized to delete configmaps.",
        "next": "Ask for delete permission on configmaps in this namespace.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
