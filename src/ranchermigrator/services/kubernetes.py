"""kubectl-backed checks and deletions for ranchermigrator."""

from typing import Callable, List

from rich.markup import escape

from ranchermigrator.errors import MigratorError
from ranchermigrator.errors_catalog import actionable_error
from ranchermigrator.services.output_matching import no_resources_found


class KubernetesService:
    """Wraps the kubectl invocations used by preflight and the pipeline."""

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    @staticmethod
    def switch_context_command(context: str) -> List[str]:
        return ["kubectl", "config", "use-context", context]

    @staticmethod
    def namespace_command(namespace: str) -> List[str]:
        return ["kubectl", "get", "namespace", namespace]

    @staticmethod
    def permissions_command(namespace: str) -> List[str]:
        return ["kubectl", "auth", "can-i", "delete", "configmaps", "--namespace", namespace]

    @staticmethod
    def delete_config_maps_command(namespace: str, label: str) -> List[str]:
        return ["kubectl", "delete", "configmaps", "-n", namespace, "-l", f"NAME={label}"]

    def switch_context(self, context: str):
        result = self.run_cmd(self.switch_context_command(context))
        if result.returncode != 0:
            raise MigratorError(actionable_error("context_switch_failed", context=context))

    def validate_namespace(self, namespace: str):
        result = self.run_cmd(self.namespace_command(namespace))
        if result.returncode != 0:
            raise MigratorError(actionable_error("namespace_not_found", namespace=namespace))

    def validate_permissions(self, namespace: str):
        result = self.run_cmd(self.permissions_command(namespace))
        if result.returncode != 0:
            raise MigratorError(actionable_error("permission_denied", namespace=namespace))

    def _delete_config_maps_by_label(self, namespace: str, label: str) -> bool:
        result = self.run_cmd(self.delete_config_maps_command(namespace, label))
        if result.returncode != 0:
            return False
        return not no_resources_found(result.stdout, result.stderr)

    def delete_config_maps(self, application: str, namespace: str, prefix: str = "") -> str:
        """Deletes the release config maps of an application.

        Rancher named releases ``<app>-<namespace>`` in recent versions and
        ``<app>`` in older ones, so both labels are tried in that order.
        Returns the label value that matched.
        """
        namespaced_label = f"{application}-{namespace}"
        if self._delete_config_maps_by_label(namespace, namespaced_label):
            return namespaced_label

        self.console.print(
            f"[yellow]{escape(prefix)} cannot delete configmaps; trying without namespace[/yellow]"
        )
        self.logger.debug("No config maps labelled NAME=%s in %s", namespaced_label, namespace)

        if self._delete_config_maps_by_label(namespace, application):
            return application

        raise MigratorError(f"{prefix} cannot delete configmaps; giving up")
