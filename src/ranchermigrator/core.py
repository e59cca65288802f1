import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from .constants import (
    CHECK_MARK,
    CROSS_MARK,
    DEFAULT_ARGOCD_SERVER,
    DEFAULT_RANCHER_URL,
    REGIONS,
    SUMMARY_RULE,
)
from .errors import MigratorError
from .errors_catalog import actionable_error
from .models import ApplicationOutcome, MigrationOptions, MigrationSummary
from .services.argocd import ArgoCDService
from .services.command_runner import CommandRunner
from .services.kubernetes import KubernetesService
from .services.pipeline import ApplicationPipeline
from .services.rancher import RancherService
from .services.report import ReportService

console = Console()
logger = logging.getLogger("ranchermigrator")


class Migrator:
    VALID_REGIONS = list(REGIONS)

    def __init__(
        self,
        context: str,
        namespace: str,
        applications: Iterable[str],
        region: str,
        rancher_token: str,
        rancher_context: str,
        force: bool = False,
        argocd_server: str = DEFAULT_ARGOCD_SERVER,
        rancher_url: str = DEFAULT_RANCHER_URL,
        parallel: bool = True,
        dry_run: bool = False,
        report_file: Optional[str] = None,
    ):
        self.options = MigrationOptions(
            context=context,
            namespace=namespace,
            applications=self._normalize_applications(applications),
            region=region,
            rancher_token=rancher_token,
            rancher_context=rancher_context,
            force=force,
            argocd_server=argocd_server,
            rancher_url=rancher_url,
            parallel=parallel,
        )
        self.dry_run = dry_run

        self.command_runner = CommandRunner(logger=logger, sensitive_values=[rancher_token])
        self.kubernetes_service = KubernetesService(
            logger=logger, console=console, run_cmd=self._run_cmd
        )
        self.argocd_service = ArgoCDService(logger=logger, console=console, run_cmd=self._run_cmd)
        self.rancher_service = RancherService(logger=logger, console=console, run_cmd=self._run_cmd)
        self.pipeline = ApplicationPipeline(
            options=self.options,
            argocd_service=self.argocd_service,
            rancher_service=self.rancher_service,
            kubernetes_service=self.kubernetes_service,
            logger=logger,
            console=console,
        )
        self.report_service = ReportService(report_file=report_file, logger=logger)

    @staticmethod
    def _normalize_applications(applications: Iterable[str]) -> Tuple[str, ...]:
        names: List[str] = []
        for value in applications or ():
            for name in str(value).split(","):
                name = name.strip()
                if name and name not in names:
                    names.append(name)

        if not names:
            raise MigratorError("At least one application is required.")
        return tuple(names)

    def _run_cmd(self, cmd: List[str], check: bool = False):
        return self.command_runner.run(cmd, check=check)

    def _passed(self, message: str):
        console.print(f"[green]{CHECK_MARK}[/green] {escape(message)}")

    def validate_region(self):
        if self.options.region not in self.VALID_REGIONS:
            raise MigratorError(
                actionable_error(
                    "invalid_region",
                    region=self.options.region,
                    regions=", ".join(self.VALID_REGIONS),
                )
            )

    def switch_context(self):
        self.kubernetes_service.switch_context(self.options.context)
        self._passed(f"[{self.options.context}] switched context")

    def validate_namespace(self):
        self.kubernetes_service.validate_namespace(self.options.namespace)
        self._passed(f"[{self.options.namespace}] namespace exists")

    def validate_argocd_auth(self):
        self.argocd_service.ensure_authenticated(self.options.argocd_server)
        self._passed("argo cd authenticated")

    def validate_rancher_auth(self):
        self.rancher_service.login(
            self.options.rancher_token,
            self.options.rancher_context,
            self.options.rancher_url,
        )
        self._passed(f"[{self.options.rancher_context}] authenticated with rancher")

    def validate_permissions(self):
        self.kubernetes_service.validate_permissions(self.options.namespace)
        self._passed(f"[{self.options.namespace}] validated namespace permissions")

    def run_preflight(self):
        """Runs the ordered preflight checks. The first failure raises MigratorError."""
        logger.debug("Running preflight checks")
        self.switch_context()
        self.validate_namespace()
        self.validate_argocd_auth()
        self.validate_rancher_auth()
        self.validate_permissions()

    def run_pipelines(self) -> MigrationSummary:
        applications = self.options.applications
        outcomes: List[ApplicationOutcome]

        if self.options.parallel and len(applications) > 1:
            with ThreadPoolExecutor(
                max_workers=len(applications), thread_name_prefix="ranchermigrator"
            ) as executor:
                futures = [executor.submit(self.pipeline.run, app) for app in applications]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self.pipeline.run(app) for app in applications]

        failures = [outcome.error for outcome in outcomes if outcome.error]
        return MigrationSummary(outcomes=outcomes, failures=failures)

    def print_summary(self, summary: MigrationSummary):
        console.print(SUMMARY_RULE, markup=False, highlight=False)
        if summary.failures:
            console.print(f"[red]found {len(summary.failures)} issues:[/red]")
            for failure in summary.failures:
                console.print(f"[red]{CROSS_MARK}[/red] {escape(failure)}")
            return
        console.print("[green]no issues found; migration complete[/green]")

    def planned_commands(self) -> List[Tuple[str, List[str]]]:
        """Lists the commands a run would execute, assuming every check passes."""
        opts = self.options
        kubernetes = self.kubernetes_service
        rancher = self.rancher_service

        rancher_login = rancher.login_command(
            opts.rancher_token, opts.rancher_context, opts.rancher_url
        )
        plan = [
            ("preflight", kubernetes.switch_context_command(opts.context)),
            ("preflight", kubernetes.namespace_command(opts.namespace)),
            ("preflight", ["argocd", "app", "list"]),
            ("preflight", rancher_login),
            ("preflight", kubernetes.permissions_command(opts.namespace)),
        ]

        for app in opts.applications:
            scope = opts.qualified_name(app)
            release_name = f"{app}-{opts.namespace}"
            sync_check = self.argocd_service.list_command(app, opts.namespace, opts.region)

            if not opts.force:
                plan.append((scope, sync_check))
            plan.append((scope, rancher.list_command()))
            plan.append((scope, kubernetes.delete_config_maps_command(opts.namespace, release_name)))
            plan.append((scope, rancher.delete_command(release_name)))
            plan.append((scope, sync_check))
        return plan

    def print_plan(self):
        console.print("[bold blue]Dry run: no commands will be executed.[/bold blue]")
        for scope, cmd in self.planned_commands():
            line = f"[{scope}] {self.command_runner.format_command(cmd)}"
            console.print(escape(line), highlight=False, soft_wrap=True)

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None

        try:
            self.validate_region()
            logger.info(
                "Migrating %s in %s (%s)",
                ", ".join(self.options.applications),
                self.options.namespace,
                self.options.region,
            )
            self.report_service.start_run(self.options)

            if self.dry_run:
                self.print_plan()
                report_status = "dry_run"
                exit_code = 0
                return exit_code

            self.run_preflight()

            summary = self.run_pipelines()
            self.report_service.set_summary(summary)
            self.print_summary(summary)

            exit_code = summary.exit_code
            report_status = "success" if exit_code == 0 else "failed"
            return exit_code

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            report_status = "aborted"
            report_error = "Operation cancelled by user."
            exit_code = 1
            return exit_code
        except MigratorError as exc:
            console.print(f"[red]{CROSS_MARK}[/red] {escape(str(exc))}")
            logger.debug("Run aborted: %s", exc)
            report_error = str(exc)
            exit_code = 1
            return exit_code
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            logger.exception("Unexpected error")
            report_error = str(exc)
            exit_code = 1
            return exit_code
        finally:
            if self.report_service.enabled and self.report_service.report["started_at"]:
                self.report_service.finalize(report_status, error=report_error)
