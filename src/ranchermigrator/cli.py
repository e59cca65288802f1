import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_ARGOCD_SERVER, DEFAULT_CONFIG_FILE, DEFAULT_RANCHER_URL
from .core import Migrator, MigratorError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option("-c", "--context", required=False, help="Kubernetes context used to run the migration")
@click.option("-n", "--namespace", required=False, help="Kubernetes namespace holding the apps")
@click.option(
    "-a",
    "--application",
    "applications",
    multiple=True,
    help="Application to migrate. Repeat the option or pass a comma-separated list.",
)
@click.option("-r", "--region", required=False, help="Region, one of: e1, e2")
@click.option(
    "--rancher-token",
    required=False,
    envvar="RANCHER_TOKEN",
    help="Rancher API token (or set RANCHER_TOKEN).",
)
@click.option("--rancher-context", required=False, help="Rancher project context")
@click.option(
    "-f",
    "--force",
    is_flag=True,
    default=None,
    help="Skip the Argo CD sync check before deleting.",
)
@click.option(
    "--argocd-server",
    required=False,
    help=f"Argo CD server used for SSO login (default: {DEFAULT_ARGOCD_SERVER}).",
)
@click.option(
    "--rancher-url",
    required=False,
    help=f"Rancher API URL (default: {DEFAULT_RANCHER_URL}).",
)
@click.option(
    "--sequential",
    is_flag=True,
    default=None,
    help="Migrate applications one after another instead of concurrently.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the commands that would run without executing anything.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--report-file",
    type=click.Path(),
    help="Write a JSON report of every application's steps to this path.",
)
def main(
    context,
    namespace,
    applications,
    region,
    rancher_token,
    rancher_context,
    force,
    argocd_server,
    rancher_url,
    sequential,
    dry_run,
    config,
    verbose,
    log_file,
    report_file,
):
    """Delete Rancher apps and their config maps once Argo CD manages them."""
    logger = logging.getLogger("ranchermigrator")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except MigratorError as exc:
        raise click.ClickException(str(exc)) from exc

    context = _resolve_option(context, config_values, "context")
    namespace = _resolve_option(namespace, config_values, "namespace")
    applications = _resolve_option(applications or None, config_values, "applications", default=[])
    region = _resolve_option(region, config_values, "region")
    rancher_token = _resolve_option(rancher_token, config_values, "rancher_token")
    rancher_context = _resolve_option(rancher_context, config_values, "rancher_context")
    force = bool(_resolve_option(force, config_values, "force", default=False))
    argocd_server = _resolve_option(
        argocd_server, config_values, "argocd_server", default=DEFAULT_ARGOCD_SERVER
    )
    rancher_url = _resolve_option(
        rancher_url, config_values, "rancher_url", default=DEFAULT_RANCHER_URL
    )
    sequential = bool(_resolve_option(sequential, config_values, "sequential", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    report_file = _resolve_option(report_file, config_values, "report_file")

    required = (
        ("--context", context),
        ("--namespace", namespace),
        ("--application", applications),
        ("--region", region),
        ("--rancher-token", rancher_token),
        ("--rancher-context", rancher_context),
    )
    for option_name, value in required:
        if not value:
            raise click.ClickException(
                f"Missing required option '{option_name}' (or provide it in config)."
            )

    region = str(region)
    if region not in Migrator.VALID_REGIONS:
        raise click.ClickException(
            f"invalid region. must be one of [{', '.join(Migrator.VALID_REGIONS)}]."
        )

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    if force and not dry_run:
        click.prompt(
            "using --force can be dangerous. press enter to continue or ctrl + c to quit.",
            default="",
            show_default=False,
            prompt_suffix="",
        )

    try:
        migrator = Migrator(
            context=str(context),
            namespace=str(namespace),
            applications=applications,
            region=region,
            rancher_token=str(rancher_token),
            rancher_context=str(rancher_context),
            force=force,
            argocd_server=argocd_server,
            rancher_url=rancher_url,
            parallel=not sequential,
            dry_run=dry_run,
            report_file=report_file,
        )
    except MigratorError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(migrator.run())


if __name__ == "__main__":
    main()
