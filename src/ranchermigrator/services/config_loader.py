"""Configuration loader for ranchermigrator."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ranchermigrator.errors import MigratorError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "context",
        "namespace",
        "applications",
        "region",
        "rancher_token",
        "rancher_context",
        "force",
        "argocd_server",
        "rancher_url",
        "sequential",
        "verbose",
        "log_file",
        "report_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise MigratorError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise MigratorError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise MigratorError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise MigratorError(f"Unknown configuration keys: {unknown_list}")

        applications = parsed.get("applications")
        if isinstance(applications, str):
            parsed["applications"] = [applications]
        elif applications is not None and not isinstance(applications, list):
            raise MigratorError("Config key 'applications' must be a list of application names.")

        return parsed
