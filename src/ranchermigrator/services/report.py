"""Run report generation service."""

import json
import os
import tempfile
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ranchermigrator.models import MigrationOptions, MigrationSummary


class ReportService:
    """Collects run metadata and writes the run report JSON."""

    def __init__(self, report_file: Optional[str], logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "metadata": {},
            "applications": [],
            "failures": [],
            "error": None,
        }

    @property
    def enabled(self) -> bool:
        return bool(self.report_file)

    def start_run(self, options: MigrationOptions):
        self.report["started_at"] = self._now()
        self.report["metadata"] = {
            "context": options.context,
            "namespace": options.namespace,
            "region": options.region,
            "applications": list(options.applications),
            "rancher_context": options.rancher_context,
            "force": options.force,
            "parallel": options.parallel,
        }

    def set_summary(self, summary: MigrationSummary):
        self.report["applications"] = [
            {
                "application": outcome.application,
                "state": outcome.state.value,
                "error": outcome.error,
                "steps": [asdict(step) for step in outcome.steps],
            }
            for outcome in summary.outcomes
        ]
        self.report["failures"] = list(summary.failures)

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        if not self.enabled:
            return

        temp_path = None
        try:
            os.makedirs(os.path.dirname(self.report_file) or ".", exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                prefix="run-report-",
                suffix=".json",
                dir=os.path.dirname(os.path.abspath(self.report_file)),
            )
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
