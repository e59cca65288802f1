"""Shared domain models for ranchermigrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .constants import DEFAULT_ARGOCD_SERVER, DEFAULT_RANCHER_URL


@dataclass(frozen=True)
class MigrationOptions:
    """Run configuration, fixed for the whole run."""

    context: str
    namespace: str
    applications: Tuple[str, ...]
    region: str
    rancher_token: str
    rancher_context: str
    force: bool = False
    argocd_server: str = DEFAULT_ARGOCD_SERVER
    rancher_url: str = DEFAULT_RANCHER_URL
    parallel: bool = True

    def qualified_name(self, application: str) -> str:
        return f"{application}-{self.namespace}-{self.region}"


class ApplicationState(Enum):
    PENDING = "pending"
    SYNC_CHECKED = "sync_checked"
    RANCHER_CHECKED = "rancher_checked"
    CONFIG_MAPS_DELETED = "config_maps_deleted"
    RANCHER_APP_DELETED = "rancher_app_deleted"
    POST_SYNC_CHECKED = "post_sync_checked"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    name: str
    success: bool
    message: str
    skipped: bool = False


@dataclass
class ApplicationOutcome:
    """Result of one application's pipeline, owned by a single worker while it runs."""

    application: str
    state: ApplicationState = ApplicationState.PENDING
    steps: List[StepResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == ApplicationState.POST_SYNC_CHECKED

    def record(self, step: StepResult, next_state: ApplicationState):
        self.steps.append(step)
        self.state = next_state

    def fail(self, step_name: str, error: str):
        self.steps.append(StepResult(name=step_name, success=False, message=error))
        self.state = ApplicationState.FAILED
        self.error = error


@dataclass
class MigrationSummary:
    outcomes: List[ApplicationOutcome] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0
