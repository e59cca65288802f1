"""Shared constants for ranchermigrator."""

REGIONS = ("e1", "e2")

DEFAULT_ARGOCD_SERVER = "argocd.external.glops.io"
DEFAULT_RANCHER_URL = "https://ops-rancher.greenlight.me/v3"
DEFAULT_CONFIG_FILE = ".ranchermigrator.yml"

# Pauses that let Argo CD observe deletions before the next step.
ARGOCD_LOGIN_WAIT_SECONDS = 3.0
CONFIG_MAPS_SETTLE_SECONDS = 2.0
RANCHER_APP_SETTLE_SECONDS = 5.0

CHECK_MARK = "✓"
CROSS_MARK = "✘"
SUMMARY_RULE = "=" * 20
MASK = "***"
