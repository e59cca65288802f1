"""Domain errors for ranchermigrator."""


class MigratorError(RuntimeError):
    """Raised when a check or deletion cannot complete."""
