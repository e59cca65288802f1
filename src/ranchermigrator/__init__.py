"""
ranchermigrator - Retire Rancher apps once Argo CD owns them
"""

__version__ = "0.3.0"

from .core import Migrator, MigratorError

__all__ = ["Migrator", "MigratorError"]
