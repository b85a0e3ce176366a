"""Legacy database migration: connector, town builder, claim merger and orchestrator."""

from .claims import ClaimWorldMerger  # noqa: F401
from .connector import LegacyConnector  # noqa: F401
from .manager import LegacyMigrator  # noqa: F401
from .schema import LegacyTables  # noqa: F401
from .towns import TownBuilder  # noqa: F401

__all__ = ["ClaimWorldMerger", "LegacyConnector", "LegacyMigrator", "LegacyTables", "TownBuilder"]
