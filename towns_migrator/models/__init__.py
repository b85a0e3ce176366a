"""Data models for the towns migrator."""

from .claim import (  # noqa: F401
    Chunk,
    Claim,
    ClaimWorld,
    ServerWorld,
)
from .enums import (  # noqa: F401
    ClaimType,
    Environment,
    FailureAction,
    Flag,
    MigrationState,
    RowKind,
)
from .result import (  # noqa: F401
    MigrationResult,
    MigrationWarning,
)
from .town import (  # noqa: F401
    PLACEHOLDER_WORLD_UUID,
    Position,
    Role,
    Rules,
    Spawn,
    Town,
    User,
    World,
)

__all__ = [
    # Claim models
    "Chunk",
    "Claim",
    "ClaimWorld",
    "ServerWorld",
    # Enums
    "ClaimType",
    "Environment",
    "FailureAction",
    "Flag",
    "MigrationState",
    "RowKind",
    # Result models
    "MigrationResult",
    "MigrationWarning",
    # Town models
    "PLACEHOLDER_WORLD_UUID",
    "Position",
    "Role",
    "Rules",
    "Spawn",
    "Town",
    "User",
    "World",
]
