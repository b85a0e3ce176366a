"""Result models produced by a migration run."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .claim import ClaimWorld, ServerWorld
from .enums import RowKind
from .town import Town


class MigrationWarning(BaseModel):
    """A non-fatal condition met during migration."""

    model_config = ConfigDict(frozen=True)

    kind: RowKind
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


class MigrationResult(BaseModel):
    """Everything a successful migration produced.

    The bundle is frozen; callers swap their live state from it in one step.
    """

    model_config = ConfigDict(frozen=True)

    towns: tuple[Town, ...] = ()
    claim_worlds: dict[ServerWorld, ClaimWorld] = Field(default_factory=dict)
    warnings: tuple[MigrationWarning, ...] = ()
    skipped_towns: tuple[str, ...] = ()
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_seconds: float = 0.0

    def warnings_of(self, kind: RowKind) -> list[MigrationWarning]:
        return [warning for warning in self.warnings if warning.kind == kind]

    def summary(self) -> dict[str, Any]:
        """Counts suitable for logging."""
        return {
            "towns": len(self.towns),
            "skipped_towns": len(self.skipped_towns),
            "claim_worlds": len(self.claim_worlds),
            "claims": sum(world.claim_count for world in self.claim_worlds.values()),
            "warnings": len(self.warnings),
            "duration_seconds": round(self.duration_seconds, 3),
        }
