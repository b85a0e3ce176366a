"""Failure policy: what to do with each class of problem row.

A single table decides, per row kind, whether a condition aborts the whole
migration or drops (or repairs) the row and records a warning.
"""

from typing import Any

import structlog
from pydantic import BaseModel, Field, model_validator

from ..models.enums import FailureAction, RowKind
from ..models.result import MigrationWarning

logger = structlog.get_logger()

DEFAULT_ACTIONS: dict[RowKind, FailureAction] = {
    RowKind.MEMBER_TOWN_MISSING: FailureAction.ABORT,
    RowKind.CLAIM_COUNT_TOWN_MISSING: FailureAction.ABORT,
    RowKind.SPAWN_TOWN_MISSING: FailureAction.ABORT,
    RowKind.BONUS_TOWN_MISSING: FailureAction.ABORT,
    RowKind.FLAG_TOWN_MISSING: FailureAction.ABORT,
    RowKind.UNKNOWN_CLAIM_TYPE: FailureAction.ABORT,
    RowKind.UNKNOWN_ROLE_WEIGHT: FailureAction.SKIP,
    RowKind.MISSING_CLAIM_WORLD: FailureAction.SKIP,
    RowKind.TOWN_PERSISTENCE: FailureAction.SKIP,
}


class FailurePolicy(BaseModel):
    """Per-row-kind failure actions. Unlisted kinds use the defaults."""

    actions: dict[RowKind, FailureAction] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_mapping(cls, data: Any) -> Any:
        # Allow ``{member_town_missing: skip}`` as well as ``{actions: {...}}``
        if isinstance(data, dict) and "actions" not in data:
            return {"actions": data}
        return data

    def action_for(self, kind: RowKind) -> FailureAction:
        return self.actions.get(kind, DEFAULT_ACTIONS[kind])

    def aborts(self, kind: RowKind) -> bool:
        return self.action_for(kind) is FailureAction.ABORT

    @classmethod
    def all(cls, action: FailureAction) -> "FailurePolicy":
        """A policy applying the same action to every row kind."""
        return cls(actions={kind: action for kind in RowKind})


class WarningCollector:
    """Applies a FailurePolicy and accumulates the warnings it produces."""

    def __init__(self, policy: FailurePolicy | None = None):
        self.policy = policy or FailurePolicy()
        self.warnings: list[MigrationWarning] = []
        self.logger = logger.bind(component="failure_policy")

    def warn(self, kind: RowKind, message: str, **context: Any) -> None:
        """Record a non-fatal condition."""
        self.warnings.append(MigrationWarning(kind=kind, message=message, context=context))
        self.logger.warning(message, kind=kind.value, **context)

    def handle(
        self,
        kind: RowKind,
        error: Exception,
        message: str | None = None,
        **context: Any,
    ) -> None:
        """Raise ``error`` if the policy aborts on ``kind``, otherwise record a warning."""
        if self.policy.aborts(kind):
            raise error
        self.warn(kind, message or str(error), **context)

