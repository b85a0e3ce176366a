"""Live town and claim-world caches."""

import threading

import structlog

from ..models.claim import ClaimWorld, ServerWorld
from ..models.result import MigrationResult
from ..models.town import Town


class LiveState:
    """Process-wide caches swapped wholesale from a migration result."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._towns: tuple[Town, ...] = ()
        self._claim_worlds: dict[ServerWorld, ClaimWorld] = {}
        self.logger = structlog.get_logger().bind(component="live_state")

    @property
    def towns(self) -> tuple[Town, ...]:
        return self._towns

    @property
    def claim_worlds(self) -> dict[ServerWorld, ClaimWorld]:
        return dict(self._claim_worlds)

    def find_town(self, town_id: int) -> Town | None:
        return next((town for town in self._towns if town.id == town_id), None)

    def replace(self, result: MigrationResult) -> None:
        """Swap both caches to the contents of ``result`` in one step."""
        with self._lock:
            self._towns = tuple(result.towns)
            self._claim_worlds = dict(result.claim_worlds)
        self.logger.info(
            "Live state replaced",
            towns=len(result.towns),
            claim_worlds=len(result.claim_worlds),
        )
