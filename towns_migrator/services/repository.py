"""
Successor persistence interface

The migrator consumes the successor system's town and claim-world storage
through the TownRepository protocol. InMemoryTownRepository backs dry runs.
"""

from typing import Protocol

import structlog

from ..core.config_loader import ClaimWorldConfig
from ..core.exceptions import TownStateError
from ..models.claim import ClaimWorld, ServerWorld
from ..models.town import Town, User, World
from ..utils import infer_environment


class TownRepository(Protocol):
    """Storage operations the migrator relies on."""

    def create_town(self, name: str, creator: User) -> Town:
        """Create an empty town; raises TownStateError if it cannot be created."""
        ...

    def update_town(self, town: Town) -> None:
        ...

    def get_claim_worlds(self) -> dict[ServerWorld, ClaimWorld]:
        ...

    def update_claim_world(self, claim_world: ClaimWorld) -> None:
        ...

    def prune_claim_worlds(self) -> int:
        """Delete claim worlds that hold no claims; returns how many were removed."""
        ...


class InMemoryTownRepository:
    """Dictionary-backed TownRepository."""

    def __init__(self, claim_worlds: list[ClaimWorld] | None = None):
        self.towns: dict[str, Town] = {}
        self.claim_worlds: dict[ServerWorld, ClaimWorld] = {}
        self.logger = structlog.get_logger().bind(component="memory_repository")
        for index, claim_world in enumerate(claim_worlds or [], start=1):
            self.claim_worlds[claim_world.server_world] = claim_world.model_copy(
                update={"id": claim_world.id or index}
            )

    @classmethod
    def from_config(cls, registered: list[ClaimWorldConfig]) -> "InMemoryTownRepository":
        """Seed claim worlds from configured (server, world) registrations."""
        return cls(
            [
                ClaimWorld(
                    server_world=ServerWorld(
                        server=entry.server,
                        world=World(
                            name=entry.world,
                            environment=entry.environment or infer_environment(entry.world),
                        ),
                    )
                )
                for entry in registered
            ]
        )

    def create_town(self, name: str, creator: User) -> Town:
        if name.lower() in (existing.lower() for existing in self.towns):
            raise TownStateError(f"A town named {name} already exists")
        town = Town(id=len(self.towns) + 1, name=name)
        self.towns[name] = town
        self.logger.debug("Town created", town=name, creator=str(creator.uuid))
        return town

    def update_town(self, town: Town) -> None:
        if town.name not in self.towns:
            raise TownStateError(f"Town {town.name} does not exist")
        self.towns[town.name] = town

    def get_claim_worlds(self) -> dict[ServerWorld, ClaimWorld]:
        return {
            key: claim_world.model_copy(deep=True)
            for key, claim_world in self.claim_worlds.items()
        }

    def update_claim_world(self, claim_world: ClaimWorld) -> None:
        self.claim_worlds[claim_world.server_world] = claim_world

    def prune_claim_worlds(self) -> int:
        empty = [key for key, claim_world in self.claim_worlds.items() if claim_world.is_empty()]
        for key in empty:
            del self.claim_worlds[key]
        if empty:
            self.logger.info("Pruned empty claim worlds", count=len(empty))
        return len(empty)
