"""Claim-related data models."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ClaimType
from .town import World


class Chunk(BaseModel):
    """Chunk coordinates."""

    model_config = ConfigDict(frozen=True)

    x: int
    z: int


class Claim(BaseModel):
    """One claimed chunk."""

    chunk: Chunk
    type: ClaimType = ClaimType.CLAIM


class ServerWorld(BaseModel):
    """Key of a claim world: a world on a named server."""

    model_config = ConfigDict(frozen=True)

    server: str
    world: World

    def __str__(self) -> str:
        return f"{self.server}/{self.world.name} ({self.world.environment.value})"


class ClaimWorld(BaseModel):
    """All claims within one server world, keyed by owning town id."""

    id: int | None = None
    server_world: ServerWorld
    claims: dict[int, list[Claim]] = Field(default_factory=dict)

    def add_claim(self, town_id: int, claim: Claim) -> None:
        self.claims.setdefault(town_id, []).append(claim)

    @property
    def claim_count(self) -> int:
        return sum(len(claims) for claims in self.claims.values())

    def is_empty(self) -> bool:
        return self.claim_count == 0
