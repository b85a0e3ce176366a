"""Town-related data models."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..core.exceptions import TownStateError
from .enums import ClaimType, Environment, Flag

PLACEHOLDER_WORLD_UUID = UUID(int=0)


class World(BaseModel):
    """A game world. Legacy data carries no world UUID, so migrated worlds use a zero UUID."""

    model_config = ConfigDict(frozen=True)

    uuid: UUID = PLACEHOLDER_WORLD_UUID
    name: str
    environment: Environment = Environment.NORMAL

    def __eq__(self, other: object) -> bool:
        # World identity across servers is the name; the UUID is unknown for legacy rows
        if not isinstance(other, World):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


class Position(BaseModel):
    """A point and orientation within a world."""

    x: float
    y: float
    z: float
    world: World
    yaw: float = 0.0
    pitch: float = 0.0


class Spawn(BaseModel):
    """A town's spawn point."""

    position: Position
    server: str | None = None
    public: bool = False


class Role(BaseModel):
    """A named town rank with its weight."""

    model_config = ConfigDict(frozen=True)

    weight: int
    name: str


class User(BaseModel):
    """A player reference."""

    uuid: UUID
    username: str


class Rules(BaseModel):
    """Flag settings for one claim type within one town."""

    flags: dict[Flag, bool] = Field(default_factory=dict)

    @classmethod
    def of(cls, **flags: bool) -> "Rules":
        """Build rules from flag keyword arguments, e.g. ``Rules.of(pvp=True)``."""
        return cls(flags={Flag(name): bool(value) for name, value in flags.items()})

    def get(self, flag: Flag) -> bool:
        return self.flags.get(flag, False)


class Town(BaseModel):
    """A town aggregate: membership, rules, spawn and claim allowances."""

    id: int
    name: str
    bio: str | None = None
    greeting: str | None = None
    farewell: str | None = None
    members: dict[UUID, Role] = Field(default_factory=dict)
    rules: dict[ClaimType, Rules] = Field(default_factory=dict)
    claim_count: int = 0
    balance: Decimal = Decimal(0)
    level: int = 1
    spawn: Spawn | None = None
    color: str = "#000000"
    bonus_claims: int = 0
    bonus_members: int = 0

    def add_member(self, uuid: UUID, role: Role) -> None:
        self.members[uuid] = role

    @property
    def mayor(self) -> UUID:
        """The member holding the highest-weighted role.

        Raises:
            TownStateError: If the town has no members
        """
        if not self.members:
            raise TownStateError(f"Town {self.name} has no mayor")
        return max(self.members.items(), key=lambda member: member[1].weight)[0]
