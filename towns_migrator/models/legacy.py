"""Typed records for rows read from the legacy schema.

Each record is validated from a SQLAlchemy result row mapping. A row that
fails type conversion aborts the migration, except a spawn location, which
only costs its town the spawn.
"""

from collections.abc import Mapping
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from ..core.exceptions import LegacyDataError

RowT = TypeVar("RowT", bound="LegacyRow")


class LegacyRow(BaseModel):
    """Base class for legacy records."""

    @classmethod
    def from_row(cls: type[RowT], row: Mapping[str, Any]) -> RowT:
        """Validate a row mapping.

        Raises:
            LegacyDataError: If a column cannot be converted
        """
        try:
            return cls.model_validate(dict(row))
        except ValidationError as e:
            raise LegacyDataError(f"Malformed {cls.__name__}: {e}") from e


class LegacyTownRow(LegacyRow):
    id: int
    name: str
    bio: str | None = None
    greeting_message: str | None = None
    farewell_message: str | None = None
    money: float = 0.0


class LegacyMemberRow(LegacyRow):
    uuid: UUID
    town_id: int
    town_role: int | None = None


class LegacyClaimCountRow(LegacyRow):
    town_id: int
    claims: int


class LegacySpawnRow(LegacyRow):
    town_id: int
    is_spawn_public: bool = False
    server: str | None = None
    world: str
    x: float
    y: float
    z: float
    yaw: float = 0.0
    pitch: float = 0.0

    @field_validator("is_spawn_public", "yaw", "pitch", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # Nullable columns; NULL means the column default
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class LegacyBonusRow(LegacyRow):
    town_id: int
    bonus_claims: int | None = None
    bonus_members: int | None = None


class LegacyFlagRow(LegacyRow):
    town_id: int
    chunk_type: int
    explosion_damage: bool = False
    fire_damage: bool = False
    mob_griefing: bool = False
    monster_spawning: bool = False
    pvp: bool = False
    public_interact_access: bool = False
    public_container_access: bool = False
    public_build_access: bool = False
    public_farm_access: bool = False


class LegacyClaimRow(LegacyRow):
    chunk_x: int
    chunk_z: int
    chunk_type: int
    town_id: int
    world: str
    server: str
