"""Enum definitions for the towns migrator."""

from enum import Enum

from ..core.exceptions import UnknownClaimTypeError


class ClaimType(Enum):
    """Classification of a claimed chunk."""

    CLAIM = "claim"
    FARM = "farm"
    PLOT = "plot"

    @classmethod
    def from_legacy(cls, code: int, mapping: dict[int, "ClaimType"] | None = None) -> "ClaimType":
        """Decode a stored legacy claim type code.

        Raises:
            UnknownClaimTypeError: If the code is outside the mapping
        """
        mapping = LEGACY_CLAIM_TYPES_V1 if mapping is None else mapping
        try:
            return mapping[code]
        except KeyError:
            raise UnknownClaimTypeError(code) from None


# Stored integer -> claim type, as written by legacy schema version 1.
LEGACY_CLAIM_TYPES_V1: dict[int, ClaimType] = {
    0: ClaimType.CLAIM,
    1: ClaimType.FARM,
    2: ClaimType.PLOT,
}


class Flag(Enum):
    """Named boolean settings that make up a town's rules for one claim type."""

    EXPLOSION_DAMAGE = "explosion_damage"
    FIRE_DAMAGE = "fire_damage"
    MOB_GRIEFING = "mob_griefing"
    MONSTER_SPAWNING = "monster_spawning"
    PVP = "pvp"
    PUBLIC_INTERACT_ACCESS = "public_interact_access"
    PUBLIC_CONTAINER_ACCESS = "public_container_access"
    PUBLIC_BUILD_ACCESS = "public_build_access"
    PUBLIC_FARM_ACCESS = "public_farm_access"


class Environment(Enum):
    """World dimension."""

    NORMAL = "normal"
    NETHER = "nether"
    END = "end"


class MigrationState(Enum):
    """Lifecycle of a single migration run."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    ABORTED = "aborted"


class RowKind(Enum):
    """Classes of recoverable-or-fatal conditions met while reading legacy rows."""

    MEMBER_TOWN_MISSING = "member_town_missing"
    CLAIM_COUNT_TOWN_MISSING = "claim_count_town_missing"
    SPAWN_TOWN_MISSING = "spawn_town_missing"
    BONUS_TOWN_MISSING = "bonus_town_missing"
    FLAG_TOWN_MISSING = "flag_town_missing"
    UNKNOWN_CLAIM_TYPE = "unknown_claim_type"
    UNKNOWN_ROLE_WEIGHT = "unknown_role_weight"
    MISSING_CLAIM_WORLD = "missing_claim_world"
    TOWN_PERSISTENCE = "town_persistence"


class FailureAction(Enum):
    """What to do when a row condition is met."""

    ABORT = "abort"
    SKIP = "skip"
