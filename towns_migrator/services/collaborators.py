"""
Successor-side catalogs consumed by the migration

Leveling policy, role catalog and default rule presets, built from configuration.
"""

from decimal import Decimal

from ..core.config_loader import MigratorConfig, RoleConfig
from ..core.exceptions import ConfigurationError
from ..models.enums import ClaimType, Flag
from ..models.town import Role, Rules


class LevelingPolicy:
    """Maps a town's money to its level and the total cost of reaching a level."""

    def __init__(self, costs: list[Decimal]):
        self.costs = [Decimal(cost) for cost in costs]

    @property
    def max_level(self) -> int:
        return len(self.costs) + 1

    def total_cost_for(self, level: int) -> Decimal:
        """Total money spent to reach ``level`` from level 1."""
        return sum(self.costs[: max(level - 1, 0)], Decimal(0))

    def highest_level_for(self, balance: Decimal) -> int:
        """The highest level whose total cost does not exceed ``balance``."""
        level = 1
        while level < self.max_level and self.total_cost_for(level + 1) <= balance:
            level += 1
        return level


class RoleCatalog:
    """Town roles by weight."""

    def __init__(self, roles: list[RoleConfig] | list[Role]):
        if not roles:
            raise ConfigurationError("At least one role must be configured")
        self.roles = {role.weight: Role(weight=role.weight, name=role.name) for role in roles}

    def role_for_weight(self, weight: int) -> Role | None:
        return self.roles.get(weight)

    def default_role(self) -> Role:
        return self.roles[min(self.roles)]

    def mayor_role(self) -> Role:
        return self.roles[max(self.roles)]


_BUILTIN_PRESETS: dict[ClaimType, dict[Flag, bool]] = {
    ClaimType.CLAIM: {
        Flag.EXPLOSION_DAMAGE: False,
        Flag.FIRE_DAMAGE: False,
        Flag.MOB_GRIEFING: False,
        Flag.MONSTER_SPAWNING: False,
        Flag.PVP: False,
        Flag.PUBLIC_INTERACT_ACCESS: False,
        Flag.PUBLIC_CONTAINER_ACCESS: False,
        Flag.PUBLIC_BUILD_ACCESS: False,
        Flag.PUBLIC_FARM_ACCESS: False,
    },
    ClaimType.FARM: {
        Flag.EXPLOSION_DAMAGE: False,
        Flag.FIRE_DAMAGE: False,
        Flag.MOB_GRIEFING: False,
        Flag.MONSTER_SPAWNING: True,
        Flag.PVP: False,
        Flag.PUBLIC_INTERACT_ACCESS: False,
        Flag.PUBLIC_CONTAINER_ACCESS: False,
        Flag.PUBLIC_BUILD_ACCESS: False,
        Flag.PUBLIC_FARM_ACCESS: True,
    },
    ClaimType.PLOT: {
        Flag.EXPLOSION_DAMAGE: False,
        Flag.FIRE_DAMAGE: False,
        Flag.MOB_GRIEFING: False,
        Flag.MONSTER_SPAWNING: False,
        Flag.PVP: False,
        Flag.PUBLIC_INTERACT_ACCESS: False,
        Flag.PUBLIC_CONTAINER_ACCESS: False,
        Flag.PUBLIC_BUILD_ACCESS: False,
        Flag.PUBLIC_FARM_ACCESS: False,
    },
}


class RulePresets:
    """Default rules applied to every claim type of a new town."""

    def __init__(self, overrides: dict[ClaimType, dict[Flag, bool]] | None = None):
        self.presets = {
            claim_type: {**flags, **(overrides or {}).get(claim_type, {})}
            for claim_type, flags in _BUILTIN_PRESETS.items()
        }

    def default_claim_rules(self) -> dict[ClaimType, Rules]:
        """A fresh rule map; callers may mutate it."""
        return {claim_type: Rules(flags=dict(flags)) for claim_type, flags in self.presets.items()}


def build_collaborators(config: MigratorConfig) -> tuple[LevelingPolicy, RoleCatalog, RulePresets]:
    """Build the leveling policy, role catalog and rule presets from configuration."""
    return (
        LevelingPolicy(config.levels.costs),
        RoleCatalog(config.roles),
        RulePresets(config.rule_presets),
    )
