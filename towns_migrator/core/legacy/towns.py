"""Rebuilds successor towns from the legacy town, player, claim, location, bonus and flag tables."""

from decimal import Decimal

import sqlalchemy as sa
import structlog

from ...models.enums import ClaimType, Flag, RowKind
from ...models.legacy import (
    LegacyBonusRow,
    LegacyClaimCountRow,
    LegacyFlagRow,
    LegacyMemberRow,
    LegacySpawnRow,
    LegacyTownRow,
)
from ...models.town import Position, Rules, Spawn, Town
from ...services.collaborators import LevelingPolicy, RoleCatalog, RulePresets
from ...utils import legacy_world, town_color
from ..exceptions import LegacyDataError, TownLookupError, UnknownClaimTypeError, UnknownRoleWeightError
from ..policy import WarningCollector
from .schema import LegacyTables

logger = structlog.get_logger()


class TownBuilder:
    """Builds the full set of towns from one legacy connection."""

    def __init__(
        self,
        tables: LegacyTables,
        levels: LevelingPolicy,
        roles: RoleCatalog,
        presets: RulePresets,
        collector: WarningCollector,
    ):
        self.tables = tables
        self.levels = levels
        self.roles = roles
        self.presets = presets
        self.collector = collector
        self.logger = logger.bind(component="town_builder")

    def build(self, connection: sa.Connection) -> list[Town]:
        """Run every town stage in order and return the towns in legacy id order."""
        towns = self.build_towns(connection)
        self.resolve_members(connection, towns)
        self.apply_claim_counts(connection, towns)
        self.resolve_spawns(connection, towns)
        self.apply_bonuses(connection, towns)
        self.consolidate_rules(connection, towns)
        return list(towns.values())

    def build_towns(self, connection: sa.Connection) -> dict[int, Town]:
        """Create a town per legacy town row, levelled from its stored money."""
        towns: dict[int, Town] = {}
        for mapping in connection.execute(self.tables.select_towns()).mappings():
            row = LegacyTownRow.from_row(mapping)
            money = Decimal(str(row.money))
            level = self.levels.highest_level_for(money)
            towns[row.id] = Town(
                id=row.id,
                name=row.name,
                bio=row.bio,
                greeting=row.greeting_message,
                farewell=row.farewell_message,
                rules=self.presets.default_claim_rules(),
                balance=money - self.levels.total_cost_for(level),
                level=level,
                color=town_color(row.name),
            )
        self.logger.info("Built towns", count=len(towns))
        return towns

    def resolve_members(self, connection: sa.Connection, towns: dict[int, Town]) -> None:
        """Attach every player with a town to that town with their resolved role."""
        attached = 0
        for mapping in connection.execute(self.tables.select_members()).mappings():
            row = LegacyMemberRow.from_row(mapping)
            town = self._find_town(towns, row.town_id, RowKind.MEMBER_TOWN_MISSING, player=str(row.uuid))
            if town is None:
                continue

            role = None if row.town_role is None else self.roles.role_for_weight(row.town_role)
            if role is None:
                self.collector.handle(
                    RowKind.UNKNOWN_ROLE_WEIGHT,
                    UnknownRoleWeightError(row.town_role),
                    f"No role found for weight: {row.town_role} - expect errors! "
                    "Have you updated your roles to match your existing setup? If not, "
                    "reset your database and start migration again.",
                    weight=row.town_role,
                    player=str(row.uuid),
                    town=town.name,
                )
                role = self.roles.default_role()

            town.add_member(row.uuid, role)
            attached += 1
        self.logger.info("Resolved town members", count=attached)

    def apply_claim_counts(self, connection: sa.Connection, towns: dict[int, Town]) -> None:
        for mapping in connection.execute(self.tables.select_claim_counts()).mappings():
            row = LegacyClaimCountRow.from_row(mapping)
            town = self._find_town(towns, row.town_id, RowKind.CLAIM_COUNT_TOWN_MISSING)
            if town is not None:
                town.claim_count = row.claims

    def resolve_spawns(self, connection: sa.Connection, towns: dict[int, Town]) -> None:
        """Set each town's spawn from its joined location row."""
        resolved = 0
        for mapping in connection.execute(self.tables.select_spawns()).mappings():
            try:
                row = LegacySpawnRow.from_row(mapping)
            except LegacyDataError as e:
                self.logger.warning(
                    "Skipped malformed spawn location", town_id=mapping.get("town_id"), error=str(e)
                )
                continue
            town = self._find_town(towns, row.town_id, RowKind.SPAWN_TOWN_MISSING)
            if town is None:
                continue
            town.spawn = Spawn(
                position=Position(
                    x=row.x,
                    y=row.y,
                    z=row.z,
                    world=legacy_world(row.world),
                    yaw=row.yaw,
                    pitch=row.pitch,
                ),
                server=row.server,
                public=row.is_spawn_public,
            )
            resolved += 1
        self.logger.info("Resolved town spawns", count=resolved)

    def apply_bonuses(self, connection: sa.Connection, towns: dict[int, Town]) -> None:
        for mapping in connection.execute(self.tables.select_bonuses()).mappings():
            row = LegacyBonusRow.from_row(mapping)
            town = self._find_town(towns, row.town_id, RowKind.BONUS_TOWN_MISSING)
            if town is not None:
                town.bonus_claims = row.bonus_claims or 0
                town.bonus_members = row.bonus_members or 0

    def consolidate_rules(self, connection: sa.Connection, towns: dict[int, Town]) -> None:
        """Overwrite each town's rules for every claim type present in the flags table."""
        for mapping in connection.execute(self.tables.select_flags()).mappings():
            row = LegacyFlagRow.from_row(mapping)
            town = self._find_town(towns, row.town_id, RowKind.FLAG_TOWN_MISSING)
            if town is None:
                continue
            try:
                claim_type = ClaimType.from_legacy(row.chunk_type)
            except UnknownClaimTypeError as e:
                self.collector.handle(
                    RowKind.UNKNOWN_CLAIM_TYPE, e, town=town.name, chunk_type=row.chunk_type
                )
                continue
            town.rules[claim_type] = Rules(
                flags={flag: getattr(row, flag.value) for flag in Flag}
            )

    def _find_town(
        self, towns: dict[int, Town], town_id: int, kind: RowKind, **context
    ) -> Town | None:
        """Look up a built town; a miss is fatal or a warning depending on the policy."""
        town = towns.get(town_id)
        if town is None:
            self.collector.handle(
                kind,
                TownLookupError(town_id, kind.value),
                town_id=town_id,
                **context,
            )
        return town
