"""Legacy schema mapping and the fixed statements read by the migrator."""

import re

import sqlalchemy as sa

from ...constants import FLAG_COLUMNS
from ..config_loader import LegacyTableNames

_TOKEN = re.compile(r"%(players|towns|claims|flags|locations|bonuses)%")


class LegacyTables:
    """The six legacy tables, named from configuration."""

    def __init__(self, names: LegacyTableNames | None = None):
        self.names = names or LegacyTableNames()
        self.metadata = sa.MetaData()

        self.towns = sa.Table(
            self.names.towns,
            self.metadata,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("name", sa.String(16), nullable=False),
            sa.Column("money", sa.Float, nullable=False, default=0),
            sa.Column("founded", sa.DateTime),
            sa.Column("greeting_message", sa.String(255)),
            sa.Column("farewell_message", sa.String(255)),
            sa.Column("bio", sa.String(255)),
            sa.Column("spawn_location_id", sa.Integer),
            sa.Column("is_spawn_public", sa.Boolean, default=False),
        )
        self.players = sa.Table(
            self.names.players,
            self.metadata,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("username", sa.String(16)),
            sa.Column("uuid", sa.String(36), nullable=False),
            sa.Column("town_id", sa.Integer),
            sa.Column("town_role", sa.Integer),
        )
        self.claims = sa.Table(
            self.names.claims,
            self.metadata,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("town_id", sa.Integer, nullable=False),
            sa.Column("claim_time", sa.DateTime),
            sa.Column("claimer_id", sa.Integer),
            sa.Column("server", sa.String(64), nullable=False),
            sa.Column("world", sa.String(64), nullable=False),
            sa.Column("chunk_x", sa.Integer, nullable=False),
            sa.Column("chunk_z", sa.Integer, nullable=False),
            sa.Column("chunk_type", sa.Integer, nullable=False),
        )
        self.flags = sa.Table(
            self.names.flags,
            self.metadata,
            sa.Column("town_id", sa.Integer, nullable=False),
            sa.Column("chunk_type", sa.Integer, nullable=False),
            *(sa.Column(column, sa.Boolean, nullable=False, default=False) for column in FLAG_COLUMNS),
        )
        self.locations = sa.Table(
            self.names.locations,
            self.metadata,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("server", sa.String(64)),
            sa.Column("world", sa.String(64), nullable=False),
            sa.Column("x", sa.Float, nullable=False),
            sa.Column("y", sa.Float, nullable=False),
            sa.Column("z", sa.Float, nullable=False),
            sa.Column("yaw", sa.Float, default=0),
            sa.Column("pitch", sa.Float, default=0),
        )
        self.bonuses = sa.Table(
            self.names.bonuses,
            self.metadata,
            sa.Column("id", sa.Integer, primary_key=True),
            sa.Column("town_id", sa.Integer, nullable=False),
            sa.Column("applier_id", sa.Integer),
            sa.Column("applied_time", sa.DateTime),
            sa.Column("bonus_claims", sa.Integer, default=0),
            sa.Column("bonus_members", sa.Integer, default=0),
        )

    def format_statement(self, template: str) -> str:
        """Replace ``%towns%``-style tokens in a raw SQL template with configured table names."""
        return _TOKEN.sub(lambda match: getattr(self.names, match.group(1)), template)

    def select_towns(self) -> sa.Select:
        t = self.towns.c
        return sa.select(
            t.id, t.name, t.bio, t.greeting_message, t.farewell_message, t.money
        ).order_by(t.id)

    def select_members(self) -> sa.Select:
        p = self.players.c
        return sa.select(p.uuid, p.town_id, p.town_role).where(p.town_id.is_not(None))

    def select_claim_counts(self) -> sa.Select:
        c = self.claims.c
        return sa.select(c.town_id, sa.func.count().label("claims")).group_by(c.town_id)

    def select_spawns(self) -> sa.Select:
        t, loc = self.towns, self.locations
        return sa.select(
            t.c.id.label("town_id"),
            t.c.is_spawn_public,
            loc.c.server,
            loc.c.world,
            loc.c.x,
            loc.c.y,
            loc.c.z,
            loc.c.yaw,
            loc.c.pitch,
        ).select_from(t.join(loc, t.c.spawn_location_id == loc.c.id))

    def select_bonuses(self) -> sa.Select:
        b = self.bonuses.c
        return sa.select(
            b.town_id,
            sa.func.sum(b.bonus_claims).label("bonus_claims"),
            sa.func.sum(b.bonus_members).label("bonus_members"),
        ).group_by(b.town_id)

    def select_flags(self) -> sa.Select:
        f = self.flags.c
        return sa.select(f.town_id, f.chunk_type, *(f[column] for column in FLAG_COLUMNS))

    def select_claims(self) -> sa.Select:
        c = self.claims.c
        return sa.select(c.chunk_x, c.chunk_z, c.chunk_type, c.town_id, c.world, c.server)

    def all(self) -> dict[str, sa.Table]:
        return {
            "players": self.players,
            "towns": self.towns,
            "claims": self.claims,
            "flags": self.flags,
            "locations": self.locations,
            "bonuses": self.bonuses,
        }
