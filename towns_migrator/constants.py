"""Centralized constants for the legacy towns migrator."""

# Legacy database defaults
DEFAULT_DATABASE_TYPE = "mysql"
DEFAULT_DATABASE_HOST = "localhost"
DEFAULT_DATABASE_PORT = 3306
DEFAULT_DATABASE_NAME = "HuskTowns"
DEFAULT_DATABASE_USERNAME = "root"
DEFAULT_DATABASE_PASSWORD = "pa55w0rd"
DEFAULT_SQLITE_FILE = "HuskTownsData.db"

# Legacy table names
DEFAULT_PLAYERS_TABLE = "husktowns_players"
DEFAULT_TOWNS_TABLE = "husktowns_towns"
DEFAULT_CLAIMS_TABLE = "husktowns_claims"
DEFAULT_FLAGS_TABLE = "husktowns_flags"
DEFAULT_LOCATIONS_TABLE = "husktowns_locations"
DEFAULT_BONUSES_TABLE = "husktowns_bonus"

# World name suffixes used to infer a dimension
NETHER_SUFFIX = "_nether"
END_SUFFIX = "_the_end"

# Username given to migrated mayors when the town is first created
MIGRATED_USERNAME = "(Migrated)"

# Flag columns shared by the legacy flags table and the Rules model
FLAG_COLUMNS = (
    "explosion_damage",
    "fire_damage",
    "mob_griefing",
    "monster_spawning",
    "pvp",
    "public_interact_access",
    "public_container_access",
    "public_build_access",
    "public_farm_access",
)

# Log files
MIGRATION_LOG_FILE = "migration.log"
