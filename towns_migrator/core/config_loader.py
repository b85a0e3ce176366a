"""Configuration management for the legacy towns migrator."""

import os
import re
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from ..constants import (
    DEFAULT_BONUSES_TABLE,
    DEFAULT_CLAIMS_TABLE,
    DEFAULT_DATABASE_HOST,
    DEFAULT_DATABASE_NAME,
    DEFAULT_DATABASE_PASSWORD,
    DEFAULT_DATABASE_PORT,
    DEFAULT_DATABASE_TYPE,
    DEFAULT_DATABASE_USERNAME,
    DEFAULT_FLAGS_TABLE,
    DEFAULT_LOCATIONS_TABLE,
    DEFAULT_PLAYERS_TABLE,
    DEFAULT_SQLITE_FILE,
    DEFAULT_TOWNS_TABLE,
)
from ..models.enums import ClaimType, Environment, Flag
from .exceptions import ConfigurationError
from .policy import FailurePolicy

logger = structlog.get_logger()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LegacyDatabaseConfig(BaseModel):
    """Connection settings for the legacy store."""

    type: Literal["mysql", "sqlite"] = DEFAULT_DATABASE_TYPE
    host: str = DEFAULT_DATABASE_HOST
    port: int = DEFAULT_DATABASE_PORT
    database: str = DEFAULT_DATABASE_NAME
    username: str = DEFAULT_DATABASE_USERNAME
    password: str = DEFAULT_DATABASE_PASSWORD
    sqlite_file: str = DEFAULT_SQLITE_FILE  # Relative paths resolve against data_dir

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class LegacyTableNames(BaseModel):
    """Names of the six legacy tables."""

    players: str = DEFAULT_PLAYERS_TABLE
    towns: str = DEFAULT_TOWNS_TABLE
    claims: str = DEFAULT_CLAIMS_TABLE
    flags: str = DEFAULT_FLAGS_TABLE
    locations: str = DEFAULT_LOCATIONS_TABLE
    bonuses: str = DEFAULT_BONUSES_TABLE

    @field_validator("*")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"{value!r} is not a valid table name")
        return value


class LevelingConfig(BaseModel):
    """Money needed to advance from each level to the next (index 0 is level 1 -> 2)."""

    costs: list[Decimal] = Field(
        default_factory=lambda: [
            Decimal(cost)
            for cost in (
                2500, 5000, 10000, 15000, 20000, 30000, 40000, 50000, 75000, 100000,
                150000, 200000, 250000, 300000, 400000, 500000, 750000, 1000000, 2000000,
            )
        ]
    )


class RoleConfig(BaseModel):
    """A role in the successor role catalog."""

    weight: int
    name: str


def _default_roles() -> list[RoleConfig]:
    return [
        RoleConfig(weight=1, name="Resident"),
        RoleConfig(weight=2, name="Trustee"),
        RoleConfig(weight=3, name="Mayor"),
    ]


class ClaimWorldConfig(BaseModel):
    """A claim world registered on a successor server (used for dry runs)."""

    server: str
    world: str
    environment: Environment | None = None  # Inferred from the world name when omitted


class MigratorConfig(BaseSettings):
    """Main configuration for the legacy towns migrator."""

    legacy: LegacyDatabaseConfig = Field(default_factory=LegacyDatabaseConfig)
    tables: LegacyTableNames = Field(default_factory=LegacyTableNames)
    levels: LevelingConfig = Field(default_factory=LevelingConfig)
    roles: list[RoleConfig] = Field(default_factory=_default_roles)
    rule_presets: dict[ClaimType, dict[Flag, bool]] = Field(default_factory=dict)
    failure_policy: FailurePolicy = Field(default_factory=FailurePolicy)
    claim_worlds: list[ClaimWorldConfig] = Field(default_factory=list)
    data_dir: str = "."
    log_dir: str | None = "logs"
    log_level: str = "INFO"
    config_file: str = Field(default="config/migrator.yml", alias="MIGRATOR_CONFIG")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def set_parameter(self, name: str, value: Any) -> None:
        """Set a flat migration parameter, e.g. ``legacy_database_host``.

        Raises:
            ConfigurationError: If the parameter is unknown or the value is invalid
        """
        key = name.lower()
        if key not in PARAMETERS:
            raise ConfigurationError(
                f"Unknown parameter {name!r}; expected one of {', '.join(sorted(PARAMETERS))}"
            )
        section_name, field_name = PARAMETERS[key]
        section = getattr(self, section_name)
        try:
            updated = type(section).model_validate({**section.model_dump(), field_name: value})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid value for {name}: {e}") from e
        setattr(self, section_name, updated)

    def parameters(self) -> dict[str, Any]:
        """Current value of every flat migration parameter."""
        return {
            key: getattr(getattr(self, section_name), field_name)
            for key, (section_name, field_name) in PARAMETERS.items()
        }

    def sqlite_path(self) -> Path:
        path = Path(self.legacy.sqlite_file)
        return path if path.is_absolute() else Path(self.data_dir) / path


# Flat parameter name -> (config section, field)
PARAMETERS: dict[str, tuple[str, str]] = {
    "legacy_database_type": ("legacy", "type"),
    "legacy_database_host": ("legacy", "host"),
    "legacy_database_port": ("legacy", "port"),
    "legacy_database_name": ("legacy", "database"),
    "legacy_database_username": ("legacy", "username"),
    "legacy_database_password": ("legacy", "password"),
    "legacy_database_file": ("legacy", "sqlite_file"),
    "legacy_players_table": ("tables", "players"),
    "legacy_towns_table": ("tables", "towns"),
    "legacy_claims_table": ("tables", "claims"),
    "legacy_flags_table": ("tables", "flags"),
    "legacy_locations_table": ("tables", "locations"),
    "legacy_bonuses_table": ("tables", "bonuses"),
}


def load_config(config_path: str | None = None) -> MigratorConfig:
    """Load configuration from .env, a YAML file and environment overrides.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If the YAML file is unreadable or invalid
    """
    load_dotenv()

    default_config_file = os.getenv("MIGRATOR_CONFIG", "config/migrator.yml")
    path = Path(config_path or default_config_file)

    data: dict[str, Any] = {}
    if path.exists():
        data = _load_yaml_config(path)

    try:
        config = MigratorConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    config.config_file = str(path)

    # Environment variables take the highest priority
    _apply_env_overrides(config)

    logger.debug("Configuration loaded", path=str(path), found=path.exists())
    return config


def _apply_env_overrides(config: MigratorConfig) -> None:
    """Apply LEGACY_* parameter and LOG_LEVEL environment overrides."""
    for key in PARAMETERS:
        if (value := os.getenv(key.upper())) is not None:
            config.set_parameter(key, value)
    if os.getenv("LOG_LEVEL"):
        config.log_level = os.getenv("LOG_LEVEL", config.log_level)


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML configuration file."""
    try:
        content = _expand_yaml_config(config_path.read_text(encoding="utf-8"))
        loaded = yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e
    # yaml.safe_load can return None, str, list, etc.
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _expand_yaml_config(content: str) -> str:
    """Expand ${VAR} references, restricted to an allowlist."""

    allowed_env_vars = {
        "HOME",
        "USER",
        "XDG_CONFIG_HOME",
        "XDG_DATA_HOME",
        "MIGRATOR_CONFIG",
        "LOG_LEVEL",
        *(key.upper() for key in PARAMETERS),
    }

    def replace_var(match):
        var_name = match.group(1)
        if var_name in allowed_env_vars:
            return os.getenv(var_name, match.group(0))  # Keep original if not found
        logger.warning(
            "Environment variable not in allowlist, skipping expansion",
            variable=var_name,
        )
        return match.group(0)

    return re.sub(r"\$\{([^}]+)\}", replace_var, content)
