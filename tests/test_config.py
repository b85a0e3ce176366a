"""Tests for configuration management."""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from towns_migrator.core.config_loader import (
    LegacyDatabaseConfig,
    LegacyTableNames,
    MigratorConfig,
    load_config,
)
from towns_migrator.core.exceptions import ConfigurationError
from towns_migrator.models import ClaimType, Environment, FailureAction, Flag, RowKind

ENV_VARS = [
    "LEGACY_DATABASE_TYPE",
    "LEGACY_DATABASE_HOST",
    "LEGACY_DATABASE_PORT",
    "LEGACY_TOWNS_TABLE",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove parameter environment variables and skip .env loading."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    with patch("towns_migrator.core.config_loader.load_dotenv"):
        yield monkeypatch


def write_yaml(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
        f.write(content)
        return f.name


def test_default_config():
    """Test default configuration creation."""
    config = MigratorConfig()

    assert config.legacy.type == "mysql"
    assert config.legacy.host == "localhost"
    assert config.legacy.port == 3306
    assert config.legacy.database == "HuskTowns"
    assert config.tables.towns == "husktowns_towns"
    assert config.tables.bonuses == "husktowns_bonus"
    assert [role.weight for role in config.roles] == [1, 2, 3]
    assert config.failure_policy.action_for(RowKind.MEMBER_TOWN_MISSING) is FailureAction.ABORT
    assert config.failure_policy.action_for(RowKind.MISSING_CLAIM_WORLD) is FailureAction.SKIP


def test_load_yaml_config(clean_env):
    """Test loading configuration from YAML file."""
    config_path = write_yaml(
        """
legacy:
  type: SQLite
  sqlite_file: legacy.db
tables:
  towns: old_towns
roles:
  - {weight: 1, name: Citizen}
  - {weight: 5, name: Leader}
rule_presets:
  claim:
    pvp: true
failure_policy:
  flag_town_missing: skip
claim_worlds:
  - {server: survival, world: world_nether}
data_dir: /srv/legacy
"""
    )
    try:
        config = load_config(config_path)

        assert config.legacy.type == "sqlite"
        assert config.sqlite_path() == Path("/srv/legacy/legacy.db")
        assert config.tables.towns == "old_towns"
        assert config.tables.players == "husktowns_players"
        assert [role.name for role in config.roles] == ["Citizen", "Leader"]
        assert config.rule_presets == {ClaimType.CLAIM: {Flag.PVP: True}}
        assert config.failure_policy.action_for(RowKind.FLAG_TOWN_MISSING) is FailureAction.SKIP
        assert config.failure_policy.action_for(RowKind.SPAWN_TOWN_MISSING) is FailureAction.ABORT
        assert config.claim_worlds[0].environment is None
        assert config.config_file == config_path
    finally:
        Path(config_path).unlink()


def test_env_overrides_yaml(clean_env):
    config_path = write_yaml("legacy:\n  host: yaml-host\n  port: 3307\n")
    clean_env.setenv("LEGACY_DATABASE_HOST", "env-host")
    clean_env.setenv("LEGACY_TOWNS_TABLE", "v1_towns")
    clean_env.setenv("LOG_LEVEL", "DEBUG")
    try:
        config = load_config(config_path)
    finally:
        Path(config_path).unlink()

    assert config.legacy.host == "env-host"
    assert config.legacy.port == 3307
    assert config.tables.towns == "v1_towns"
    assert config.log_level == "DEBUG"


def test_yaml_env_expansion_uses_allowlist(clean_env):
    clean_env.setenv("LEGACY_DATABASE_PASSWORD", "s3cret")
    clean_env.setenv("UNLISTED_SECRET", "nope")
    config_path = write_yaml(
        "legacy:\n  password: ${LEGACY_DATABASE_PASSWORD}\n  username: ${UNLISTED_SECRET}\n"
    )
    try:
        config = load_config(config_path)
    finally:
        Path(config_path).unlink()

    assert config.legacy.password == "s3cret"
    assert config.legacy.username == "${UNLISTED_SECRET}"


def test_invalid_config_file(clean_env):
    """Test handling of invalid configuration file."""
    config_path = write_yaml("invalid: yaml: content: [")
    try:
        with pytest.raises(ConfigurationError, match="Failed to load config"):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_invalid_config_values(clean_env):
    config_path = write_yaml("legacy:\n  type: postgres\n")
    try:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_missing_config_file_uses_defaults(clean_env):
    config = load_config(os.path.join(tempfile.gettempdir(), "does-not-exist.yml"))

    assert config.legacy.type == "mysql"


class TestParameters:
    """Flat parameter namespace."""

    def test_set_parameter_is_case_insensitive(self):
        config = MigratorConfig()

        config.set_parameter("LEGACY_DATABASE_PORT", "3310")
        config.set_parameter("legacy_players_table", "v1_players")

        assert config.legacy.port == 3310
        assert config.tables.players == "v1_players"
        assert config.parameters()["legacy_database_port"] == 3310

    def test_unknown_parameter(self):
        with pytest.raises(ConfigurationError, match="Unknown parameter"):
            MigratorConfig().set_parameter("legacy_plot_members_table", "x")

    def test_invalid_parameter_value(self):
        config = MigratorConfig()

        with pytest.raises(ConfigurationError, match="legacy_database_port"):
            config.set_parameter("legacy_database_port", "not-a-port")
        assert config.legacy.port == 3306

    def test_table_names_must_be_identifiers(self):
        with pytest.raises(ConfigurationError):
            MigratorConfig().set_parameter("legacy_towns_table", "towns; DROP TABLE x")

    def test_parameters_cover_every_table(self):
        parameters = MigratorConfig().parameters()

        for table in LegacyTableNames.model_fields:
            assert parameters[f"legacy_{table}_table"] == getattr(LegacyTableNames(), table)


def test_legacy_database_type_normalized():
    assert LegacyDatabaseConfig(type="MySQL").type == "mysql"


def test_claim_world_environment_parsed():
    config = MigratorConfig(claim_worlds=[{"server": "s", "world": "w", "environment": "end"}])

    assert config.claim_worlds[0].environment is Environment.END
