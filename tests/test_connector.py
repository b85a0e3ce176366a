"""Tests for legacy connections and statements."""

from unittest.mock import MagicMock, patch

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from towns_migrator.core.config_loader import LegacyTableNames, MigratorConfig
from towns_migrator.core.exceptions import LegacyConnectionError
from towns_migrator.core.legacy import LegacyConnector, LegacyTables
from towns_migrator.core.settings import MigrationTimeoutSettings


class TestLegacyConnector:
    """Test suite for LegacyConnector."""

    def test_mysql_url(self):
        config = MigratorConfig()
        config.set_parameter("legacy_database_host", "db.example.com")
        config.set_parameter("legacy_database_password", "p@ss:word")

        url = LegacyConnector(config).url()

        assert url.drivername == "mysql+pymysql"
        assert url.host == "db.example.com"
        assert url.port == 3306
        assert url.database == "HuskTowns"
        assert url.username == "root"
        assert url.password == "p@ss:word"

    def test_sqlite_url(self, legacy_config):
        url = LegacyConnector(legacy_config).url()

        assert url.drivername == "sqlite"
        assert url.database == str(legacy_config.sqlite_path().absolute())

    def test_missing_sqlite_file(self, legacy_config):
        with pytest.raises(LegacyConnectionError, match="not found"):
            with LegacyConnector(legacy_config).connect():
                pass

    def test_mysql_timeouts_forwarded(self):
        connector = LegacyConnector(
            MigratorConfig(),
            MigrationTimeoutSettings(connect_timeout=3, read_timeout=30),
        )

        with patch("towns_migrator.core.legacy.connector.sa.create_engine") as create_engine:
            connector.create_engine()

        assert create_engine.call_args.kwargs["connect_args"] == {
            "connect_timeout": 3,
            "read_timeout": 30,
        }

    def test_connect_failure_is_wrapped(self):
        engine = MagicMock()
        engine.connect.side_effect = OperationalError("connect", {}, Exception("refused"))
        connector = LegacyConnector(MigratorConfig())

        with patch.object(connector, "create_engine", return_value=engine):
            with pytest.raises(LegacyConnectionError, match="Failed to connect"):
                with connector.connect():
                    pass

        engine.dispose.assert_called_once()

    def test_query_failure_is_wrapped_and_released(self, connector, legacy_engine):
        with patch.object(sa.Engine, "dispose", autospec=True) as dispose:
            with pytest.raises(LegacyConnectionError, match="Legacy query failed"):
                with connector.connect() as connection:
                    connection.execute(sa.text("SELECT * FROM no_such_table"))

        dispose.assert_called_once()

    def test_other_errors_pass_through(self, connector, legacy_engine):
        with pytest.raises(KeyError):
            with connector.connect():
                raise KeyError("boom")


class TestLegacyTables:
    """Configured table names flow into every statement."""

    def test_format_statement(self):
        tables = LegacyTables(LegacyTableNames(towns="v1_towns", locations="v1_locations"))

        statement = tables.format_statement(
            "SELECT * FROM %towns% INNER JOIN %locations% ON %towns%.spawn_location_id = %locations%.id"
        )

        assert statement == (
            "SELECT * FROM v1_towns INNER JOIN v1_locations ON v1_towns.spawn_location_id = v1_locations.id"
        )

    def test_unknown_tokens_untouched(self):
        assert LegacyTables().format_statement("%plot_members%") == "%plot_members%"

    def test_statements_use_configured_names(self):
        tables = LegacyTables(LegacyTableNames(claims="v1_claims", bonuses="v1_bonus"))

        assert "v1_claims" in str(tables.select_claims())
        assert "v1_claims" in str(tables.select_claim_counts())
        assert "v1_bonus" in str(tables.select_bonuses())
        assert "husktowns_towns" in str(tables.select_towns())

    def test_spawn_statement_is_a_join(self):
        sql = str(LegacyTables().select_spawns())

        assert "JOIN husktowns_locations" in sql
        assert "spawn_location_id" in sql

    def test_members_statement_excludes_townless_players(self):
        assert "town_id IS NOT NULL" in str(LegacyTables().select_members())
