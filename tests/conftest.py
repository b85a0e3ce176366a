"""Shared pytest fixtures for migrator tests."""

from collections.abc import Callable, Generator
from decimal import Decimal
from typing import Any

import pytest
import sqlalchemy as sa

from towns_migrator.core.config_loader import MigratorConfig
from towns_migrator.core.legacy import LegacyConnector, LegacyTables
from towns_migrator.core.policy import WarningCollector
from towns_migrator.models import ClaimWorld, ServerWorld, World
from towns_migrator.models.town import Role
from towns_migrator.services import (
    InMemoryTownRepository,
    LevelingPolicy,
    RoleCatalog,
    RulePresets,
)

MAYOR_UUID = "5f1c2d4e-0000-4000-8000-000000000001"
RESIDENT_UUID = "5f1c2d4e-0000-4000-8000-000000000002"


@pytest.fixture
def legacy_config(tmp_path) -> MigratorConfig:
    """Configuration pointing at an SQLite legacy database in a temp directory."""
    config = MigratorConfig(data_dir=str(tmp_path), log_dir=None)
    config.set_parameter("legacy_database_type", "sqlite")
    return config


@pytest.fixture
def legacy_tables(legacy_config: MigratorConfig) -> LegacyTables:
    return LegacyTables(legacy_config.tables)


@pytest.fixture
def legacy_engine(
    legacy_config: MigratorConfig, legacy_tables: LegacyTables
) -> Generator[sa.Engine, None, None]:
    """Create the legacy schema on disk."""
    engine = sa.create_engine(f"sqlite:///{legacy_config.sqlite_path()}")
    legacy_tables.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(
    legacy_engine: sa.Engine, legacy_tables: LegacyTables
) -> Callable[..., None]:
    """Insert rows into a legacy table: ``seed("towns", {...}, {...})``."""

    def _seed(table: str, *rows: dict[str, Any]) -> None:
        with legacy_engine.begin() as connection:
            for row in rows:
                connection.execute(legacy_tables.all()[table].insert().values(**row))

    return _seed


@pytest.fixture
def connector(legacy_config: MigratorConfig) -> LegacyConnector:
    return LegacyConnector(legacy_config)


@pytest.fixture
def levels() -> LevelingPolicy:
    """Level 2 costs 300, level 3 costs 800 in total, level 4 costs 1800."""
    return LevelingPolicy([Decimal(300), Decimal(500), Decimal(1000)])


@pytest.fixture
def roles() -> RoleCatalog:
    return RoleCatalog(
        [
            Role(weight=1, name="Resident"),
            Role(weight=2, name="Trustee"),
            Role(weight=3, name="Mayor"),
        ]
    )


@pytest.fixture
def presets() -> RulePresets:
    return RulePresets()


@pytest.fixture
def collector() -> WarningCollector:
    return WarningCollector()


@pytest.fixture
def registered_worlds() -> list[ClaimWorld]:
    """Claim worlds already registered by the successor servers."""
    return [
        ClaimWorld(server_world=ServerWorld(server="survival", world=World(name="world"))),
        ClaimWorld(server_world=ServerWorld(server="survival", world=World(name="world_the_end"))),
        ClaimWorld(server_world=ServerWorld(server="creative", world=World(name="world"))),
    ]


@pytest.fixture
def repository(registered_worlds: list[ClaimWorld]) -> InMemoryTownRepository:
    return InMemoryTownRepository(registered_worlds)
