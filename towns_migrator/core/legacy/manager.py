"""Main orchestrator for legacy town data migrations."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

import sqlalchemy as sa
import structlog

from ...constants import MIGRATED_USERNAME
from ...models.claim import ClaimWorld, ServerWorld
from ...models.enums import MigrationState, RowKind
from ...models.result import MigrationResult
from ...models.town import Town, User
from ...services.collaborators import LevelingPolicy, RoleCatalog, RulePresets, build_collaborators
from ...services.repository import TownRepository
from ...services.state import LiveState
from ..config_loader import MigratorConfig
from ..exceptions import MigrationError, TownStateError
from ..policy import WarningCollector
from .claims import ClaimWorldMerger
from .connector import LegacyConnector
from .schema import LegacyTables
from .towns import TownBuilder

logger = structlog.get_logger()


class LegacyMigrator:
    """Converts a legacy town database into successor towns and claim worlds.

    A migrator runs once: IDLE -> RUNNING -> SUCCEEDED or ABORTED.
    """

    def __init__(
        self,
        config: MigratorConfig,
        repository: TownRepository,
        levels: LevelingPolicy | None = None,
        roles: RoleCatalog | None = None,
        presets: RulePresets | None = None,
        connector: LegacyConnector | None = None,
    ):
        self.logger = logger.bind(component="legacy_migrator")
        self.config = config
        self.repository = repository
        default_levels, default_roles, default_presets = build_collaborators(config)
        self.levels = levels or default_levels
        self.roles = roles or default_roles
        self.presets = presets or default_presets
        self.connector = connector or LegacyConnector(config)
        self.tables = LegacyTables(config.tables)
        self.state = MigrationState.IDLE

    def run(self) -> MigrationResult:
        """Run the whole migration and return its result.

        Live caches are not touched; see ``migrate``.

        Raises:
            MigrationError: If the run aborts, or this migrator has already run
        """
        if self.state is not MigrationState.IDLE:
            raise MigrationError(f"Migration cannot start from state {self.state.value}")

        self.state = MigrationState.RUNNING
        started_at = datetime.now(UTC)
        start_time = time.perf_counter()
        collector = WarningCollector(self.config.failure_policy)
        self.logger.info(
            "Starting legacy migration",
            database_type=self.config.legacy.type,
            tables=self.config.tables.model_dump(),
        )

        try:
            with self._stage("convert_towns"):
                with self.connector.connect() as connection:
                    towns = TownBuilder(
                        self.tables, self.levels, self.roles, self.presets, collector
                    ).build(connection)

            with self._stage("persist_towns"):
                migrated, skipped = self._persist_towns(towns, collector)

            with self._stage("merge_claims"):
                registered = self.repository.get_claim_worlds()
                with self.connector.connect() as connection:
                    claim_worlds = ClaimWorldMerger(self.tables, collector).merge(
                        connection, registered
                    )

            with self._stage("persist_claim_worlds"):
                claim_worlds = self._persist_claim_worlds(claim_worlds)
        except Exception:
            self.state = MigrationState.ABORTED
            raise

        self.state = MigrationState.SUCCEEDED
        result = MigrationResult(
            towns=tuple(migrated),
            claim_worlds=claim_worlds,
            warnings=tuple(collector.warnings),
            skipped_towns=tuple(skipped),
            started_at=started_at,
            duration_seconds=time.perf_counter() - start_time,
        )
        self.logger.info("Legacy migration complete", **result.summary())
        return result

    def migrate(self, live_state: LiveState) -> MigrationResult:
        """Run the migration and, only if it succeeds, swap ``live_state`` to its result."""
        result = self.run()
        live_state.replace(result)
        return result

    def preflight(self) -> dict[str, int]:
        """Count the rows of every legacy table; fails like a migration would if the store is unreachable."""
        counts: dict[str, int] = {}
        with self.connector.connect() as connection:
            for key in self.tables.all():
                statement = sa.text(self.tables.format_statement(f"SELECT COUNT(*) FROM %{key}%"))
                counts[key] = connection.execute(statement).scalar_one()
        self.logger.info("Legacy tables reachable", **counts)
        return counts

    def _persist_towns(
        self, towns: list[Town], collector: WarningCollector
    ) -> tuple[list[Town], list[str]]:
        """Create then update every town; towns the repository rejects are skipped."""
        migrated: list[Town] = []
        skipped: list[str] = []
        for town in towns:
            try:
                self.repository.create_town(town.name, User(uuid=town.mayor, username=MIGRATED_USERNAME))
                self.repository.update_town(town)
            except TownStateError as e:
                collector.handle(
                    RowKind.TOWN_PERSISTENCE,
                    e,
                    f"Skipped migrating {town.name}: {e}",
                    town=town.name,
                )
                skipped.append(town.name)
                continue
            migrated.append(town)
        return migrated, skipped

    def _persist_claim_worlds(
        self, claim_worlds: dict[ServerWorld, ClaimWorld]
    ) -> dict[ServerWorld, ClaimWorld]:
        """Save every claim world, prune the empty ones and return those that remain."""
        for claim_world in claim_worlds.values():
            self.repository.update_claim_world(claim_world)
        pruned = self.repository.prune_claim_worlds()
        self.logger.info("Claim worlds saved", saved=len(claim_worlds), pruned=pruned)
        return {key: world for key, world in claim_worlds.items() if not world.is_empty()}

    @contextmanager
    def _stage(self, name: str) -> Iterator[None]:
        """Time a migration stage and turn any fault raised in it into a MigrationError."""
        start = time.perf_counter()
        self.logger.info("Migration stage started", stage=name)
        try:
            yield
        except Exception as e:
            self.logger.error(
                "Migration stage failed",
                stage=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise MigrationError(f"Migration aborted during {name}: {e}", stage=name) from e
        self.logger.info(
            "Migration stage finished",
            stage=name,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
