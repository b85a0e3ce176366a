"""Merges legacy chunk claims into the successor's registered claim worlds."""

import sqlalchemy as sa
import structlog

from ...models.claim import Chunk, Claim, ClaimWorld, ServerWorld
from ...models.enums import ClaimType, RowKind
from ...models.legacy import LegacyClaimRow
from ...utils import legacy_world
from ..exceptions import MissingClaimWorldError, UnknownClaimTypeError
from ..policy import WarningCollector
from .schema import LegacyTables

logger = structlog.get_logger()


class ClaimWorldMerger:
    """Appends every legacy claim to the claim world registered for its server and world.

    Claim worlds are created by each successor server when it registers its
    worlds; the merger never creates one.
    """

    def __init__(self, tables: LegacyTables, collector: WarningCollector):
        self.tables = tables
        self.collector = collector
        self.logger = logger.bind(component="claim_world_merger")

    def merge(
        self,
        connection: sa.Connection,
        claim_worlds: dict[ServerWorld, ClaimWorld],
    ) -> dict[ServerWorld, ClaimWorld]:
        """Return a copy of ``claim_worlds`` with the legacy claims added.

        The returned mapping has exactly the keys of ``claim_worlds``.
        """
        merged = {key: claim_world.model_copy(deep=True) for key, claim_world in claim_worlds.items()}
        added = 0
        dropped = 0

        for mapping in connection.execute(self.tables.select_claims()).mappings():
            row = LegacyClaimRow.from_row(mapping)
            server_world = ServerWorld(server=row.server, world=legacy_world(row.world))

            claim_world = merged.get(server_world)
            if claim_world is None:
                self.collector.handle(
                    RowKind.MISSING_CLAIM_WORLD,
                    MissingClaimWorldError(
                        f"Could not find claim world for {server_world}! "
                        "Are all your servers online and running the latest version?"
                    ),
                    server=row.server,
                    world=row.world,
                    town_id=row.town_id,
                )
                dropped += 1
                continue

            try:
                claim_type = ClaimType.from_legacy(row.chunk_type)
            except UnknownClaimTypeError as e:
                self.collector.handle(
                    RowKind.UNKNOWN_CLAIM_TYPE,
                    e,
                    chunk_type=row.chunk_type,
                    town_id=row.town_id,
                )
                dropped += 1
                continue

            claim_world.add_claim(
                row.town_id, Claim(chunk=Chunk(x=row.chunk_x, z=row.chunk_z), type=claim_type)
            )
            added += 1

        self.logger.info(
            "Merged legacy claims",
            claims_added=added,
            claims_dropped=dropped,
            claim_worlds=len(merged),
        )
        return merged
