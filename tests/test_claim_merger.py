"""Tests for merging legacy claims into registered claim worlds."""

from uuid import uuid4

import pytest

from towns_migrator.core.exceptions import MissingClaimWorldError, UnknownClaimTypeError
from towns_migrator.core.legacy import ClaimWorldMerger
from towns_migrator.core.policy import FailurePolicy, WarningCollector
from towns_migrator.models import (
    Chunk,
    ClaimType,
    ClaimWorld,
    FailureAction,
    RowKind,
    ServerWorld,
    World,
)


def claim_row(**overrides):
    row = {
        "town_id": 1,
        "server": "survival",
        "world": "world",
        "chunk_x": 0,
        "chunk_z": 0,
        "chunk_type": 0,
    }
    row.update(overrides)
    return row


def key(server: str, world: str) -> ServerWorld:
    return ServerWorld(server=server, world=World(name=world))


@pytest.fixture
def merger(legacy_tables, collector) -> ClaimWorldMerger:
    return ClaimWorldMerger(legacy_tables, collector)


@pytest.fixture
def registered(repository) -> dict[ServerWorld, ClaimWorld]:
    return repository.get_claim_worlds()


def merge(merger, connector, registered):
    with connector.connect() as connection:
        return merger.merge(connection, registered)


class TestClaimWorldMerger:
    """Test suite for ClaimWorldMerger."""

    def test_claims_grouped_by_town(self, merger, connector, seed, registered):
        seed(
            "claims",
            claim_row(chunk_x=1, chunk_z=2),
            claim_row(chunk_x=3, chunk_z=4, chunk_type=1),
            claim_row(town_id=2, chunk_x=-5, chunk_z=6, chunk_type=2),
        )

        merged = merge(merger, connector, registered)

        claims = merged[key("survival", "world")].claims
        assert [(c.chunk, c.type) for c in claims[1]] == [
            (Chunk(x=1, z=2), ClaimType.CLAIM),
            (Chunk(x=3, z=4), ClaimType.FARM),
        ]
        assert [(c.chunk, c.type) for c in claims[2]] == [(Chunk(x=-5, z=6), ClaimType.PLOT)]

    def test_claims_keyed_by_server_and_world(self, merger, connector, seed, registered):
        seed(
            "claims",
            claim_row(server="creative"),
            claim_row(world="world_the_end", chunk_x=9),
        )

        merged = merge(merger, connector, registered)

        assert merged[key("creative", "world")].claim_count == 1
        assert merged[key("survival", "world_the_end")].claims[1][0].chunk == Chunk(x=9, z=0)
        assert merged[key("survival", "world")].is_empty()

    def test_missing_claim_world_is_skipped_with_warning(
        self, merger, connector, seed, registered, collector
    ):
        seed("claims", claim_row(chunk_x=5, chunk_z=10, chunk_type=1, world="world_nether"))

        merged = merge(merger, connector, registered)

        assert set(merged) == set(registered)
        assert all(world.is_empty() for world in merged.values())
        assert len(collector.warnings) == 1
        warning = collector.warnings[0]
        assert warning.kind == RowKind.MISSING_CLAIM_WORLD
        assert "survival/world_nether" in warning.message
        assert warning.context == {"server": "survival", "world": "world_nether", "town_id": 1}

    def test_missing_claim_world_can_abort(self, legacy_tables, connector, seed, registered):
        collector = WarningCollector(
            FailurePolicy(actions={RowKind.MISSING_CLAIM_WORLD: FailureAction.ABORT})
        )
        seed("claims", claim_row(server="lobby"))

        with pytest.raises(MissingClaimWorldError, match="lobby"):
            merge(ClaimWorldMerger(legacy_tables, collector), connector, registered)

    def test_unknown_claim_type_aborts(self, merger, connector, seed, registered):
        seed("claims", claim_row(chunk_type=3))

        with pytest.raises(UnknownClaimTypeError):
            merge(merger, connector, registered)

    def test_input_claim_worlds_are_not_mutated(self, merger, connector, seed, registered):
        seed("claims", claim_row())

        merged = merge(merger, connector, registered)

        assert registered[key("survival", "world")].is_empty()
        assert merged[key("survival", "world")].claim_count == 1

    def test_world_uuid_ignored_when_matching(self, merger, connector, seed):
        registered_key = ServerWorld(server="survival", world=World(uuid=uuid4(), name="world"))
        registered = {registered_key: ClaimWorld(server_world=registered_key)}
        seed("claims", claim_row())

        merged = merge(merger, connector, registered)

        assert merged[registered_key].claim_count == 1
