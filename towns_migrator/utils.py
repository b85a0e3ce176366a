"""Utility functions for the towns migrator."""

import hashlib

from .constants import END_SUFFIX, NETHER_SUFFIX
from .models.enums import Environment
from .models.town import PLACEHOLDER_WORLD_UUID, World


def infer_environment(world_name: str) -> Environment:
    """Infer a world's dimension from its name.

    Example:
        >>> infer_environment("world_nether")
        <Environment.NETHER: 'nether'>
        >>> infer_environment("world_THE_END")
        <Environment.NORMAL: 'normal'>
    """
    if world_name.endswith(NETHER_SUFFIX):
        return Environment.NETHER
    if world_name.endswith(END_SUFFIX):
        return Environment.END
    return Environment.NORMAL


def legacy_world(world_name: str) -> World:
    """Build a World for a legacy world name (placeholder UUID, inferred environment)."""
    return World(
        uuid=PLACEHOLDER_WORLD_UUID,
        name=world_name,
        environment=infer_environment(world_name),
    )


def town_color(name: str) -> str:
    """Derive a stable hex colour from a town name."""
    digest = hashlib.md5(name.encode("utf-8"), usedforsecurity=False).digest()
    return "#{:02x}{:02x}{:02x}".format(*digest[:3])
