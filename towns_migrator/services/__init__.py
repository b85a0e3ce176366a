"""
Migrator Services

Successor-side collaborators, persistence interface and live state.
"""

from .collaborators import LevelingPolicy, RoleCatalog, RulePresets, build_collaborators  # noqa: F401
from .repository import InMemoryTownRepository, TownRepository  # noqa: F401
from .state import LiveState  # noqa: F401

__all__ = [
    "LevelingPolicy",
    "RoleCatalog",
    "RulePresets",
    "build_collaborators",
    "InMemoryTownRepository",
    "TownRepository",
    "LiveState",
]
