"""Core exceptions for legacy town migration."""


class MigratorError(Exception):
    """Base exception for migrator operations."""


class ConfigurationError(MigratorError):
    """Configuration validation or loading failed."""


class LegacyConnectionError(MigratorError):
    """The legacy store could not be opened or queried."""


class LegacyDataError(MigratorError):
    """A legacy row could not be converted into a typed record."""


class TownLookupError(MigratorError):
    """A legacy row references a town id that was never built."""

    def __init__(self, town_id: int, source: str):
        super().__init__(f"No town with id {town_id} (referenced by {source})")
        self.town_id = town_id
        self.source = source


class UnknownClaimTypeError(MigratorError):
    """A legacy claim type code has no known variant."""

    def __init__(self, code: int):
        super().__init__(f"Unknown legacy claim type code: {code}")
        self.code = code


class UnknownRoleWeightError(MigratorError):
    """A legacy role weight has no role in the catalog."""

    def __init__(self, weight: int | None):
        super().__init__(f"No role found for weight: {weight}")
        self.weight = weight


class MissingClaimWorldError(MigratorError):
    """No registered claim world matches a legacy claim's server and world."""


class TownStateError(MigratorError):
    """A town cannot be persisted in its current state (duplicate name, no mayor)."""


class MigrationError(MigratorError):
    """Migration aborted."""

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        self.stage = stage
