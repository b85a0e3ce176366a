"""Transport timeout settings for the legacy store.

Provides timeout configuration using Pydantic BaseSettings with environment
variable support. Only the networked (MySQL) driver honours these values.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrationTimeoutSettings(BaseSettings):
    """Legacy store connection timeout configuration."""

    connect_timeout: int = Field(
        10, alias="LEGACY_CONNECT_TIMEOUT", description="Connect timeout in seconds"
    )

    read_timeout: int | None = Field(
        None, alias="LEGACY_READ_TIMEOUT", description="Per-read timeout in seconds (None waits forever)"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    def mysql_connect_args(self) -> dict[str, int]:
        """Driver keyword arguments for PyMySQL."""
        args = {"connect_timeout": self.connect_timeout}
        if self.read_timeout is not None:
            args["read_timeout"] = self.read_timeout
        return args
