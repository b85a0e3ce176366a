"""Scoped connections to the legacy store."""

from collections.abc import Iterator
from contextlib import contextmanager

import sqlalchemy as sa
import structlog
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..config_loader import MigratorConfig
from ..exceptions import LegacyConnectionError
from ..settings import MigrationTimeoutSettings

logger = structlog.get_logger()


class LegacyConnector:
    """Opens connections to a MySQL server or an SQLite file holding the legacy tables."""

    def __init__(
        self,
        config: MigratorConfig,
        timeouts: MigrationTimeoutSettings | None = None,
    ):
        self.config = config
        self.timeouts = timeouts or MigrationTimeoutSettings()
        self.logger = logger.bind(component="legacy_connector")

    def url(self) -> URL:
        """Build the SQLAlchemy URL for the configured store."""
        legacy = self.config.legacy
        if legacy.type == "mysql":
            return URL.create(
                "mysql+pymysql",
                username=legacy.username,
                password=legacy.password,
                host=legacy.host,
                port=legacy.port,
                database=legacy.database,
            )
        return URL.create("sqlite", database=str(self.config.sqlite_path().absolute()))

    def create_engine(self) -> sa.Engine:
        connect_args = {}
        if self.config.legacy.type == "mysql":
            connect_args = self.timeouts.mysql_connect_args()
        elif not self.config.sqlite_path().is_file():
            # SQLite would silently create an empty database
            raise LegacyConnectionError(
                f"Legacy database file not found: {self.config.sqlite_path()}"
            )
        return sa.create_engine(self.url(), connect_args=connect_args, poolclass=NullPool)

    @contextmanager
    def connect(self) -> Iterator[sa.Connection]:
        """Yield a connection that is closed, and its engine disposed, on every exit path.

        Raises:
            LegacyConnectionError: If the store cannot be reached or a query fails
        """
        engine = self.create_engine()
        try:
            try:
                connection = engine.connect()
            except SQLAlchemyError as e:
                raise LegacyConnectionError(
                    f"Failed to connect to legacy {self.config.legacy.type} database: {e}"
                ) from e

            self.logger.debug(
                "Legacy connection opened",
                url=self.url().render_as_string(hide_password=True),
            )
            with connection:
                try:
                    yield connection
                except SQLAlchemyError as e:
                    raise LegacyConnectionError(f"Legacy query failed: {e}") from e
        finally:
            engine.dispose()
            self.logger.debug("Legacy connection released")
