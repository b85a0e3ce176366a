"""
Legacy towns migrator command line

Converts a legacy town database into successor towns and claim worlds. Without
a successor persistence backend the migration runs as a dry run against the
claim worlds listed in the configuration and writes the result as JSON.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from .core.config_loader import MigratorConfig, load_config
from .core.exceptions import ConfigurationError, MigratorError
from .core.legacy import LegacyMigrator
from .core.logging_config import get_migration_logger, setup_logging
from .models.result import MigrationResult
from .services import InMemoryTownRepository, LiveState


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Legacy towns data migrator")
    parser.add_argument(
        "--config",
        default=os.getenv("MIGRATOR_CONFIG", "config/migrator.yml"),
        help="Configuration file path",
    )
    parser.add_argument(
        "--set",
        dest="parameters",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override a migration parameter, e.g. legacy_database_host=db.local",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration and exit"
    )
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Count rows in every legacy table and exit",
    )
    parser.add_argument("--output", help="Write the migration result as JSON to this path")
    return parser.parse_args(argv)


def apply_parameters(config: MigratorConfig, parameters: list[str]) -> None:
    """Apply ``NAME=VALUE`` overrides to the configuration."""
    for parameter in parameters:
        name, sep, value = parameter.partition("=")
        if not sep:
            raise ConfigurationError(f"Expected NAME=VALUE, got {parameter!r}")
        config.set_parameter(name.strip(), value.strip())


def build_report(result: MigrationResult) -> dict[str, Any]:
    """JSON-serializable view of a migration result."""
    return {
        "summary": result.summary(),
        "started_at": result.started_at.isoformat(),
        "towns": [town.model_dump(mode="json") for town in result.towns],
        "skipped_towns": list(result.skipped_towns),
        "claim_worlds": [world.model_dump(mode="json") for world in result.claim_worlds.values()],
        "warnings": [warning.model_dump(mode="json") for warning in result.warnings],
    }


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        apply_parameters(config, args.parameters)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(log_dir=config.log_dir, log_level=args.log_level or config.log_level)
    logger = get_migration_logger()

    if args.validate_config:
        parameters = config.parameters()
        parameters["legacy_database_password"] = "***"
        logger.info("Configuration is valid", config_file=config.config_file, **parameters)
        return

    repository = InMemoryTownRepository.from_config(config.claim_worlds)
    migrator = LegacyMigrator(config, repository)

    try:
        if args.check_connection:
            migrator.preflight()
            return
        result = migrator.migrate(LiveState())
    except MigratorError as e:
        logger.error("Migration failed", error=str(e), stage=getattr(e, "stage", None))
        sys.exit(1)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(build_report(result), indent=2), encoding="utf-8")
        logger.info("Migration result written", path=str(output))


if __name__ == "__main__":
    main()
