"""Migrates legacy town and claim data into server- and world-partitioned towns and claim worlds."""

__version__ = "2.0.0"
