"""Core configuration, logging, error handling and the legacy migration engine."""
