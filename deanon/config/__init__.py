"""
Centralized configuration package for the clustering pipeline.

Exports:
    CLUSTER_DB_PATH: Path to the cluster database
    get_connection: Helper to get DuckDB connection
    ClusteringConfig / get_config / reload_config: Run settings
    setup_logging: Logging setup
"""

from deanon.config.database import CLUSTER_DB_PATH, get_connection
from deanon.config.settings import ClusteringConfig, get_config, reload_config
from deanon.config.logging_config import setup_logging

__all__ = [
    "CLUSTER_DB_PATH",
    "get_connection",
    "ClusteringConfig",
    "get_config",
    "reload_config",
    "setup_logging",
]
