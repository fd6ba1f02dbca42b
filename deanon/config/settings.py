#!/usr/bin/env python3
"""
Shared Configuration Module for the clustering pipeline

Provides input/output locations and run options with environment variable
overrides. A ``.env`` file in the working directory is loaded first.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_MODES = ("development", "production")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class ClusteringConfig:
    """
    Main configuration for address clustering

    All settings can be overridden via environment variables.
    """

    # ==================== Input ====================
    transactions_path: str = field(
        default_factory=lambda: os.getenv("TRANSACTIONS_PATH", "transactions.txt")
    )

    # ==================== Output ====================
    output_dir: str = field(
        default_factory=lambda: os.getenv("CLUSTER_OUTPUT_DIR", "data/clusters")
    )
    user_map_filename: str = field(
        default_factory=lambda: os.getenv("USER_MAP_FILENAME", "userMap.txt")
    )
    key_map_filename: str = field(
        default_factory=lambda: os.getenv("KEY_MAP_FILENAME", "keyMap.txt")
    )
    graph_filename: str = field(
        default_factory=lambda: os.getenv("GRAPH_FILENAME", "userGraph.txt")
    )

    # ==================== Database ====================
    save_to_db: bool = field(default_factory=lambda: _env_flag("SAVE_CLUSTERS_DB"))

    # ==================== Graph ====================
    # Log and drop unresolved outputs instead of aborting the graph
    skip_unresolved: bool = field(
        default_factory=lambda: _env_flag("SKIP_UNRESOLVED")
    )

    # ==================== Logging ====================
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_mode: str = field(
        default_factory=lambda: os.getenv("LOG_MODE", "development")
    )  # development or production
    log_dir: Optional[str] = field(default_factory=lambda: os.getenv("LOG_DIR"))

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        if self.log_mode not in VALID_LOG_MODES:
            raise ValueError(f"log_mode must be one of {VALID_LOG_MODES}")

    @property
    def user_map_path(self) -> Path:
        return Path(self.output_dir) / self.user_map_filename

    @property
    def key_map_path(self) -> Path:
        return Path(self.output_dir) / self.key_map_filename

    @property
    def graph_path(self) -> Path:
        return Path(self.output_dir) / self.graph_filename

    def to_dict(self) -> dict:
        """Convert configuration to dictionary"""
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }


# Singleton instance
_config: Optional[ClusteringConfig] = None


def get_config() -> ClusteringConfig:
    """
    Get the global configuration instance (singleton)

    Returns:
        ClusteringConfig instance
    """
    global _config
    if _config is None:
        _config = ClusteringConfig()
    return _config


def reload_config() -> ClusteringConfig:
    """
    Reload configuration from environment variables

    Returns:
        New ClusteringConfig instance
    """
    global _config
    _config = ClusteringConfig()
    return _config
