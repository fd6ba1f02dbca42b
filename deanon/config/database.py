"""
Cluster database configuration module.

Provides the DuckDB path used to persist cluster maps and graph edges.

Usage:
    from deanon.config import CLUSTER_DB_PATH, get_connection

    # Read-only access
    conn = get_connection(read_only=True)

    # Read-write access
    conn = get_connection()
"""

import os
from pathlib import Path
from typing import Optional

import duckdb
from dotenv import load_dotenv

load_dotenv()

# Default database path - can be overridden via environment variable
CLUSTER_DB_PATH = Path(os.getenv("CLUSTER_DB_PATH", "data/clusters.duckdb"))


def get_connection(
    read_only: bool = False, db_path: Optional[str] = None
) -> duckdb.DuckDBPyConnection:
    """
    Get a DuckDB connection to the cluster database.

    Args:
        read_only: If True, open connection in read-only mode
        db_path: Override CLUSTER_DB_PATH for this connection

    Returns:
        DuckDB connection object

    Example:
        >>> conn = get_connection(read_only=True)
        >>> conn.execute("SELECT COUNT(*) FROM address_clusters").fetchone()
        >>> conn.close()
    """
    path = Path(db_path) if db_path else CLUSTER_DB_PATH
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)
