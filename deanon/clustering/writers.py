"""Persist cluster maps and the transaction graph.

Text formats:
    user map:  ``<clusterId> <address1> ... <addressK>``
    key map:   ``<address> <clusterId>``
    graph:     ``<inputClusterId>,<outputClusterId>,<amount>``

The same results can also be stored in DuckDB (``address_clusters`` and
``cluster_edges`` tables).
"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from deanon.clustering.address_clustering import ClusterView
from deanon.clustering.transaction_graph import TransactionGraph

logger = logging.getLogger(__name__)

DB_BATCH_SIZE = 100_000


def _ensure_parent(path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def write_user_map(view: ClusterView, path: str | Path) -> int:
    """Write one line per cluster, in ascending cluster id order.

    Returns:
        Number of lines written
    """
    path = _ensure_parent(path)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for cluster_id in sorted(view.user_map):
            addresses = " ".join(view.user_map[cluster_id])
            f.write(f"{cluster_id} {addresses}\n")
            count += 1

    logger.info(f"Wrote {count:,} clusters to {path}")
    return count


def write_key_map(view: ClusterView, path: str | Path) -> int:
    """Write one ``<address> <clusterId>`` line per address.

    Lines are grouped by cluster id, following address order within each
    cluster.
    """
    path = _ensure_parent(path)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for cluster_id in sorted(view.user_map):
            for address in view.user_map[cluster_id]:
                f.write(f"{address} {cluster_id}\n")
                count += 1

    logger.info(f"Wrote {count:,} address mappings to {path}")
    return count


def write_graph(graph: TransactionGraph, path: str | Path) -> int:
    """Write one comma-separated line per edge."""
    path = _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        for edge in graph.edges:
            f.write(f"{edge.input_cluster},{edge.output_cluster},{edge.amount}\n")

    logger.info(f"Wrote {len(graph.edges):,} edges to {path}")
    return len(graph.edges)


def _insert_batched(
    conn: duckdb.DuckDBPyConnection, sql: str, rows, batch_size: int
) -> int:
    count = 0
    batch = []
    for row in rows:
        batch.append(row)
        if len(batch) >= batch_size:
            conn.executemany(sql, batch)
            count += len(batch)
            batch = []

    # Insert remaining
    if batch:
        conn.executemany(sql, batch)
        count += len(batch)

    return count


def save_clusters_to_db(
    view: ClusterView,
    conn: duckdb.DuckDBPyConnection,
    batch_size: int = DB_BATCH_SIZE,
) -> int:
    """Replace the ``address_clusters`` table with the key map.

    Returns:
        Number of address rows saved
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS address_clusters (
            address VARCHAR PRIMARY KEY,
            cluster_id BIGINT NOT NULL
        )
        """
    )
    conn.execute("DELETE FROM address_clusters")

    rows = (
        (address, cluster_id)
        for cluster_id in sorted(view.user_map)
        for address in view.user_map[cluster_id]
    )
    count = _insert_batched(
        conn,
        "INSERT INTO address_clusters (address, cluster_id) VALUES (?, ?)",
        rows,
        batch_size,
    )

    logger.info(f"Saved {count:,} address-cluster mappings")
    return count


def save_graph_to_db(
    graph: TransactionGraph,
    conn: duckdb.DuckDBPyConnection,
    batch_size: int = DB_BATCH_SIZE,
) -> int:
    """Replace the ``cluster_edges`` table with the graph edges."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS cluster_edges (
            input_cluster BIGINT NOT NULL,
            output_cluster BIGINT NOT NULL,
            amount BIGINT NOT NULL
        )
        """
    )
    conn.execute("DELETE FROM cluster_edges")

    count = _insert_batched(
        conn,
        "INSERT INTO cluster_edges (input_cluster, output_cluster, amount) "
        "VALUES (?, ?, ?)",
        (tuple(edge) for edge in graph.edges),
        batch_size,
    )

    logger.info(f"Saved {count:,} cluster edges")
    return count
