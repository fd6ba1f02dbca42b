#!/usr/bin/env python3
"""Run Address Clustering on a flat transaction-record file.

Reads ``<txId> <hash> <address> <amount> <in|out>`` records, merges addresses
with the multi-input heuristic, and writes:

- user map: cluster id -> addresses
- key map: address -> cluster id
- user graph: input cluster -> output cluster money flow

Usage:
    python -m deanon.run_clustering --input transactions.txt
    python -m deanon.run_clustering --input transactions.txt --save-db -v

Exit codes:
    0: Success
    1: Input could not be read or parsed, or outputs could not be written
    2: Cluster maps written, transaction graph failed
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

import duckdb

from deanon.clustering import (
    ClusteringError,
    MalformedRecordError,
    TransactionGraph,
    build_transaction_graph,
    cluster_transactions,
    get_cluster_stats,
    read_transactions,
    save_clusters_to_db,
    save_graph_to_db,
    write_graph,
    write_key_map,
    write_user_map,
)
from deanon.config import ClusteringConfig, get_connection, setup_logging

logger = logging.getLogger("deanon.run_clustering")

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_GRAPH_ERROR = 2


class GraphBuildError(Exception):
    """Graph construction failed after the cluster maps were written."""

    def __init__(self, cause: ClusteringError, stats: dict):
        self.cause = cause
        self.stats = stats
        super().__init__(str(cause))


def run_pipeline(config: ClusteringConfig, db_path: Optional[str] = None) -> dict:
    """Parse, cluster, build the graph and write every output.

    Args:
        config: Input/output locations and run options
        db_path: DuckDB path override when ``config.save_to_db`` is set

    Returns:
        Run statistics

    Raises:
        MalformedRecordError: Input file has an invalid record
        OSError: Input or output file failure
        GraphBuildError: Maps were written but the graph could not be built
    """
    start_time = time.time()

    records = read_transactions(config.transactions_path)
    view = cluster_transactions(records)

    stats = get_cluster_stats(view)
    stats["records"] = len(records)

    write_user_map(view, config.user_map_path)
    write_key_map(view, config.key_map_path)

    conn = get_connection(db_path=db_path) if config.save_to_db else None
    try:
        if conn is not None:
            save_clusters_to_db(view, conn)

        try:
            graph = build_transaction_graph(
                records, view, skip_unresolved=config.skip_unresolved
            )
        except ClusteringError as e:
            # Edges from an earlier run would reference the old cluster ids
            Path(config.graph_path).unlink(missing_ok=True)
            if conn is not None:
                save_graph_to_db(TransactionGraph(), conn)
            stats["duration_seconds"] = time.time() - start_time
            raise GraphBuildError(e, stats) from e

        write_graph(graph, config.graph_path)
        if conn is not None:
            save_graph_to_db(graph, conn)
    finally:
        if conn is not None:
            conn.close()

    stats["edges"] = len(graph.edges)
    stats["skipped_outputs"] = graph.skipped_outputs
    stats["inconsistent_transactions"] = len(graph.inconsistent_transactions)
    stats["duration_seconds"] = time.time() - start_time

    return stats


def print_summary(stats: dict) -> None:
    print("\n" + "=" * 60)
    print("ADDRESS CLUSTERING COMPLETE")
    print("=" * 60)
    print(f"  Records: {stats['records']:,}")
    print(f"  Addresses: {stats['total_addresses']:,}")
    print(f"  Users (clusters): {stats['cluster_count']:,}")
    print(f"  Largest cluster: {stats['max_cluster_size']:,} addresses")
    if "edges" in stats:
        print(f"  Graph edges: {stats['edges']:,}")
    print(f"  Duration: {stats['duration_seconds']:.1f}s")
    print("=" * 60)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cluster addresses by common input ownership"
    )
    try:
        defaults = ClusteringConfig()
    except ValueError as e:
        parser.error(f"invalid environment configuration: {e}")

    parser.add_argument(
        "--input",
        default=defaults.transactions_path,
        help=f"Transaction record file (default: {defaults.transactions_path})",
    )
    parser.add_argument(
        "--output-dir",
        default=defaults.output_dir,
        help=f"Directory for map and graph files (default: {defaults.output_dir})",
    )
    parser.add_argument(
        "--save-db",
        action="store_true",
        default=defaults.save_to_db,
        help="Also store clusters and edges in DuckDB",
    )
    parser.add_argument(
        "--db-path",
        help="DuckDB database path (default: CLUSTER_DB_PATH)",
    )
    parser.add_argument(
        "--skip-unresolved",
        action="store_true",
        default=defaults.skip_unresolved,
        help="Skip outputs whose clusters cannot be resolved instead of failing",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    config = ClusteringConfig(
        transactions_path=args.input,
        output_dir=args.output_dir,
        save_to_db=args.save_db,
        skip_unresolved=args.skip_unresolved,
        log_level="DEBUG" if args.verbose else defaults.log_level,
    )
    setup_logging(level=config.log_level, mode=config.log_mode, log_dir=config.log_dir)

    try:
        stats = run_pipeline(config, db_path=args.db_path)
    except MalformedRecordError as e:
        logger.error(f"Failed to parse {config.transactions_path}: {e}")
        return EXIT_INPUT_ERROR
    except OSError as e:
        logger.error(f"I/O error: {e}")
        return EXIT_INPUT_ERROR
    except duckdb.Error as e:
        logger.error(f"Database error: {e}")
        return EXIT_INPUT_ERROR
    except GraphBuildError as e:
        logger.error(f"Transaction graph not written: {e}")
        print_summary(e.stats)
        return EXIT_GRAPH_ERROR

    print_summary(stats)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
