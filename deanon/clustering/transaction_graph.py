"""De-anonymized transaction graph between clusters.

Once addresses are clustered, every output record becomes an edge from the
cluster that funded the transaction to the cluster that received the output.
Construction takes two passes over the records:

1. Resolve each transaction's input cluster from its first input record.
2. Emit one ``(input_cluster, output_cluster, amount)`` edge per output.

Edges are never aggregated: two outputs between the same pair of clusters
produce two edges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple, Sequence

from deanon.clustering.address_clustering import ClusterView
from deanon.clustering.errors import MissingInputClusterError, UnknownAddressError
from deanon.clustering.records import TransactionRecord

logger = logging.getLogger(__name__)


class GraphEdge(NamedTuple):
    """Money moving from one cluster to another in a single output."""

    input_cluster: int
    output_cluster: int
    amount: int


@dataclass
class TransactionGraph:
    """Result of graph construction.

    Attributes:
        edges: One edge per resolved output record, in record order
        input_clusters: transaction id -> cluster that supplied its inputs
        inconsistent_transactions: Transactions whose inputs span clusters
        skipped_outputs: Output records dropped under ``skip_unresolved``
    """

    edges: list[GraphEdge] = field(default_factory=list)
    input_clusters: dict[str, int] = field(default_factory=dict)
    inconsistent_transactions: list[str] = field(default_factory=list)
    skipped_outputs: int = 0

    @property
    def total_amount(self) -> int:
        return sum(edge.amount for edge in self.edges)

    def __len__(self) -> int:
        return len(self.edges)


def resolve_input_clusters(
    records: Sequence[TransactionRecord],
    view: ClusterView,
    graph: TransactionGraph,
    skip_unresolved: bool = False,
) -> None:
    """Pass 1: map each transaction id to the cluster of its first input.

    Inputs that resolve to a different cluster than the first one are
    recorded in ``graph.inconsistent_transactions``; the first input still
    wins.
    """
    key_map = view.key_map
    inconsistent: set[str] = set()

    for record in records:
        if not record.is_input:
            continue

        cluster = key_map.get(record.address)
        if cluster is None:
            error = UnknownAddressError(
                record.address, record.transaction_id, record.line_number
            )
            if not skip_unresolved:
                raise error
            logger.warning(f"Skipping input: {error}")
            continue

        known = graph.input_clusters.get(record.transaction_id)
        if known is None:
            graph.input_clusters[record.transaction_id] = cluster
        elif known != cluster and record.transaction_id not in inconsistent:
            inconsistent.add(record.transaction_id)
            graph.inconsistent_transactions.append(record.transaction_id)
            logger.warning(
                f"Inputs of tx {record.transaction_id} span clusters "
                f"{known} and {cluster}; attributing outputs to {known}"
            )


def emit_edges(
    records: Sequence[TransactionRecord],
    view: ClusterView,
    graph: TransactionGraph,
    skip_unresolved: bool = False,
) -> None:
    """Pass 2: one edge per output record."""
    key_map = view.key_map

    for record in records:
        if not record.is_output:
            continue

        input_cluster = graph.input_clusters.get(record.transaction_id)
        output_cluster = key_map.get(record.address)

        error: Exception | None = None
        if input_cluster is None:
            error = MissingInputClusterError(
                record.transaction_id, record.line_number
            )
        elif output_cluster is None:
            error = UnknownAddressError(
                record.address, record.transaction_id, record.line_number
            )

        if error is not None:
            if not skip_unresolved:
                raise error
            logger.warning(f"Skipping output: {error}")
            graph.skipped_outputs += 1
            continue

        graph.edges.append(GraphEdge(input_cluster, output_cluster, record.amount))


def build_transaction_graph(
    records: Sequence[TransactionRecord],
    view: ClusterView,
    skip_unresolved: bool = False,
) -> TransactionGraph:
    """Build the inter-cluster transaction graph.

    Args:
        records: Full record set; iterated twice, so it must be a sequence
        view: Finalized clusters; only its key map is read
        skip_unresolved: Log and skip unresolved records instead of raising

    Returns:
        TransactionGraph with one edge per resolved output record

    Raises:
        UnknownAddressError: An input or output address is not in the key map
        MissingInputClusterError: An output's transaction has no inputs
    """
    graph = TransactionGraph()

    resolve_input_clusters(records, view, graph, skip_unresolved)
    emit_edges(records, view, graph, skip_unresolved)

    logger.info(
        f"Built transaction graph: {len(graph.edges):,} edges from "
        f"{len(graph.input_clusters):,} transactions"
    )
    if graph.inconsistent_transactions:
        logger.warning(
            f"{len(graph.inconsistent_transactions):,} transactions have inputs "
            f"in more than one cluster"
        )
    if graph.skipped_outputs:
        logger.warning(f"Skipped {graph.skipped_outputs:,} unresolved outputs")

    return graph
