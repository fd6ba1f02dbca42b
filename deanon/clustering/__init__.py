"""Address Clustering Module.

Groups addresses by owning entity with the common-input-ownership heuristic
and rebuilds the money flow between the resulting clusters.

Public API:
- parse_record / read_transactions: Flat record parsing
- AddressIndex: Address to integer handle mapping
- UnionFind: Disjoint set data structure for clustering
- merge_addresses / build_clusters: Multi-input heuristic clustering
- build_transaction_graph: Inter-cluster transaction graph
- write_* / save_*_to_db: Text and DuckDB persistence
"""

from deanon.clustering.errors import (
    ClusteringError,
    MalformedRecordError,
    MissingInputClusterError,
    UnknownAddressError,
)
from deanon.clustering.records import (
    Direction,
    TransactionRecord,
    parse_record,
    parse_records,
    read_transactions,
)
from deanon.clustering.address_index import AddressIndex
from deanon.clustering.union_find import UnionFind
from deanon.clustering.address_clustering import (
    AddressCluster,
    ClusterView,
    build_clusters,
    cluster_addresses,
    cluster_transactions,
    get_cluster_for_address,
    get_cluster_stats,
    group_input_addresses,
    merge_addresses,
)
from deanon.clustering.transaction_graph import (
    GraphEdge,
    TransactionGraph,
    build_transaction_graph,
)
from deanon.clustering.writers import (
    save_clusters_to_db,
    save_graph_to_db,
    write_graph,
    write_key_map,
    write_user_map,
)


# Public API exports
__all__ = [
    # Errors
    "ClusteringError",
    "MalformedRecordError",
    "MissingInputClusterError",
    "UnknownAddressError",
    # Records
    "Direction",
    "TransactionRecord",
    "parse_record",
    "parse_records",
    "read_transactions",
    # Union-Find
    "AddressIndex",
    "UnionFind",
    # Address Clustering
    "AddressCluster",
    "ClusterView",
    "build_clusters",
    "cluster_addresses",
    "cluster_transactions",
    "get_cluster_for_address",
    "get_cluster_stats",
    "group_input_addresses",
    "merge_addresses",
    # Transaction Graph
    "GraphEdge",
    "TransactionGraph",
    "build_transaction_graph",
    # Writers
    "save_clusters_to_db",
    "save_graph_to_db",
    "write_graph",
    "write_key_map",
    "write_user_map",
]
