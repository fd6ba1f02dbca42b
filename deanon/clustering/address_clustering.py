"""Address Clustering using the Multi-Input Heuristic.

Implements the Multi-Input Heuristic (MIH), also called common-input-ownership:
addresses that appear together as inputs in the same transaction are
controlled by the same entity.

This is one of the most reliable clustering heuristics, based on the fact
that only the owner of all inputs can sign a transaction.

Reference: Meiklejohn et al. (2013) "A Fistful of Bitcoins"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from deanon.clustering.address_index import AddressIndex
from deanon.clustering.errors import UnknownAddressError
from deanon.clustering.records import TransactionRecord
from deanon.clustering.union_find import UnionFind

logger = logging.getLogger(__name__)


@dataclass
class AddressCluster:
    """Represents a cluster of addresses belonging to the same entity.

    Attributes:
        cluster_id: Dense cluster identifier
        addresses: Addresses in this cluster, in handle order
    """

    cluster_id: int
    addresses: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.addresses)


class ClusterView:
    """Read-only result of clustering: UserMap, KeyMap and summary stats.

    ``user_map`` maps cluster id to its addresses and ``key_map`` maps each
    address back to its cluster id. The two are exact inverses.
    """

    def __init__(
        self,
        user_map: dict[int, list[str]],
        key_map: dict[str, int],
        num_clusters: int,
        largest_cluster_size: int,
    ) -> None:
        self._user_map = MappingProxyType(
            {cid: tuple(addrs) for cid, addrs in user_map.items()}
        )
        self._key_map = MappingProxyType(dict(key_map))
        self.num_clusters = num_clusters
        self.largest_cluster_size = largest_cluster_size

    @property
    def user_map(self) -> Mapping[int, tuple[str, ...]]:
        return self._user_map

    @property
    def key_map(self) -> Mapping[str, int]:
        return self._key_map

    def cluster_of(self, address: str) -> int:
        """Return the cluster id of an address.

        Raises:
            UnknownAddressError: If the address was never clustered
        """
        try:
            return self._key_map[address]
        except KeyError:
            raise UnknownAddressError(address) from None

    def addresses_of(self, cluster_id: int) -> tuple[str, ...]:
        return self._user_map[cluster_id]

    def __len__(self) -> int:
        return len(self._user_map)

    def __repr__(self) -> str:
        return (
            f"ClusterView(clusters={self.num_clusters}, "
            f"addresses={len(self._key_map)}, "
            f"largest={self.largest_cluster_size})"
        )


def group_input_addresses(
    records: Iterable[TransactionRecord],
) -> dict[str, list[str]]:
    """Group input addresses by transaction id.

    Each group holds the distinct input addresses of one transaction in
    first-seen order; groups are ordered by first-seen transaction id.
    Output records are ignored.
    """
    groups: dict[str, dict[str, None]] = {}
    for record in records:
        if record.is_input:
            groups.setdefault(record.transaction_id, {})[record.address] = None

    return {tx_id: list(addrs) for tx_id, addrs in groups.items()}


def cluster_addresses(
    uf: UnionFind, index: AddressIndex, input_addresses: Sequence[str]
) -> int:
    """Cluster addresses that appear together in a transaction's inputs.

    Unions the first input address with every other one, which is
    transitively equivalent to unioning all pairs.

    Args:
        uf: UnionFind data structure to update
        index: Address-to-handle mapping used by ``uf``
        input_addresses: Distinct addresses from one transaction's inputs

    Returns:
        Number of unions that merged two previously separate sets

    Example:
        >>> index = AddressIndex(["addr1", "addr2", "addr3"])
        >>> uf = UnionFind(len(index))
        >>> cluster_addresses(uf, index, ["addr1", "addr2", "addr3"])
        2
    """
    if len(input_addresses) < 2:
        return 0

    first = index.handle_of(input_addresses[0])
    merged = 0
    for address in input_addresses[1:]:
        if uf.union(first, index.handle_of(address)):
            merged += 1
    return merged


def merge_addresses(
    records: Sequence[TransactionRecord],
    index: AddressIndex | None = None,
) -> tuple[AddressIndex, UnionFind]:
    """Merge addresses based on joint control of transaction inputs.

    Args:
        records: Full parsed record set
        index: Prebuilt address index (built from ``records`` if omitted)

    Returns:
        (index, uf) with all joint-input unions applied
    """
    if index is None:
        index = AddressIndex.from_records(records)

    uf = UnionFind(len(index))
    groups = group_input_addresses(records)

    multi_input = 0
    merges = 0
    for input_addresses in groups.values():
        if len(input_addresses) > 1:
            multi_input += 1
            merges += cluster_addresses(uf, index, input_addresses)

    logger.info(
        f"Merged {len(index):,} addresses: {len(groups):,} transactions with inputs, "
        f"{multi_input:,} multi-input, {merges:,} merges, {uf.num_sets:,} clusters"
    )
    return index, uf


def build_clusters(index: AddressIndex, uf: UnionFind) -> ClusterView:
    """Assign dense cluster ids to the finalized partition.

    Handles are enumerated in order and each new root receives the next id,
    starting at 0. UserMap and KeyMap are built in the same pass.
    """
    root_to_cluster: dict[int, int] = {}
    user_map: dict[int, list[str]] = {}
    key_map: dict[str, int] = {}

    for handle, address in enumerate(index.addresses):
        root = uf.find(handle)
        cluster_id = root_to_cluster.get(root)
        if cluster_id is None:
            cluster_id = len(root_to_cluster)
            root_to_cluster[root] = cluster_id
            user_map[cluster_id] = []
        user_map[cluster_id].append(address)
        key_map[address] = cluster_id

    return ClusterView(
        user_map=user_map,
        key_map=key_map,
        num_clusters=uf.num_sets,
        largest_cluster_size=uf.max_size,
    )


def cluster_transactions(records: Sequence[TransactionRecord]) -> ClusterView:
    """Run index, merge and cluster-id assignment over a record set."""
    index, uf = merge_addresses(records)
    view = build_clusters(index, uf)
    if uf.max_root >= 0:
        logger.debug(
            f"Largest cluster: {view.largest_cluster_size:,} addresses, "
            f"id {view.cluster_of(index.address_of(uf.max_root))}"
        )
    return view


def get_cluster_stats(view: ClusterView) -> dict:
    """Get statistics about the clustering result.

    Args:
        view: Finalized clusters

    Returns:
        Dictionary with clustering statistics:
        - cluster_count: Number of distinct clusters
        - total_addresses: Total addresses clustered
        - max_cluster_size: Size of largest cluster
        - min_cluster_size: Size of smallest cluster
        - avg_cluster_size: Average cluster size
        - multi_address_clusters: Clusters with more than one address
    """
    if not len(view):
        return {
            "cluster_count": 0,
            "total_addresses": 0,
            "max_cluster_size": 0,
            "min_cluster_size": 0,
            "avg_cluster_size": 0.0,
            "multi_address_clusters": 0,
        }

    sizes = [len(addrs) for addrs in view.user_map.values()]

    return {
        "cluster_count": view.num_clusters,
        "total_addresses": sum(sizes),
        "max_cluster_size": view.largest_cluster_size,
        "min_cluster_size": min(sizes),
        "avg_cluster_size": sum(sizes) / len(sizes),
        "multi_address_clusters": sum(1 for s in sizes if s > 1),
    }


def get_cluster_for_address(view: ClusterView, address: str) -> AddressCluster | None:
    """Get the cluster containing a specific address.

    Args:
        view: Finalized clusters
        address: Address to look up

    Returns:
        AddressCluster if address is tracked, None otherwise
    """
    cluster_id = view.key_map.get(address)
    if cluster_id is None:
        return None

    return AddressCluster(
        cluster_id=cluster_id,
        addresses=list(view.addresses_of(cluster_id)),
    )
