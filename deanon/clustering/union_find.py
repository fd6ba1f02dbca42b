"""Union-Find (Disjoint Set) data structure for address clustering.

Implements Union-Find with path compression and union by size over dense
integer handles, giving O(α(n)) amortized time per operation, where α is the
inverse Ackermann function (effectively constant for practical n).

Parent and size storage are numpy arrays, which keeps memory at 16 bytes per
address instead of a dict entry per string.

Reference: Cormen et al., "Introduction to Algorithms" (Chapter 21)
"""

from __future__ import annotations

import numpy as np


class UnionFind:
    """Disjoint set forest over handles ``0..n-1``.

    Example:
        >>> uf = UnionFind(4)
        >>> uf.union(0, 1)
        True
        >>> uf.union(1, 2)
        True
        >>> uf.connected(0, 2)
        True
        >>> uf.num_sets
        2
    """

    def __init__(self, n: int) -> None:
        """Initialize ``n`` singleton sets.

        Args:
            n: Number of elements (addresses)
        """
        if n < 0:
            raise ValueError("n must be non-negative")

        self._parent = np.arange(n, dtype=np.int64)
        self._size = np.ones(n, dtype=np.int64)
        self._num_sets = n
        self._max_size = 1 if n > 0 else 0
        self._max_root = 0 if n > 0 else -1

    def _check(self, i: int) -> None:
        # numpy would silently wrap negative indices
        if not 0 <= i < len(self._parent):
            raise IndexError(f"handle {i} out of range for {len(self._parent)} elements")

    def find(self, i: int) -> int:
        """Find root of element with path compression.

        Walks to the root first, then points every node on the path directly
        at it. Iterative so long chains cannot exhaust the call stack.

        Args:
            i: Element to find root for

        Returns:
            Root representative of the set containing i
        """
        self._check(i)
        parent = self._parent

        root = i
        while parent[root] != root:
            root = int(parent[root])

        while parent[i] != root:
            next_i = int(parent[i])
            parent[i] = root
            i = next_i

        return root

    def union(self, i: int, j: int) -> bool:
        """Union sets containing i and j using union by size.

        The smaller tree is attached under the larger one. On equal sizes the
        root of ``j`` goes under the root of ``i``.

        Args:
            i: First element
            j: Second element

        Returns:
            True if two sets were merged, False if already in the same set
        """
        ri = self.find(i)
        rj = self.find(j)

        if ri == rj:
            return False

        if self._size[ri] < self._size[rj]:
            ri, rj = rj, ri

        self._parent[rj] = ri
        self._size[ri] += self._size[rj]
        self._num_sets -= 1

        merged = int(self._size[ri])
        if merged > self._max_size:
            self._max_size = merged
            self._max_root = ri

        return True

    def connected(self, i: int, j: int) -> bool:
        """Check if two elements are in the same set."""
        return self.find(i) == self.find(j)

    def size_of(self, i: int) -> int:
        """Return the size of the set containing i."""
        return int(self._size[self.find(i)])

    def roots(self) -> list[int]:
        """Return the current root of every set, in handle order."""
        return [int(r) for r in np.flatnonzero(self._parent == np.arange(len(self)))]

    @property
    def num_sets(self) -> int:
        """Number of distinct sets."""
        return self._num_sets

    @property
    def max_size(self) -> int:
        """Size of the largest set seen so far."""
        return self._max_size

    @property
    def max_root(self) -> int:
        """Root handle of the largest set at the time it was formed."""
        return self._max_root

    def __len__(self) -> int:
        """Return number of elements tracked."""
        return len(self._parent)
