from __future__ import annotations

import heapq
from dataclasses import dataclass

from hfc.core.weights import WeightTable
from hfc.errors import ConfigurationError, CorruptStreamError


# -------------------
# Strutture di base Huffman
# -------------------
@dataclass(frozen=True)
class HuffmanNode:
    weight: int
    symbol: int | None = None  # None per nodi interni
    left: HuffmanNode | None = None
    right: HuffmanNode | None = None
    height: int = 0  # 0 per foglie
    low: int = 0  # simbolo minimo nel sottoalbero

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


def _tie_key(node: HuffmanNode, optimize_ties: bool) -> tuple[int, ...]:
    # low e' unico tra i nodi vivi (sottoalberi disgiunti): le chiavi non
    # collidono mai, quindi heapq non confronta i nodi.
    if optimize_ties:
        return (node.weight, node.height, node.low)
    return (node.weight, node.low)


class HuffmanTree:
    """Huffman code tree built from a WeightTable.

    Tie-break policy, among nodes of equal weight:
      - optimize_ties=False: the node holding the lowest symbol index first.
      - optimize_ties=True: the shallower subtree first (lowest symbol index
        after that). Merging shallow nodes early keeps the longest code as
        short as possible.

    Both give an optimal total encoded length; exact codes may differ.
    The first popped node becomes the left child ('0').
    """

    __slots__ = ("_root", "_optimize_ties", "_leaf_count")

    def __init__(self, root: HuffmanNode, *, optimize_ties: bool, leaf_count: int) -> None:
        self._root = root
        self._optimize_ties = optimize_ties
        self._leaf_count = leaf_count

    @classmethod
    def build(cls, weights: WeightTable, optimize_ties: bool = False) -> HuffmanTree:
        heap: list[tuple[tuple[int, ...], HuffmanNode]] = []

        for sym, w in enumerate(weights.counts):
            if w > 0:
                node = HuffmanNode(weight=w, symbol=sym, low=sym)
                heapq.heappush(heap, (_tie_key(node, optimize_ties), node))

        if not heap:
            raise ConfigurationError("nessun simbolo con peso > 0: impossibile costruire l'albero")

        leaf_count = len(heap)

        # Caso degenere (una sola foglia): la radice e' la foglia, codice '0'.
        while len(heap) > 1:
            _, n1 = heapq.heappop(heap)
            _, n2 = heapq.heappop(heap)
            parent = HuffmanNode(
                weight=n1.weight + n2.weight,
                left=n1,
                right=n2,
                height=max(n1.height, n2.height) + 1,
                low=min(n1.low, n2.low),
            )
            heapq.heappush(heap, (_tie_key(parent, optimize_ties), parent))

        return cls(heap[0][1], optimize_ties=optimize_ties, leaf_count=leaf_count)

    @property
    def root(self) -> HuffmanNode:
        return self._root

    @property
    def optimize_ties(self) -> bool:
        return self._optimize_ties

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    @property
    def max_depth(self) -> int:
        # albero degenere: il codice ha comunque 1 bit
        return max(1, self._root.height)

    def match(self, bits: str) -> tuple[int, int] | None:
        """Resolve a prefix of ``bits`` to a leaf.

        Returns (symbol, bits_used), or None when ``bits`` ends before a leaf.
        Raises CorruptStreamError for a path that cannot exist in this tree.
        """
        node = self._root
        if node.is_leaf:
            if not bits:
                return None
            if bits[0] != "0":
                raise CorruptStreamError("bit '1' con albero a foglia singola")
            return node.symbol, 1

        for i, bit in enumerate(bits):
            nxt = node.left if bit == "0" else node.right
            if nxt is None:
                raise CorruptStreamError("percorso non valido nell'albero")
            node = nxt
            if node.is_leaf:
                return node.symbol, i + 1
        return None
