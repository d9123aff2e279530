from __future__ import annotations

from collections.abc import ItemsView, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from hfc.core.tree import HuffmanNode, HuffmanTree
from hfc.core.weights import ALPHABET_SIZE, TERMINATOR, WeightTable, symbol_label
from hfc.errors import ConfigurationError, UnencodableSymbolError


@dataclass(frozen=True)
class CodeTable:
    """Symbol -> bit-string, derived once from a HuffmanTree.

    Read-only: ``codes`` is a mapping proxy over a private copy.
    """

    codes: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "codes", MappingProxyType(dict(self.codes)))

    @classmethod
    def derive(cls, tree: HuffmanTree | None) -> CodeTable:
        if tree is None or tree.leaf_count == 0:
            raise ConfigurationError("albero vuoto: nessun codice derivabile")

        codes: dict[int, str] = {}

        def dfs(node: HuffmanNode, path: str) -> None:
            # Foglia
            if node.is_leaf:
                if node.symbol is None:
                    raise ConfigurationError("foglia senza simbolo")
                codes[node.symbol] = path or "0"
                return
            if node.left is not None:
                dfs(node.left, path + "0")
            if node.right is not None:
                dfs(node.right, path + "1")

        dfs(tree.root, "")
        if not codes:
            raise ConfigurationError("albero senza foglie")
        return cls(codes)

    def code_for(self, symbol: int, *, offset: int | None = None) -> str:
        """Code of an input symbol (0..127).

        The terminator is not an input symbol: byte 0x80 must not alias it.
        """
        if not 0 <= symbol < ALPHABET_SIZE:
            raise UnencodableSymbolError(symbol, offset=offset)
        code = self.codes.get(symbol)
        if code is None:
            raise UnencodableSymbolError(symbol, offset=offset)
        return code

    @property
    def terminator_code(self) -> str:
        code = self.codes.get(TERMINATOR)
        if code is None:
            raise ConfigurationError("il terminatore non ha un codice (peso zero nella tabella)")
        return code

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.codes

    def __len__(self) -> int:
        return len(self.codes)

    def items(self) -> ItemsView[int, str]:
        return self.codes.items()

    @property
    def max_length(self) -> int:
        return max((len(c) for c in self.codes.values()), default=0)

    def encoded_bits(self, weights: WeightTable) -> int:
        """Total weighted code length: bits needed to encode ``weights``."""
        total = 0
        for sym, w in weights.nonzero():
            code = self.terminator_code if sym == TERMINATOR else self.code_for(sym)
            total += w * len(code)
        return total


def render_codes(table: CodeTable) -> list[str]:
    return [f"{sym:>3} {symbol_label(sym):<5} {code}" for sym, code in sorted(table.items())]
