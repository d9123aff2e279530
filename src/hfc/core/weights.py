from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from hfc.core.bitio import DEFAULT_CHUNK_SIZE, iter_chunks
from hfc.errors import FormatError

# -------------------
# Alfabeto
# -------------------
ALPHABET_SIZE = 128  # codici carattere 0..127
TERMINATOR = ALPHABET_SIZE  # simbolo riservato di fine stream, fuori dal range dei byte
N_SYMBOLS = ALPHABET_SIZE + 1

_RECORD_RE = re.compile(r"^(\d+),(\d+),$", re.ASCII)


@dataclass(frozen=True, slots=True)
class WeightTable:
    """Occurrence count per symbol (index = symbol), terminator slot included."""

    counts: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.counts) != N_SYMBOLS:
            raise ValueError(f"WeightTable: attesi {N_SYMBOLS} pesi, trovati {len(self.counts)}")
        for sym, w in enumerate(self.counts):
            if w < 0:
                raise ValueError(f"WeightTable: peso negativo per simbolo {sym}")

    def __getitem__(self, symbol: int) -> int:
        return self.counts[symbol]

    def __len__(self) -> int:
        return len(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts)

    def nonzero(self) -> list[tuple[int, int]]:
        return [(sym, w) for sym, w in enumerate(self.counts) if w > 0]

    @classmethod
    def from_counts(cls, counts: Mapping[int, int]) -> WeightTable:
        out = [0] * N_SYMBOLS
        for sym, w in counts.items():
            if sym < 0 or sym >= N_SYMBOLS:
                raise ValueError(f"WeightTable: simbolo fuori range: {sym}")
            out[sym] = int(w)
        return cls(tuple(out))


def from_source(source: BinaryIO | Iterable[bytes], *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> WeightTable:
    """Count every byte of ``source`` until exhaustion.

    ``source`` is a binary file object or an iterable of byte chunks.
    Bytes outside 0..127 are ignored. The terminator gets weight 1: it is
    emitted exactly once per encoded stream.
    """
    chunks = iter_chunks(source, chunk_size) if hasattr(source, "read") else source
    freq = [0] * N_SYMBOLS
    for chunk in chunks:
        for b in chunk:
            if b < ALPHABET_SIZE:
                freq[b] += 1
    freq[TERMINATOR] = 1
    return WeightTable(tuple(freq))


def from_bytes(data: bytes) -> WeightTable:
    return from_source([data])


def from_persisted(lines: Iterable[str]) -> WeightTable:
    """Parse ``index,count,`` records (one per symbol, ascending, no gaps)."""
    freq: list[int] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        m = _RECORD_RE.match(line)
        if m is None:
            raise FormatError(f"record malformato {raw.rstrip()!r} (atteso 'indice,peso,')", line=lineno)
        idx = int(m.group(1))
        w = int(m.group(2))
        if idx >= N_SYMBOLS:
            raise FormatError(f"indice fuori range: {idx} (max {N_SYMBOLS - 1})", line=lineno)
        if idx < len(freq):
            raise FormatError(f"indice duplicato o fuori ordine: {idx}", line=lineno)
        if idx > len(freq):
            raise FormatError(f"indice mancante: {len(freq)} (trovato {idx})", line=lineno)
        freq.append(w)

    if len(freq) != N_SYMBOLS:
        raise FormatError(f"attesi {N_SYMBOLS} record, trovati {len(freq)}")
    return WeightTable(tuple(freq))


def to_persisted(table: WeightTable) -> Iterator[str]:
    for sym, w in enumerate(table.counts):
        yield f"{sym},{w},"


def load_weights_file(path: str | Path) -> WeightTable:
    p = Path(path)
    with p.open("r", encoding="utf-8") as fp:
        return from_persisted(fp)


def save_weights_file(table: WeightTable, path: str | Path) -> None:
    p = Path(path)
    with p.open("w", encoding="utf-8", newline="\n") as fp:
        for line in to_persisted(table):
            fp.write(line + "\n")


def symbol_label(symbol: int) -> str:
    if symbol == TERMINATOR:
        return "<EOT>"
    if symbol < 32 or symbol == 127:
        return "[ ]"
    return f"({chr(symbol)})"


def render_weights(table: WeightTable, *, all_symbols: bool = False) -> list[str]:
    """Human readable dump, one line per symbol.

    Non-printing characters (0-31, 127) show as ``[ ]``. By default only
    symbols with nonzero weight are listed.
    """
    lines: list[str] = []
    for sym, w in enumerate(table.counts):
        if w == 0 and not all_symbols:
            continue
        lines.append(f"i:{sym} {symbol_label(sym)} = {w}")
    return lines
