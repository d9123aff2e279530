"""File sessions: scoped handles around the core codec.

Each call builds its own WeightTable / HuffmanTree / CodeTable and owns the
input and output handles for its whole duration. Handles are opened with
``with`` so they are flushed and closed on every exit path, errors included.

The core never resolves paths; this module is the only place that does.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

from hfc.core.bitio import DEFAULT_CHUNK_SIZE
from hfc.core.codec import DecodeStats, EncodeStats, decode_stream, encode_stream
from hfc.core.codes import CodeTable
from hfc.core.tree import HuffmanTree
from hfc.core.weights import (
    WeightTable,
    from_source,
    load_weights_file,
    save_weights_file,
)
from hfc.errors import UsageError


@dataclass(frozen=True)
class EncodeReport:
    input_path: Path
    output_path: Path
    weights_path: Path | None
    weights_origin: str  # "analyzed" | "loaded"
    optimize_ties: bool
    max_code_length: int
    stats: EncodeStats


@dataclass(frozen=True)
class DecodeReport:
    input_path: Path
    output_path: Path
    weights_path: Path
    optimize_ties: bool
    stats: DecodeStats


@dataclass(frozen=True)
class VerifyReport:
    input_path: Path
    weights_path: Path
    symbols: int
    bytes_in: int
    trailing_bytes: int  # byte dopo quello del terminatore (non letti dal decoder)
    sha256: str


class _HashSink:
    """Write-only sink that hashes what the decoder emits."""

    def __init__(self) -> None:
        self._h = hashlib.sha256()

    def write(self, b: bytes) -> int:
        self._h.update(b)
        return len(b)

    def flush(self) -> None:
        pass

    def hexdigest(self) -> str:
        return self._h.hexdigest()


def _has_content(p: Path | None) -> bool:
    return p is not None and p.is_file() and p.stat().st_size > 0


def _require_weights(weights_path: str | Path | None) -> Path:
    if weights_path is None:
        raise UsageError("file dei pesi richiesto (--weights o profile.weights)")
    p = Path(weights_path)
    if not _has_content(p):
        raise UsageError(f"file dei pesi mancante o vuoto: {p}")
    return p


def analyze_file(input_path: str | Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> WeightTable:
    with Path(input_path).open("rb") as src:
        return from_source(src, chunk_size=chunk_size)


def generate_weights(
    input_path: str | Path,
    weights_path: str | Path,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> WeightTable:
    """Frequency analysis of ``input_path`` saved as a weight file."""
    table = analyze_file(input_path, chunk_size=chunk_size)
    save_weights_file(table, weights_path)
    return table


def encode_file(
    input_path: str | Path,
    output_path: str | Path,
    weights_path: str | Path | None = None,
    *,
    optimize_ties: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> EncodeReport:
    """Encode ``input_path`` into ``output_path``.

    If ``weights_path`` points to a non-empty file the weights are loaded from
    it, otherwise they come from analysing the input. When ``weights_path`` is
    given, the table actually used is written there, so decode can rebuild the
    same tree.
    """
    inp = Path(input_path)
    out = Path(output_path)
    wp = Path(weights_path) if weights_path is not None else None

    if wp is not None and _has_content(wp):
        table = load_weights_file(wp)
        origin = "loaded"
    else:
        table = analyze_file(inp, chunk_size=chunk_size)
        origin = "analyzed"

    if wp is not None:
        save_weights_file(table, wp)

    tree = HuffmanTree.build(table, optimize_ties)
    codes = CodeTable.derive(tree)

    with inp.open("rb") as src, out.open("wb") as dst:
        stats = encode_stream(src, dst, codes, chunk_size=chunk_size)

    return EncodeReport(
        input_path=inp,
        output_path=out,
        weights_path=wp,
        weights_origin=origin,
        optimize_ties=optimize_ties,
        max_code_length=codes.max_length,
        stats=stats,
    )


def decode_file(
    input_path: str | Path,
    output_path: str | Path,
    weights_path: str | Path | None,
    *,
    optimize_ties: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> DecodeReport:
    """Decode ``input_path`` into ``output_path``; the weight file is mandatory."""
    inp = Path(input_path)
    out = Path(output_path)
    wp = _require_weights(weights_path)

    tree = HuffmanTree.build(load_weights_file(wp), optimize_ties)

    with inp.open("rb") as src, out.open("wb") as dst:
        stats = decode_stream(src, dst, tree, chunk_size=chunk_size)

    return DecodeReport(
        input_path=inp,
        output_path=out,
        weights_path=wp,
        optimize_ties=optimize_ties,
        stats=stats,
    )


def verify_file(
    input_path: str | Path,
    weights_path: str | Path | None,
    *,
    optimize_ties: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> VerifyReport:
    """Decode without writing anything: the stream must reach the terminator."""
    inp = Path(input_path)
    wp = _require_weights(weights_path)

    tree = HuffmanTree.build(load_weights_file(wp), optimize_ties)
    sink = _HashSink()

    with inp.open("rb") as src:
        stats = decode_stream(src, sink, tree, chunk_size=chunk_size)

    size = inp.stat().st_size
    return VerifyReport(
        input_path=inp,
        weights_path=wp,
        symbols=stats.symbols,
        bytes_in=stats.bytes_in,
        trailing_bytes=max(0, size - stats.bytes_in),
        sha256=sink.hexdigest(),
    )
