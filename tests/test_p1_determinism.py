from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from hfc import session
from hfc.core.codec import encode_bytes
from hfc.core.codes import CodeTable
from hfc.core.tree import HuffmanTree
from hfc.core.weights import TERMINATOR, WeightTable, from_bytes

pytestmark = pytest.mark.p1


def sha256_file(p: Path) -> str:
    h = hashlib.sha256()
    with p.open("rb") as f:
        while True:
            b = f.read(1024 * 1024)
            if not b:
                break
            h.update(b)
    return h.hexdigest()


def _tie_heavy_table() -> WeightTable:
    # molti pesi uguali: solo la regola di tie-break decide la forma dell'albero
    counts = {sym: 1 + (sym % 3) for sym in range(32, 96)}
    counts[TERMINATOR] = 1
    return WeightTable.from_counts(counts)


@pytest.mark.parametrize("optimize", [False, True])
def test_same_table_same_codes(optimize: bool) -> None:
    table = _tie_heavy_table()
    a = CodeTable.derive(HuffmanTree.build(table, optimize))
    b = CodeTable.derive(HuffmanTree.build(WeightTable(tuple(table.counts)), optimize))
    assert dict(a.items()) == dict(b.items())


@pytest.mark.parametrize("optimize", [False, True])
def test_same_input_same_bytes(optimize: bool) -> None:
    data = bytes(range(32, 96)) * 7 + b"\n"
    blobs = {
        encode_bytes(data, CodeTable.derive(HuffmanTree.build(from_bytes(data), optimize)))
        for _ in range(3)
    }
    assert len(blobs) == 1


def test_file_encode_is_reproducible(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    inp.write_text("determinismo: stesso input, stessi byte\n" * 50, encoding="utf-8")

    outs = []
    for i in range(2):
        out = tmp_path / f"out{i}.hfc"
        w = tmp_path / f"w{i}.txt"
        session.encode_file(inp, out, w, optimize_ties=True, chunk_size=13)
        outs.append((sha256_file(out), sha256_file(w)))

    assert outs[0] == outs[1]
