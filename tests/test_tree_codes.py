from __future__ import annotations

import dataclasses
import itertools

import pytest

from hfc.core.codes import CodeTable, render_codes
from hfc.core.tree import HuffmanTree
from hfc.core.weights import N_SYMBOLS, TERMINATOR, WeightTable, from_bytes
from hfc.errors import ConfigurationError, CorruptStreamError, UnencodableSymbolError

A, B, C = ord("A"), ord("B"), ord("C")


def _abc_table() -> WeightTable:
    return WeightTable.from_counts({A: 3, B: 1, C: 1, TERMINATOR: 1})


def _tie_table() -> WeightTable:
    # due coppie di pesi uguali: le due politiche risolvono i pareggi in modo diverso
    return WeightTable.from_counts({0: 1, 1: 1, 2: 2, 3: 2})


def _assert_prefix_free(codes: CodeTable) -> None:
    for (s1, c1), (s2, c2) in itertools.permutations(codes.items(), 2):
        assert not c2.startswith(c1), f"{s1}:{c1} e' prefisso di {s2}:{c2}"


def test_abc_scenario_codes() -> None:
    codes = CodeTable.derive(HuffmanTree.build(_abc_table(), False))
    assert len(codes.code_for(A)) <= len(codes.code_for(B))
    assert len(codes.code_for(A)) <= len(codes.code_for(C))
    assert codes.codes == {A: "0", TERMINATOR: "10", B: "110", C: "111"}
    _assert_prefix_free(codes)


@pytest.mark.parametrize("optimize", [False, True])
def test_codes_prefix_free_on_text(optimize: bool) -> None:
    table = from_bytes(b"the quick brown fox jumps over the lazy dog\n" * 3 + bytes(range(0, 128, 7)))
    tree = HuffmanTree.build(table, optimize)
    codes = CodeTable.derive(tree)
    assert len(codes) == tree.leaf_count == len(table.nonzero())
    assert codes.max_length == tree.max_depth
    _assert_prefix_free(codes)


def test_zero_weight_symbols_have_no_code() -> None:
    codes = CodeTable.derive(HuffmanTree.build(_abc_table(), False))
    assert ord("D") not in codes
    with pytest.raises(UnencodableSymbolError) as ei:
        codes.code_for(ord("D"), offset=7)
    assert ei.value.symbol == ord("D")
    assert ei.value.offset == 7


def test_terminator_is_not_an_input_symbol() -> None:
    codes = CodeTable.derive(HuffmanTree.build(_abc_table(), False))
    assert TERMINATOR in codes
    assert codes.terminator_code == "10"
    with pytest.raises(UnencodableSymbolError) as ei:
        codes.code_for(TERMINATOR, offset=4)
    assert ei.value.symbol == TERMINATOR
    assert ei.value.offset == 4


def test_terminator_code_missing_is_configuration_error() -> None:
    codes = CodeTable.derive(HuffmanTree.build(WeightTable.from_counts({A: 1, B: 1}), False))
    with pytest.raises(ConfigurationError):
        _ = codes.terminator_code


def test_code_table_and_tree_are_read_only() -> None:
    src = {A: "0", TERMINATOR: "1"}
    codes = CodeTable(src)
    src[B] = "11"
    assert B not in codes
    with pytest.raises(TypeError):
        codes.codes[B] = "11"
    with pytest.raises(dataclasses.FrozenInstanceError):
        codes.codes = {}

    tree = HuffmanTree.build(_abc_table(), False)
    with pytest.raises(dataclasses.FrozenInstanceError):
        tree.root.weight = 0


def test_all_zero_table_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        HuffmanTree.build(WeightTable((0,) * N_SYMBOLS), True)
    with pytest.raises(ConfigurationError):
        CodeTable.derive(None)


def test_degenerate_single_leaf_tree() -> None:
    tree = HuffmanTree.build(WeightTable.from_counts({TERMINATOR: 1}), False)
    assert tree.leaf_count == 1
    assert tree.root.is_leaf
    assert tree.max_depth == 1

    codes = CodeTable.derive(tree)
    assert codes.codes == {TERMINATOR: "0"}

    assert tree.match("") is None
    assert tree.match("0110") == (TERMINATOR, 1)
    with pytest.raises(CorruptStreamError):
        tree.match("1")


def test_match_partial_and_complete() -> None:
    tree = HuffmanTree.build(_abc_table(), False)
    assert tree.match("") is None
    assert tree.match("1") is None
    assert tree.match("11") is None
    assert tree.match("110") == (B, 3)
    assert tree.match("0111") == (A, 1)
    assert tree.match("10") == (TERMINATOR, 2)


def test_optimize_ties_changes_tie_resolution() -> None:
    table = _tie_table()
    plain = CodeTable.derive(HuffmanTree.build(table, False))
    opt = CodeTable.derive(HuffmanTree.build(table, True))

    # lowest symbol index first
    assert plain.codes == {3: "0", 0: "100", 1: "101", 2: "11"}
    # shallow subtrees first
    assert opt.codes == {0: "00", 1: "01", 2: "10", 3: "11"}

    _assert_prefix_free(plain)
    _assert_prefix_free(opt)

    # stessa lunghezza totale (ottimalita'), profondita' massima non peggiore
    assert plain.encoded_bits(table) == opt.encoded_bits(table) == 12
    assert opt.max_length < plain.max_length


@pytest.mark.parametrize("optimize", [False, True])
def test_same_table_twice_same_codes(optimize: bool) -> None:
    table = from_bytes(b"aaaabbbbccccddddeeeeffff\n" * 4)
    c1 = CodeTable.derive(HuffmanTree.build(table, optimize))
    c2 = CodeTable.derive(HuffmanTree.build(table, optimize))
    assert c1 == c2


def test_optimize_keeps_total_length() -> None:
    # molti pareggi: pesi a potenze di 2 ripetute
    counts = {sym: 1 << (sym % 4) for sym in range(40)}
    counts[TERMINATOR] = 1
    table = WeightTable.from_counts(counts)
    plain = CodeTable.derive(HuffmanTree.build(table, False))
    opt = CodeTable.derive(HuffmanTree.build(table, True))
    assert plain.encoded_bits(table) == opt.encoded_bits(table)
    assert set(plain.codes) == set(opt.codes)
    _assert_prefix_free(opt)


def test_encoded_bits_and_render() -> None:
    table = _abc_table()
    codes = CodeTable.derive(HuffmanTree.build(table, False))
    assert codes.encoded_bits(table) == 3 * 1 + 1 * 3 + 1 * 3 + 1 * 2
    assert codes.max_length == 3

    lines = render_codes(codes)
    assert len(lines) == 4
    assert "(A)" in lines[0] and lines[0].endswith(" 0")
    assert "<EOT>" in lines[-1] and lines[-1].endswith(" 10")
