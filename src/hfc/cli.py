"""hfc (Huffman File Codec) CLI.

This is the stable CLI entrypoint (console-script: ``hfc``).

UX policy:
  - ``weights ...`` produces/inspects weight files.
  - ``file ...`` encodes/decodes/verifies; decode needs the same weights and
    the same tie-break policy (--optimize) used by encode.
  - Settings can come from a profile (--profile); CLI flags win.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from hfc.core.bitio import DEFAULT_CHUNK_SIZE
from hfc.core.codes import CodeTable, render_codes
from hfc.core.tree import HuffmanTree
from hfc.core.weights import load_weights_file, render_weights
from hfc.errors import EXIT_GENERIC, EXIT_USAGE, HFCError
from hfc.profile import ProfileError, ProfileV1, load_profile

DEFAULT_ZSTD_LEVEL = 19


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")


def _add_codec_args(p: argparse.ArgumentParser, *, weights_help: str) -> None:
    p.add_argument("--weights", type=Path, default=None, help=weights_help)
    p.add_argument(
        "--optimize",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Tie-break policy: prefer shallow subtrees on equal weights (default: off)",
    )
    p.add_argument(
        "--profile",
        default=None,
        help="Profile JSON. Use '@file.json' to load from file, or pass JSON inline.",
    )


def _resolve(ns: argparse.Namespace) -> tuple[Path | None, bool, int]:
    """Merge CLI flags and profile. Precedence: CLI > profile > default."""
    prof: ProfileV1 | None = load_profile(ns.profile) if ns.profile else None

    weights = ns.weights
    if weights is None and prof is not None:
        weights = prof.weights_path()

    if ns.optimize is not None:
        optimize = bool(ns.optimize)
    elif prof is not None and prof.optimize_ties is not None:
        optimize = prof.optimize_ties
    else:
        optimize = False

    chunk_size = (
        prof.chunk_size if prof is not None and prof.chunk_size is not None else DEFAULT_CHUNK_SIZE
    )
    return weights, optimize, chunk_size


def _weights_generate(input_path: Path, weights_path: Path, *, show: bool) -> int:
    from hfc.session import generate_weights

    table = generate_weights(input_path, weights_path)
    if show:
        for line in render_weights(table):
            print(line)
    print(f"weights: {weights_path} ({len(table.nonzero())} simboli con peso > 0)")
    return 0


def _weights_show(weights_path: Path, *, all_symbols: bool) -> int:
    table = load_weights_file(weights_path)
    for line in render_weights(table, all_symbols=all_symbols):
        print(line)
    return 0


def _file_encode(ns: argparse.Namespace) -> int:
    from hfc.session import encode_file
    from hfc.stats import print_stats

    weights, optimize, chunk_size = _resolve(ns)
    rep = encode_file(
        ns.input, ns.output, weights, optimize_ties=optimize, chunk_size=chunk_size
    )
    if not ns.quiet:
        if rep.weights_path is not None:
            print(f"encode: pesi {rep.weights_origin} -> {rep.weights_path}")
        print(
            f"encode: simboli={rep.stats.symbols} bit={rep.stats.bits} "
            f"pad={rep.stats.pad_bits} codice_max={rep.max_code_length}"
        )
        print_stats(rep.input_path, rep.output_path, "encode")
    return 0


def _file_decode(ns: argparse.Namespace) -> int:
    from hfc.session import decode_file

    weights, optimize, chunk_size = _resolve(ns)
    rep = decode_file(ns.input, ns.output, weights, optimize_ties=optimize, chunk_size=chunk_size)
    print(f"decode: simboli={rep.stats.symbols} -> {rep.output_path}")
    return 0


def _file_verify(ns: argparse.Namespace) -> int:
    from hfc.session import verify_file

    weights, optimize, chunk_size = _resolve(ns)
    rep = verify_file(ns.input, weights, optimize_ties=optimize, chunk_size=chunk_size)
    print(f"simboli={rep.symbols} sha256={rep.sha256}")
    if rep.trailing_bytes:
        print(f"attenzione: {rep.trailing_bytes} byte dopo il terminatore ignorati")
    print("OK")
    return 0


def _file_codes(weights_path: Path, *, optimize: bool) -> int:
    tree = HuffmanTree.build(load_weights_file(weights_path), optimize)
    codes = CodeTable.derive(tree)
    for line in render_codes(codes):
        print(line)
    print(f"simboli={len(codes)} codice_max={codes.max_length}")
    return 0


def _file_stats(ns: argparse.Namespace) -> int:
    from hfc.stats import print_stats

    prof = load_profile(ns.profile) if ns.profile else None
    prof_level = prof.zstd_level if prof is not None else None

    level = None
    if ns.zstd_level is not None:
        level = int(ns.zstd_level)
    elif prof_level is not None:
        level = prof_level
    elif ns.zstd:
        level = DEFAULT_ZSTD_LEVEL
    print_stats(ns.original, ns.compressed, "stats", zstd_level=level)
    return 0


def _profile_validate(profile_arg: str) -> int:
    # load is the validation
    load_profile(profile_arg)
    print("OK")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hfc", description="hfc - Huffman File Codec")
    sub = p.add_subparsers(dest="cmd", required=True)

    # weights ...
    p_w = sub.add_parser("weights", help="Frequency weights (generate/show)")
    sub_w = p_w.add_subparsers(dest="weights_cmd", required=True)

    p_wg = sub_w.add_parser("generate", help="Analyze a file and save its weights")
    p_wg.add_argument("input", type=Path)
    p_wg.add_argument("weights", type=Path)
    p_wg.add_argument("--show", action="store_true", help="Also print the weights")
    _add_common_args(p_wg)

    p_ws = sub_w.add_parser("show", help="Print a weight file")
    p_ws.add_argument("weights", type=Path)
    p_ws.add_argument("--all", action="store_true", help="Include zero-weight symbols")
    _add_common_args(p_ws)

    # file ...
    p_file = sub.add_parser("file", help="File operations (encode/decode/verify)")
    sub_file = p_file.add_subparsers(dest="file_cmd", required=True)

    p_e = sub_file.add_parser("encode", help="Huffman encode a file")
    p_e.add_argument("input", type=Path)
    p_e.add_argument("output", type=Path)
    _add_codec_args(
        p_e,
        weights_help="Weight file: loaded if non-empty, else generated from input and saved here",
    )
    p_e.add_argument("--quiet", action="store_true", help="Do not print stats")
    _add_common_args(p_e)

    p_d = sub_file.add_parser("decode", help="Decode a file produced by 'file encode'")
    p_d.add_argument("input", type=Path)
    p_d.add_argument("output", type=Path)
    _add_codec_args(p_d, weights_help="Weight file used by encode (required)")
    _add_common_args(p_d)

    p_v = sub_file.add_parser("verify", help="Decode without output: check it reaches the terminator")
    p_v.add_argument("input", type=Path)
    _add_codec_args(p_v, weights_help="Weight file used by encode (required)")
    _add_common_args(p_v)

    p_c = sub_file.add_parser("codes", help="Print the code table of a weight file")
    p_c.add_argument("weights", type=Path)
    p_c.add_argument("--optimize", action=argparse.BooleanOptionalAction, default=False)
    _add_common_args(p_c)

    p_s = sub_file.add_parser("stats", help="Compare original and compressed sizes")
    p_s.add_argument("original", type=Path)
    p_s.add_argument("compressed", type=Path)
    p_s.add_argument("--zstd", action="store_true", help="Also print a zstd reference size")
    p_s.add_argument("--zstd-level", type=int, default=None, help="zstd level (default 19)")
    p_s.add_argument(
        "--profile",
        default=None,
        help="Profile JSON; its zstd_level enables the zstd reference line",
    )
    _add_common_args(p_s)

    # profile-validate
    p_pv = sub.add_parser("profile-validate", help="Validate a profile (v1)")
    p_pv.add_argument("profile", help="Profile JSON (@file.json or inline JSON)")
    _add_common_args(p_pv)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    try:
        if ns.cmd == "weights":
            if ns.weights_cmd == "generate":
                return _weights_generate(ns.input, ns.weights, show=bool(ns.show))
            if ns.weights_cmd == "show":
                return _weights_show(ns.weights, all_symbols=bool(ns.all))
            raise AssertionError("unreachable")

        if ns.cmd == "file":
            if ns.file_cmd == "encode":
                return _file_encode(ns)
            if ns.file_cmd == "decode":
                return _file_decode(ns)
            if ns.file_cmd == "verify":
                return _file_verify(ns)
            if ns.file_cmd == "codes":
                return _file_codes(ns.weights, optimize=bool(ns.optimize))
            if ns.file_cmd == "stats":
                return _file_stats(ns)
            raise AssertionError("unreachable")

        if ns.cmd == "profile-validate":
            return _profile_validate(str(ns.profile))

        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except ProfileError as e:
        # Treat as usage/config error.
        if getattr(ns, "debug", False):
            raise
        print(f"[hfc] {e}", file=sys.stderr)
        return EXIT_USAGE
    except HFCError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[hfc] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[hfc] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
