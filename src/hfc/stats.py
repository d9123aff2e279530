from __future__ import annotations

from pathlib import Path

from hfc.core.codec_zstd import CodecZstd


# -------------------
# Statistiche
# -------------------
def print_stats(
    original_path: str | Path,
    compressed_path: str | Path,
    label: str,
    *,
    zstd_level: int | None = None,
) -> None:
    """Print sizes, ratio and bits per symbol; optionally a zstd reference size."""
    original_path = Path(original_path)
    compressed_path = Path(compressed_path)

    size_orig = original_path.stat().st_size
    size_comp = compressed_path.stat().st_size

    print(f"=== hfc stats ({label}) ===")
    print(f"File originale : {original_path} ({size_orig} byte)")
    print(f"File compresso : {compressed_path} ({size_comp} byte)")

    if size_orig == 0:
        print("File originale vuoto: niente statistiche sensate")
        print("===============================")
        return

    ratio = size_comp / size_orig
    bps = (size_comp * 8) / size_orig

    print(f"Rapporto       : {ratio:.3f} (1.0 = nessuna compressione)")
    print(f"Bit/simbolo    : {bps:.3f} (8.0 = non compresso)")

    if zstd_level is not None:
        ref = CodecZstd(level=zstd_level).compressed_size(original_path.read_bytes())
        print(f"zstd -{zstd_level:<2}      : {ref} byte (rapporto {ref / size_orig:.3f})")

    print("===============================")
