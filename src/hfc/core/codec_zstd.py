from __future__ import annotations

from dataclasses import dataclass

try:
    import zstandard as zstd  # type: ignore
except Exception:  # pragma: no cover
    zstd = None


@dataclass
class CodecZstd:
    """
    Compressore di riferimento per le statistiche (``hfc file stats --zstd``).
    Nota: non produce file hfc; serve solo a confrontare la dimensione
    Huffman con quella di un compressore general-purpose.

    "tight" toglie l'overhead del frame (no content size, no checksum),
    per un confronto piu' onesto su file piccoli.
    """

    level: int = 19
    tight: bool = True

    def _require(self) -> None:
        if zstd is None:
            raise RuntimeError(
                "Modulo 'zstandard' non disponibile. Installa con: python3 -m pip install zstandard"
            )

    def compress(self, data: bytes) -> bytes:
        self._require()
        if self.tight:
            c = zstd.ZstdCompressor(
                level=int(self.level),
                write_content_size=False,
                write_checksum=False,
            )
        else:
            c = zstd.ZstdCompressor(level=int(self.level))
        return c.compress(data)

    def compressed_size(self, data: bytes) -> int:
        return len(self.compress(data))
