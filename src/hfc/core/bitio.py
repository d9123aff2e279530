"""Bit packing / unpacking over byte sources and sinks.

Bits are packed MSB-first, in the order codes are appended. A code is a
``str`` of ``'0'``/``'1'`` characters.

Sources are consumed through ``iter_bytes``: a lazy, finite, non-restartable
sequence of byte values. Running out of bytes is a normal condition, checked
by the caller (``BitReader.fill`` returns False); it is never an exception.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import BinaryIO

DEFAULT_CHUNK_SIZE = 64 * 1024


def iter_chunks(fp: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    if chunk_size <= 0:
        raise ValueError("chunk_size deve essere > 0")
    while True:
        b = fp.read(chunk_size)
        if not b:
            break
        yield b


def iter_bytes(fp: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[int]:
    for chunk in iter_chunks(fp, chunk_size):
        yield from chunk


class BitWriter:
    """Accumulates code bits and emits whole bytes to ``sink``.

    Completed bytes are buffered up to ``chunk_size`` before being written.
    ``finish()`` pads the last partial byte with zero bits and flushes.
    """

    def __init__(self, sink: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._sink = sink
        self._chunk_size = max(1, int(chunk_size))
        self._out = bytearray()
        self._current = 0
        self._nbits = 0
        self.bits_written = 0
        self.bytes_written = 0
        self.pad_bits = 0
        self._finished = False

    def write_code(self, code: str) -> None:
        if self._finished:
            raise ValueError("BitWriter gia' chiuso")
        current = self._current
        nbits = self._nbits
        for ch in code:
            current = (current << 1) | (ch == "1")
            nbits += 1
            if nbits == 8:
                self._out.append(current)
                current = 0
                nbits = 0
        self._current = current
        self._nbits = nbits
        self.bits_written += len(code)
        if len(self._out) >= self._chunk_size:
            self._drain()

    def _drain(self) -> None:
        if self._out:
            self._sink.write(bytes(self._out))
            self.bytes_written += len(self._out)
            self._out.clear()

    def finish(self) -> None:
        if self._finished:
            return
        if self._nbits > 0:
            self.pad_bits = 8 - self._nbits
            self._out.append(self._current << self.pad_bits)
            self._current = 0
            self._nbits = 0
        self._drain()
        self._sink.flush()
        self._finished = True


class BitReader:
    """Exposes a byte source as a residual bit-string.

    The residual holds bits read but not yet resolved into a code; the
    decoder strips the consumed prefix after every leaf.
    """

    def __init__(self, source: Iterable[int]) -> None:
        self._source = iter(source)
        self.residual = ""
        self.bytes_read = 0

    def fill(self) -> bool:
        """Append the next byte's 8 bits. False when the source is exhausted."""
        b = next(self._source, None)
        if b is None:
            return False
        self.residual += format(b, "08b")
        self.bytes_read += 1
        return True

    def consume(self, n: int) -> None:
        if n > len(self.residual):
            raise ValueError("consume oltre i bit disponibili")
        self.residual = self.residual[n:]
