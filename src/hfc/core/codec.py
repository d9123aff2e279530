"""Terminated Huffman stream codec.

Encode: every input byte goes through the CodeTable into a BitWriter; the
terminator code closes the stream and the last byte is zero-padded.

Decode is a small state machine driven by the BitReader residual:

  ACCUMULATING --(prefix resolves to a leaf)--> EMIT --> ACCUMULATING
  ACCUMULATING --(terminator leaf)--> DONE

Running out of source bytes before DONE is a CorruptStreamError.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO

from hfc.core.bitio import DEFAULT_CHUNK_SIZE, BitReader, BitWriter, iter_bytes
from hfc.core.codes import CodeTable
from hfc.core.tree import HuffmanTree
from hfc.core.weights import TERMINATOR
from hfc.errors import CorruptStreamError


@dataclass(frozen=True)
class EncodeStats:
    symbols: int  # byte in input (terminatore escluso)
    bytes_out: int
    bits: int  # bit di codice emessi, terminatore incluso
    pad_bits: int


@dataclass(frozen=True)
class DecodeStats:
    symbols: int  # byte in output
    bytes_in: int  # byte letti dalla sorgente fino al terminatore


def encode_stream(
    source: BinaryIO,
    sink: BinaryIO,
    codes: CodeTable,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> EncodeStats:
    # ConfigurationError prima di scrivere qualsiasi byte
    eot = codes.terminator_code

    writer = BitWriter(sink, chunk_size)
    n = 0
    for b in iter_bytes(source, chunk_size):
        # UnencodableSymbolError interrompe tutto: niente successo parziale
        writer.write_code(codes.code_for(b, offset=n))
        n += 1

    writer.write_code(eot)
    writer.finish()
    return EncodeStats(symbols=n, bytes_out=writer.bytes_written, bits=writer.bits_written, pad_bits=writer.pad_bits)


def decode_stream(
    source: BinaryIO,
    sink: BinaryIO,
    tree: HuffmanTree,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> DecodeStats:
    reader = BitReader(iter_bytes(source, chunk_size))
    out = bytearray()
    n = 0

    while True:
        try:
            hit = tree.match(reader.residual)
        except CorruptStreamError as err:
            err.offset = reader.bytes_read
            raise

        if hit is None:
            # ACCUMULATING: serve un altro byte
            if not reader.fill():
                raise CorruptStreamError(
                    "stream terminato prima del simbolo di fine", offset=reader.bytes_read
                )
            continue

        sym, used = hit
        if sym == TERMINATOR:
            break
        out.append(sym)
        n += 1
        reader.consume(used)
        if len(out) >= chunk_size:
            sink.write(bytes(out))
            out.clear()

    if out:
        sink.write(bytes(out))
    sink.flush()
    return DecodeStats(symbols=n, bytes_in=reader.bytes_read)


def encode_bytes(data: bytes, codes: CodeTable) -> bytes:
    sink = io.BytesIO()
    encode_stream(io.BytesIO(data), sink, codes)
    return sink.getvalue()


def decode_bytes(blob: bytes, tree: HuffmanTree) -> bytes:
    sink = io.BytesIO()
    decode_stream(io.BytesIO(blob), sink, tree)
    return sink.getvalue()
