# filename: huffman_service.py

import logging
import struct
from typing import Iterable, List, Optional

from huffman_core import CodeTable, build_code_table, decode, encode, tree_from_sample
from huffman_errors import InvalidInput, TruncatedOrCorruptSequence

logger = logging.getLogger(__name__)

# Big-endian count of meaningful bits in the payload
HEADER = struct.Struct(">I")
MAX_BITS = 2 ** 32 - 1


def pack_header(bit_count: int) -> bytes:
    if bit_count > MAX_BITS:
        raise InvalidInput(f"{bit_count} bits do not fit the {HEADER.size}-byte header (max {MAX_BITS})")
    return HEADER.pack(bit_count)


def pack_bits(bits: List[int]) -> bytes:
    """Pack bits MSB-first into bytes, zero-padding the last byte."""
    padding = (8 - len(bits) % 8) % 8
    padded = list(bits) + [0] * padding

    b = bytearray()
    for i in range(0, len(padded), 8):
        byte = 0
        for bit in padded[i:i + 8]:
            byte = (byte << 1) | bit
        b.append(byte)
    return bytes(b)


def unpack_bits(payload: bytes, bit_count: int) -> List[int]:
    if bit_count > len(payload) * 8:
        raise TruncatedOrCorruptSequence(
            reason=f"header announces {bit_count} bits but payload holds only {len(payload) * 8}"
        )
    bits = []
    for byte in payload:
        bits.extend((byte >> shift) & 1 for shift in range(7, -1, -1))
    return bits[:bit_count]


class HuffmanService:
    """
    Holds a trained code table and compresses/decompresses against it.

    The table comes from `sample` at construction, an explicit `train` call,
    or the first `compress` call on an untrained service.
    """

    def __init__(self, sample: Optional[Iterable] = None, fixed_fallback: bool = True):
        self.fixed_fallback = fixed_fallback
        self._table: Optional[CodeTable] = None
        if sample is not None:
            self.train(sample)

    @property
    def table(self) -> Optional[CodeTable]:
        return self._table

    @property
    def is_trained(self) -> bool:
        return self._table is not None

    def train(self, sample: Iterable) -> CodeTable:
        tree = tree_from_sample(sample)
        self._table = build_code_table(tree, fixed_fallback=self.fixed_fallback)
        logger.debug(
            "trained code table: %d symbols, longest code %d bits",
            len(self._table), self._table.max_code_length,
        )
        return self._table

    def _require_table(self) -> CodeTable:
        if self._table is None:
            raise InvalidInput("service has no code table; call train() first")
        return self._table

    def encode(self, stream: Iterable) -> List[int]:
        return encode(stream, self._require_table())

    def decode(self, bits: Iterable[int]) -> list:
        return decode(bits, self._require_table())

    def compress(self, data: bytes) -> bytes:
        if not data:
            return b""
        if self._table is None:
            self.train(data)

        bits = self.encode(data)
        out = pack_header(len(bits)) + pack_bits(bits)
        logger.debug("compressed %d bytes into %d bytes (%d bits)", len(data), len(out), len(bits))
        return out

    def decompress(self, blob: bytes) -> bytes:
        if not blob:
            return b""
        if len(blob) < HEADER.size:
            raise TruncatedOrCorruptSequence(reason=f"header needs {HEADER.size} bytes, got {len(blob)}")

        (bit_count,) = HEADER.unpack_from(blob)
        payload = blob[HEADER.size:]
        expected = (bit_count + 7) // 8
        if len(payload) != expected:
            raise TruncatedOrCorruptSequence(
                reason=f"payload is {len(payload)} bytes, header announces {bit_count} bits ({expected} bytes)"
            )

        symbols = self.decode(unpack_bits(payload, bit_count))
        for symbol in symbols:
            if type(symbol) is not int or not 0 <= symbol <= 255:
                raise InvalidInput(f"decoded symbol {symbol!r} is not a byte; the table was not trained on bytes")
        logger.debug("decompressed %d bytes into %d symbols", len(blob), len(symbols))
        return bytes(symbols)

    def compression_ratio(self, data: bytes) -> float:
        """
        Compressed size over original size; below 1.0 means the data shrank.

        An untrained service measures against a table built from `data`
        without keeping it.
        """
        if not data:
            raise InvalidInput("cannot compute a ratio for empty data")
        table = self._table
        if table is None:
            table = build_code_table(tree_from_sample(data), fixed_fallback=self.fixed_fallback)
        bit_count = len(encode(data, table))
        return (HEADER.size + (bit_count + 7) // 8) / len(data)
