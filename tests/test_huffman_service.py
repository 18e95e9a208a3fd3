import random
import time

import pytest

from huffman_errors import EncodingDegenerate, InvalidInput, TruncatedOrCorruptSequence, UnknownSymbol
from huffman_service import HEADER, MAX_BITS, HuffmanService, pack_bits, pack_header, unpack_bits


def _get_service(**kwargs):
    return HuffmanService(**kwargs)


def test_roundtrip_random_10kb():
    svc = _get_service()

    data = bytes(random.getrandbits(8) for _ in range(10 * 1024))
    compressed = svc.compress(data)
    out = svc.decompress(compressed)
    assert out == data


def test_roundtrip_all_bytes_once():
    svc = _get_service()

    data = bytes(range(256))
    compressed = svc.compress(data)
    assert len(svc.table) == 256
    out = svc.decompress(compressed)
    assert out == data


def test_empty_input():
    svc = _get_service()
    data = b""
    compressed = svc.compress(data)
    assert compressed == b""
    assert svc.decompress(compressed) == data
    assert not svc.is_trained


def test_single_byte_repeated_small():
    svc = _get_service()

    data = b'A' * (1024 * 10)
    compressed = svc.compress(data)
    assert len(compressed) == HEADER.size + 1024 * 10 // 8
    out = svc.decompress(compressed)
    assert out == data


def test_single_byte_without_fallback_is_degenerate():
    svc = _get_service(fixed_fallback=False)
    with pytest.raises(EncodingDegenerate):
        svc.compress(b'A' * 16)


def test_small_inputs():
    for n in (1, 2, 3):
        svc = _get_service()
        data = bytes(random.getrandbits(8) for _ in range(n))
        compressed = svc.compress(data)
        out = svc.decompress(compressed)
        assert out == data


def test_skewed_data_shrinks():
    svc = _get_service()
    data = b"a" * 900 + b"b" * 80 + b"c" * 20
    assert svc.compression_ratio(data) < 0.2
    assert not svc.is_trained


def test_trained_service_reuses_table():
    svc = _get_service(sample=b"hello world")
    table = svc.table
    for data in (b"hello", b"world", b"lol"):
        assert svc.decompress(svc.compress(data)) == data
    assert svc.table is table


def test_trained_service_rejects_unknown_symbol():
    svc = _get_service(sample=b"abc")
    with pytest.raises(UnknownSymbol) as excinfo:
        svc.compress(b"abcd")
    assert excinfo.value.symbol == ord("d")


def test_text_stream_encode_decode():
    svc = _get_service(sample="aaaabbbcc")
    bits = svc.encode("aab")
    assert bits == [0, 0, 1, 1]
    assert svc.decode(bits) == ["a", "a", "b"]


def test_text_trained_service_cannot_decompress_to_bytes():
    svc = _get_service(sample="aaaabbbcc")
    with pytest.raises(InvalidInput):
        svc.decompress(HEADER.pack(4) + b"\x30")


def test_wide_symbols_cannot_decompress_to_bytes():
    svc = _get_service(sample=[300, 300, 7])
    compressed = pack_header(2) + pack_bits(svc.encode([300, 7]))
    with pytest.raises(InvalidInput):
        svc.decompress(compressed)


def test_untrained_service_needs_table():
    svc = _get_service()
    with pytest.raises(InvalidInput):
        svc.encode("abc")
    with pytest.raises(InvalidInput):
        svc.decompress(b"\x00\x00\x00\x01\x00")


def test_train_rejects_empty_sample():
    svc = _get_service()
    with pytest.raises(InvalidInput):
        svc.train(b"")


def test_truncated_stream_behavior():
    svc = _get_service()

    data = b'This is a test' * 100
    compressed = svc.compress(data)
    # truncate last few bytes
    truncated = compressed[:-3]
    with pytest.raises(TruncatedOrCorruptSequence):
        svc.decompress(truncated)


def test_truncated_header():
    svc = _get_service(sample=b"abc")
    with pytest.raises(TruncatedOrCorruptSequence):
        svc.decompress(b"\x00\x01")


def test_corrupted_header_behavior():
    svc = _get_service()

    data = b'Hello World' * 50
    compressed = bytearray(svc.compress(data))
    # flip bits in the header's high byte
    compressed[0] ^= 0xFF
    with pytest.raises(TruncatedOrCorruptSequence):
        svc.decompress(bytes(compressed))


def test_header_cutting_mid_code():
    svc = _get_service(sample=b"aaaabbbcc")
    # b encodes as 11; a header of one bit leaves it unfinished
    with pytest.raises(TruncatedOrCorruptSequence) as excinfo:
        svc.decompress(HEADER.pack(1) + b"\xc0")
    assert excinfo.value.pending == (1,)


def test_pack_bits():
    assert pack_bits([]) == b""
    assert pack_bits([1, 0, 1]) == b"\xa0"
    assert pack_bits([1] * 8 + [0, 1]) == b"\xff\x40"


def test_unpack_bits():
    assert unpack_bits(b"\xa0", 3) == [1, 0, 1]
    assert unpack_bits(b"\xff\x40", 10) == [1] * 8 + [0, 1]
    with pytest.raises(TruncatedOrCorruptSequence):
        unpack_bits(b"\xff", 9)


def test_header_bit_count_limit():
    assert pack_header(MAX_BITS) == b"\xff\xff\xff\xff"
    with pytest.raises(InvalidInput):
        pack_header(MAX_BITS + 1)


@pytest.mark.timeout(120)
def test_performance_256kb():
    svc = _get_service()
    data = bytes(random.getrandbits(8) for _ in range(256 * 1024))
    t0 = time.time()
    compressed = svc.compress(data)
    assert svc.decompress(compressed) == data
    dur = time.time() - t0
    assert dur > 0
    print(f"Round trip time for 256KB: {dur:.4f}s")
