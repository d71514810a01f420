import pytest

from evrhash.hashtypes import (
    CompactTarget,
    from_compact,
    from_words32,
    from_words64,
    is_equal,
    is_less_or_equal,
    shift_left,
    to_hex,
    words32,
    words64,
)

ZERO = bytes(32)
ONE = bytes(31) + b"\x01"
SAMPLE = bytes(range(32))


def test_words32_round_trip():
    assert from_words32(words32(SAMPLE)) == SAMPLE
    assert len(words32(SAMPLE)) == 8


def test_words32_little_endian():
    assert words32(b"\x01\x00\x00\x00\x00\x00\x00\x80") == (1, 0x80000000)


def test_words64_round_trip():
    assert from_words64(words64(SAMPLE)) == SAMPLE
    assert len(words64(SAMPLE)) == 4
    assert words64(b"\x01" + bytes(7)) == (1,)


def test_words_reject_bad_length():
    with pytest.raises(ValueError):
        words32(b"\x00\x01\x02")
    with pytest.raises(ValueError):
        words64(bytes(12))


def test_is_less_or_equal():
    assert is_less_or_equal(ZERO, ONE)
    assert not is_less_or_equal(ONE, ZERO)
    assert is_less_or_equal(SAMPLE, SAMPLE)
    high = b"\x01" + bytes(31)
    low = bytes(1) + b"\xff" * 31
    assert is_less_or_equal(low, high)
    assert not is_less_or_equal(high, low)


def test_is_less_or_equal_rejects_wrong_size():
    with pytest.raises(ValueError):
        is_less_or_equal(bytes(31), ZERO)


def test_is_equal():
    assert is_equal(SAMPLE, bytes(range(32)))
    assert not is_equal(SAMPLE, ZERO)


def test_to_hex():
    assert to_hex(ZERO) == "00" * 32
    assert bytes.fromhex(to_hex(SAMPLE)) == SAMPLE


def test_shift_left_identities():
    assert shift_left(SAMPLE, 0) == SAMPLE
    assert shift_left(SAMPLE, 256) == ZERO
    assert shift_left(ONE, 255) == b"\x80" + bytes(31)


@pytest.mark.parametrize("a,b", [(1, 7), (8, 8), (63, 1), (64, 64), (3, 130)])
def test_shift_left_composes(a, b):
    assert shift_left(shift_left(SAMPLE, a), b) == shift_left(SAMPLE, a + b)


def test_shift_left_by_bytes_moves_bytes():
    assert shift_left(SAMPLE, 8) == SAMPLE[1:] + b"\x00"


def test_shift_left_rejects_negative():
    with pytest.raises(ValueError):
        shift_left(SAMPLE, -1)


def test_from_compact_default_boundary():
    result = from_compact(0x1D00FFFF)
    expected = bytes.fromhex(
        "00000000ffff0000000000000000000000000000000000000000000000000000"
    )
    assert result == CompactTarget(target=expected, negative=False, overflow=False)


def test_from_compact_small_size_truncates():
    result = from_compact(0x01123456)
    assert result.target == bytes(31) + b"\x12"
    assert not result.negative


def test_from_compact_zero_word():
    result = from_compact(0x00000000)
    assert result.target == ZERO
    assert not result.negative and not result.overflow


def test_from_compact_negative_flag():
    assert from_compact(0x04923456).negative
    assert not from_compact(0x04123456).negative


def test_from_compact_overflow_flag():
    assert from_compact(0xFF123456).overflow
    assert not from_compact(0x20123456).overflow


def test_from_compact_rejects_out_of_range():
    with pytest.raises(ValueError):
        from_compact(1 << 32)
    with pytest.raises(ValueError):
        from_compact(-1)