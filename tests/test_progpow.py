import pytest

from evrhash.epoch import VerificationResult
from evrhash.ethash import EpochContext
from evrhash.keccak import keccak512
from evrhash.progpow import (
    compute_hash,
    hash_final,
    hash_mix,
    hash_seed,
    init_mix,
    verify_full,
)
from evrhash.progpow_kernel import LANES, REGS

HEADER = bytes(range(32))
MAX_BOUNDARY = b"\xff" * 32
ZERO_BOUNDARY = bytes(32)


@pytest.fixture(scope="module")
def context():
    light_cache = []
    item = keccak512(b"light cache seed")
    for _ in range(17):
        light_cache.append(item)
        item = keccak512(item)
    # 128 items of 1024 bits keep every 2048-bit lookup inside the L1 cache.
    return EpochContext(0, light_cache, 128)


def test_init_mix_shape_and_range():
    mix = init_mix(0x1234567890ABCDEF)
    assert len(mix) == LANES
    assert all(len(lane) == REGS for lane in mix)
    assert all(0 <= w <= 0xFFFFFFFF for lane in mix for w in lane)


def test_init_mix_is_deterministic_and_lanes_differ():
    assert init_mix(42) == init_mix(42)
    mix = init_mix(42)
    assert len({tuple(lane) for lane in mix}) == LANES
    assert init_mix(42) != init_mix(43)


def test_hash_seed_length_and_determinism():
    seed = hash_seed(HEADER, 7)
    assert len(seed) == 32
    assert seed == hash_seed(HEADER, 7)
    assert seed != hash_seed(HEADER, 8)


def test_hash_seed_nonce_wraps_to_64_bits():
    assert hash_seed(HEADER, 5 + (1 << 64)) == hash_seed(HEADER, 5)


def test_hash_seed_rejects_short_header():
    with pytest.raises(ValueError):
        hash_seed(HEADER[:31], 0)


def test_hash_final_depends_on_both_inputs():
    a = hash_final(HEADER, ZERO_BOUNDARY)
    assert len(a) == 32
    assert a == hash_final(HEADER, ZERO_BOUNDARY)
    assert a != hash_final(HEADER, MAX_BOUNDARY)
    assert a != hash_final(ZERO_BOUNDARY, ZERO_BOUNDARY)


def test_hash_final_rejects_bad_mix_length():
    with pytest.raises(ValueError):
        hash_final(HEADER, b"\x00" * 16)


def test_hash_mix_deterministic_and_period_sensitive(context):
    first = hash_mix(context, 1, 99)
    assert len(first) == 32
    assert first == hash_mix(context, 1, 99)
    assert first != hash_mix(context, 2, 99)
    assert first != hash_mix(context, 1, 100)


def test_compute_hash_matches_its_parts(context):
    result = compute_hash(context, 3, HEADER, 11)
    seed = hash_seed(HEADER, 11)
    mix = hash_mix(context, 3, int.from_bytes(seed[:8], "little"))
    assert result.mix_hash == mix
    assert result.final_hash == hash_final(seed, mix)


def test_verify_full_ok(context):
    result = compute_hash(context, 4, HEADER, 12)
    outcome = verify_full(context, 4, HEADER, result.mix_hash, 12, MAX_BOUNDARY)
    assert outcome is VerificationResult.OK


def test_verify_full_invalid_nonce(context):
    result = compute_hash(context, 4, HEADER, 12)
    outcome = verify_full(context, 4, HEADER, result.mix_hash, 12, ZERO_BOUNDARY)
    assert outcome is VerificationResult.INVALID_NONCE


def test_verify_full_invalid_mix_hash(context):
    result = compute_hash(context, 4, HEADER, 12)
    wrong = bytes(b ^ 0xFF for b in result.mix_hash)
    outcome = verify_full(context, 4, HEADER, wrong, 12, MAX_BOUNDARY)
    assert outcome is VerificationResult.INVALID_MIX_HASH


def test_verify_full_boundary_equal_to_final_hash_passes(context):
    result = compute_hash(context, 5, HEADER, 13)
    outcome = verify_full(context, 5, HEADER, result.mix_hash, 13, result.final_hash)
    assert outcome is VerificationResult.OK