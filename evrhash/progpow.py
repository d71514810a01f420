"""The ProgPoW hashing round with the Evrmore input constraints."""

from __future__ import annotations

from .bitwise import FNV_OFFSET_BASIS, MASK32, MASK64, fnv1a
from .epoch import L1_CACHE_WORDS, HashResult, VerificationResult, calculate_epoch_from_block_num
from .ethash import EpochContext, get_epoch_context, lazy_lookup_2048
from .hashtypes import from_words32, is_equal, is_less_or_equal, words32
from .keccak import keccakf800
from .kiss99 import Kiss99
from .progpow_kernel import (
    CACHE_COUNT,
    DAG_COUNT,
    LANES,
    MATH_COUNT,
    PERIOD_LENGTH,
    REGS,
    WORDS_PER_LANE,
    MixRngState,
    random_math,
    random_merge,
)

_HASH256_SIZE = 32
_HASH256_WORDS = _HASH256_SIZE // 4

# "rAVENCOINKAWPOW" padding words that fill the tail of the Keccak-f[800] state.
_EVRMORE_KAWPOW = tuple(ord(c) for c in "rAVENCOINKAWPOW")


def _check_hash256(value, name: str) -> bytes:
    value = bytes(value)
    if len(value) != _HASH256_SIZE:
        raise ValueError(f"{name} must be {_HASH256_SIZE} bytes, got {len(value)}")
    return value


def init_mix(seed: int) -> list:
    """Initial mix registers: ``LANES`` lists of ``REGS`` 32-bit words."""
    seed &= MASK64
    z = fnv1a(FNV_OFFSET_BASIS, seed & MASK32)
    w = fnv1a(z, seed >> 32)
    mix = []
    for lane in range(LANES):
        jsr = fnv1a(w, lane)
        jcong = fnv1a(jsr, lane)
        rng = Kiss99(z, w, jsr, jcong)
        mix.append([rng() for _ in range(REGS)])
    return mix


def _round(context: EpochContext, r: int, mix: list, state: MixRngState) -> None:
    num_items = context.full_dataset_num_items // 2
    item_index = mix[r % LANES][0] % num_items
    item = words32(lazy_lookup_2048(context, item_index))
    l1_words = context.l1_words

    for i in range(max(CACHE_COUNT, MATH_COUNT)):
        if i < CACHE_COUNT:
            src = state.next_src()
            dst = state.next_dst()
            sel = state.rng()
            for lane in mix:
                lane[dst] = random_merge(lane[dst], l1_words[lane[src] % L1_CACHE_WORDS], sel)
        if i < MATH_COUNT:
            src_rnd = state.rng() % (REGS * (REGS - 1))
            src1 = src_rnd % REGS
            src2 = src_rnd // REGS
            if src2 >= src1:
                src2 += 1
            sel1 = state.rng()
            dst = state.next_dst()
            sel2 = state.rng()
            for lane in mix:
                data = random_math(lane[src1], lane[src2], sel1)
                lane[dst] = random_merge(lane[dst], data, sel2)

    dsts = []
    sels = []
    for i in range(WORDS_PER_LANE):
        dsts.append(0 if i == 0 else state.next_dst())
        sels.append(state.rng())

    for l, lane in enumerate(mix):
        offset = ((l ^ r) % LANES) * WORDS_PER_LANE
        for i, (dst, sel) in enumerate(zip(dsts, sels)):
            lane[dst] = random_merge(lane[dst], item[offset + i], sel)


def hash_seed(header_hash: bytes, nonce: int) -> bytes:
    """Keccak-f[800] seed hash of a header hash and a nonce."""
    header_hash = _check_hash256(header_hash, "header hash")
    nonce &= MASK64
    state = list(words32(header_hash))
    state += [nonce & MASK32, nonce >> 32]
    state += _EVRMORE_KAWPOW
    state = keccakf800(state)
    return from_words32(state[:_HASH256_WORDS])


def hash_mix(context: EpochContext, period: int, seed: int) -> bytes:
    """The ProgPoW mix of a 64-bit seed for a program period, as 32 bytes."""
    mix = init_mix(seed)
    period &= MASK32
    for r in range(DAG_COUNT):
        # Every round starts from the same freshly seeded program state.
        _round(context, r, mix, MixRngState(period))

    lane_hashes = []
    for lane in mix:
        h = FNV_OFFSET_BASIS
        for word in lane:
            h = fnv1a(h, word)
        lane_hashes.append(h)

    mix_hash = [FNV_OFFSET_BASIS] * _HASH256_WORDS
    for l, lane_hash in enumerate(lane_hashes):
        mix_hash[l % _HASH256_WORDS] = fnv1a(mix_hash[l % _HASH256_WORDS], lane_hash)
    return from_words32(mix_hash)


def hash_final(input_hash: bytes, mix_hash: bytes) -> bytes:
    """Keccak-f[800] final hash of the seed hash and the mix hash."""
    input_hash = _check_hash256(input_hash, "input hash")
    mix_hash = _check_hash256(mix_hash, "mix hash")
    state = list(words32(input_hash)) + list(words32(mix_hash))
    state += _EVRMORE_KAWPOW[: 25 - len(state)]
    state = keccakf800(state)
    return from_words32(state[:_HASH256_WORDS])


def compute_hash(context: EpochContext, period: int, header_hash: bytes, nonce: int) -> HashResult:
    """Run one ProgPoW round for ``header_hash`` and ``nonce``."""
    seed_hash = hash_seed(header_hash, nonce)
    seed_64 = int.from_bytes(seed_hash[:8], "little")
    mix_hash = hash_mix(context, period, seed_64)
    return HashResult(final_hash=hash_final(seed_hash, mix_hash), mix_hash=mix_hash)


def verify_full(
    context: EpochContext,
    period: int,
    header_hash: bytes,
    mix_hash: bytes,
    nonce: int,
    boundary: bytes,
) -> VerificationResult:
    """Check the final hash against the boundary and the mix hash against the computed one."""
    result = compute_hash(context, period, header_hash, nonce)
    if not is_less_or_equal(result.final_hash, boundary):
        return VerificationResult.INVALID_NONCE
    if not is_equal(result.mix_hash, mix_hash):
        return VerificationResult.INVALID_MIX_HASH
    return VerificationResult.OK


def verify_full_block(
    block_number: int, header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes
) -> VerificationResult:
    """Full verification using the light context and program period of a block."""
    context = get_epoch_context(calculate_epoch_from_block_num(block_number), False)
    period = (block_number // PERIOD_LENGTH) & MASK32
    return verify_full(context, period, header_hash, mix_hash, nonce, boundary)