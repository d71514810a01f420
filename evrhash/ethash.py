"""Ethash dataset items, epoch contexts and the Ethash hashing round."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .bitwise import FNV_PRIME, MASK32, MASK64, fnv1
from .epoch import (
    FULL_DATASET_ITEM_PARENTS,
    FULL_DATASET_ITEM_SIZE,
    L1_CACHE_SIZE,
    LIGHT_CACHE_ITEM_SIZE,
    LIGHT_CACHE_ROUNDS,
    NUM_DATASET_ACCESSES,
    HashResult,
    VerificationResult,
    calculate_epoch_from_block_num,
    calculate_full_dataset_num_items,
    calculate_light_cache_num_items,
    calculate_seed_from_epoch,
    get_full_dataset_size,
    get_light_cache_size,
)
from .hashtypes import from_words32, is_equal, is_less_or_equal, words32
from .keccak import keccak256, keccak512

_HASH256_SIZE = 32
_HASH1024_SIZE = 128
_HASH2048_SIZE = 256
_L1_ITEMS_1024 = L1_CACHE_SIZE // _HASH1024_SIZE
_L1_ITEMS_2048 = L1_CACHE_SIZE // _HASH2048_SIZE


def _fnv_words(a, b) -> list:
    return [((x * FNV_PRIME) & MASK32) ^ y for x, y in zip(a, b)]


def _check_size(value: bytes, size: int, name: str) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")
    return value


def build_light_cache(
    hash_function: Callable[[bytes], bytes], num_items: int, seed: bytes
) -> List[bytes]:
    """Build the light cache of ``num_items`` 64-byte items from an epoch seed."""
    if num_items < 1:
        raise ValueError("the light cache needs at least one item")
    item = hash_function(bytes(seed))
    cache = [item]
    for _ in range(1, num_items):
        item = hash_function(item)
        cache.append(item)

    for _ in range(LIGHT_CACHE_ROUNDS):
        for i in range(num_items):
            v = int.from_bytes(cache[i][:4], "little") % num_items
            w = (i - 1) % num_items
            mixed = int.from_bytes(cache[v], "little") ^ int.from_bytes(cache[w], "little")
            cache[i] = hash_function(mixed.to_bytes(LIGHT_CACHE_ITEM_SIZE, "little"))
    return cache


@dataclass(eq=False)
class EpochContext:
    """Light cache, L1 cache and optional lazily filled full dataset of one epoch."""

    epoch_number: int
    light_cache: list
    full_dataset_num_items: int
    full: bool = False
    l1_cache: bytes = field(init=False, repr=False)
    l1_words: tuple = field(init=False, repr=False)
    full_dataset: Optional[dict] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.light_cache:
            raise ValueError("the light cache must not be empty")
        items = [bytes(item) for item in self.light_cache]
        if any(len(item) != LIGHT_CACHE_ITEM_SIZE for item in items):
            raise ValueError(f"light cache items must be {LIGHT_CACHE_ITEM_SIZE} bytes")
        if self.full_dataset_num_items < 1:
            raise ValueError("the full dataset needs at least one item")
        self.light_cache = items
        self._light_words = [words32(item) for item in items]
        self.full_dataset = {} if self.full else None
        self.l1_cache = b"".join(
            calculate_dataset_item_2048(self, i) for i in range(_L1_ITEMS_2048)
        )
        self.l1_words = words32(self.l1_cache)

    @property
    def light_cache_num_items(self) -> int:
        return len(self.light_cache)

    @property
    def light_cache_size(self) -> int:
        return get_light_cache_size(len(self.light_cache))

    @property
    def full_dataset_size(self) -> int:
        return get_full_dataset_size(self.full_dataset_num_items)


class _ItemState:
    """Running state for computing one 512-bit slice of a dataset item."""

    __slots__ = ("_cache", "_seed", "_mix")

    def __init__(self, context: EpochContext, index: int) -> None:
        cache = context._light_words
        self._cache = cache
        self._seed = index & MASK32
        mix = list(cache[self._seed % len(cache)])
        mix[0] ^= self._seed
        self._mix = list(words32(keccak512(from_words32(mix))))

    def update(self, round_number: int) -> None:
        t = fnv1(self._seed ^ round_number, self._mix[round_number % 16])
        parent = self._cache[t % len(self._cache)]
        self._mix = _fnv_words(self._mix, parent)

    def final(self) -> bytes:
        return keccak512(from_words32(self._mix))


def _dataset_item(context: EpochContext, index: int, slices: int) -> bytes:
    states = [_ItemState(context, (index * slices + k) & MASK32) for k in range(slices)]
    for round_number in range(FULL_DATASET_ITEM_PARENTS):
        for state in states:
            state.update(round_number)
    return b"".join(state.final() for state in states)


def calculate_dataset_item_1024(context: EpochContext, index: int) -> bytes:
    """Compute the 128-byte dataset item at ``index`` from the light cache."""
    return _dataset_item(context, index, 2)


def calculate_dataset_item_2048(context: EpochContext, index: int) -> bytes:
    """Compute the 256-byte dataset item at ``index`` from the light cache."""
    return _dataset_item(context, index, 4)


def lazy_lookup_1024(context: EpochContext, index: int) -> bytes:
    """128-byte dataset item, served from the L1 cache or full dataset when possible."""
    if index < _L1_ITEMS_1024:
        return context.l1_cache[index * _HASH1024_SIZE : (index + 1) * _HASH1024_SIZE]
    dataset = context.full_dataset
    if dataset is None:
        return calculate_dataset_item_1024(context, index)
    item = dataset.get(index)
    if item is None:
        item = calculate_dataset_item_1024(context, index)
        dataset[index] = item
    return item


def lazy_lookup_2048(context: EpochContext, index: int) -> bytes:
    """256-byte dataset item, served from the L1 cache or full dataset when possible."""
    if index < _L1_ITEMS_2048:
        return context.l1_cache[index * _HASH2048_SIZE : (index + 1) * _HASH2048_SIZE]
    dataset = context.full_dataset
    if dataset is None:
        return calculate_dataset_item_2048(context, index)
    low = dataset.get(2 * index)
    high = dataset.get(2 * index + 1)
    if low is None or high is None:
        item = calculate_dataset_item_2048(context, index)
        dataset[2 * index] = item[:_HASH1024_SIZE]
        dataset[2 * index + 1] = item[_HASH1024_SIZE:]
        return item
    return low + high


def hash_seed(header: bytes, nonce: int) -> bytes:
    """Keccak-512 of the header hash followed by the little-endian nonce."""
    header = _check_size(header, _HASH256_SIZE, "header")
    return keccak512(header + (nonce & MASK64).to_bytes(8, "little"))


def hash_mix(context: EpochContext, seed: bytes) -> bytes:
    """The memory-hard mix of a 64-byte seed, compressed to 32 bytes."""
    seed_words = words32(_check_size(seed, 64, "seed"))
    seed_init = seed_words[0]
    mix = list(seed_words) * 2
    limit = context.full_dataset_num_items

    for i in range(NUM_DATASET_ACCESSES):
        p = fnv1(i ^ seed_init, mix[i % len(mix)]) % limit
        mix = _fnv_words(mix, words32(lazy_lookup_1024(context, p)))

    quads = zip(*[iter(mix)] * 4)
    return from_words32(fnv1(fnv1(fnv1(a, b), c), d) for a, b, c, d in quads)


def hash_final(seed: bytes, mix: bytes) -> bytes:
    """Keccak-256 of the seed followed by the mix hash."""
    return keccak256(bytes(seed) + bytes(mix))


def create_epoch_context(epoch_number: int, full: bool) -> EpochContext:
    """Build the context of an epoch from scratch."""
    light_num_items = calculate_light_cache_num_items(epoch_number)
    full_num_items = calculate_full_dataset_num_items(epoch_number)
    seed = calculate_seed_from_epoch(epoch_number)
    light_cache = build_light_cache(keccak512, light_num_items, seed)
    return EpochContext(epoch_number, light_cache, full_num_items, bool(full))


class _LocalContext(threading.local):
    context: Optional[EpochContext] = None


_local = _LocalContext()
_shared_lock = threading.Lock()
_shared_context: Optional[EpochContext] = None


def _matches(context: Optional[EpochContext], epoch_number: int, full: bool) -> bool:
    return (
        context is not None
        and context.epoch_number == epoch_number
        and context.full == bool(full)
    )


def get_epoch_context(epoch_number: int, full: bool) -> EpochContext:
    """Context for an epoch, shared between threads and cached per thread."""
    global _shared_context
    if not _matches(_local.context, epoch_number, full):
        _local.context = None
        with _shared_lock:
            if not _matches(_shared_context, epoch_number, full):
                _shared_context = None
                _shared_context = create_epoch_context(epoch_number, full)
            _local.context = _shared_context
    return _local.context


def compute_hash(context: EpochContext, header: bytes, nonce: int) -> HashResult:
    """Run one full Ethash round for ``header`` and ``nonce``."""
    seed = hash_seed(header, nonce)
    mix_hash = hash_mix(context, seed)
    return HashResult(final_hash=hash_final(seed, mix_hash), mix_hash=mix_hash)


def verify_light(header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes) -> bool:
    """Check the final hash against the boundary, trusting the given mix hash."""
    seed = hash_seed(header_hash, nonce)
    return is_less_or_equal(hash_final(seed, mix_hash), boundary)


def verify_full(
    context: EpochContext, header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes
) -> VerificationResult:
    """Check both the final hash against the boundary and the mix hash itself."""
    seed = hash_seed(header_hash, nonce)
    if not is_less_or_equal(hash_final(seed, mix_hash), boundary):
        return VerificationResult.INVALID_NONCE
    if not is_equal(mix_hash, hash_mix(context, seed)):
        return VerificationResult.INVALID_MIX_HASH
    return VerificationResult.OK


def verify_full_block(
    block_num: int, header_hash: bytes, mix_hash: bytes, nonce: int, boundary: bytes
) -> VerificationResult:
    """Full verification using the light context of the block's epoch."""
    context = get_epoch_context(calculate_epoch_from_block_num(block_num), False)
    return verify_full(context, header_hash, mix_hash, nonce, boundary)


__all__ = [
    "EpochContext",
    "FULL_DATASET_ITEM_SIZE",
    "build_light_cache",
    "calculate_dataset_item_1024",
    "calculate_dataset_item_2048",
    "lazy_lookup_1024",
    "lazy_lookup_2048",
    "hash_seed",
    "hash_mix",
    "hash_final",
    "create_epoch_context",
    "get_epoch_context",
    "compute_hash",
    "verify_light",
    "verify_full",
    "verify_full_block",
]