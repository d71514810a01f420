"""Epoch parameters for the DAG: sizes, seeds, epoch lookup and boundaries."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from typing import Optional

from .bitwise import MASK32
from .keccak import keccak256

REVISION = 23

EPOCH_LENGTH = 27500
"""Number of blocks in one DAG epoch."""

LIGHT_CACHE_ITEM_SIZE = 64
FULL_DATASET_ITEM_SIZE = 128
NUM_DATASET_ACCESSES = 32
LIGHT_CACHE_INIT_SIZE = 1 << 24
LIGHT_CACHE_GROWTH = 1 << 17
LIGHT_CACHE_ROUNDS = 3
L1_CACHE_SIZE = 16384
L1_CACHE_WORDS = L1_CACHE_SIZE // 4
FULL_DATASET_INIT_SIZE = 1 << 30
FULL_DATASET_GROWTH = 1 << 23
FULL_DATASET_ITEM_PARENTS = 512

_EPOCH_SEARCH_LIMIT = 30000
_MAX_TARGET = (1 << 256) - 1
_HASH256_SIZE = 32


class VerificationResult(enum.Enum):
    """Outcome of verifying a proof-of-work solution."""

    OK = "ok"
    INVALID_NONCE = "invalid_nonce"
    INVALID_MIX_HASH = "invalid_mix_hash"


@dataclass(frozen=True)
class HashResult:
    """The final hash and the mix hash produced by one hashing round."""

    final_hash: bytes
    mix_hash: bytes


def _is_odd_prime(number: int) -> bool:
    if not number & 1:
        return False
    d = 3
    while d * d <= number:
        if number % d == 0:
            return False
        d += 2
    return True


def find_largest_unsigned_prime(upper_bound: int) -> int:
    """Largest prime not above ``upper_bound``; 0 when ``upper_bound`` < 2."""
    upper_bound &= MASK32
    if upper_bound < 2:
        return 0
    n = upper_bound if upper_bound & 1 else upper_bound - 1
    while not _is_odd_prime(n):
        n -= 2
    return n


def calculate_light_cache_num_items(epoch_number: int) -> int:
    """Number of 64-byte items in the light cache for ``epoch_number``."""
    init = LIGHT_CACHE_INIT_SIZE // LIGHT_CACHE_ITEM_SIZE
    growth = LIGHT_CACHE_GROWTH // LIGHT_CACHE_ITEM_SIZE
    return find_largest_unsigned_prime((init + epoch_number * growth) & MASK32)


def calculate_full_dataset_num_items(epoch_number: int) -> int:
    """Number of 128-byte items in the full dataset for ``epoch_number``."""
    init = FULL_DATASET_INIT_SIZE // FULL_DATASET_ITEM_SIZE
    growth = FULL_DATASET_GROWTH // FULL_DATASET_ITEM_SIZE
    return find_largest_unsigned_prime((init + epoch_number * growth) & MASK32)


def get_light_cache_size(num_items: int) -> int:
    """Light cache size in bytes for the given number of items."""
    return num_items * LIGHT_CACHE_ITEM_SIZE


def get_full_dataset_size(num_items: int) -> int:
    """Full dataset size in bytes for the given number of items."""
    return num_items * FULL_DATASET_ITEM_SIZE


def calculate_seed_from_epoch(epoch_number: int) -> bytes:
    """Seed hash of an epoch: Keccak-256 applied ``epoch_number`` times to zeros."""
    if epoch_number < 0:
        raise ValueError("epoch number must be non-negative")
    seed = bytes(_HASH256_SIZE)
    for _ in range(epoch_number):
        seed = keccak256(seed)
    return seed


class _SeedCache(threading.local):
    def __init__(self) -> None:
        self.epoch: Optional[int] = None
        self.seed: bytes = bytes(_HASH256_SIZE)


_seed_cache = _SeedCache()


def calculate_epoch_from_seed(seed: bytes) -> Optional[int]:
    """Epoch number whose seed hash is ``seed``, or None if none of the first 30000 match."""
    seed = bytes(seed)
    cache = _seed_cache

    if cache.epoch is not None:
        if seed == cache.seed:
            return cache.epoch
        following = keccak256(cache.seed)
        if following == seed:
            cache.seed = following
            cache.epoch += 1
            return cache.epoch

    cache.seed = bytes(_HASH256_SIZE)
    for epoch in range(_EPOCH_SEARCH_LIMIT):
        if cache.seed == seed:
            cache.epoch = epoch
            return epoch
        cache.seed = keccak256(cache.seed)

    cache.epoch = None
    return None


def calculate_epoch_from_block_num(block_num: int) -> int:
    """Epoch that a block number belongs to."""
    if block_num < 0:
        raise ValueError("block number must be non-negative")
    return (block_num // EPOCH_LENGTH) & MASK32


def get_boundary_from_diff(difficulty: int) -> bytes:
    """Big-endian 256-bit boundary for a difficulty: (2**256 - 1) // difficulty."""
    if not 0 <= difficulty <= _MAX_TARGET:
        raise ValueError("difficulty must be an unsigned 256-bit value")
    if difficulty > 1:
        return (_MAX_TARGET // difficulty).to_bytes(_HASH256_SIZE, "big")
    return _MAX_TARGET.to_bytes(_HASH256_SIZE, "big")


def from_bytes(data) -> bytes:
    """Take the first 32 bytes of ``data`` as a 256-bit hash."""
    data = bytes(data)
    if len(data) < _HASH256_SIZE:
        raise ValueError(f"need at least {_HASH256_SIZE} bytes, got {len(data)}")
    return data[:_HASH256_SIZE]