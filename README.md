# evrhash

Pure Python implementations of the Ethash and ProgPoW proof-of-work
algorithms, set up with the Evrmore KawPoW parameters (epoch length of
27500 blocks, program period of 3 blocks, the Evrmore padding words in the
Keccak-f[800] state). The package has no runtime dependencies.

Hashes are plain `bytes` values: 32 bytes for a 256-bit hash and 64 bytes
for a 512-bit one. Numeric comparisons treat a 256-bit hash as a big-endian
unsigned integer.

## Modules

- `evrhash.bitwise`: `rotl32`, `rotl64`, `rotr32`, `clz32`, `popcnt32`,
  `mul_hi32`, and the FNV mixers `fnv1` and `fnv1a`.
- `evrhash.kiss99`: the `Kiss99` generator. Call an instance to get the next
  32-bit value. It can also be iterated.
- `evrhash.hashtypes`: little-endian word views (`words32`, `from_words32`,
  `words64`, `from_words64`) and the 256-bit hash helpers `is_less_or_equal`,
  `is_equal`, `to_hex` and `shift_left`. It also has `from_compact`, which
  expands compact `nbits` into a `CompactTarget` holding `target`, `negative`
  and `overflow`.
- `evrhash.keccak`: the permutations `keccakf1600` (24 rounds, 64-bit words)
  and `keccakf800` (22 rounds, 32-bit words). Each takes 25 words and returns
  the new state as a list. It also has `keccak256` and `keccak512`, which use
  the original Keccak padding rather than SHA-3's.
- `evrhash.epoch`: sizing and seed arithmetic.
  - `find_largest_unsigned_prime`
  - `calculate_light_cache_num_items` and `calculate_full_dataset_num_items`
  - `get_light_cache_size` and `get_full_dataset_size`
  - `calculate_seed_from_epoch`
  - `calculate_epoch_from_seed`, which searches the first 30000 epochs and
    returns `None` if none matches. It remembers the last match per thread.
  - `calculate_epoch_from_block_num`
  - `get_boundary_from_diff`, which gives `(2**256 - 1) // difficulty` as 32
    big-endian bytes.
  - `from_bytes`
  - the `VerificationResult` enum and the `HashResult` dataclass.
- `evrhash.ethash`: Ethash itself.
  - `build_light_cache` and `EpochContext`.
  - Dataset items: `calculate_dataset_item_1024` and
    `calculate_dataset_item_2048`, and the cached forms `lazy_lookup_1024` and
    `lazy_lookup_2048`.
  - `create_epoch_context`, and `get_epoch_context`, which caches the context
    per thread and shares it between threads.
  - The hashing steps `hash_seed`, `hash_mix`, `hash_final` and
    `compute_hash`.
  - Verification: `verify_light`, `verify_full` and `verify_full_block`.
- `evrhash.progpow_kernel`: the ProgPoW random program.
  - `MixRngState`, with `next_dst`, `next_src` and its `rng`.
  - `random_merge` and `random_math`.
  - Their source-text forms, `random_merge_src` and `random_math_src`.
  - `get_kern`, which returns the inner-loop source for a program seed as CUDA
    or OpenCL text, chosen with `KernelType.CUDA` or `KernelType.OPENCL`.
- `evrhash.progpow`: ProgPoW hashing.
  - The hashing steps `init_mix`, `hash_seed`, `hash_mix`, `hash_final` and
    `compute_hash`.
  - Verification: `verify_full` and `verify_full_block`. Both return a
    `VerificationResult`.

## Install

```
pip install .
```

## Examples

Keccak digests:

```python
from evrhash.keccak import keccak256

print(keccak256(b"").hex())
```

Epoch helpers:

```python
from evrhash.epoch import (
    calculate_epoch_from_block_num,
    calculate_epoch_from_seed,
    calculate_seed_from_epoch,
    get_boundary_from_diff,
)

epoch = calculate_epoch_from_block_num(100_000)   # 3
seed = calculate_seed_from_epoch(epoch)
assert calculate_epoch_from_seed(seed) == epoch
boundary = get_boundary_from_diff(1_000_000)
```

Compact targets:

```python
from evrhash.hashtypes import from_compact, to_hex

compact = from_compact(0x1D00FFFF)
print(to_hex(compact.target), compact.negative, compact.overflow)
```

Kernel source for a ProgPoW program seed:

```python
from evrhash.progpow_kernel import KernelType, get_kern

source = get_kern(1234, KernelType.OPENCL)
```

Hashing and verifying with ProgPoW:

```python
from evrhash.epoch import VerificationResult
from evrhash.ethash import get_epoch_context
from evrhash.progpow import compute_hash, verify_full

context = get_epoch_context(0, False)
header = bytes(32)
result = compute_hash(context, 0, header, 0)
status = verify_full(context, 0, header, result.mix_hash, 0, b"\xff" * 32)
assert status is VerificationResult.OK
```

## Performance

Everything runs in pure Python. An epoch context needs a light cache of
about 16 MiB, which takes hundreds of thousands of Keccak-512 calls, plus the
first 16 KiB of the dataset. Building one takes minutes. Create it once with
`get_epoch_context`, which caches it, and reuse it.

## What this package does not do

- It computes and checks single hashes. It has no miner loop that searches
  nonces.
- It does not connect to mining pools and has no network server.
- `get_kern` produces kernel source text only. Nothing here compiles or runs
  it on a GPU. The text uses `PROGPOW_DAG_ELEMENTS`, which the text itself
  does not define; the code that compiles it must supply it.

## Tests

```
pip install .[test]
pytest
```