"""Helpers for fixed-size hash values held as ``bytes``.

Hashes are plain byte strings (32 bytes for a 256-bit hash, 64 for 512, and
so on). Word views are little-endian, matching the in-memory layout the
algorithms are defined over; numeric comparison and shifts treat a hash as a
big-endian unsigned integer.
"""

from dataclasses import dataclass
import struct

HASH256_SIZE = 32


def _check_multiple(data: bytes, size: int) -> None:
    if len(data) % size:
        raise ValueError(f"length {len(data)} is not a multiple of {size}")


def words32(data: bytes) -> tuple:
    """Split ``data`` into little-endian 32-bit words."""
    _check_multiple(data, 4)
    return struct.unpack(f"<{len(data) // 4}I", data)


def from_words32(words) -> bytes:
    """Pack 32-bit words into little-endian bytes."""
    words = list(words)
    return struct.pack(f"<{len(words)}I", *(w & 0xFFFFFFFF for w in words))


def words64(data: bytes) -> tuple:
    """Split ``data`` into little-endian 64-bit words."""
    _check_multiple(data, 8)
    return struct.unpack(f"<{len(data) // 8}Q", data)


def from_words64(words) -> bytes:
    """Pack 64-bit words into little-endian bytes."""
    words = list(words)
    return struct.pack(f"<{len(words)}Q", *(w & 0xFFFFFFFFFFFFFFFF for w in words))


def _check_hash256(value: bytes) -> None:
    if len(value) != HASH256_SIZE:
        raise ValueError(f"expected {HASH256_SIZE} bytes, got {len(value)}")


def is_less_or_equal(a: bytes, b: bytes) -> bool:
    """True when ``a`` read as a big-endian number is not greater than ``b``."""
    _check_hash256(a)
    _check_hash256(b)
    return a <= b


def is_equal(a: bytes, b: bytes) -> bool:
    """True when both hashes hold the same bytes."""
    return bytes(a) == bytes(b)


def to_hex(value: bytes) -> str:
    """Lower-case hex of the hash bytes, without prefix."""
    return bytes(value).hex()


def shift_left(value: bytes, bits: int) -> bytes:
    """Shift a 256-bit big-endian hash left by ``bits``, dropping overflow."""
    _check_hash256(value)
    if bits < 0:
        raise ValueError("shift must be non-negative")
    number = int.from_bytes(value, "big") << bits
    return (number & ((1 << 256) - 1)).to_bytes(HASH256_SIZE, "big")


@dataclass(frozen=True)
class CompactTarget:
    """A 256-bit target expanded from compact ``nbits`` form."""

    target: bytes
    negative: bool
    overflow: bool


def from_compact(nbits: int) -> CompactTarget:
    """Expand a compact-encoded target (``nbits``) into a 256-bit hash."""
    if not 0 <= nbits <= 0xFFFFFFFF:
        raise ValueError("nbits must be an unsigned 32-bit value")
    size = nbits >> 24
    word = nbits & 0x007FFFFF
    if size <= 3:
        word >>= 8 * (3 - size)
        target = word.to_bytes(HASH256_SIZE, "big")
    else:
        target = shift_left(word.to_bytes(HASH256_SIZE, "big"), 8 * (size - 3))

    negative = word != 0 and (nbits & 0x00800000) != 0
    overflow = word != 0 and (
        size > 34 or (word > 0xFF and size > 33) or (word > 0xFFFF and size > 32)
    )
    return CompactTarget(target=target, negative=negative, overflow=overflow)