"""32- and 64-bit integer helpers: rotations, bit counts and FNV mixing."""

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

FNV_PRIME = 0x01000193
"""FNV 32-bit prime."""

FNV_OFFSET_BASIS = 0x811C9DC5
"""FNV 32-bit offset basis."""


def rotl32(n: int, s: int) -> int:
    """Rotate the 32-bit value ``n`` left by ``s`` bits (modulo 32)."""
    n &= MASK32
    s &= 31
    return ((n << s) | (n >> ((-s) & 31))) & MASK32


def rotl64(n: int, s: int) -> int:
    """Rotate the 64-bit value ``n`` left by ``s`` bits (modulo 64)."""
    n &= MASK64
    s &= 63
    return ((n << s) | (n >> ((-s) & 63))) & MASK64


def rotr32(n: int, s: int) -> int:
    """Rotate the 32-bit value ``n`` right by ``s`` bits (modulo 32)."""
    n &= MASK32
    s &= 31
    return ((n >> s) | (n << ((-s) & 31))) & MASK32


def clz32(v: int) -> int:
    """Number of leading zero bits in a 32-bit value; 32 for zero."""
    v &= MASK32
    return 32 - v.bit_length()


def popcnt32(v: int) -> int:
    """Number of set bits in a 32-bit value."""
    return bin(v & MASK32).count("1")


def mul_hi32(x: int, y: int) -> int:
    """High 32 bits of the 64-bit product of two 32-bit values."""
    return ((x & MASK32) * (y & MASK32)) >> 32


def fnv1(u: int, v: int) -> int:
    """FNV-1 combination step on 32-bit values."""
    return ((u & MASK32) * FNV_PRIME & MASK32) ^ (v & MASK32)


def fnv1a(u: int, v: int) -> int:
    """FNV-1a combination step on 32-bit values."""
    return (((u ^ v) & MASK32) * FNV_PRIME) & MASK32