"""Keccak-f permutations and the original (pre-SHA-3) Keccak hash functions."""

from .bitwise import MASK32, MASK64, rotl32, rotl64

_STATE_WORDS = 25


def _round_constants(count: int) -> tuple:
    """Round constants produced by the Keccak LFSR, as 64-bit words."""
    constants = []
    reg = 1
    for _ in range(count):
        constant = 0
        for j in range(7):
            if reg & 1:
                constant |= 1 << ((1 << j) - 1)
            reg = ((reg << 1) ^ (0x71 if reg & 0x80 else 0)) & 0xFF
        constants.append(constant)
    return tuple(constants)


def _rotation_offsets() -> tuple:
    """Rho rotation offsets indexed by ``x + 5 * y``."""
    offsets = [0] * _STATE_WORDS
    x, y = 1, 0
    for t in range(24):
        offsets[x + 5 * y] = ((t + 1) * (t + 2) // 2) % 64
        x, y = y, (2 * x + 3 * y) % 5
    return tuple(offsets)


_RC64 = _round_constants(24)
_RC32 = tuple(rc & MASK32 for rc in _RC64)
_OFFSETS = _rotation_offsets()
_PI_TARGET = tuple(y + 5 * ((2 * x + 3 * y) % 5) for y in range(5) for x in range(5))


def _permute(state, rounds, constants, rotate, mask):
    if len(state) != _STATE_WORDS:
        raise ValueError(f"state must hold {_STATE_WORDS} words, got {len(state)}")
    a = [w & mask for w in state]
    for rc in constants[:rounds]:
        # theta
        c = [a[x] ^ a[x + 5] ^ a[x + 10] ^ a[x + 15] ^ a[x + 20] for x in range(5)]
        d = [c[(x - 1) % 5] ^ rotate(c[(x + 1) % 5], 1) for x in range(5)]
        a = [w ^ d[i % 5] for i, w in enumerate(a)]
        # rho and pi
        b = [0] * _STATE_WORDS
        for i, w in enumerate(a):
            b[_PI_TARGET[i]] = rotate(w, _OFFSETS[i])
        # chi
        a = [
            b[i] ^ (~b[(i % 5 + 1) % 5 + (i - i % 5)] & mask & b[(i % 5 + 2) % 5 + (i - i % 5)])
            for i in range(_STATE_WORDS)
        ]
        # iota
        a[0] ^= rc
    return a


def keccakf1600(state) -> list:
    """Apply Keccak-f[1600] (24 rounds) to 25 64-bit words; return the new state."""
    return _permute(state, 24, _RC64, rotl64, MASK64)


def keccakf800(state) -> list:
    """Apply Keccak-f[800] (22 rounds) to 25 32-bit words; return the new state."""
    return _permute(state, 22, _RC32, rotl32, MASK32)


def _keccak(bits: int, data) -> bytes:
    hash_size = bits // 8
    rate = (1600 - 2 * bits) // 8
    padded = bytearray(data)
    padded.append(0x01)
    padded.extend(bytes(-len(padded) % rate))
    padded[-1] |= 0x80

    state = [0] * _STATE_WORDS
    view = memoryview(padded)
    for start in range(0, len(padded), rate):
        block = view[start : start + rate]
        for i in range(rate // 8):
            state[i] ^= int.from_bytes(block[i * 8 : i * 8 + 8], "little")
        state = keccakf1600(state)

    out = b"".join(w.to_bytes(8, "little") for w in state[: hash_size // 8])
    return out


def keccak256(data) -> bytes:
    """Keccak-256 digest (original padding) of a bytes-like object."""
    return _keccak(256, data)


def keccak512(data) -> bytes:
    """Keccak-512 digest (original padding) of a bytes-like object."""
    return _keccak(512, data)