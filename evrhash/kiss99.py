"""KISS pseudo-random number generator as specified in 1999."""

from .bitwise import MASK32


class Kiss99:
    """KISS99 generator on 32-bit state; calling the instance yields the next value."""

    __slots__ = ("_z", "_w", "_jsr", "_jcong")

    def __init__(
        self,
        z: int = 362436069,
        w: int = 521288629,
        jsr: int = 123456789,
        jcong: int = 380116160,
    ) -> None:
        self._z = z & MASK32
        self._w = w & MASK32
        self._jsr = jsr & MASK32
        self._jcong = jcong & MASK32

    def __call__(self) -> int:
        self._z = (36969 * (self._z & 0xFFFF) + (self._z >> 16)) & MASK32
        self._w = (18000 * (self._w & 0xFFFF) + (self._w >> 16)) & MASK32

        self._jcong = (69069 * self._jcong + 1234567) & MASK32

        jsr = self._jsr
        jsr ^= (jsr << 17) & MASK32
        jsr ^= jsr >> 13
        jsr ^= (jsr << 5) & MASK32
        self._jsr = jsr

        return ((((self._z << 16) + self._w) & MASK32) ^ self._jcong) + jsr & MASK32

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self()