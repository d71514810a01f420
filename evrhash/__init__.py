"""Ethash and ProgPoW proof-of-work hashing (Evrmore KawPoW parameters) with Keccak primitives."""

__version__ = "0.1.0"

__all__ = [
    "bitwise",
    "kiss99",
    "hashtypes",
    "keccak",
    "epoch",
    "ethash",
    "progpow_kernel",
    "progpow",
]