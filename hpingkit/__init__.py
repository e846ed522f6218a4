"""Packet prober building blocks: options, packet descriptions, statistics, bignums and an RC4 generator."""

__version__ = "0.1.0"

__all__ = [
    "bignum",
    "bignum_math",
    "bignum_text",
    "icmplog",
    "options",
    "payload",
    "rapd",
    "rc4",
    "resolve",
    "stats",
]