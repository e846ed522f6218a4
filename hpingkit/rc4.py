"""RC4-style pseudo-random 32-bit number generator."""

from __future__ import annotations

import os
import time
from collections.abc import Iterable

SBOX_SIZE = 256
_DISCARD_AFTER_SEED = 32


class Rc4Generator:
    """Generates 32-bit numbers from an RC4 state box.

    The state box does not need to be a permutation: any 256 bytes
    are accepted, as the generator only swaps entries around.
    """

    def __init__(self, sbox: Iterable[int]) -> None:
        box = bytearray(sbox)
        if len(box) != SBOX_SIZE:
            raise ValueError(f"sbox must hold exactly {SBOX_SIZE} bytes, got {len(box)}")
        self._sbox = box
        self._i = 0
        self._j = 0

    def next_u32(self) -> int:
        """Return the next 32-bit value; the first byte produced is the least significant."""
        box = self._sbox
        out = bytearray(4)
        for x in range(4):
            self._i = (self._i + 1) & 0xFF
            si = box[self._i]
            self._j = (self._j + si) & 0xFF
            sj = box[self._j]
            box[self._i] = sj
            box[self._j] = si
            out[x] = box[(si + sj) & 0xFF]
        return int.from_bytes(out, "little")

    def seed(self, data: bytes) -> None:
        """Mix ``data`` into the state box, then discard 32 outputs."""
        for index, byte in enumerate(bytes(data)):
            self._sbox[index & 0xFF] ^= byte
        for _ in range(_DISCARD_AFTER_SEED):
            self.next_u32()

    def __iter__(self):
        return self

    def __next__(self) -> int:
        return self.next_u32()


def identity_generator() -> Rc4Generator:
    """A generator whose state box holds 0..255, giving a reproducible sequence."""
    return Rc4Generator(range(SBOX_SIZE))


def system_seeded_generator() -> Rc4Generator:
    """A generator seeded from the system entropy source mixed with the clock."""
    try:
        box = bytearray(os.urandom(SBOX_SIZE))
    except (NotImplementedError, OSError):
        box = bytearray(SBOX_SIZE)
    for i in range(SBOX_SIZE):
        now = time.time()
        sec = int(now)
        usec = int((now - sec) * 1_000_000)
        value = usec if i & 1 else sec
        box[i] ^= (value >> (i & 0xF)) & 0xFF
    return Rc4Generator(box)