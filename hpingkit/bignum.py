"""Signed arbitrary precision integers with truncating division."""

from __future__ import annotations

import math
from functools import total_ordering
from typing import Union

IntLike = Union["Mpz", int]


@total_ordering
class Mpz:
    """An immutable signed arbitrary precision integer.

    Division truncates toward zero: the quotient takes the sign of the
    operands' product and the remainder takes the sign of the dividend.
    Bit operations work on the magnitude and keep the sign, as in a
    sign-and-magnitude representation.
    """

    __slots__ = ("_value",)

    def __init__(self, value: IntLike = 0) -> None:
        if isinstance(value, Mpz):
            value = value._value
        elif not isinstance(value, int):
            raise TypeError(f"cannot build Mpz from {type(value).__name__}")
        self._value = int(value)

    # ------------------------------------------------------------ helpers
    @staticmethod
    def _coerce(other: object) -> Mpz | None:
        if isinstance(other, Mpz):
            return other
        if isinstance(other, int):
            return Mpz(other)
        return None

    @property
    def value(self) -> int:
        """The number as a Python int."""
        return self._value

    @property
    def negative(self) -> bool:
        """True when the number is below zero."""
        return self._value < 0

    def _with_sign(self, magnitude: int) -> Mpz:
        return Mpz(-magnitude if self._value < 0 else magnitude)

    # --------------------------------------------------------- arithmetic
    def __add__(self, other: object) -> Mpz:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Mpz(self._value + o._value)

    def __radd__(self, other: object) -> Mpz:
        return self.__add__(other)

    def __sub__(self, other: object) -> Mpz:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Mpz(self._value - o._value)

    def __rsub__(self, other: object) -> Mpz:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Mpz(o._value - self._value)

    def __mul__(self, other: object) -> Mpz:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return Mpz(self._value * o._value)

    def __rmul__(self, other: object) -> Mpz:
        return self.__mul__(other)

    def __neg__(self) -> Mpz:
        return Mpz(-self._value)

    def __abs__(self) -> Mpz:
        return Mpz(abs(self._value))

    # --------------------------------------------------------------- bits
    def bits(self) -> int:
        """Number of bits needed to represent the magnitude."""
        return abs(self._value).bit_length()

    @staticmethod
    def _check_bit_index(i: int) -> None:
        if i < 0:
            raise ValueError("bit index must be non-negative")

    def set_bit(self, i: int) -> Mpz:
        """Return a copy with bit ``i`` of the magnitude set."""
        self._check_bit_index(i)
        return self._with_sign(abs(self._value) | (1 << i))

    def clear_bit(self, i: int) -> Mpz:
        """Return a copy with bit ``i`` of the magnitude cleared."""
        self._check_bit_index(i)
        return self._with_sign(abs(self._value) & ~(1 << i))

    def test_bit(self, i: int) -> bool:
        """Whether bit ``i`` of the magnitude is set."""
        self._check_bit_index(i)
        return bool(abs(self._value) >> i & 1)

    def lshift(self, bits: int) -> Mpz:
        """Shift the magnitude left by ``bits``, keeping the sign."""
        self._check_bit_index(bits)
        return self._with_sign(abs(self._value) << bits)

    def rshift(self, bits: int) -> Mpz:
        """Shift the magnitude right by ``bits``, keeping the sign."""
        self._check_bit_index(bits)
        return self._with_sign(abs(self._value) >> bits)

    def bit_and(self, other: IntLike) -> Mpz:
        """Bitwise AND of the magnitudes; ANDing a number with itself returns it."""
        o = self._coerce(other)
        if o is None:
            raise TypeError("bit_and needs an Mpz or int")
        if o is self:
            return self
        return Mpz(abs(self._value) & abs(o._value))

    # --------------------------------------------------------- comparison
    def cmpabs(self, other: IntLike) -> int:
        """Compare magnitudes: 1, 0 or -1."""
        o = self._coerce(other)
        if o is None:
            raise TypeError("cmpabs needs an Mpz or int")
        a, b = abs(self._value), abs(o._value)
        return (a > b) - (a < b)

    def __eq__(self, other: object) -> bool:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._value == o._value

    def __lt__(self, other: object) -> bool:
        o = self._coerce(other)
        if o is None:
            return NotImplemented
        return self._value < o._value

    def __hash__(self) -> int:
        return hash(self._value)

    # ----------------------------------------------------------- division
    def tdiv_qr(self, divisor: IntLike) -> tuple[Mpz, Mpz]:
        """Truncating division: (quotient, remainder)."""
        d = self._coerce(divisor)
        if d is None:
            raise TypeError("divisor must be an Mpz or int")
        if d._value == 0:
            raise ZeroDivisionError("division by zero")
        qmag, rmag = divmod(abs(self._value), abs(d._value))
        q = -qmag if (self._value < 0) != (d._value < 0) else qmag
        r = -rmag if self._value < 0 else rmag
        return Mpz(q), Mpz(r)

    def tdiv_q(self, divisor: IntLike) -> Mpz:
        """Quotient truncated toward zero."""
        return self.tdiv_qr(divisor)[0]

    def tdiv_r(self, divisor: IntLike) -> Mpz:
        """Remainder carrying the sign of the dividend."""
        return self.tdiv_qr(divisor)[1]

    def mod(self, modulus: IntLike) -> Mpz:
        """Modular reduction; a negative dividend gives a non-negative result."""
        m = self._coerce(modulus)
        if m is None:
            raise TypeError("modulus must be an Mpz or int")
        r = self.tdiv_r(m)
        if r._value and self._value < 0:
            r = r - m if m._value < 0 else r + m
        return r

    # -------------------------------------------------------- conversions
    def to_float(self) -> float:
        """Approximate the number as a float, infinite when too large."""
        try:
            return float(self._value)
        except OverflowError:
            return math.copysign(math.inf, self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __repr__(self) -> str:
        return f"Mpz({self._value})"

    def __str__(self) -> str:
        return str(self._value)


def from_float(value: float) -> Mpz:
    """Build an Mpz from a float, truncating toward zero."""
    if not math.isfinite(value):
        raise ValueError(f"cannot convert {value!r} to an integer")
    return Mpz(int(value))