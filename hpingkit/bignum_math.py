"""Number theoretic helpers built on Mpz."""

from __future__ import annotations

import math
import operator

from .bignum import IntLike, Mpz
from .rc4 import Rc4Generator, identity_generator

_ATOM_BITS = 32
_ATOM_MASK = 0xFFFFFFFF

# Shared by every call that does not bring its own generator, so repeated
# calls walk one reproducible sequence.
_DEFAULT_GENERATOR = identity_generator()


def factorial(n: int) -> Mpz:
    """Return n! for a non-negative ``n``.

    A zero argument yields zero rather than one.
    """
    n = operator.index(n)
    if n < 0:
        raise ValueError("factorial needs a non-negative argument")
    if n == 0:
        return Mpz(0)
    result = 1
    for factor in range(2, n + 1):
        result *= factor
    return Mpz(result)


def _square_and_multiply(base: Mpz, exponent: Mpz, modulus: Mpz | None) -> Mpz:
    if exponent.negative:
        raise ValueError("negative exponents are not supported")
    negative = base.negative and bool(exponent.value & 1)
    square = abs(base)
    acc = Mpz(1)
    rest = exponent.value
    while rest > 1:
        if rest & 1:
            acc = acc * square
            if modulus is not None:
                acc = acc.mod(modulus)
        rest >>= 1
        square = square * square
        if modulus is not None:
            square = square.mod(modulus)
    acc = acc * square
    if negative:
        acc = -acc
    if modulus is not None:
        acc = acc.mod(modulus)
    return acc


def power(base: IntLike, exponent: IntLike) -> Mpz:
    """Return base ** exponent.

    The exponent must be non-negative; a zero exponent yields the absolute
    value of the base.
    """
    return _square_and_multiply(Mpz(base), Mpz(exponent), None)


def power_mod(base: IntLike, exponent: IntLike, modulus: IntLike) -> Mpz:
    """Return base ** exponent reduced modulo ``modulus``.

    The exponent must be non-negative and the modulus non-zero.
    """
    return _square_and_multiply(Mpz(base), Mpz(exponent), Mpz(modulus))


def isqrt(z: IntLike) -> Mpz:
    """Return floor(sqrt(|z|))."""
    return Mpz(math.isqrt(abs(Mpz(z).value)))


def gcd(a: IntLike, b: IntLike) -> Mpz:
    """Greatest common divisor of |a| and |b|; gcd(a, 0) is |a|."""
    return Mpz(math.gcd(Mpz(a).value, Mpz(b).value))


def random_mpz(length: int, generator: Rc4Generator | None = None) -> Mpz:
    """A random number of at most ``abs(length)`` 32-bit words.

    A negative ``length`` gives a negative number. The least significant
    word is drawn first.
    """
    length = operator.index(length)
    gen = generator if generator is not None else _DEFAULT_GENERATOR
    if length == 0:
        return Mpz(0)
    words = abs(length)
    value = 0
    for index in range(words):
        value |= (gen.next_u32() & _ATOM_MASK) << (index * _ATOM_BITS)
    return Mpz(-value if length < 0 else value)