"""Conversion of Mpz numbers to and from text in bases 2 to 36."""

from __future__ import annotations

import math

from .bignum import IntLike, Mpz

MIN_BASE = 2
MAX_BASE = 36

_ATOM_BITS = 32
_ATOM_MASK = (1 << _ATOM_BITS) - 1
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_DIGIT_VALUES = {ch: value for value, ch in enumerate(_DIGITS)}
_SPACE = " \t\n\v\f\r"

# Digits of base b needed for one 32-bit word: log(2**32) / log(b).
_DIGITS_PER_WORD = (
    0.0, 0.0,
    32.000000, 20.189752, 16.000000, 13.781650, 12.379290, 11.398630,
    10.666667, 10.094876, 9.632960, 9.250074, 8.926174, 8.647621,
    8.404785, 8.190657, 8.000000, 7.828817, 7.673999, 7.533085,
    7.404103, 7.285448, 7.175802, 7.074071, 6.979337, 6.890825,
    6.807874, 6.729917, 6.656467, 6.587099, 6.521442, 6.459171,
    6.400000, 6.343676, 6.289972, 6.238689, 6.189645,
)


def _check_base(base: int) -> None:
    if not MIN_BASE <= base <= MAX_BASE:
        raise ValueError(f"base must be between {MIN_BASE} and {MAX_BASE}, got {base}")


def _largest_power(base: int) -> tuple[int, int]:
    """The largest power of ``base`` that fits in a 32-bit word, and its exponent."""
    exponent = int(math.log(_ATOM_MASK, base))
    while base ** (exponent + 1) <= _ATOM_MASK:
        exponent += 1
    while base**exponent > _ATOM_MASK:
        exponent -= 1
    return base**exponent, exponent


def size_in_base(z: IntLike, base: int) -> int:
    """Upper estimate of the digits needed to write ``z`` in ``base``.

    The minus sign and any terminator are not counted.
    """
    _check_base(base)
    words = (abs(Mpz(z).value).bit_length() + _ATOM_BITS - 1) // _ATOM_BITS
    return int((_DIGITS_PER_WORD[base] + 0.000001) * words + 1)


def to_string(z: IntLike, base: int = 10) -> str:
    """Write ``z`` in ``base`` with lower-case digits and a leading '-' when negative."""
    _check_base(base)
    number = Mpz(z).value
    magnitude = abs(number)
    if magnitude == 0:
        return "0"
    chunk, chunk_digits = _largest_power(base)
    digits: list[str] = []
    while magnitude:
        magnitude, part = divmod(magnitude, chunk)
        for _ in range(chunk_digits):
            part, digit = divmod(part, base)
            digits.append(_DIGITS[digit])
            if part == 0 and magnitude == 0:
                break
    if number < 0:
        digits.append("-")
    return "".join(reversed(digits))


def from_string(text: str, base: int = 10) -> Mpz:
    """Parse ``text`` as a number in ``base``.

    Leading and trailing white space is ignored and a leading '-' makes the
    number negative. With ``base`` 0 the base is guessed: a leading '0'
    means octal, '0x' hexadecimal, '0b' binary, anything else decimal.
    Digits are case-insensitive; any other character raises ValueError.
    """
    body = text.lstrip(_SPACE)
    negative = body.startswith("-")
    if negative:
        body = body[1:]
    if base == 0:
        base = 10
        if body.startswith("0"):
            base = 8
            body = body[1:]
            prefix = body[:1].lower()
            if prefix == "x":
                base = 16
                body = body[1:]
            elif prefix == "b":
                base = 2
                body = body[1:]
    _check_base(base)
    body = body.rstrip(_SPACE)
    value = 0
    for ch in body:
        digit = _DIGIT_VALUES.get(ch.lower() if ch.isascii() else ch)
        if digit is None or digit >= base:
            raise ValueError(f"invalid digit {ch!r} for base {base}")
        value = value * base + digit
    return Mpz(-value if negative else value)