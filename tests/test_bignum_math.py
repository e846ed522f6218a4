import math

import pytest

from hpingkit.bignum import Mpz
from hpingkit.bignum_math import factorial, gcd, isqrt, power, power_mod, random_mpz
from hpingkit.rc4 import identity_generator


@pytest.mark.parametrize("n", [1, 2, 3, 10, 20, 35])
def test_factorial_matches_math(n):
    assert factorial(n) == math.factorial(n)


def test_factorial_of_zero_is_zero():
    assert factorial(0) == 0


def test_factorial_rejects_negative():
    with pytest.raises(ValueError):
        factorial(-1)


@pytest.mark.parametrize(
    "base,exponent",
    [(2, 10), (3, 1), (-3, 3), (-2, 4), (7, 33), (10**12 + 3, 5), (0, 7)],
)
def test_power_matches_builtin(base, exponent):
    assert power(base, exponent) == base**exponent


def test_power_accepts_mpz_operands():
    assert power(Mpz(3), Mpz(4)) == 3**4


def test_power_with_zero_exponent_gives_abs_base():
    assert power(-5, 0) == abs(-5)


def test_power_rejects_negative_exponent():
    with pytest.raises(ValueError):
        power(2, -1)


@pytest.mark.parametrize(
    "base,exponent,modulus",
    [(4, 13, 497), (2, 100, 1000003), (-7, 5, 11), (-7, 4, 11), (123456789, 65537, 2**61 - 1)],
)
def test_power_mod_matches_builtin(base, exponent, modulus):
    assert power_mod(base, exponent, modulus) == pow(base, exponent, modulus)


def test_power_mod_result_is_reduced():
    result = power_mod(10**30, 17, 97)
    assert 0 <= result.value < 97


def test_power_mod_zero_modulus_raises():
    with pytest.raises(ZeroDivisionError):
        power_mod(3, 5, 0)


def test_power_mod_rejects_negative_exponent():
    with pytest.raises(ValueError):
        power_mod(3, -2, 7)


@pytest.mark.parametrize("z", [0, 1, 2, 3, 4, 15, 16, 17, 10**40, 2**64 + 5, -17])
def test_isqrt_bounds(z):
    r = isqrt(z).value
    assert r >= 0
    assert r * r <= abs(z) < (r + 1) * (r + 1)


def test_isqrt_ignores_sign():
    assert isqrt(-1000) == isqrt(1000)


@pytest.mark.parametrize(
    "a,b", [(12, 18), (-12, 18), (17, 5), (0, -9), (-9, 0), (2**80, 2**50 * 3)]
)
def test_gcd_matches_math(a, b):
    result = gcd(a, b)
    assert result == math.gcd(a, b)
    assert not result.negative


def test_random_mpz_is_reproducible():
    first = random_mpz(4, identity_generator())
    second = random_mpz(4, identity_generator())
    assert first == second


def test_random_mpz_bounds_and_sign():
    gen = identity_generator()
    positive = random_mpz(3, gen)
    negative = random_mpz(-3, gen)
    assert positive.bits() <= 3 * 32
    assert negative.bits() <= 3 * 32
    assert not positive.negative
    assert negative.negative


def test_random_mpz_zero_length():
    assert random_mpz(0, identity_generator()) == 0


def test_random_mpz_consumes_one_word_per_atom():
    gen_a = identity_generator()
    gen_b = identity_generator()
    random_mpz(2, gen_a)
    gen_b.next_u32()
    gen_b.next_u32()
    assert gen_a.next_u32() == gen_b.next_u32()