#!/usr/bin/env python
# Modular arithmetic in the order-q subgroup of Z_p^*, where p = 2q + 1 is a safe prime.
# Every record carries its own prime and generator, so the group is a value, not a
# process-wide constant.

from dataclasses import dataclass
from typing import Union

# pylint: disable=no-name-in-module
from gmpy2 import invert, is_prime, mpz, powmod

from .errors import MalformedValue, ParameterError

IntLike = Union[int, mpz]

_zero_mpz = mpz(0)
_one_mpz = mpz(1)


@dataclass(frozen=True)
class ElectionGroup:
    """
    The prime-order subgroup used by an election: large prime `p`,
    small prime `q = (p - 1) / 2` and generator `g` of order `q`.
    """

    prime: mpz
    small_prime: mpz
    generator: mpz

    def pow_p(self, b: IntLike, e: IntLike) -> mpz:
        """
        Computes b^e mod p.
        """
        return powmod(mpz(b), mpz(e), self.prime)

    def g_pow_p(self, e: IntLike) -> mpz:
        """
        Computes g^e mod p.
        """
        return powmod(self.generator, mpz(e), self.prime)

    def mult_p(self, *elems: IntLike) -> mpz:
        """
        Computes the product, mod p, of all elements.
        """
        product = _one_mpz
        for x in elems:
            product = (product * mpz(x)) % self.prime
        return product

    def div_p(self, a: IntLike, b: IntLike) -> mpz:
        """
        Computes a/b mod p.

        :param b: An element in [1, P).
        """
        return self.mult_p(a, invert(mpz(b), self.prime))

    def add_q(self, *elems: IntLike) -> mpz:
        """
        Adds together one or more elements in Q, returns the sum mod Q.
        """
        t = _zero_mpz
        for e in elems:
            t = (t + mpz(e)) % self.small_prime
        return t

    def a_minus_b_q(self, a: IntLike, b: IntLike) -> mpz:
        return (mpz(a) - mpz(b)) % self.small_prime

    def mult_q(self, *elems: IntLike) -> mpz:
        product = _one_mpz
        for x in elems:
            product = (product * mpz(x)) % self.small_prime
        return product

    def div_q(self, a: IntLike, b: IntLike) -> mpz:
        """
        Computes a/b mod q. Raises `ZeroDivisionError` when b is a multiple of q.
        """
        return self.mult_q(a, invert(mpz(b) % self.small_prime, self.small_prime))

    def is_valid_element(self, x: IntLike) -> bool:
        """
        Validates that x lies in [1, P) and in the order-q subgroup.
        """
        if not 0 < x < self.prime:
            return False
        return powmod(mpz(x), self.small_prime, self.prime) == _one_mpz

    def is_valid_exponent(self, x: IntLike) -> bool:
        return 0 <= x < self.small_prime

    def check_element(self, x: IntLike, name: str = "value") -> mpz:
        if not self.is_valid_element(x):
            raise MalformedValue(f"{name} is not an element of the order-q subgroup")
        return mpz(x)

    def check_exponent(self, x: IntLike, name: str = "value") -> mpz:
        if not self.is_valid_exponent(x):
            raise MalformedValue(f"{name} is not in the range [0, q)")
        return mpz(x)


def make_group(prime: IntLike, generator: IntLike) -> ElectionGroup:
    """
    Build the election group from the published prime and generator,
    raising `ParameterError` unless p is a safe prime and g generates
    the order-q subgroup.
    """
    p = mpz(prime)
    if p <= 5 or p % 2 == 0 or not is_prime(p):
        raise ParameterError("prime is not an odd prime greater than 5")
    q = (p - 1) // 2
    if not is_prime(q):
        raise ParameterError("prime is not a safe prime")
    group = ElectionGroup(prime=p, small_prime=q, generator=mpz(generator))
    if generator == 1 or not group.is_valid_element(generator):
        raise ParameterError("generator does not generate the order-q subgroup")
    return group
