#!/usr/bin/env python
from hashlib import sha256
from typing import Any, Iterable, Sequence

# pylint: disable=no-name-in-module
from gmpy2 import mpz

from .group import ElectionGroup, IntLike
from .schema import ContestConfiguration, Parameters, TrusteePublicKey


def _to_hex(i: IntLike) -> str:
    h = format(int(i), "02X")
    if len(h) % 2:
        h = "0" + h
    return h


def hash_digest(*elems: Any) -> int:
    """
    SHA-256 over the canonical encoding of the given elements, read as a
    big-endian integer.

    Every element is written as text followed by a "|" separator, after an
    opening "|". Integers are uppercase hex of even length, strings are
    used as-is, `None` becomes "null" and nested sequences are replaced by
    the hex of their own digest. Proof generation must use the same
    encoding, byte for byte, or no challenge will ever match.
    """
    h = sha256()
    h.update("|".encode("utf-8"))
    for x in elems:
        if x is None:
            hash_me = "null"
        elif isinstance(x, str):
            hash_me = x
        elif isinstance(x, (int, mpz)):
            hash_me = _to_hex(x)
        elif isinstance(x, Sequence):
            hash_me = _to_hex(hash_digest(*x))
        else:
            raise TypeError(f"cannot hash value of type {type(x).__name__}")
        h.update((hash_me + "|").encode("utf-8"))
    return int.from_bytes(h.digest(), byteorder="big")


def hash_elems(group: ElectionGroup, *elems: Any) -> mpz:
    """
    Hash the elements and reduce the digest into the exponent space [0, q).
    """
    return mpz(hash_digest(*elems)) % group.small_prime


def challenge(group: ElectionGroup, context: IntLike, *commitments: IntLike) -> mpz:
    """
    The Fiat-Shamir challenge for a proof: the hash of the context hash
    followed by the proof's public values, in the order given.
    """
    return hash_elems(group, context, *commitments)


def base_hash(
    parameters: Parameters, contests: Iterable[ContestConfiguration]
) -> int:
    """
    The base hash `Q`, binding the group, the trustee counts, the
    descriptive parameters and the contest structure.
    """
    return hash_digest(
        parameters.prime,
        parameters.generator,
        parameters.num_trustees,
        parameters.threshold,
        parameters.date,
        parameters.location,
        [[contest.num_selections, contest.max_selections] for contest in contests],
    )


def extended_base_hash(
    base: IntLike, trustee_public_keys: Iterable[TrusteePublicKey]
) -> int:
    """
    The extended base hash `Q̅`: the base hash followed by every trustee
    coefficient key, trustee by trustee.
    """
    keys = [
        coefficient.public_key
        for trustee in trustee_public_keys
        for coefficient in trustee.coefficients
    ]
    return hash_digest(base, *keys)
