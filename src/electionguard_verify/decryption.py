#!/usr/bin/env python
"""
Threshold decryption checks: per-trustee shares, shares rebuilt for absent
trustees from fragments, and the recombination of all shares into the
published decryption.

Trustee indices are 1-based positions in the record's list of trustees.
"""
from typing import Sequence, Union

# pylint: disable=no-name-in-module
from gmpy2 import mpz

from .chaum_pedersen import check_decryption_proof
from .errors import DecryptionMismatch, ThresholdError
from .group import ElectionGroup, IntLike
from .schema import (
    DecryptedValue,
    DirectShare,
    ElGamalMessage,
    RecoveredShare,
    TrusteePublicKey,
)

ShareType = Union[DirectShare, RecoveredShare]


def compute_lagrange_coefficient(
    group: ElectionGroup, coordinate: IntLike, *degrees: IntLike
) -> mpz:
    """
    Compute the Lagrange coefficient for a specific coordinate against N degrees,
    i.e. the weight of the value at `coordinate` when interpolating at zero
    through the points `coordinate, *degrees`.
    """
    numerator = group.mult_q(*degrees)
    denominator = group.mult_q(
        *[group.a_minus_b_q(degree, coordinate) for degree in degrees]
    )
    return group.div_q(numerator, denominator)


def compute_recovery_public_key(
    group: ElectionGroup, trustee: TrusteePublicKey, index: IntLike
) -> mpz:
    """
    The public counterpart `g^P(index)` of trustee `index`'s backup of
    another trustee's secret polynomial `P`, computed from that trustee's
    coefficient commitments as `prod_j K_j^(index^j)`.

    Fragment proofs are checked against this key, not against the
    contributing trustee's own `K_index,0`: a fragment is `a^P(index)`,
    which only `g^P(index)` matches.
    """
    key = mpz(1)
    for j, coefficient in enumerate(trustee.coefficients):
        exponent = mpz(index) ** j % group.small_prime
        key = group.mult_p(key, group.pow_p(coefficient.public_key, exponent))
    return key


def check_direct_share(
    group: ElectionGroup,
    share: DirectShare,
    ciphertext: ElGamalMessage,
    trustee: TrusteePublicKey,
    context: IntLike,
) -> None:
    if not trustee.coefficients:
        raise ThresholdError("trustee published no public key")
    check_decryption_proof(
        group, ciphertext, share.proof, trustee.public_key, share.share, context
    )


def check_recovered_share(
    group: ElectionGroup,
    share: RecoveredShare,
    ciphertext: ElGamalMessage,
    absent_index: int,
    trustee_public_keys: Sequence[TrusteePublicKey],
    threshold: int,
    context: IntLike,
) -> None:
    """
    Check the share of an absent trustee: `threshold` fragments from distinct
    other trustees, each with a valid proof against the matching recovery key,
    each weighted by the correct Lagrange coefficient, and recombining to the
    claimed share.
    """
    fragments = share.recovery.fragments
    if len(fragments) != threshold:
        raise ThresholdError(
            f"expected {threshold} fragments, found {len(fragments)}"
        )
    indices = [fragment.trustee_index for fragment in fragments]
    if len(set(indices)) != len(indices):
        raise ThresholdError("fragments repeat a trustee index")
    if absent_index in indices:
        raise ThresholdError("absent trustee contributed a fragment to its own share")
    for index in indices:
        if not 1 <= index <= len(trustee_public_keys):
            raise ThresholdError(f"fragment from unknown trustee index {index}")
    # indices are interpolation points mod q
    residues = [index % group.small_prime for index in indices]
    if len(set(residues)) != len(residues) or 0 in residues:
        raise ThresholdError("fragment indices collide modulo q")
    if absent_index % group.small_prime in residues:
        raise ThresholdError("fragment index is the absent trustee's own point mod q")
    group.check_element(share.share, "share")

    absent = trustee_public_keys[absent_index - 1]
    for fragment in fragments:
        recovery_key = compute_recovery_public_key(
            group, absent, fragment.trustee_index
        )
        check_decryption_proof(
            group,
            ciphertext,
            fragment.proof,
            recovery_key,
            fragment.fragment,
            context,
        )

    for fragment in fragments:
        others = [index for index in indices if index != fragment.trustee_index]
        expected = compute_lagrange_coefficient(group, fragment.trustee_index, *others)
        if fragment.lagrange_coefficient != expected:
            raise ThresholdError(
                f"lagrange coefficient for trustee {fragment.trustee_index} is incorrect"
            )

    recombined = group.mult_p(
        *[
            group.pow_p(fragment.fragment, fragment.lagrange_coefficient)
            for fragment in fragments
        ]
    )
    if recombined != share.share:
        raise DecryptionMismatch("fragments do not recombine to the claimed share")


def check_share(
    group: ElectionGroup,
    share: ShareType,
    ciphertext: ElGamalMessage,
    trustee_index: int,
    trustee_public_keys: Sequence[TrusteePublicKey],
    threshold: int,
    context: IntLike,
) -> None:
    """
    Check one trustee's share of the decryption of `ciphertext`, whether
    the trustee was present or its share was rebuilt from fragments.
    """
    if isinstance(share, RecoveredShare):
        check_recovered_share(
            group,
            share,
            ciphertext,
            trustee_index,
            trustee_public_keys,
            threshold,
            context,
        )
    else:
        check_direct_share(
            group, share, ciphertext, trustee_public_keys[trustee_index - 1], context
        )


def combine_shares(group: ElectionGroup, shares: Sequence[ShareType]) -> mpz:
    """
    The product of every trustee's share, `prod M_i = a^s` for the joint secret `s`.
    """
    return group.mult_p(*[share.share for share in shares])


def check_decrypted_value(
    group: ElectionGroup,
    value: DecryptedValue,
    ciphertext: ElGamalMessage,
    num_trustees: int,
) -> None:
    """
    Check that the shares decrypt `ciphertext` to the published value,
    `b / prod M_i = M`, and that `M = g^t` for the published cleartext.
    """
    if len(value.shares) != num_trustees:
        raise ThresholdError(
            f"expected one share per trustee ({num_trustees}), found {len(value.shares)}"
        )
    group.check_element(value.decrypted_value, "decrypted value")
    for share in value.shares:
        group.check_element(share.share, "share")
    combined = combine_shares(group, value.shares)
    if group.div_p(ciphertext.data, combined) != value.decrypted_value:
        raise DecryptionMismatch("shares do not decrypt to the decrypted value")
    if group.g_pow_p(value.cleartext) != value.decrypted_value:
        raise DecryptionMismatch("g^cleartext != decrypted value")
