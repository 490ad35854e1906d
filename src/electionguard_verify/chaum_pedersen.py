#!/usr/bin/env python
"""
Chaum-Pedersen proofs of equal discrete logs, in the three forms an
election record uses:

- constant proofs, that a ciphertext encrypts a known exponent (the
  number of selections made in a contest);
- disjunctive proofs, that a ciphertext encrypts zero or one;
- decryption proofs, that a partial decryption `M_i = a^s_i` uses the
  same secret as the public key `K_i = g^s_i`.

The `check_*` functions raise `MalformedValue` or `InvalidProof`;
the `verify_*` functions wrap them and return a bool.
"""
from typing import Sequence

from .elgamal import check_message, elgamal_add
from .errors import InvalidProof, VerificationError
from .group import ElectionGroup, IntLike
from .hash import challenge
from .logs import log_debug
from .schema import (
    ChaumPedersenProof,
    DisjunctiveChaumPedersenProof,
    ElGamalMessage,
)


def constant_equations_hold(
    group: ElectionGroup,
    message: ElGamalMessage,
    public_key: IntLike,
    constant: IntLike,
    pad: IntLike,
    data: IntLike,
    c: IntLike,
    v: IntLike,
) -> bool:
    """
    The two verification equations for `(a, b)` encrypting `constant`,
    without the challenge hash: `g^v = a0 * a^c` and
    `K^v = b0 * (b / g^constant)^c`.
    """
    if group.g_pow_p(v) != group.mult_p(pad, group.pow_p(message.pad, c)):
        return False
    unblinded = group.div_p(message.data, group.g_pow_p(constant))
    return group.pow_p(public_key, v) == group.mult_p(data, group.pow_p(unblinded, c))


def _check_proof_values(group: ElectionGroup, proof: ChaumPedersenProof) -> None:
    group.check_element(proof.pad, "proof pad")
    group.check_element(proof.data, "proof data")
    group.check_exponent(proof.challenge, "proof challenge")
    group.check_exponent(proof.response, "proof response")


def check_constant_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: ChaumPedersenProof,
    public_key: IntLike,
    constant: IntLike,
    context: IntLike,
) -> None:
    """
    Check that `message` encrypts `g^constant` under `public_key`.
    """
    check_message(group, message)
    group.check_element(public_key, "public key")
    _check_proof_values(group, proof)

    expected = challenge(
        group, context, message.pad, message.data, proof.pad, proof.data
    )
    if proof.challenge != expected:
        raise InvalidProof("challenge is not the hash of the ciphertext and commitments")
    if not constant_equations_hold(
        group,
        message,
        public_key,
        constant,
        proof.pad,
        proof.data,
        proof.challenge,
        proof.response,
    ):
        raise InvalidProof(f"ciphertext is not proven to encrypt {constant}")


def check_disjunctive_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: DisjunctiveChaumPedersenProof,
    public_key: IntLike,
    context: IntLike,
) -> None:
    """
    Check that `message` encrypts either zero or one. Both branches are
    checked the same way; nothing here depends on which one is genuine.
    """
    check_message(group, message)
    group.check_element(public_key, "public key")
    for name in (
        "proof_zero_pad",
        "proof_zero_data",
        "proof_one_pad",
        "proof_one_data",
    ):
        group.check_element(getattr(proof, name), name.replace("_", " "))
    for name in (
        "proof_zero_challenge",
        "proof_one_challenge",
        "challenge",
        "proof_zero_response",
        "proof_one_response",
    ):
        group.check_exponent(getattr(proof, name), name.replace("_", " "))

    expected = challenge(
        group,
        context,
        message.pad,
        message.data,
        proof.proof_zero_pad,
        proof.proof_zero_data,
        proof.proof_one_pad,
        proof.proof_one_data,
    )
    if proof.challenge != expected:
        raise InvalidProof("challenge is not the hash of the ciphertext and commitments")
    split = group.add_q(proof.proof_zero_challenge, proof.proof_one_challenge)
    if split != proof.challenge:
        raise InvalidProof("c0 + c1 != c mod q")

    for constant, branch in enumerate(("zero", "one")):
        if not constant_equations_hold(
            group,
            message,
            public_key,
            constant,
            getattr(proof, f"proof_{branch}_pad"),
            getattr(proof, f"proof_{branch}_data"),
            getattr(proof, f"proof_{branch}_challenge"),
            getattr(proof, f"proof_{branch}_response"),
        ):
            raise InvalidProof(f"branch {constant} equations do not hold")


def check_selection_sum_proof(
    group: ElectionGroup,
    messages: Sequence[ElGamalMessage],
    proof: ChaumPedersenProof,
    public_key: IntLike,
    max_selections: IntLike,
    context: IntLike,
) -> None:
    """
    Check that the selections of a contest, multiplied together, encrypt
    exactly `max_selections`.
    """
    for message in messages:
        check_message(group, message, "selection")
    accumulation = elgamal_add(group, messages)
    check_constant_proof(
        group, accumulation, proof, public_key, max_selections, context
    )


def check_decryption_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: ChaumPedersenProof,
    public_key: IntLike,
    partial: IntLike,
    context: IntLike,
) -> None:
    """
    Check that `partial = a^s` for the same `s` as `public_key = g^s`:
    the challenge is the hash of `(a, b, a0, b0, partial)` and both
    `g^v = a0 * K^c` and `a^v = b0 * partial^c` must hold.
    """
    check_message(group, message)
    group.check_element(public_key, "public key")
    group.check_element(partial, "partial decryption")
    _check_proof_values(group, proof)

    expected = challenge(
        group, context, message.pad, message.data, proof.pad, proof.data, partial
    )
    if proof.challenge != expected:
        raise InvalidProof("challenge is not the hash of the ciphertext, commitments and share")
    c = proof.challenge
    v = proof.response
    if group.g_pow_p(v) != group.mult_p(proof.pad, group.pow_p(public_key, c)):
        raise InvalidProof("g^v != a0 * K^c")
    if group.pow_p(message.pad, v) != group.mult_p(proof.data, group.pow_p(partial, c)):
        raise InvalidProof("a^v != b0 * M^c")


def verify_constant_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: ChaumPedersenProof,
    public_key: IntLike,
    constant: IntLike,
    context: IntLike,
) -> bool:
    try:
        check_constant_proof(group, message, proof, public_key, constant, context)
    except VerificationError as error:
        log_debug("constant chaum-pedersen proof rejected: %s", error)
        return False
    return True


def verify_disjunctive_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: DisjunctiveChaumPedersenProof,
    public_key: IntLike,
    context: IntLike,
) -> bool:
    try:
        check_disjunctive_proof(group, message, proof, public_key, context)
    except VerificationError as error:
        log_debug("disjunctive chaum-pedersen proof rejected: %s", error)
        return False
    return True


def verify_decryption_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    proof: ChaumPedersenProof,
    public_key: IntLike,
    partial: IntLike,
    context: IntLike,
) -> bool:
    try:
        check_decryption_proof(group, message, proof, public_key, partial, context)
    except VerificationError as error:
        log_debug("decryption proof rejected: %s", error)
        return False
    return True
