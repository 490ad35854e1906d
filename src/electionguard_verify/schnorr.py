#!/usr/bin/env python
from .errors import InvalidProof, VerificationError
from .group import ElectionGroup, IntLike
from .hash import challenge
from .logs import log_debug
from .schema import SchnorrProof


def check_schnorr_proof(
    group: ElectionGroup, public_key: IntLike, proof: SchnorrProof, context: IntLike
) -> None:
    """
    Check a proof of possession of the secret `s` behind `K = g^s`:
    the challenge must be the hash of the context, `K` and the commitment
    `h`, and `g^u = h * K^c mod p` must hold.

    Raises `MalformedValue` for out-of-range inputs and `InvalidProof`
    when either check fails.
    """
    k = group.check_element(public_key, "public key")
    h = group.check_element(proof.commitment, "commitment")
    c = group.check_exponent(proof.challenge, "challenge")
    u = group.check_exponent(proof.response, "response")

    if c != challenge(group, context, k, h):
        raise InvalidProof("challenge is not the hash of the public key and commitment")
    if group.g_pow_p(u) != group.mult_p(h, group.pow_p(k, c)):
        raise InvalidProof("g^u != h * K^c")


def verify_schnorr_proof(
    group: ElectionGroup, public_key: IntLike, proof: SchnorrProof, context: IntLike
) -> bool:
    try:
        check_schnorr_proof(group, public_key, proof, context)
    except VerificationError as error:
        log_debug("schnorr proof rejected: %s", error)
        return False
    return True
