#!/usr/bin/env python
"""
An honest prover for tests: generates trustee keys, encrypted ballots,
tallies, spoiled ballots and (possibly reconstructed) decryption shares,
with every proof built the way the verifier expects to check it.

Nothing here is part of the verifier; it only exists so tests can start
from a valid record and corrupt one value at a time.
"""
from dataclasses import dataclass, field
from random import Random
from typing import Collection, List, Sequence, Tuple

from electionguard_verify.group import ElectionGroup, make_group
from electionguard_verify.hash import base_hash, challenge, extended_base_hash
from electionguard_verify.schema import (
    CastBallot,
    CastContest,
    CastSelection,
    ChaumPedersenProof,
    ContestConfiguration,
    ContestTally,
    DecryptedValue,
    DirectShare,
    DisjunctiveChaumPedersenProof,
    ElGamalMessage,
    Fragment,
    Parameters,
    RecoveredShare,
    Record,
    SchnorrProof,
    ShareRecovery,
    SpoiledBallot,
    SpoiledContest,
    TrusteeCoefficient,
    TrusteePublicKey,
)

# The 1024-bit MODP group of RFC 2409, a safe prime.
# 4 = 2^2 generates the order-q subgroup.
MODP_1024_PRIME = int(
    "FFFFFFFFFFFFFFFFC90FDAA22168C234C4C6628B80DC1CD1"
    "29024E088A67CC74020BBEA63B139B22514A08798E3404DD"
    "EF9519B3CD3A431B302B0A6DF25F14374FE1356D6D51C245"
    "E485B576625E7EC6F44C42E9A637ED6B0BFF5CB6F406B7ED"
    "EE386BFB5A899FA5AE9F24117C4B1FE649286651ECE65381"
    "FFFFFFFFFFFFFFFF",
    16,
)
MODP_1024_GENERATOR = 4

TOY_PRIME = 23
TOY_GENERATOR = 4


def toy_group() -> ElectionGroup:
    return make_group(TOY_PRIME, TOY_GENERATOR)


def modp_group() -> ElectionGroup:
    return make_group(MODP_1024_PRIME, MODP_1024_GENERATOR)


def encrypt(
    group: ElectionGroup, public_key: int, vote: int, nonce: int
) -> ElGamalMessage:
    return ElGamalMessage(
        pad=int(group.g_pow_p(nonce)),
        data=int(group.mult_p(group.g_pow_p(vote), group.pow_p(public_key, nonce))),
    )


def decrypt(group: ElectionGroup, message: ElGamalMessage, secret: int) -> int:
    """
    Recover the exponent of a toy-group ciphertext by exhaustive search.
    """
    m = group.div_p(message.data, group.pow_p(message.pad, secret))
    for t in range(int(group.small_prime)):
        if group.g_pow_p(t) == m:
            return t
    raise ValueError("ciphertext does not decrypt to a power of g")


def make_schnorr_proof(
    group: ElectionGroup, secret: int, context: int, nonce: int
) -> SchnorrProof:
    public_key = group.g_pow_p(secret)
    commitment = group.g_pow_p(nonce)
    c = challenge(group, context, public_key, commitment)
    u = group.add_q(nonce, group.mult_q(c, secret))
    return SchnorrProof(commitment=int(commitment), challenge=int(c), response=int(u))


def make_constant_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    encryption_nonce: int,
    public_key: int,
    context: int,
    nonce: int,
) -> ChaumPedersenProof:
    pad = group.g_pow_p(nonce)
    data = group.pow_p(public_key, nonce)
    c = challenge(group, context, message.pad, message.data, pad, data)
    v = group.add_q(nonce, group.mult_q(c, encryption_nonce))
    return ChaumPedersenProof(
        pad=int(pad), data=int(data), challenge=int(c), response=int(v)
    )


def make_disjunctive_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    encryption_nonce: int,
    vote: int,
    public_key: int,
    context: int,
    rng: Random,
) -> DisjunctiveChaumPedersenProof:
    """
    The branch for `vote` is genuine; the other branch is simulated from a
    random challenge and response.
    """
    q = int(group.small_prime)
    fake = 1 - vote
    fake_c = rng.randrange(q)
    fake_v = rng.randrange(q)
    fake_pad = group.div_p(group.g_pow_p(fake_v), group.pow_p(message.pad, fake_c))
    unblinded = group.div_p(message.data, group.g_pow_p(fake))
    fake_data = group.div_p(
        group.pow_p(public_key, fake_v), group.pow_p(unblinded, fake_c)
    )
    u = rng.randrange(q)
    real_pad = group.g_pow_p(u)
    real_data = group.pow_p(public_key, u)

    pads = {vote: real_pad, fake: fake_pad}
    datas = {vote: real_data, fake: fake_data}
    c = challenge(
        group, context, message.pad, message.data, pads[0], datas[0], pads[1], datas[1]
    )
    real_c = group.a_minus_b_q(c, fake_c)
    real_v = group.add_q(u, group.mult_q(real_c, encryption_nonce))
    challenges = {vote: real_c, fake: fake_c}
    responses = {vote: real_v, fake: fake_v}
    return DisjunctiveChaumPedersenProof(
        proof_zero_pad=int(pads[0]),
        proof_zero_data=int(datas[0]),
        proof_one_pad=int(pads[1]),
        proof_one_data=int(datas[1]),
        proof_zero_challenge=int(challenges[0]),
        proof_one_challenge=int(challenges[1]),
        challenge=int(c),
        proof_zero_response=int(responses[0]),
        proof_one_response=int(responses[1]),
    )


def make_decryption_proof(
    group: ElectionGroup,
    message: ElGamalMessage,
    secret: int,
    partial: int,
    context: int,
    nonce: int,
) -> ChaumPedersenProof:
    pad = group.g_pow_p(nonce)
    data = group.pow_p(message.pad, nonce)
    c = challenge(group, context, message.pad, message.data, pad, data, partial)
    v = group.add_q(nonce, group.mult_q(c, secret))
    return ChaumPedersenProof(
        pad=int(pad), data=int(data), challenge=int(c), response=int(v)
    )


def lagrange_coefficient(q: int, index: int, others: Sequence[int]) -> int:
    """
    Interpolation-at-zero weight, computed with plain integers.
    """
    numerator = 1
    denominator = 1
    for m in others:
        numerator = numerator * m % q
        denominator = denominator * (m - index) % q
    return numerator * pow(denominator, -1, q) % q


@dataclass
class Trustee:
    index: int
    coefficients: List[int]

    @property
    def secret(self) -> int:
        return self.coefficients[0]

    def polynomial(self, x: int, q: int) -> int:
        return sum(a * pow(x, j, q) for j, a in enumerate(self.coefficients)) % q

    def public_key(self, group: ElectionGroup) -> int:
        return int(group.g_pow_p(self.secret))

    def publish(
        self, group: ElectionGroup, context: int, rng: Random
    ) -> TrusteePublicKey:
        q = int(group.small_prime)
        return TrusteePublicKey(
            coefficients=tuple(
                TrusteeCoefficient(
                    public_key=int(group.g_pow_p(a)),
                    proof=make_schnorr_proof(group, a, context, rng.randrange(q)),
                )
                for a in self.coefficients
            )
        )


@dataclass
class ElectionFactory:
    """
    Builds records for a group with `num_trustees` trustees and threshold
    `threshold`. The same seed always gives the same record.
    """

    group: ElectionGroup
    num_trustees: int = 3
    threshold: int = 2
    seed: int = 0
    date: str = "2020-03-01"
    location: str = "Test County"
    rng: Random = field(init=False)
    trustees: List[Trustee] = field(init=False)

    def __post_init__(self) -> None:
        self.rng = Random(self.seed)
        self.trustees = [
            Trustee(i + 1, [self.rand_q() for _ in range(self.threshold)])
            for i in range(self.num_trustees)
        ]

    @property
    def q(self) -> int:
        return int(self.group.small_prime)

    def rand_q(self) -> int:
        return self.rng.randrange(self.q)

    @property
    def joint_public_key(self) -> int:
        keys = [t.public_key(self.group) for t in self.trustees]
        return int(self.group.mult_p(*keys))

    @property
    def parameters(self) -> Parameters:
        return Parameters(
            date=self.date,
            location=self.location,
            num_trustees=self.num_trustees,
            threshold=self.threshold,
            prime=int(self.group.prime),
            generator=int(self.group.generator),
        )

    def encrypt_selection(
        self, vote: int, context: int
    ) -> Tuple[CastSelection, int]:
        nonce = self.rand_q()
        message = encrypt(self.group, self.joint_public_key, vote, nonce)
        proof = make_disjunctive_proof(
            self.group, message, nonce, vote, self.joint_public_key, context, self.rng
        )
        return CastSelection(message=message, proof=proof), nonce

    def encrypt_contest(
        self, votes: Sequence[int], max_selections: int, context: int
    ) -> CastContest:
        selections = []
        nonces = []
        for vote in votes:
            selection, nonce = self.encrypt_selection(vote, context)
            selections.append(selection)
            nonces.append(nonce)
        accumulation = ElGamalMessage(
            pad=int(self.group.mult_p(*[s.message.pad for s in selections])),
            data=int(self.group.mult_p(*[s.message.data for s in selections])),
        )
        proof = make_constant_proof(
            self.group,
            accumulation,
            self.group.add_q(*nonces),
            self.joint_public_key,
            context,
            self.rand_q(),
        )
        return CastContest(
            selections=tuple(selections),
            max_selections=max_selections,
            num_selections_proof=proof,
        )

    def make_share(
        self, trustee: Trustee, message: ElGamalMessage, context: int
    ) -> DirectShare:
        partial = int(self.group.pow_p(message.pad, trustee.secret))
        proof = make_decryption_proof(
            self.group, message, trustee.secret, partial, context, self.rand_q()
        )
        return DirectShare(share=partial, proof=proof)

    def make_fragments(
        self,
        absent: Trustee,
        helpers: Sequence[int],
        message: ElGamalMessage,
        context: int,
    ) -> Tuple[Fragment, ...]:
        fragments = []
        for index in helpers:
            backup = absent.polynomial(index, self.q)
            partial = int(self.group.pow_p(message.pad, backup))
            fragments.append(
                Fragment(
                    fragment=partial,
                    lagrange_coefficient=lagrange_coefficient(
                        self.q, index, [m for m in helpers if m != index]
                    ),
                    proof=make_decryption_proof(
                        self.group, message, backup, partial, context, self.rand_q()
                    ),
                    trustee_index=index,
                )
            )
        return tuple(fragments)

    def make_recovered_share(
        self,
        absent: Trustee,
        helpers: Sequence[int],
        message: ElGamalMessage,
        context: int,
    ) -> RecoveredShare:
        fragments = self.make_fragments(absent, helpers, message, context)
        share = self.group.mult_p(
            *[
                self.group.pow_p(f.fragment, f.lagrange_coefficient)
                for f in fragments
            ]
        )
        return RecoveredShare(share=int(share), recovery=ShareRecovery(fragments))

    def decrypt_value(
        self,
        message: ElGamalMessage,
        cleartext: int,
        context: int,
        absent: Collection[int] = (),
    ) -> DecryptedValue:
        present = [t.index for t in self.trustees if t.index not in absent]
        helpers = present[: self.threshold]
        shares = []
        for trustee in self.trustees:
            if trustee.index in absent:
                shares.append(
                    self.make_recovered_share(trustee, helpers, message, context)
                )
            else:
                shares.append(self.make_share(trustee, message, context))
        combined = self.group.mult_p(*[share.share for share in shares])
        return DecryptedValue(
            cleartext=cleartext,
            decrypted_value=int(self.group.div_p(message.data, combined)),
            encrypted_value=message,
            shares=tuple(shares),
        )

    def build_record(
        self,
        cast_votes: Sequence[Sequence[Sequence[int]]],
        max_selections: Sequence[int],
        spoiled_votes: Sequence[Sequence[Sequence[int]]] = (),
        absent: Collection[int] = (),
    ) -> Record:
        """
        `cast_votes[ballot][contest][selection]` is 0 or 1; every ballot has
        the same contests, with `max_selections[contest]` votes in each.
        `absent` lists the 1-based indices of trustees whose shares are
        rebuilt from fragments.
        """
        num_selections = [len(contest) for contest in (cast_votes or spoiled_votes)[0]]
        configuration = [
            ContestConfiguration(count, limit if cast_votes else None)
            for count, limit in zip(num_selections, max_selections)
        ]
        base = base_hash(self.parameters, configuration)
        trustee_keys = tuple(
            trustee.publish(self.group, base, self.rng) for trustee in self.trustees
        )
        extended = extended_base_hash(base, trustee_keys)

        cast_ballots = tuple(
            CastBallot(
                ballot_info={"device": "device-1", "tracker": f"cast-{i}"},
                contests=tuple(
                    self.encrypt_contest(votes, limit, extended)
                    for votes, limit in zip(ballot, max_selections)
                ),
            )
            for i, ballot in enumerate(cast_votes)
        )

        tallies = []
        for j, count in enumerate(num_selections):
            selections = []
            for k in range(count):
                pad = self.group.mult_p(
                    *[b.contests[j].selections[k].message.pad for b in cast_ballots]
                )
                data = self.group.mult_p(
                    *[b.contests[j].selections[k].message.data for b in cast_ballots]
                )
                total = sum(ballot[j][k] for ballot in cast_votes)
                selections.append(
                    self.decrypt_value(
                        ElGamalMessage(pad=int(pad), data=int(data)),
                        total,
                        extended,
                        absent,
                    )
                )
            tallies.append(ContestTally(selections=tuple(selections)))

        spoiled_ballots = []
        for i, ballot in enumerate(spoiled_votes):
            contests = []
            for votes in ballot:
                values = []
                for vote in votes:
                    message = encrypt(
                        self.group, self.joint_public_key, vote, self.rand_q()
                    )
                    values.append(self.decrypt_value(message, vote, extended, absent))
                contests.append(SpoiledContest(selections=tuple(values)))
            spoiled_ballots.append(
                SpoiledBallot(
                    ballot_info={"device": "device-1", "tracker": f"spoiled-{i}"},
                    contests=tuple(contests),
                )
            )

        return Record(
            parameters=self.parameters,
            base_hash=base,
            trustee_public_keys=trustee_keys,
            joint_public_key=self.joint_public_key,
            extended_base_hash=extended,
            cast_ballots=cast_ballots,
            contest_tallies=tuple(tallies),
            spoiled_ballots=tuple(spoiled_ballots),
        )
