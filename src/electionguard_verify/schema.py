#!/usr/bin/env python
"""
The election record, as a tree of immutable values.

Numeric fields carry their on-disk decoding as `Annotated` metadata so that
`electionguard_verify.serialize` can load the whole tree through a single
pydantic `TypeAdapter`. Verification code only ever reads these values.
"""
from dataclasses import dataclass
from typing import Annotated, Any, Dict, Optional, Tuple, Union

from pydantic import BeforeValidator, Discriminator, PlainSerializer, Tag


def _parse_biguint(value: Any) -> int:
    # bool is an int subclass, but never a valid big integer
    if isinstance(value, bool):
        raise ValueError("expected a non-negative integer, not a boolean")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.isdigit() and value.isascii():
        result = int(value, 10)
    else:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    if result < 0:
        raise ValueError(f"expected a non-negative integer, got {value!r}")
    return result


def _parse_hash(value: Any) -> int:
    if not isinstance(value, str) or not value:
        raise ValueError(f"expected a hexadecimal hash, got {value!r}")
    try:
        return int(value, 16)
    except ValueError as error:
        raise ValueError(f"expected a hexadecimal hash, got {value!r}") from error


BigUInt = Annotated[
    int,
    BeforeValidator(_parse_biguint),
    PlainSerializer(lambda x: str(int(x)), return_type=str),
]
HashValue = Annotated[
    int,
    BeforeValidator(_parse_hash),
    PlainSerializer(lambda x: f"{int(x):064X}", return_type=str),
]


@dataclass(frozen=True)
class Parameters:
    """
    All the parameters necessary to form the election.
    """

    date: str
    location: str
    num_trustees: BigUInt
    threshold: BigUInt
    prime: BigUInt
    generator: BigUInt


@dataclass(frozen=True)
class SchnorrProof:
    """
    Proof of possession of the secret behind a public key: commitment `h`,
    challenge `c` and response `u`.
    """

    commitment: BigUInt
    challenge: BigUInt
    response: BigUInt


@dataclass(frozen=True)
class ElGamalMessage:
    """
    An ElGamal ciphertext `(a, b) = (g^r, g^t K^r)`.
    """

    pad: BigUInt
    data: BigUInt


@dataclass(frozen=True)
class ChaumPedersenProof:
    """
    Proof that two values share a discrete log: commitments `(a0, b0)`,
    challenge `c` and response `v`.
    """

    pad: BigUInt
    data: BigUInt
    challenge: BigUInt
    response: BigUInt


@dataclass(frozen=True)
class DisjunctiveChaumPedersenProof:
    """
    Proof that a ciphertext encrypts either zero or one.
    """

    proof_zero_pad: BigUInt
    proof_zero_data: BigUInt
    proof_one_pad: BigUInt
    proof_one_data: BigUInt
    proof_zero_challenge: BigUInt
    proof_one_challenge: BigUInt
    challenge: BigUInt
    proof_zero_response: BigUInt
    proof_one_response: BigUInt


@dataclass(frozen=True)
class TrusteeCoefficient:
    public_key: BigUInt
    proof: SchnorrProof


@dataclass(frozen=True)
class TrusteePublicKey:
    """
    The `k` coefficient commitments of one trustee. The first is the
    trustee's main public key; the rest let other trustees stand in for
    this one during decryption.
    """

    coefficients: Tuple[TrusteeCoefficient, ...]

    @property
    def public_key(self) -> int:
        return self.coefficients[0].public_key


@dataclass(frozen=True)
class CastSelection:
    message: ElGamalMessage
    proof: DisjunctiveChaumPedersenProof


@dataclass(frozen=True)
class CastContest:
    selections: Tuple[CastSelection, ...]
    max_selections: BigUInt
    num_selections_proof: ChaumPedersenProof


@dataclass(frozen=True)
class CastBallot:
    ballot_info: Dict[str, Any]
    contests: Tuple[CastContest, ...]


@dataclass(frozen=True)
class Fragment:
    """
    Trustee `trustee_index`'s piece `M_ij` of an absent trustee's share,
    with the Lagrange coefficient used to recombine it.
    """

    fragment: BigUInt
    lagrange_coefficient: BigUInt
    proof: ChaumPedersenProof
    trustee_index: BigUInt


@dataclass(frozen=True)
class ShareRecovery:
    fragments: Tuple[Fragment, ...]


@dataclass(frozen=True)
class DirectShare:
    """
    A share `M_i` computed by a trustee who was present for decryption.
    """

    share: BigUInt
    proof: ChaumPedersenProof


@dataclass(frozen=True)
class RecoveredShare:
    """
    A share `M_i` of an absent trustee, rebuilt from fragments.
    """

    share: BigUInt
    recovery: ShareRecovery


def _share_tag(value: Any) -> str:
    if isinstance(value, dict):
        return "recovered" if value.get("recovery") is not None else "direct"
    return "recovered" if isinstance(value, RecoveredShare) else "direct"


Share = Annotated[
    Union[
        Annotated[DirectShare, Tag("direct")],
        Annotated[RecoveredShare, Tag("recovered")],
    ],
    Discriminator(_share_tag),
]


@dataclass(frozen=True)
class DecryptedValue:
    """
    The decryption of an encrypted value: cleartext `t`, `M = g^t`, the
    ciphertext and one share per trustee.
    """

    cleartext: BigUInt
    decrypted_value: BigUInt
    encrypted_value: ElGamalMessage
    shares: Tuple[Share, ...]


@dataclass(frozen=True)
class ContestTally:
    selections: Tuple[DecryptedValue, ...]


@dataclass(frozen=True)
class SpoiledContest:
    selections: Tuple[DecryptedValue, ...]


@dataclass(frozen=True)
class SpoiledBallot:
    ballot_info: Dict[str, Any]
    contests: Tuple[SpoiledContest, ...]


@dataclass(frozen=True)
class ContestConfiguration:
    num_selections: int
    max_selections: Optional[int]


@dataclass(frozen=True)
class Record:
    """
    All data from an ElectionGuard election.
    """

    parameters: Parameters
    base_hash: HashValue
    trustee_public_keys: Tuple[TrusteePublicKey, ...]
    joint_public_key: BigUInt
    extended_base_hash: HashValue
    cast_ballots: Tuple[CastBallot, ...]
    contest_tallies: Tuple[ContestTally, ...]
    spoiled_ballots: Tuple[SpoiledBallot, ...]

    def contest_configuration(self) -> Tuple[ContestConfiguration, ...]:
        """
        The contest structure bound by the base hash: one entry per contest
        tally, with the selection limit taken from the first cast ballot.
        """
        first_ballot = self.cast_ballots[0] if self.cast_ballots else None
        configuration = []
        for j, tally in enumerate(self.contest_tallies):
            max_selections = None
            if first_ballot is not None and j < len(first_ballot.contests):
                max_selections = first_ballot.contests[j].max_selections
            configuration.append(
                ContestConfiguration(len(tally.selections), max_selections)
            )
        return tuple(configuration)
